from .config import AppConfig, PathConfig, SolverConfig, load_config
from .constraints import EnvironmentalAnalyzer
from .errors import AnalysisError, MotionSynthError, ProcessingError, StructuralError, ValidationError
from .path_processor import PathProcessor
from .pipeline import CameraPathPipeline, GeneratedPath
from .results import PathDegenerate, PathError, PathOk, ProcessedPathData
from .types import BoundingBox, CameraCommand, SceneGeometry, ValidationResult, Vector3
from .validator import CommandValidator
