from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union

from rich.console import Console

from .config import AppConfig
from .constraints import EnvironmentalAnalyzer
from .errors import StructuralError, ValidationError
from .path_processor import PathProcessor
from .results import PathResult
from .types import EnvironmentalAnalysis, SceneGeometry, ValidationResult
from .validator import CommandValidator


@dataclass(frozen=True)
class GeneratedPath:
    analysis: EnvironmentalAnalysis
    validation: ValidationResult
    result: PathResult


class CameraPathPipeline:
    """One "generate a camera path" request: analyse the object, validate the waypoints, build the trajectory."""

    def __init__(self, config: Optional[AppConfig] = None, console: Optional[Console] = None) -> None:
        self.config = config or AppConfig()
        self.console = console or Console(stderr=True)
        self.analyzer = EnvironmentalAnalyzer(self.config.solver, console=self.console)
        self.analyzer.initialize()
        self.validator = CommandValidator(console=self.console)
        self.processor = PathProcessor(self.config.path, console=self.console)

    def generate(
        self,
        geometry: Union[SceneGeometry, Mapping[str, Any]],
        commands: Sequence[Any],
        initial_orientation: Sequence[float] = (0.0, 0.0, 0.0, 1.0),
    ) -> GeneratedPath:
        analysis = self.analyzer.analyze_environment(geometry)

        validation = self.validator.validate(
            commands,
            bounding_box=analysis.object.bounding_box,
            constraints=analysis.camera_constraints,
        )
        if not validation.is_valid:
            if validation.rule == "structural":
                raise StructuralError("; ".join(validation.errors))
            raise ValidationError("; ".join(validation.errors), errors=validation.errors, rule=validation.rule)

        result = self.processor.process(commands, initial_orientation)
        if result.status == "degenerate":
            self.console.print(f"[yellow]CameraPathPipeline: degenerate path ({result.reason}).[/yellow]")
        elif result.status == "ok":
            self.console.print(
                f"[bold green]Camera path ready:[/bold green] {result.data.sample_count} samples "
                f"over {result.data.total_duration:.2f}s"
            )
        return GeneratedPath(analysis=analysis, validation=validation, result=result)
