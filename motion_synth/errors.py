from __future__ import annotations

from typing import List, Optional


class MotionSynthError(Exception):
    """Base error carrying a machine-readable code and the failing component."""

    def __init__(self, message: str, code: str, component: str) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.component = component

    def __str__(self) -> str:
        return f"[{self.component}] {self.code}: {self.message}"


class StructuralError(MotionSynthError):
    def __init__(
        self,
        message: str,
        index: Optional[int] = None,
        field: Optional[str] = None,
        component: str = "CommandValidator",
    ) -> None:
        super().__init__(message, "STRUCTURAL_ERROR", component)
        self.index = index
        self.field = field


class AnalysisError(MotionSynthError):
    def __init__(self, message: str) -> None:
        super().__init__(message, "ANALYSIS_ERROR", "EnvironmentalAnalyzer")


class MeasurementError(MotionSynthError):
    def __init__(self, message: str) -> None:
        super().__init__(message, "MEASUREMENT_ERROR", "EnvironmentalAnalyzer")


class ValidationError(MotionSynthError):
    def __init__(self, message: str, errors: Optional[List[str]] = None, rule: Optional[str] = None) -> None:
        super().__init__(message, "VALIDATION_ERROR", "CommandValidator")
        self.errors = list(errors or [])
        self.rule = rule


class ProcessingError(MotionSynthError):
    def __init__(self, message: str) -> None:
        super().__init__(message, "PROCESSING_ERROR", "PathProcessor")
