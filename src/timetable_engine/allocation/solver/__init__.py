"""CP-SAT model for placing teaching hours."""

from .builder import ModelBuilder
from .extractor import PlannedHour, SolutionExtractor
from .variables import VariableManager

__all__ = [
    "ModelBuilder",
    "PlannedHour",
    "SolutionExtractor",
    "VariableManager",
]
