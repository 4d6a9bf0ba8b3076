"""Missing-value and outlier imputation for exploratory data analysis."""

from .config import Settings, get_settings, setup_logging
from .engine import imputate_na, imputate_outlier
from .exceptions import (
    ImputationError,
    ModelFittingError,
    NoDefectsWarning,
    TypeCompatibilityError,
    UnknownColumnError,
    UnknownMethodError,
)
from .result import ImputationResult
from .schemas import ImputationKind, MissingMethodName, OutlierMethodName, VariableType
from .summary import summarize

__version__ = "0.1.0"

__all__ = [
    "imputate_na",
    "imputate_outlier",
    "summarize",
    "ImputationResult",
    "ImputationKind",
    "MissingMethodName",
    "OutlierMethodName",
    "VariableType",
    "ImputationError",
    "ModelFittingError",
    "NoDefectsWarning",
    "TypeCompatibilityError",
    "UnknownColumnError",
    "UnknownMethodError",
    "Settings",
    "get_settings",
    "setup_logging",
]
