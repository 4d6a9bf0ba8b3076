from typing import Any, Dict, Optional


class ImputationError(Exception):
    """Base exception for imputation errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class UnknownColumnError(ImputationError, KeyError):
    """Raised when a requested column is not present in the dataset."""

    def __init__(self, column: Any, available: Optional[list] = None):
        super().__init__(
            f"Column {column} is unknown",
            details={"column": column, "available": list(available or [])},
        )
        self.column = column


class UnknownMethodError(ImputationError, ValueError):
    """Raised when a method name is outside the pipeline's method set."""

    def __init__(self, method: Any, allowed: list):
        super().__init__(
            f"'arg' should be one of {', '.join(repr(m) for m in allowed)}, got {method!r}",
            details={"method": method, "allowed": list(allowed)},
        )
        self.method = method


class TypeCompatibilityError(ImputationError, TypeError):
    """Raised when a method cannot be applied to the column's variable type."""


class ModelFittingError(ImputationError):
    """Raised when a model-based strategy fails to fit or predict."""


class NoDefectsWarning(UserWarning):
    """Emitted when there are no missing values or outliers to impute."""
