"""Annotated imputation result shared by the missing-value and outlier pipelines."""

from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .schemas import ImputationKind, MissingMethodName, VariableType

_MODEL_DESCRIPTIONS = {
    MissingMethodName.KNN.value: "K-Nearest Neighbors",
    MissingMethodName.RPART.value: "Recursive Partitioning and Regression Trees",
    MissingMethodName.MICE.value: "Multivariate Imputation by Chained Equations",
}


@dataclass(frozen=True, eq=False)
class ImputationResult:
    """
    A corrected column together with the provenance of the correction.

    ``defect_positions`` are zero-based row positions. For missing values they
    are also exposed as ``na_pos``; for outliers as ``outlier_pos`` with the
    original values kept in ``outlier_values`` so the input can be rebuilt.
    The corrected column itself is private; ``corrected_values`` and
    ``original()`` hand out copies.
    """

    _values: pd.Series = field(repr=False)
    kind: ImputationKind
    method: str
    variable_type: VariableType
    defect_positions: Tuple[int, ...]
    outlier_values: Optional[Tuple[Any, ...]] = None
    seed: Optional[int] = None
    column: Optional[Hashable] = None

    def __post_init__(self):
        # Detach from the caller's series so later edits there cannot leak in
        object.__setattr__(self, "_values", self._values.copy())
        object.__setattr__(self, "defect_positions", tuple(int(p) for p in self.defect_positions))
        if self.outlier_values is not None:
            object.__setattr__(self, "outlier_values", tuple(self.outlier_values))

        if len(set(self.defect_positions)) != len(self.defect_positions):
            raise ValueError("defect_positions must be unique")
        if any(p < 0 or p >= len(self._values) for p in self.defect_positions):
            raise ValueError("defect_positions must be valid row positions of the corrected values")
        if self.kind is ImputationKind.OUTLIERS:
            if self.outlier_values is None or len(self.outlier_values) != len(self.defect_positions):
                raise ValueError("outlier results need one original value per outlier position")

    @classmethod
    def for_missing_values(
        cls,
        values: pd.Series,
        method: str,
        variable_type: VariableType,
        na_pos: Sequence[int],
        seed: Optional[int] = None,
    ) -> "ImputationResult":
        return cls(
            _values=values,
            kind=ImputationKind.MISSING_VALUES,
            method=method,
            variable_type=variable_type,
            defect_positions=tuple(na_pos),
            seed=seed,
            column=values.name,
        )

    @classmethod
    def for_outliers(
        cls,
        values: pd.Series,
        method: str,
        outlier_pos: Sequence[int],
        outlier_values: Sequence[Any],
    ) -> "ImputationResult":
        return cls(
            _values=values,
            kind=ImputationKind.OUTLIERS,
            method=method,
            variable_type=VariableType.NUMERICAL,
            defect_positions=tuple(outlier_pos),
            outlier_values=tuple(outlier_values),
            column=values.name,
        )

    @property
    def corrected_values(self) -> pd.Series:
        return self._values.copy()

    @property
    def na_pos(self) -> Tuple[int, ...]:
        if self.kind is ImputationKind.MISSING_VALUES:
            return self.defect_positions
        return ()

    @property
    def outlier_pos(self) -> Tuple[int, ...]:
        if self.kind is ImputationKind.OUTLIERS:
            return self.defect_positions
        return ()

    @property
    def has_defects(self) -> bool:
        return len(self.defect_positions) > 0

    @property
    def method_label(self) -> str:
        if self.method == MissingMethodName.MICE.value:
            return f"{self.method} (seed = {self.seed})"
        return self.method

    def original(self) -> pd.Series:
        """Rebuilds the column as it was before imputation."""
        original = self._values.copy()
        if not self.defect_positions:
            return original

        positions = list(self.defect_positions)
        if self.kind is ImputationKind.MISSING_VALUES:
            original.iloc[positions] = np.nan
        else:
            original.iloc[positions] = list(self.outlier_values)
        return original

    def describe_method(self) -> str:
        """Header describing the correction, as printed above summaries."""
        kind = self.kind.value
        description = _MODEL_DESCRIPTIONS.get(self.method)
        if description is None:
            return f"Impute {kind} with {self.method}"

        text = f"Impute {kind} based on {description}\n - method : {self.method}"
        if self.method == MissingMethodName.MICE.value:
            text += f"\n - random seed : {self.seed}"
        return text

    def to_dict(self) -> Dict[str, Any]:
        """Metadata of the result as plain Python values."""
        info: Dict[str, Any] = {
            "column": self.column,
            "kind": self.kind.value,
            "method": self.method,
            "variable_type": self.variable_type.value,
        }
        if self.kind is ImputationKind.MISSING_VALUES:
            info["na_pos"] = list(self.defect_positions)
            info["seed"] = self.seed
        else:
            info["outlier_pos"] = list(self.defect_positions)
            info["outliers"] = list(self.outlier_values)
        return info

    def __len__(self) -> int:
        return len(self._values)
