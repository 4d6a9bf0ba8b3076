from abc import ABC, abstractmethod
from typing import Any, Dict, Sequence

import numpy as np
import pandas as pd


class BaseCalculator(ABC):
    @abstractmethod
    def fit(self, df: pd.DataFrame, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Calculates the substitute values from the data.
        Returns a dictionary of fitted parameters, including the positions to fill.
        """
        pass


class BaseApplier(ABC):
    @abstractmethod
    def apply(self, series: pd.Series, params: Dict[str, Any]) -> pd.Series:
        """
        Writes the fitted substitutes into a copy of the column.
        """
        pass


def fill_positions(series: pd.Series, positions: Sequence[int], values: Any) -> pd.Series:
    """
    Copy of ``series`` with ``values`` written at the given row positions.

    ``values`` is either a scalar used for every position or a sequence aligned
    with ``positions``. Every other row keeps its original value. Integer
    columns stay integer when every substitute is a whole number and are
    upcast to float64 otherwise.
    """
    out = series.copy()
    positions = list(positions)
    if not positions:
        return out

    if np.ndim(values) > 0:
        values = list(values)
        if len(values) != len(positions):
            raise ValueError(
                f"Got {len(values)} substitute values for {len(positions)} positions"
            )

    if pd.api.types.is_integer_dtype(out.dtype):
        substitutes = values if isinstance(values, list) else [values]
        if all(_is_whole(v) for v in substitutes):
            values = [int(v) for v in substitutes] if isinstance(values, list) else int(values)
        else:
            out = out.astype("float64")

    out.iloc[positions] = values
    return out


def _is_whole(value: Any) -> bool:
    if isinstance(value, (int, np.integer)):
        return True
    return bool(np.isfinite(value)) and float(value).is_integer()


class ColumnImputer:
    def __init__(self, calculator: BaseCalculator, applier: BaseApplier, node_id: str):
        self.calculator = calculator
        self.applier = applier
        self.node_id = node_id
        self.params: Dict[str, Any] = {}

    def fit_transform(self, df: pd.DataFrame, series: pd.Series, config: Dict[str, Any]) -> pd.Series:
        # df carries the predictors (if any) and the prepared target column;
        # series is the prepared target the substitutes are written into.
        self.params = self.calculator.fit(df, config)
        return self.applier.apply(series, self.params)
