from typing import Any, Hashable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .exceptions import ImputationError, TypeCompatibilityError, UnknownColumnError
from .schemas import VariableType


def resolve_column(frame: pd.DataFrame, column: Optional[Hashable]) -> Optional[Hashable]:
    """
    Checks that a resolved column name exists in the dataframe.

    ``None`` passes through so optional columns (the auxiliary ``yvar``) can be
    resolved with the same call.
    """
    if column is None:
        return None
    if column not in frame.columns:
        raise UnknownColumnError(column, frame.columns.tolist())
    return column


def resolve_predictors(
    frame: pd.DataFrame,
    target: Hashable,
    exclude: Optional[Hashable] = None,
) -> List[Hashable]:
    """
    Predictor set for the model-based strategies.

    All columns of the dataframe in their original order, minus the auxiliary
    column and minus the target itself.
    """
    if exclude is not None and exclude == target:
        raise ImputationError(
            f"Auxiliary column {exclude} must differ from the target column",
            details={"target": target, "exclude": exclude},
        )
    return [c for c in frame.columns if c != target and c != exclude]


def detect_variable_type(series: pd.Series) -> VariableType:
    """
    Infers the semantic type of a column from its storage type.

    1. Booleans are categorical (two levels), even though numpy treats them as numbers.
    2. Integer and float storage (including nullable extension types) is numerical.
    3. Category, object and string storage is categorical.
    4. Anything else (datetimes, timedeltas, complex numbers) is unsupported.
    """
    dtype = series.dtype

    if pd.api.types.is_bool_dtype(dtype):
        return VariableType.CATEGORICAL

    if pd.api.types.is_integer_dtype(dtype) or pd.api.types.is_float_dtype(dtype):
        return VariableType.NUMERICAL

    if (
        isinstance(dtype, pd.CategoricalDtype)
        or pd.api.types.is_object_dtype(dtype)
        or pd.api.types.is_string_dtype(dtype)
    ):
        return VariableType.CATEGORICAL

    raise TypeCompatibilityError(
        f"Variable({series.name}) has unsupported storage type {dtype}",
        details={"column": series.name, "dtype": str(dtype)},
    )


def as_numerical(series: pd.Series) -> pd.Series:
    """
    Numpy-backed copy of a numerical column.

    Integer columns without missing values keep their integer storage so large
    values stay exact; everything else becomes float64 with NaN for missing
    values.
    """
    dtype = series.dtype
    if pd.api.types.is_integer_dtype(dtype) and not series.isna().any():
        numpy_dtype = getattr(dtype, "numpy_dtype", dtype)
        values = series.to_numpy(dtype=numpy_dtype)
    else:
        values = series.to_numpy(dtype="float64", na_value=np.nan)
    return pd.Series(values, index=series.index, name=series.name, copy=True)


def as_categorical(series: pd.Series) -> pd.Series:
    """
    Categorical copy of a column.

    Columns already stored as ``category`` keep their level order; other columns
    get the sorted distinct observed values as levels.
    """
    if isinstance(series.dtype, pd.CategoricalDtype):
        return series.copy()
    return series.astype("category")


def prepare_column(series: pd.Series, variable_type: VariableType) -> pd.Series:
    if variable_type is VariableType.NUMERICAL:
        return as_numerical(series)
    return as_categorical(series)


def missing_positions(series: pd.Series) -> Tuple[int, ...]:
    """Zero-based positions of missing values."""
    return tuple(int(i) for i in np.flatnonzero(series.isna().to_numpy()))


def mode_value(series: pd.Series) -> Any:
    """
    Most frequent observed value.

    Ties resolve to the first maximum of the frequency table in its natural
    order: ascending values for numerical data, level order for categoricals.
    Returns NaN when nothing is observed.
    """
    observed = series.dropna()
    if observed.empty:
        return np.nan

    if isinstance(series.dtype, pd.CategoricalDtype):
        counts = observed.value_counts(sort=False).reindex(series.cat.categories, fill_value=0)
    else:
        counts = observed.value_counts(sort=False).sort_index()

    return counts.idxmax()


def tukey_hinges(values: Sequence[float]) -> Tuple[float, float]:
    """
    Lower and upper hinges of Tukey's five-number summary.

    Computed on the sorted non-missing values: the hinges are the medians of the
    lower and upper halves, with the middle observation shared by both halves
    when the count is odd.
    """
    x = np.sort(np.asarray(values, dtype="float64"))
    x = x[~np.isnan(x)]
    n = x.size
    if n == 0:
        return np.nan, np.nan

    n4 = np.floor((n + 3) / 2) / 2
    lower = 0.5 * (x[int(np.floor(n4)) - 1] + x[int(np.ceil(n4)) - 1])
    upper_d = n + 1 - n4
    upper = 0.5 * (x[int(np.floor(upper_d)) - 1] + x[int(np.ceil(upper_d)) - 1])
    return float(lower), float(upper)


def encode_frame(frame: pd.DataFrame) -> pd.DataFrame:
    """
    Float-encoded copy of a dataframe for scikit-learn estimators.

    Numerical columns become float64; every other column becomes its category
    codes as floats, with NaN where the value is missing.
    """
    encoded = {}
    for column in frame.columns:
        series = frame[column]
        if detect_variable_type(series) is VariableType.NUMERICAL:
            encoded[column] = series.to_numpy(dtype="float64", na_value=np.nan)
        else:
            codes = as_categorical(series).cat.codes.to_numpy().astype("float64")
            codes[codes < 0] = np.nan
            encoded[column] = codes
    return pd.DataFrame(encoded, index=frame.index, columns=frame.columns)


def model_matrix(frame: pd.DataFrame) -> np.ndarray:
    """
    Writable float64 matrix of ``encode_frame(frame)``.

    Always a fresh array: under copy-on-write pandas hands out read-only views,
    and some scikit-learn imputers write into their input.
    """
    return encode_frame(frame).to_numpy(dtype="float64", copy=True)


def decode_codes(codes: Sequence[float], categories: pd.Index) -> List[Any]:
    """Maps (possibly fractional) level codes back to category labels."""
    rounded = np.clip(np.rint(np.asarray(codes, dtype="float64")), 0, len(categories) - 1)
    return [categories[int(c)] for c in rounded]
