"""Before/after comparison tables for imputation results."""

import logging
from typing import Dict

import numpy as np
import pandas as pd

from .result import ImputationResult
from .schemas import VariableType

logger = logging.getLogger(__name__)

PERCENTILES = (0, 1, 5, 10, 20, 25, 30, 40, 50, 60, 70, 75, 80, 90, 95, 99, 100)

# Row label of the missing-value count in categorical summaries
MISSING_LABEL = "<NA>"


def _numeric_profile(series: pd.Series) -> Dict[str, float]:
    valid = series.dropna()
    n = int(valid.size)
    sd = valid.std() if n > 1 else np.nan

    profile = {
        'n': n,
        'na': int(series.isna().sum()),
        'mean': valid.mean() if n else np.nan,
        'sd': sd,
        'se_mean': sd / np.sqrt(n) if n > 1 else np.nan,
        'IQR': valid.quantile(0.75) - valid.quantile(0.25) if n else np.nan,
        'skewness': valid.skew() if n > 2 else np.nan,
        'kurtosis': valid.kurt() if n > 3 else np.nan,
    }
    for p in PERCENTILES:
        profile[f"p{p:02d}"] = valid.quantile(p / 100) if n else np.nan
    return profile


def _numeric_summary(original: pd.Series, imputed: pd.Series) -> pd.DataFrame:
    return pd.DataFrame({
        'original': pd.Series(_numeric_profile(original)),
        'imputation': pd.Series(_numeric_profile(imputed)),
    })


def _categorical_summary(original: pd.Series, imputed: pd.Series) -> pd.DataFrame:
    levels = list(imputed.cat.categories)
    counts = pd.DataFrame(
        {
            'original': [int((original == level).sum()) for level in levels],
            'imputation': [int((imputed == level).sum()) for level in levels],
        },
        index=pd.Index(levels, dtype=object),
    )

    n_missing = (int(original.isna().sum()), int(imputed.isna().sum()))
    if any(n_missing):
        counts.loc[MISSING_LABEL] = list(n_missing)

    counts = counts.astype('int64')
    totals = counts.sum()
    percents = (counts / totals.replace(0, np.nan) * 100).round(2)

    return pd.DataFrame({
        'original': counts['original'],
        'imputation': counts['imputation'],
        'original_percent': percents['original'],
        'imputation_percent': percents['imputation'],
    })


def summarize(result: ImputationResult) -> pd.DataFrame:
    """
    Compare the column before and after imputation.

    Numerical columns get descriptive statistics (count, missing count, moments
    and percentiles) side by side. Categorical columns get a frequency table per
    level, with a row for missing values when there are any, and the column
    percentages.
    """
    original = result.original()
    imputed = result.corrected_values

    logger.debug(f"Summarizing {result.kind.value} imputation of {result.column} ({result.method})")

    if result.variable_type is VariableType.NUMERICAL:
        return _numeric_summary(original.astype('float64'), imputed.astype('float64'))
    return _categorical_summary(original, imputed)
