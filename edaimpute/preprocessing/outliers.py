from typing import Any, Dict
import logging

import numpy as np
import pandas as pd

from .base import BaseApplier, BaseCalculator, fill_positions
from ..utils import mode_value, tukey_hinges

logger = logging.getLogger(__name__)


# --- IQR Detection (boxplot whisker rule) ---
class IQRCalculator(BaseCalculator):
    def fit(self, df: pd.DataFrame, config: Dict[str, Any]) -> Dict[str, Any]:
        # Config: {'coef': 1.5, 'column': ...}
        column = config['column']
        coef = config.get('coef', 1.5)

        series = pd.to_numeric(df[column], errors='coerce')
        lower_hinge, upper_hinge = tukey_hinges(series.dropna().to_numpy())

        if np.isnan(lower_hinge):
            return {
                'type': 'iqr',
                'column': column,
                'lower': np.nan,
                'upper': np.nan,
                'positions': [],
                'outliers': [],
            }

        spread = upper_hinge - lower_hinge
        lower = lower_hinge - (coef * spread)
        upper = upper_hinge + (coef * spread)

        # NaN compares False on both sides, so missing values are never outliers
        mask = ((series < lower) | (series > upper)).to_numpy()
        positions = [int(p) for p in np.flatnonzero(mask)]
        outliers = series.iloc[positions].tolist()

        logger.debug(f"IQR bounds for {column}: [{lower}, {upper}], {len(positions)} outliers")

        return {
            'type': 'iqr',
            'column': column,
            'coef': coef,
            'lower': float(lower),
            'upper': float(upper),
            'positions': positions,
            'outliers': outliers,
        }


# --- Statistic Replacement (Mean, Median, Mode) ---
class OutlierStatisticCalculator(BaseCalculator):
    def fit(self, df: pd.DataFrame, config: Dict[str, Any]) -> Dict[str, Any]:
        # Config: {'strategy': 'mean' | 'median' | 'mode', 'column': ..., 'positions': [...]}
        column = config['column']
        strategy = config.get('strategy', 'mean')
        positions = [int(p) for p in config.get('positions', [])]

        # The statistic is taken over the whole column, outliers included
        series = pd.to_numeric(df[column], errors='coerce')

        if strategy == 'mean':
            fill_value = series.mean(skipna=True)
        elif strategy == 'median':
            fill_value = series.median(skipna=True)
        elif strategy == 'mode':
            fill_value = mode_value(series)
        else:
            raise ValueError(f"Unknown outlier replacement strategy: {strategy}")

        if isinstance(fill_value, np.generic):
            fill_value = fill_value.item()

        return {
            'type': 'outlier_statistic',
            'strategy': strategy,
            'column': column,
            'fill_value': fill_value,
            'positions': positions,
        }


class OutlierStatisticApplier(BaseApplier):
    def apply(self, series: pd.Series, params: Dict[str, Any]) -> pd.Series:
        positions = params.get('positions', [])
        if not positions:
            return series.copy()
        return fill_positions(series, positions, params['fill_value'])


# --- Capping (Winsorize keyed off the whisker rule) ---
class WinsorizeCalculator(BaseCalculator):
    def fit(self, df: pd.DataFrame, config: Dict[str, Any]) -> Dict[str, Any]:
        # Config: {'lower_percentile': 0.05, 'upper_percentile': 0.95, 'coef': 1.5,
        #          'column': ..., 'positions': [...]}
        column = config['column']
        lower_p = config.get('lower_percentile', 0.05)
        upper_p = config.get('upper_percentile', 0.95)
        coef = config.get('coef', 1.5)
        positions = [int(p) for p in config.get('positions', [])]

        series = pd.to_numeric(df[column], errors='coerce')
        valid = series.dropna()

        if valid.empty or not positions:
            return {'type': 'winsorize', 'column': column, 'positions': [], 'fill_values': []}

        q1 = valid.quantile(0.25)
        q3 = valid.quantile(0.75)
        lower_cap = float(valid.quantile(lower_p))
        upper_cap = float(valid.quantile(upper_p))

        whisker = coef * (q3 - q1)
        lower_bound = q1 - whisker
        upper_bound = q3 + whisker

        fill_values = []
        for pos in positions:
            value = series.iloc[pos]
            if value < lower_bound:
                fill_values.append(lower_cap)
            elif value > upper_bound:
                fill_values.append(upper_cap)
            else:
                # Flagged by the hinge rule but inside the quantile whiskers
                fill_values.append(value.item() if isinstance(value, np.generic) else value)

        return {
            'type': 'winsorize',
            'column': column,
            'lower_percentile': lower_p,
            'upper_percentile': upper_p,
            'lower_bound': float(lower_bound),
            'upper_bound': float(upper_bound),
            'lower_cap': lower_cap,
            'upper_cap': upper_cap,
            'positions': positions,
            'fill_values': fill_values,
        }


class WinsorizeApplier(BaseApplier):
    def apply(self, series: pd.Series, params: Dict[str, Any]) -> pd.Series:
        positions = params.get('positions', [])
        if not positions:
            return series.copy()
        return fill_positions(series, positions, params['fill_values'])
