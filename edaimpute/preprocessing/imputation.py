from collections import Counter
from typing import Any, Dict, List
import logging
import warnings

import numpy as np
import pandas as pd
from sklearn.exceptions import ConvergenceWarning
# Enable experimental IterativeImputer
from sklearn.experimental import enable_iterative_imputer  # noqa
from sklearn.ensemble import RandomForestRegressor
from sklearn.impute import IterativeImputer, KNNImputer
from sklearn.preprocessing import StandardScaler
from sklearn.tree import DecisionTreeClassifier, DecisionTreeRegressor

from .base import BaseApplier, BaseCalculator, fill_positions
from ..exceptions import ImputationError, ModelFittingError
from ..schemas import VariableType
from ..utils import decode_codes, missing_positions, model_matrix, mode_value

logger = logging.getLogger(__name__)


def _target_positions(df: pd.DataFrame, config: Dict[str, Any]) -> List[int]:
    positions = config.get('positions')
    if positions is None:
        positions = missing_positions(df[config['column']])
    return [int(p) for p in positions]


def draw_seed(seed_max: int = 100000) -> int:
    """
    Draws a fresh seed in ``1..seed_max`` from OS entropy.

    A new generator is created per call so no global random state is read or
    advanced.
    """
    return int(np.random.default_rng().integers(1, seed_max + 1))


# --- Simple Imputer (Mean, Median, Mode) ---
class SimpleImputerCalculator(BaseCalculator):
    def fit(self, df: pd.DataFrame, config: Dict[str, Any]) -> Dict[str, Any]:
        # Config: {'strategy': 'mean' | 'median' | 'mode', 'column': ..., 'positions': [...]}
        column = config['column']
        strategy = config.get('strategy', 'mean')
        series = df[column]
        positions = _target_positions(df, config)

        if strategy == 'mean':
            fill_value = series.mean(skipna=True)
        elif strategy == 'median':
            fill_value = series.median(skipna=True)
        elif strategy == 'mode':
            fill_value = mode_value(series)
        else:
            raise ValueError(f"Unknown simple imputation strategy: {strategy}")

        if isinstance(fill_value, np.generic):
            fill_value = fill_value.item()

        return {
            'type': 'simple_imputer',
            'strategy': strategy,
            'column': column,
            'fill_value': fill_value,
            'positions': positions,
            'missing_count': len(positions),
        }


class SimpleImputerApplier(BaseApplier):
    def apply(self, series: pd.Series, params: Dict[str, Any]) -> pd.Series:
        positions = params.get('positions', [])
        if not positions:
            return series.copy()
        return fill_positions(series, positions, params['fill_value'])


class PredictionApplier(BaseApplier):
    """Writes per-position predictions of a model-based calculator."""

    def apply(self, series: pd.Series, params: Dict[str, Any]) -> pd.Series:
        positions = params.get('positions', [])
        if not positions:
            return series.copy()
        return fill_positions(series, positions, params['fill_values'])


# --- KNN Imputer ---
class KNNImputerCalculator(BaseCalculator):
    def fit(self, df: pd.DataFrame, config: Dict[str, Any]) -> Dict[str, Any]:
        # Config: {'n_neighbors': 10, 'column': ..., 'predictors': [...], 'positions': [...]}
        column = config['column']
        predictors = list(config.get('predictors', []))
        n_neighbors = config.get('n_neighbors', 10)
        positions = _target_positions(df, config)

        if not positions:
            return {'type': 'knn_imputer', 'column': column, 'positions': [], 'fill_values': []}

        # Target goes last so its imputed values are the last matrix column
        matrix = model_matrix(df[predictors + [column]])

        try:
            # Distances are computed on standardised columns
            scaler = StandardScaler()
            scaled = scaler.fit_transform(matrix)

            imputer = KNNImputer(
                n_neighbors=n_neighbors,
                weights='distance',
                keep_empty_features=True,
            )
            completed = scaler.inverse_transform(imputer.fit_transform(scaled))
        except Exception as e:
            logger.error(f"KNN Imputation failed for column {column}: {e}")
            raise ModelFittingError(
                f"KNN imputation failed for {column}: {e}",
                details={'column': column, 'method': 'knn'},
            ) from e

        fill_values = completed[positions, -1].tolist()

        return {
            'type': 'knn_imputer',
            'column': column,
            'predictors': predictors,
            'n_neighbors': n_neighbors,
            'positions': positions,
            'fill_values': fill_values,
        }


# --- Decision Tree Imputer (rpart) ---
class DecisionTreeImputerCalculator(BaseCalculator):
    def fit(self, df: pd.DataFrame, config: Dict[str, Any]) -> Dict[str, Any]:
        # Config: {'variable_type': ..., 'min_samples_split': 20, 'min_samples_leaf': 7,
        #          'random_state': 0, 'column': ..., 'predictors': [...], 'positions': [...]}
        column = config['column']
        predictors = list(config.get('predictors', []))
        variable_type = VariableType(config.get('variable_type', VariableType.NUMERICAL))
        positions = _target_positions(df, config)

        if not positions:
            return {'type': 'decision_tree_imputer', 'column': column, 'positions': [], 'fill_values': []}

        tree_params = {
            'min_samples_split': config.get('min_samples_split', 20),
            'min_samples_leaf': config.get('min_samples_leaf', 7),
            'random_state': config.get('random_state', 0),
        }

        X = model_matrix(df[predictors])
        target = df[column]
        observed = target.notna().to_numpy()

        try:
            if variable_type is VariableType.NUMERICAL:
                model = DecisionTreeRegressor(**tree_params)
                model.fit(X[observed], target[observed].to_numpy(dtype='float64'))
                fill_values = model.predict(X[positions]).tolist()
            else:
                categories = target.cat.categories
                model = DecisionTreeClassifier(**tree_params)
                model.fit(X[observed], target.cat.codes.to_numpy()[observed])
                fill_values = [categories[int(code)] for code in model.predict(X[positions])]
        except Exception as e:
            logger.error(f"Decision tree imputation failed for column {column}: {e}")
            raise ModelFittingError(
                f"rpart imputation failed for {column}: {e}",
                details={'column': column, 'method': 'rpart'},
            ) from e

        return {
            'type': 'decision_tree_imputer',
            'column': column,
            'predictors': predictors,
            'objective': 'regression' if variable_type is VariableType.NUMERICAL else 'classification',
            'positions': positions,
            'fill_values': fill_values,
        }


# --- Iterative Imputer (MICE) ---
class IterativeImputerCalculator(BaseCalculator):
    def fit(self, df: pd.DataFrame, config: Dict[str, Any]) -> Dict[str, Any]:
        # Config: {'seed': 123, 'print_flag': True, 'n_imputations': 5, 'max_iter': 5,
        #          'n_estimators': 10, 'variable_type': ..., 'column': ...,
        #          'predictors': [...], 'positions': [...]}
        column = config['column']
        predictors = list(config.get('predictors', []))
        variable_type = VariableType(config.get('variable_type', VariableType.NUMERICAL))
        seed = config.get('seed')
        print_flag = config.get('print_flag', True)
        n_imputations = config.get('n_imputations', 5)
        max_iter = config.get('max_iter', 5)
        n_estimators = config.get('n_estimators', 10)
        positions = _target_positions(df, config)

        if seed is None:
            raise ImputationError("mice imputation needs a resolved seed", details={'column': column})

        if not positions:
            return {'type': 'iterative_imputer', 'column': column, 'seed': seed, 'positions': [], 'fill_values': []}

        matrix = model_matrix(df[predictors + [column]])

        # One independent random state per draw, all derived from the seed
        states = [
            int(child.generate_state(1)[0])
            for child in np.random.SeedSequence(seed).spawn(n_imputations)
        ]

        draws = []
        for i, state in enumerate(states):
            if print_flag:
                logger.info(f"mice draw {i + 1}/{n_imputations} for {column} (random_state={state})")

            imputer = IterativeImputer(
                estimator=RandomForestRegressor(n_estimators=n_estimators, random_state=state),
                max_iter=max_iter,
                random_state=state,
                keep_empty_features=True,
                verbose=2 if print_flag else 0,
            )

            try:
                with warnings.catch_warnings(record=True) as caught:
                    warnings.simplefilter('always', ConvergenceWarning)
                    completed = imputer.fit_transform(matrix.copy())
            except Exception as e:
                logger.error(f"Iterative Imputation failed for column {column}: {e}")
                raise ModelFittingError(
                    f"mice imputation failed for {column}: {e}",
                    details={'column': column, 'method': 'mice', 'seed': seed},
                ) from e

            if print_flag:
                for w in caught:
                    logger.info(f"mice draw {i + 1}: {w.message}")

            draws.append(completed[positions, -1])

        draws_matrix = np.vstack(draws)

        if variable_type is VariableType.NUMERICAL:
            fill_values = draws_matrix.mean(axis=0).tolist()
        else:
            categories = df[column].cat.categories
            labels = [decode_codes(row, categories) for row in draws_matrix]
            fill_values = []
            for j in range(len(positions)):
                votes = Counter(draw_labels[j] for draw_labels in labels)
                fill_values.append(votes.most_common(1)[0][0])

        return {
            'type': 'iterative_imputer',
            'column': column,
            'predictors': predictors,
            'seed': seed,
            'n_imputations': n_imputations,
            'positions': positions,
            'fill_values': fill_values,
        }
