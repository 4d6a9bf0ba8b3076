"""
Imputation engine.

Entry points for the two pipelines:

1. ``imputate_na`` replaces missing values of one column using one of six
   strategies, some of which fit a model on the other columns.
2. ``imputate_outlier`` flags outliers of a numerical column with the boxplot
   whisker rule and replaces or caps them using one of four strategies.

Both validate their arguments before doing any work and return an
``ImputationResult``.
"""

import logging
import warnings
from typing import Any, Dict, Hashable, List, Optional, Tuple, Type, Union

import pandas as pd

from .config import Settings, get_settings
from .exceptions import ImputationError, NoDefectsWarning, TypeCompatibilityError
from .preprocessing.base import BaseApplier, BaseCalculator, ColumnImputer
from .preprocessing.imputation import (
    DecisionTreeImputerCalculator,
    IterativeImputerCalculator,
    KNNImputerCalculator,
    PredictionApplier,
    SimpleImputerApplier,
    SimpleImputerCalculator,
    draw_seed,
)
from .preprocessing.outliers import (
    IQRCalculator,
    OutlierStatisticApplier,
    OutlierStatisticCalculator,
    WinsorizeApplier,
    WinsorizeCalculator,
)
from .result import ImputationResult
from .schemas import (
    MODEL_BASED_METHODS,
    NUMERICAL_ONLY_METHODS,
    MiceMethod,
    MissingMethod,
    MissingMethodName,
    OutlierMethod,
    OutlierMethodName,
    VariableType,
    parse_missing_method,
    parse_outlier_method,
)
from .utils import (
    as_numerical,
    detect_variable_type,
    missing_positions,
    prepare_column,
    resolve_column,
    resolve_predictors,
)

logger = logging.getLogger(__name__)

Components = Tuple[Type[BaseCalculator], Type[BaseApplier]]

MISSING_VALUE_COMPONENTS: Dict[MissingMethodName, Components] = {
    MissingMethodName.MEAN: (SimpleImputerCalculator, SimpleImputerApplier),
    MissingMethodName.MEDIAN: (SimpleImputerCalculator, SimpleImputerApplier),
    MissingMethodName.MODE: (SimpleImputerCalculator, SimpleImputerApplier),
    MissingMethodName.KNN: (KNNImputerCalculator, PredictionApplier),
    MissingMethodName.RPART: (DecisionTreeImputerCalculator, PredictionApplier),
    MissingMethodName.MICE: (IterativeImputerCalculator, PredictionApplier),
}

OUTLIER_COMPONENTS: Dict[OutlierMethodName, Components] = {
    OutlierMethodName.CAPPING: (WinsorizeCalculator, WinsorizeApplier),
    OutlierMethodName.MEAN: (OutlierStatisticCalculator, OutlierStatisticApplier),
    OutlierMethodName.MEDIAN: (OutlierStatisticCalculator, OutlierStatisticApplier),
    OutlierMethodName.MODE: (OutlierStatisticCalculator, OutlierStatisticApplier),
}


def _get_components(registry: Dict[Any, Components], name: Any) -> Tuple[BaseCalculator, BaseApplier]:
    calculator_cls, applier_cls = registry[name]
    return calculator_cls(), applier_cls()


def _missing_value_config(
    method: MissingMethod,
    column: Hashable,
    variable_type: VariableType,
    predictors: List[Hashable],
    positions: Tuple[int, ...],
    seed: Optional[int],
    settings: Settings,
) -> Dict[str, Any]:
    config: Dict[str, Any] = {
        'strategy': method.name.value,
        'column': column,
        'variable_type': variable_type.value,
        'predictors': predictors,
        'positions': list(positions),
    }

    if method.name is MissingMethodName.KNN:
        config['n_neighbors'] = settings.KNN_NEIGHBORS
    elif method.name is MissingMethodName.RPART:
        config['min_samples_split'] = settings.TREE_MIN_SAMPLES_SPLIT
        config['min_samples_leaf'] = settings.TREE_MIN_SAMPLES_LEAF
        config['random_state'] = settings.TREE_RANDOM_STATE
    elif isinstance(method, MiceMethod):
        config['seed'] = seed
        config['print_flag'] = method.print_flag
        config['n_imputations'] = settings.MICE_IMPUTATIONS
        config['max_iter'] = settings.MICE_MAX_ITER
        config['n_estimators'] = settings.MICE_N_ESTIMATORS

    return config


def imputate_na(
    df: pd.DataFrame,
    xvar: Hashable,
    yvar: Optional[Hashable] = None,
    method: Union[str, MissingMethodName, MissingMethod] = MissingMethodName.MEAN,
    seed: Optional[int] = None,
    print_flag: bool = True,
    settings: Optional[Settings] = None,
) -> ImputationResult:
    """
    Impute the missing values of one column.

    Args:
        df: Dataset holding the target column and any predictor columns.
        xvar: Name of the column whose missing values are replaced.
        yvar: Optional auxiliary (response) column left out of every predictor set.
        method: 'mean', 'median', 'mode', 'knn', 'rpart' or 'mice' (or a method variant).
            Categorical columns only support 'mode', 'rpart' and 'mice'.
        seed: Random seed for 'mice' (non-negative). Drawn at random and reported when
            omitted. Fills in a MiceMethod variant without a seed and must match one that has a seed.
        print_flag: Whether 'mice' prints its fitting history. A MiceMethod variant keeps its own flag.
        settings: Overrides the cached settings.

    Returns:
        ImputationResult of kind "missing values".

    Raises:
        UnknownColumnError: xvar or yvar is not a column of df.
        ImputationError: yvar equals xvar, or the mice seed is negative or conflicting.
        UnknownMethodError: method is not one of the six strategies.
        TypeCompatibilityError: method cannot be used on the column's variable type.
        ModelFittingError: knn, rpart or mice failed to fit.
    """
    settings = settings or get_settings()

    resolve_column(df, xvar)
    resolve_column(df, yvar)
    predictors = resolve_predictors(df, xvar, yvar)

    variant = parse_missing_method(method, seed=seed, print_flag=print_flag)
    name = variant.name

    variable_type = detect_variable_type(df[xvar])
    if variable_type is VariableType.CATEGORICAL and name in NUMERICAL_ONLY_METHODS:
        raise TypeCompatibilityError(
            f"Categorical variable({xvar}) not support {name.value} method",
            details={'column': xvar, 'method': name.value, 'variable_type': variable_type.value},
        )

    resolved_seed = None
    if isinstance(variant, MiceMethod):
        resolved_seed = variant.seed if variant.seed is not None else draw_seed(settings.SEED_MAX)

    data = prepare_column(df[xvar], variable_type)
    na_pos = missing_positions(data)

    if not na_pos:
        logger.warning(f"There are no missing values in {xvar}.")
        warnings.warn(f"There are no missing values in {xvar}.", NoDefectsWarning, stacklevel=2)
        return ImputationResult.for_missing_values(data, name.value, variable_type, (), seed=resolved_seed)

    if name in MODEL_BASED_METHODS and not predictors:
        raise ImputationError(
            f"Method {name.value} needs at least one predictor column besides {xvar}",
            details={'column': xvar, 'method': name.value, 'excluded': yvar},
        )

    logger.info(
        f"Imputing {len(na_pos)} missing values in {xvar} ({variable_type.value}) with {name.value}"
    )

    # The model frame holds the predictors plus the prepared target; the caller's df is not touched
    if name in MODEL_BASED_METHODS:
        frame = df[predictors].copy()
        frame[xvar] = data.values
    else:
        frame = data.to_frame()

    config = _missing_value_config(variant, xvar, variable_type, predictors, na_pos, resolved_seed, settings)
    calculator, applier = _get_components(MISSING_VALUE_COMPONENTS, name)
    imputer = ColumnImputer(calculator, applier, node_id=f"imputate_na_{name.value}")
    corrected = imputer.fit_transform(frame, data, config)

    return ImputationResult.for_missing_values(corrected, name.value, variable_type, na_pos, seed=resolved_seed)


def imputate_outlier(
    df: pd.DataFrame,
    xvar: Hashable,
    method: Union[str, OutlierMethodName, OutlierMethod] = OutlierMethodName.CAPPING,
    settings: Optional[Settings] = None,
) -> ImputationResult:
    """
    Impute the outliers of a numerical column.

    Outliers are the values beyond ``OUTLIER_COEF`` hinge spreads from the
    nearer Tukey hinge. 'mean', 'median' and 'mode' replace them with the
    statistic of the whole column (outliers included); 'capping' sets low
    outliers to the 5th percentile and high outliers to the 95th.

    Raises:
        UnknownColumnError: xvar is not a column of df.
        UnknownMethodError: method is not one of the four strategies.
        TypeCompatibilityError: xvar is not numerical.
    """
    settings = settings or get_settings()

    resolve_column(df, xvar)
    variant = parse_outlier_method(method)
    name = variant.name

    if detect_variable_type(df[xvar]) is not VariableType.NUMERICAL:
        raise TypeCompatibilityError(
            f"Categorical variable({xvar}) not support imputate_outlier()",
            details={'column': xvar, 'method': name.value},
        )

    data = as_numerical(df[xvar])
    frame = data.to_frame()

    detection = IQRCalculator().fit(frame, {'column': xvar, 'coef': settings.OUTLIER_COEF})
    outlier_pos = tuple(detection['positions'])
    outliers = tuple(detection['outliers'])

    if not outlier_pos:
        logger.warning(f"There are no outliers in {xvar}.")
        warnings.warn(f"There are no outliers in {xvar}.", NoDefectsWarning, stacklevel=2)
        return ImputationResult.for_outliers(data, name.value, (), ())

    logger.info(f"Imputing {len(outlier_pos)} outliers in {xvar} with {name.value}")

    config = {
        'strategy': name.value,
        'column': xvar,
        'positions': list(outlier_pos),
        'coef': settings.OUTLIER_COEF,
        'lower_percentile': settings.CAPPING_LOWER,
        'upper_percentile': settings.CAPPING_UPPER,
    }
    calculator, applier = _get_components(OUTLIER_COMPONENTS, name)
    imputer = ColumnImputer(calculator, applier, node_id=f"imputate_outlier_{name.value}")
    corrected = imputer.fit_transform(frame, data, config)

    return ImputationResult.for_outliers(corrected, name.value, outlier_pos, outliers)
