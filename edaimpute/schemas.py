from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ImputationError, UnknownMethodError


class VariableType(str, Enum):
    NUMERICAL = "numerical"
    CATEGORICAL = "categorical"


class ImputationKind(str, Enum):
    MISSING_VALUES = "missing values"
    OUTLIERS = "outliers"


class MissingMethodName(str, Enum):
    MEAN = "mean"
    MEDIAN = "median"
    MODE = "mode"
    RPART = "rpart"
    KNN = "knn"
    MICE = "mice"


class OutlierMethodName(str, Enum):
    CAPPING = "capping"
    MEAN = "mean"
    MEDIAN = "median"
    MODE = "mode"


# Methods that need arithmetic on the column values
NUMERICAL_ONLY_METHODS = frozenset(
    {MissingMethodName.MEAN, MissingMethodName.MEDIAN, MissingMethodName.KNN}
)

# Methods that fit a model on the predictor columns
MODEL_BASED_METHODS = frozenset(
    {MissingMethodName.KNN, MissingMethodName.RPART, MissingMethodName.MICE}
)


class _Method(BaseModel):
    model_config = ConfigDict(frozen=True)


# --- Missing-value methods ---
class MeanMethod(_Method):
    name: Literal[MissingMethodName.MEAN] = MissingMethodName.MEAN


class MedianMethod(_Method):
    name: Literal[MissingMethodName.MEDIAN] = MissingMethodName.MEDIAN


class ModeMethod(_Method):
    name: Literal[MissingMethodName.MODE] = MissingMethodName.MODE


class KNNMethod(_Method):
    name: Literal[MissingMethodName.KNN] = MissingMethodName.KNN


class RpartMethod(_Method):
    name: Literal[MissingMethodName.RPART] = MissingMethodName.RPART


class MiceMethod(_Method):
    name: Literal[MissingMethodName.MICE] = MissingMethodName.MICE
    seed: Optional[int] = Field(default=None, ge=0)
    print_flag: bool = True


MissingMethod = Union[MeanMethod, MedianMethod, ModeMethod, KNNMethod, RpartMethod, MiceMethod]


# --- Outlier methods ---
class CappingMethod(_Method):
    name: Literal[OutlierMethodName.CAPPING] = OutlierMethodName.CAPPING


class OutlierMeanMethod(_Method):
    name: Literal[OutlierMethodName.MEAN] = OutlierMethodName.MEAN


class OutlierMedianMethod(_Method):
    name: Literal[OutlierMethodName.MEDIAN] = OutlierMethodName.MEDIAN


class OutlierModeMethod(_Method):
    name: Literal[OutlierMethodName.MODE] = OutlierMethodName.MODE


OutlierMethod = Union[CappingMethod, OutlierMeanMethod, OutlierMedianMethod, OutlierModeMethod]


_MISSING_VARIANTS = {
    MissingMethodName.MEAN: MeanMethod,
    MissingMethodName.MEDIAN: MedianMethod,
    MissingMethodName.MODE: ModeMethod,
    MissingMethodName.KNN: KNNMethod,
    MissingMethodName.RPART: RpartMethod,
    MissingMethodName.MICE: MiceMethod,
}

_OUTLIER_VARIANTS = {
    OutlierMethodName.CAPPING: CappingMethod,
    OutlierMethodName.MEAN: OutlierMeanMethod,
    OutlierMethodName.MEDIAN: OutlierMedianMethod,
    OutlierMethodName.MODE: OutlierModeMethod,
}


def parse_missing_method(
    method: Union[str, MissingMethodName, MissingMethod],
    seed: Optional[int] = None,
    print_flag: bool = True,
) -> MissingMethod:
    """
    Turn a method name into its missing-value method variant.

    ``seed`` and ``print_flag`` only apply to ``mice``; they are ignored for the
    other methods. An already-built variant is returned as is, except that a
    ``MiceMethod`` without a seed takes ``seed``. A ``MiceMethod`` whose seed
    differs from ``seed`` is rejected; its own ``print_flag`` always wins.

    Raises:
        UnknownMethodError: the name is not a missing-value method.
        ImputationError: the seed is negative or conflicts with the variant's seed.
    """
    if isinstance(method, _Method):
        if not isinstance(method, tuple(_MISSING_VARIANTS.values())):
            raise UnknownMethodError(method.name, [m.value for m in MissingMethodName])
        if isinstance(method, MiceMethod) and seed is not None:
            if method.seed is None:
                return _mice_method(seed, method.print_flag)
            if method.seed != seed:
                raise ImputationError(
                    f"Conflicting mice seeds: {method.seed} on the method, {seed} given",
                    details={"method_seed": method.seed, "seed": seed},
                )
        return method

    try:
        name = MissingMethodName(method)
    except ValueError:
        raise UnknownMethodError(method, [m.value for m in MissingMethodName]) from None

    if name is MissingMethodName.MICE:
        return _mice_method(seed, print_flag)
    return _MISSING_VARIANTS[name]()


def _mice_method(seed: Optional[int], print_flag: bool) -> MiceMethod:
    try:
        return MiceMethod(seed=seed, print_flag=print_flag)
    except ValidationError as e:
        raise ImputationError(
            f"Invalid mice seed {seed!r}: must be a non-negative integer",
            details={"seed": seed, "errors": e.errors()},
        ) from e


def parse_outlier_method(method: Union[str, OutlierMethodName, OutlierMethod]) -> OutlierMethod:
    """Turn a method name into its outlier method variant."""
    if isinstance(method, _Method):
        if not isinstance(method, tuple(_OUTLIER_VARIANTS.values())):
            raise UnknownMethodError(method.name, [m.value for m in OutlierMethodName])
        return method

    try:
        name = OutlierMethodName(method)
    except ValueError:
        raise UnknownMethodError(method, [m.value for m in OutlierMethodName]) from None

    return _OUTLIER_VARIANTS[name]()
