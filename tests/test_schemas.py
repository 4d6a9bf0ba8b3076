import pytest
from pydantic import ValidationError

from edaimpute.exceptions import ImputationError, UnknownMethodError
from edaimpute.schemas import (
    CappingMethod,
    KNNMethod,
    MeanMethod,
    MiceMethod,
    MissingMethodName,
    OutlierMeanMethod,
    OutlierMethodName,
    RpartMethod,
    parse_missing_method,
    parse_outlier_method,
)


class TestParseMissingMethod:
    @pytest.mark.parametrize("name", [m.value for m in MissingMethodName])
    def test_every_name(self, name):
        assert parse_missing_method(name).name.value == name

    def test_enum_member(self):
        assert isinstance(parse_missing_method(MissingMethodName.KNN), KNNMethod)

    def test_mice_carries_seed_and_flag(self):
        method = parse_missing_method("mice", seed=11, print_flag=False)
        assert method == MiceMethod(seed=11, print_flag=False)

    def test_seed_ignored_for_other_methods(self):
        assert parse_missing_method("rpart", seed=11) == RpartMethod()

    def test_variant_returned_unchanged(self):
        method = MiceMethod(seed=5)
        assert parse_missing_method(method) is method
        assert parse_missing_method(method, seed=5) is method

    def test_variant_without_seed_takes_keyword(self):
        method = parse_missing_method(MiceMethod(print_flag=False), seed=8, print_flag=True)
        assert method == MiceMethod(seed=8, print_flag=False)

    def test_conflicting_seeds_rejected(self):
        with pytest.raises(ImputationError, match="Conflicting mice seeds"):
            parse_missing_method(MiceMethod(seed=5), seed=99)

    def test_negative_seed_rejected(self):
        with pytest.raises(ImputationError) as excinfo:
            parse_missing_method("mice", seed=-3)
        assert isinstance(excinfo.value.__cause__, ValidationError)
        assert excinfo.value.details["seed"] == -3

    def test_outlier_variant_rejected(self):
        with pytest.raises(UnknownMethodError):
            parse_missing_method(CappingMethod())

    @pytest.mark.parametrize("name", ["capping", "MEAN", "", "hotdeck"])
    def test_unknown_name(self, name):
        with pytest.raises(UnknownMethodError) as excinfo:
            parse_missing_method(name)
        assert isinstance(excinfo.value, ValueError)
        assert excinfo.value.method == name
        assert "'mice'" in str(excinfo.value)


class TestParseOutlierMethod:
    @pytest.mark.parametrize("name", [m.value for m in OutlierMethodName])
    def test_every_name(self, name):
        assert parse_outlier_method(name).name.value == name

    def test_mean_is_outlier_variant(self):
        assert isinstance(parse_outlier_method("mean"), OutlierMeanMethod)

    def test_missing_value_variant_rejected(self):
        with pytest.raises(UnknownMethodError):
            parse_outlier_method(MeanMethod())

    @pytest.mark.parametrize("name", ["knn", "rpart", "mice"])
    def test_model_methods_unknown(self, name):
        with pytest.raises(UnknownMethodError):
            parse_outlier_method(name)


def test_mice_seed_must_be_non_negative():
    with pytest.raises(ValidationError):
        MiceMethod(seed=-1)


def test_variants_are_frozen():
    method = MiceMethod(seed=1)
    with pytest.raises(ValidationError):
        method.seed = 2
