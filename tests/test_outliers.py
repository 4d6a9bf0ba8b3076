import numpy as np
import pandas as pd
import pytest

from edaimpute import (
    ImputationKind,
    NoDefectsWarning,
    TypeCompatibilityError,
    UnknownColumnError,
    UnknownMethodError,
    VariableType,
    imputate_outlier,
)
from edaimpute.config import Settings
from edaimpute.engine import OUTLIER_COMPONENTS
from edaimpute.preprocessing.outliers import (
    IQRCalculator,
    OutlierStatisticApplier,
    OutlierStatisticCalculator,
    WinsorizeApplier,
    WinsorizeCalculator,
)
from edaimpute.schemas import CappingMethod, OutlierMethodName


def test_iqr_detection(outlier_df):
    calc = IQRCalculator()
    params = calc.fit(outlier_df, {"column": "A", "coef": 1.5})

    # Hinges 2 and 5: whiskers at -2.5 and 9.5
    assert params["type"] == "iqr"
    assert params["lower"] == -2.5
    assert params["upper"] == 9.5
    assert params["positions"] == [5]
    assert params["outliers"] == [100]


def test_iqr_detection_constant_column(outlier_df):
    params = IQRCalculator().fit(outlier_df, {"column": "B"})
    assert params["positions"] == []


def test_iqr_detection_all_missing():
    df = pd.DataFrame({"A": [np.nan, np.nan]})
    params = IQRCalculator().fit(df, {"column": "A"})
    assert params["positions"] == []
    assert np.isnan(params["lower"])


def test_outlier_statistic_pair(outlier_df):
    params = OutlierStatisticCalculator().fit(
        outlier_df, {"strategy": "median", "column": "A", "positions": [5]}
    )
    assert params["fill_value"] == 3.5

    out = OutlierStatisticApplier().apply(outlier_df["A"].astype(float), params)
    assert out.tolist() == [1.0, 2.0, 3.0, 4.0, 5.0, 3.5]


def test_winsorize_pair(outlier_df):
    params = WinsorizeCalculator().fit(
        outlier_df,
        {"column": "A", "positions": [5], "lower_percentile": 0.05, "upper_percentile": 0.95},
    )
    assert params["upper_cap"] == pytest.approx(76.25)
    assert params["fill_values"] == [pytest.approx(76.25)]

    out = WinsorizeApplier().apply(outlier_df["A"].astype(float), params)
    assert out.iloc[5] == pytest.approx(76.25)
    assert out.iloc[:5].tolist() == [1.0, 2.0, 3.0, 4.0, 5.0]


def test_every_method_has_components():
    assert set(OUTLIER_COMPONENTS) == set(OutlierMethodName)


class TestImputateOutlier:
    @pytest.mark.parametrize(
        "method, expected",
        [
            ("capping", 76.25),
            # The mean is taken with the outlier included
            ("mean", 115 / 6),
            ("median", 3.5),
            ("mode", 1.0),
        ],
    )
    def test_replacement_value(self, outlier_df, method, expected):
        result = imputate_outlier(outlier_df, "A", method=method)
        corrected = result.corrected_values

        assert result.kind is ImputationKind.OUTLIERS
        assert result.variable_type is VariableType.NUMERICAL
        assert result.method == method
        assert result.outlier_pos == (5,)
        assert result.outlier_values == (100.0,)
        assert corrected.iloc[5] == pytest.approx(expected)
        assert corrected.iloc[:5].tolist() == [1.0, 2.0, 3.0, 4.0, 5.0]

    def test_default_method_is_capping(self, outlier_df):
        assert imputate_outlier(outlier_df, "A").method == "capping"

    def test_lower_outlier_caps_to_low_percentile(self):
        df = pd.DataFrame({"A": [-100.0, 1.0, 2.0, 3.0, 4.0, 5.0]})
        result = imputate_outlier(df, "A", method="capping")

        assert result.outlier_pos == (0,)
        assert result.corrected_values.iloc[0] == pytest.approx(-74.75)

    def test_missing_values_are_ignored(self):
        df = pd.DataFrame({"A": [1.0, 2.0, np.nan, 3.0, 4.0, 5.0, 100.0]})
        result = imputate_outlier(df, "A", method="capping")

        assert result.outlier_pos == (6,)
        assert np.isnan(result.corrected_values.iloc[2])
        assert result.corrected_values.iloc[6] == pytest.approx(76.25)

    def test_no_outliers_warns(self, outlier_df):
        with pytest.warns(NoDefectsWarning, match="no outliers in B"):
            result = imputate_outlier(outlier_df, "B", method="mean")

        assert result.outlier_pos == ()
        assert result.outlier_values == ()
        assert result.corrected_values.tolist() == [10.0] * 6

    def test_values_inside_hinge_whiskers_are_kept(self):
        # 9 lies inside the hinge whisker (9.5) though above the quantile whisker
        df = pd.DataFrame({"A": [1.0, 2.0, 3.0, 4.0, 5.0, 9.0]})
        with pytest.warns(NoDefectsWarning):
            result = imputate_outlier(df, "A", method="capping")
        assert result.corrected_values.tolist() == [1.0, 2.0, 3.0, 4.0, 5.0, 9.0]

    def test_coefficient_from_settings(self):
        df = pd.DataFrame({"A": [1.0, 2.0, 3.0, 4.0, 5.0, 9.0]})
        result = imputate_outlier(df, "A", method="median", settings=Settings(OUTLIER_COEF=1.0))
        assert result.outlier_pos == (5,)
        assert result.corrected_values.iloc[5] == 3.5

    def test_input_is_not_mutated(self, outlier_df):
        before = outlier_df.copy()
        imputate_outlier(outlier_df, "A", method="capping")
        pd.testing.assert_frame_equal(outlier_df, before)

    def test_original_restores_outliers(self, outlier_df):
        result = imputate_outlier(outlier_df, "A", method="median")
        assert result.original().tolist() == [1.0, 2.0, 3.0, 4.0, 5.0, 100.0]

    def test_method_variant_is_accepted(self, outlier_df):
        result = imputate_outlier(outlier_df, "A", method=CappingMethod())
        assert result.method == "capping"

    def test_object_column_rejected(self, outlier_df):
        with pytest.raises(TypeCompatibilityError, match="not support imputate_outlier"):
            imputate_outlier(outlier_df, "C", method="capping")

    def test_categorical_column_rejected(self, carseats):
        with pytest.raises(TypeCompatibilityError):
            imputate_outlier(carseats, "ShelveLoc", method="mode")

    def test_unknown_method(self, outlier_df):
        with pytest.raises(UnknownMethodError):
            imputate_outlier(outlier_df, "A", method="knn")

    @pytest.mark.parametrize("method", ["capping", "mean", "median", "mode"])
    def test_large_integers_outside_outliers_are_exact(self, method):
        base = 2**53 + 1
        values = [base, base + 2, base + 4, base + 6, base + 8, base + 10**12]
        df = pd.DataFrame({"A": np.array(values, dtype="int64")})

        result = imputate_outlier(df, "A", method=method)
        corrected = result.corrected_values

        assert result.outlier_pos == (5,)
        assert [int(v) for v in corrected.iloc[:5]] == values[:5]
        assert result.outlier_values == (base + 10**12,)

    def test_integer_storage_kept_for_whole_substitutes(self, outlier_df):
        result = imputate_outlier(outlier_df, "A", method="mode")
        assert result.corrected_values.dtype == np.int64
        assert result.corrected_values.tolist() == [1, 2, 3, 4, 5, 1]
        pd.testing.assert_series_equal(result.original(), outlier_df["A"])

    def test_integer_column_upcast_for_fractional_substitutes(self, outlier_df):
        result = imputate_outlier(outlier_df, "A", method="median")
        assert result.corrected_values.dtype == np.float64
        assert result.corrected_values.iloc[5] == 3.5

    def test_no_outliers_returns_input(self, outlier_df):
        with pytest.warns(NoDefectsWarning):
            result = imputate_outlier(outlier_df, "B")
        pd.testing.assert_series_equal(result.corrected_values, outlier_df["B"])

    def test_unknown_column(self, outlier_df):
        with pytest.raises(UnknownColumnError):
            imputate_outlier(outlier_df, "Z")
