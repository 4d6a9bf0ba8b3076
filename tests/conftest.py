"""Pytest fixtures for edaimpute tests."""

import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def carseats() -> pd.DataFrame:
    """Mixed numerical/categorical dataset with missing values in Income and Urban."""
    np.random.seed(42)
    n = 120
    data = pd.DataFrame({
        "Sales": np.random.normal(7.5, 2.8, n).round(2),
        "Income": np.random.normal(68, 28, n).round(),
        "Advertising": np.random.randint(0, 30, n).astype(float),
        "Price": np.random.normal(115, 24, n).round(),
        "Age": np.random.randint(25, 80, n),
        "ShelveLoc": pd.Categorical(
            np.random.choice(["Bad", "Medium", "Good"], n),
            categories=["Bad", "Good", "Medium"],
        ),
        "Urban": pd.Categorical(np.random.choice(["No", "Yes"], n)),
        "US": np.random.choice(["No", "Yes"], n),
    })
    # Introduce some missing values
    data.loc[[3, 10, 17, 25, 40, 58, 71, 88, 95, 110], "Income"] = np.nan
    data.loc[[5, 33, 60, 81, 102], "Urban"] = np.nan
    return data


@pytest.fixture
def small_numeric() -> pd.DataFrame:
    return pd.DataFrame({"x": [1.0, 2.0, np.nan, 4.0]})


@pytest.fixture
def outlier_df() -> pd.DataFrame:
    return pd.DataFrame({
        "A": [1, 2, 3, 4, 5, 100],  # 100 is outlier
        "B": [10, 10, 10, 10, 10, 10],
        "C": ["a", "b", "a", "b", "a", "b"],
    })
