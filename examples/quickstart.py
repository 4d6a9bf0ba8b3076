"""
edaimpute Quickstart Example.

This script demonstrates how to:
1. Impute missing values of a numerical and a categorical column.
2. Impute outliers of a numerical column.
3. Compare the distributions before and after imputation.
"""

import numpy as np
import pandas as pd
from edaimpute import imputate_na, imputate_outlier, setup_logging, summarize


def create_dummy_data():
    """Create a dummy dataset for demonstration."""
    np.random.seed(42)
    n = 400
    df = pd.DataFrame(
        {
            "income": np.random.normal(70, 25, n).round(),
            "price": np.random.normal(115, 24, n).round(),
            "age": np.random.randint(25, 80, n),
            "urban": pd.Categorical(np.random.choice(["No", "Yes"], n)),
            "us": np.random.choice(["No", "Yes"], n),
        }
    )
    # Add some missing values and outliers
    df.loc[np.random.choice(n, 20, replace=False), "income"] = np.nan
    df.loc[np.random.choice(n, 5, replace=False), "urban"] = np.nan
    df.loc[[3, 50, 200], "price"] = [320.0, 5.0, 290.0]
    return df


def main():
    setup_logging("INFO")
    data = create_dummy_data()
    print(f"Data shape: {data.shape}")

    # 1. Numerical column with a regression tree, leaving the response out
    income = imputate_na(data, "income", "us", method="rpart")
    print(income.describe_method())
    print(summarize(income))

    # 2. Categorical column with chained equations
    urban = imputate_na(data, "urban", "us", method="mice", print_flag=False)
    print(urban.describe_method())
    print(summarize(urban))

    # 3. Outliers
    price = imputate_outlier(data, "price", method="capping")
    print(price.describe_method())
    print(f"Outliers at {price.outlier_pos}: {price.outlier_values}")
    print(summarize(price))


if __name__ == "__main__":
    main()
