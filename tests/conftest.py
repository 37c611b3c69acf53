"""Pytest configuration and shared fixtures for woekit tests."""

import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def example_df():
    """Four rows: category 'a' has one of each label, 'b' has two positives."""
    return pd.DataFrame({"x": ["a", "a", "b", "b"], "y": [1, 0, 1, 1]})


@pytest.fixture
def credit_df():
    """Seeded credit-style data with one predictive and one noise feature."""
    rng = np.random.default_rng(42)
    n_samples = 1000
    df = pd.DataFrame(
        {
            "grade": rng.choice(["A", "B", "C", "D"], n_samples, p=[0.4, 0.3, 0.2, 0.1]),
            "region": rng.choice(["north", "south", "east"], n_samples),
            "term": rng.choice([36, 60], n_samples),
        }
    )
    default_rate = df["grade"].map({"A": 0.05, "B": 0.1, "C": 0.2, "D": 0.4})
    df["default"] = (rng.random(n_samples) < default_rate).astype(int)
    return df


@pytest.fixture
def missing_df():
    """Category column with missing values forming their own group."""
    return pd.DataFrame(
        {
            "x": ["a", None, "a", None, "b", "b", "a"],
            "y": [1, 0, 0, 1, 1, 0, 0],
        }
    )
