"""Input handling shared by WoeEncoder and WoeModel."""

import warnings
from typing import Union

import numpy as np
import pandas as pd


def as_dataframe(X: Union[pd.DataFrame, np.ndarray, pd.Series], method: str) -> pd.DataFrame:
    """Convert numpy arrays and Series to a DataFrame, warning about the conversion."""
    if isinstance(X, pd.DataFrame):
        return X
    if isinstance(X, np.ndarray):
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        column_names = [f"feature_{i}" for i in range(X.shape[1])]
        warnings.warn(
            "Input X is a numpy array. Converting to pandas DataFrame with generic column names. "
            f"For better control, convert to DataFrame with meaningful column names before passing to {method}().",
            UserWarning,
            stacklevel=3,
        )
        return pd.DataFrame(X, columns=column_names)  # type: ignore[arg-type]
    if isinstance(X, pd.Series):
        column_name = X.name if X.name is not None else "feature_0"
        warnings.warn(
            f"Input X is a pandas Series. Converting to DataFrame with column name '{column_name}'. "
            f"For better control, convert to DataFrame before passing to {method}().",
            UserWarning,
            stacklevel=3,
        )
        return pd.DataFrame({column_name: X})
    raise TypeError(
        f"{method}() expects a pandas DataFrame, Series or numpy array, got {type(X).__name__}"
    )


def check_columns_present(X: pd.DataFrame, columns: list[str]) -> None:
    """Raise ValueError naming the first column of ``columns`` absent from ``X``."""
    for col in columns:
        if col not in X.columns:
            raise ValueError(f"Column '{col}' not found in input data")
