"""
aggregation.py.

Grouped positive/negative label counts per category. The WOE table builder only
needs these two conditional sums per category, so any group-by engine can stand
in for the default pandas implementation by following ``AggregationService``.
"""

from typing import Protocol

import numpy as np
import pandas as pd

from .exceptions import InvalidLabelError

CATEGORY = "category"
POSITIVE_COUNT = "positive_count"
NEGATIVE_COUNT = "negative_count"


class AggregationService(Protocol):
    """Anything that can count positive and negative labels per category."""

    def grouped_counts(
        self, dataset: pd.DataFrame, category_col: str, label_col: str
    ) -> pd.DataFrame:
        """
        Return one row per distinct category of ``category_col`` with columns
        ``["category", "positive_count", "negative_count"]``.

        Null categories must form their own group.
        """
        ...


def coerce_label(label: pd.Series) -> np.ndarray:
    """
    Cast a label column to float, the way a SQL ``CAST(label AS DOUBLE)`` would.

    Booleans become 1.0/0.0 and numeric strings are parsed. Missing labels stay
    NaN and are later counted as neither class.

    Raises
    ------
    InvalidLabelError
        If the label cannot be cast to a number, or if any non-missing value is
        something other than 0 or 1.
    """
    try:
        numeric = pd.to_numeric(label, errors="raise")
        values = numeric.to_numpy(dtype=float, na_value=np.nan)
    except (TypeError, ValueError) as e:
        raise InvalidLabelError(
            f"Label column '{label.name}' must be boolean or numeric with values 0/1."
        ) from e

    present = values[~np.isnan(values)]
    unexpected = np.setdiff1d(np.unique(present), [0.0, 1.0])
    if unexpected.size > 0:
        shown = unexpected[:10].tolist()
        raise InvalidLabelError(
            f"Label column '{label.name}' must be binary (0/1). "
            f"Found unexpected values: {shown}{'...' if unexpected.size > 10 else ''}"
        )
    return values


class PandasAggregationService:
    """In-memory ``AggregationService`` backed by ``DataFrame.groupby``."""

    def grouped_counts(
        self, dataset: pd.DataFrame, category_col: str, label_col: str
    ) -> pd.DataFrame:
        label = coerce_label(dataset[label_col])
        category = dataset[category_col].reset_index(drop=True).rename(CATEGORY)
        flags = pd.DataFrame(
            {
                POSITIVE_COUNT: (label == 1.0).astype(np.int64),
                NEGATIVE_COUNT: (label == 0.0).astype(np.int64),
            }
        )

        grouped = flags.groupby(category, dropna=False, sort=False, observed=True).sum()
        grouped.index.name = CATEGORY
        return grouped.reset_index()


__all__ = [
    "AggregationService",
    "PandasAggregationService",
    "coerce_label",
    "CATEGORY",
    "POSITIVE_COUNT",
    "NEGATIVE_COUNT",
]
