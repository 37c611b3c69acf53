"""
table.py.

Weight of Evidence tables built from per-category label counts.

For a category with ``pos`` positive and ``neg`` negative labels, out of column
totals ``total_pos`` and ``total_neg``:

    p1  = pos / total_pos
    p0  = neg / total_neg
    woe = ln((err + pos) / total_pos * total_neg / (neg + err))

The smoothing constant ``err`` sits inside the odds ratio only, so a category
with no positives or no negatives still has a finite WOE while the column
totals stay unsmoothed.
"""

import numpy as np
import pandas as pd

from .aggregation import CATEGORY, NEGATIVE_COUNT, POSITIVE_COUNT
from .exceptions import DegenerateLabelError

WOE_SMOOTHING = 0.01
WOE_TABLE_COLUMNS = [CATEGORY, "p1", "p0", "woe"]


def build_woe_table(
    counts: pd.DataFrame, feature: str = CATEGORY, err: float = WOE_SMOOTHING
) -> pd.DataFrame:
    """
    Turn grouped label counts into a WOE table.

    Parameters
    ----------
    counts : pd.DataFrame
        One row per category with columns ``category``, ``positive_count``
        and ``negative_count``.
    feature : str, default="category"
        Name of the feature the counts belong to, used in error messages.
    err : float, default=0.01
        Additive smoothing inside the odds ratio.

    Returns:
    -------
    pd.DataFrame
        Columns ``["category", "p1", "p0", "woe"]``, one row per category in
        the order of ``counts``.

    Raises
    ------
    DegenerateLabelError
        If there are no positive or no negative labels in total.
    """
    pos = counts[POSITIVE_COUNT].to_numpy(dtype=float)
    neg = counts[NEGATIVE_COUNT].to_numpy(dtype=float)
    total_pos = pos.sum()
    total_neg = neg.sum()

    if total_pos <= 0 or total_neg <= 0:
        raise DegenerateLabelError(
            f"WOE for '{feature}' needs both label classes. "
            f"Found {int(total_pos)} positive and {int(total_neg)} negative labels."
        )

    woe = np.log((err + pos) / total_pos * total_neg / (neg + err))

    return pd.DataFrame(
        {
            CATEGORY: counts[CATEGORY].reset_index(drop=True),
            "p1": pos / total_pos,
            "p0": neg / total_neg,
            "woe": woe,
        }
    )


def information_value(woe_table: pd.DataFrame) -> float:
    """Information Value of a WOE table: sum of ``woe * (p1 - p0)``."""
    return float((woe_table["woe"] * (woe_table["p1"] - woe_table["p0"])).sum())


def predictive_power(iv: float) -> str:
    """Conventional reading of an IV value."""
    if iv < 0.02:
        return "Not useful"
    elif iv < 0.1:
        return "Weak"
    elif iv < 0.3:
        return "Medium"
    elif iv < 0.5:
        return "Strong"
    return "Suspicious"


def is_missing(value) -> bool:
    """True for scalar nulls (None, NaN, NaT, pd.NA)."""
    return pd.api.types.is_scalar(value) and bool(pd.isna(value))


def woe_mapping(woe_table: pd.DataFrame) -> dict:
    """Category -> WOE lookup. A null category is keyed by ``None``."""
    categories = woe_table[CATEGORY]
    return {
        (None if is_missing(cat) else cat): float(woe)
        for cat, woe in zip(categories, woe_table["woe"])
    }


def apply_woe_mapping(values: pd.Series, mapping: dict) -> pd.Series:
    """
    Look up the WOE of every value in ``values``.

    Categories missing from ``mapping`` become NaN. Null values take the WOE of
    the null category when one was fitted.
    """
    null_woe = mapping.get(None, np.nan)
    return (
        values.astype(object)
        .map(lambda v: null_woe if is_missing(v) else mapping.get(v, np.nan))
        .astype(float)
    )
