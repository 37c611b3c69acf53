"""
encoder.py.

The Weight of Evidence (WOE) measures how strongly a category separates positive
from negative outcomes. It is computed from the ratio of the category's share of
all positives to its share of all negatives:

    woe = ln(p1 / p0)

The Information Value (IV) summarises a feature's WOE table as a single number,
``sum(woe * (p1 - p0))``. Values below 0.02 conventionally mean the feature has
no useful predictive power. Neither is multiplied by 100.
"""

import uuid
from typing import Optional, Union

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from sklearn.base import BaseEstimator

from .aggregation import AggregationService, PandasAggregationService
from .exceptions import DuplicateColumnError
from .logging_config import logger
from .model import WoeModel, WoeTableWrapper, output_col_name
from .table import WOE_SMOOTHING, build_woe_table, information_value
from .utils import as_dataframe, check_columns_present


def _woe_table(
    X: pd.DataFrame,
    category_col: str,
    label_col: str,
    aggregation: AggregationService,
) -> pd.DataFrame:
    counts = aggregation.grouped_counts(X, category_col, label_col)
    table = build_woe_table(counts, feature=category_col, err=WOE_SMOOTHING)
    logger.debug(f"WOE table for {category_col}: {len(table)} categories")
    return table


def get_information_value(
    X: pd.DataFrame,
    category_col: str,
    label_col: str,
    aggregation: Optional[AggregationService] = None,
) -> float:
    """
    Information Value of ``category_col`` against ``label_col`` without fitting a model.

    Parameters
    ----------
    X : pd.DataFrame
        Data holding both columns.
    category_col : str
        Categorical column to score.
    label_col : str
        Binary 0/1 (or boolean) label column.
    aggregation : AggregationService, optional
        Group-by backend. Defaults to ``PandasAggregationService``.

    Returns:
    -------
    float
        ``sum(woe * (p1 - p0))`` over the categories of ``category_col``.
    """
    check_columns_present(X, [category_col, label_col])
    if aggregation is None:
        aggregation = PandasAggregationService()
    return information_value(_woe_table(X, category_col, label_col, aggregation))


class WoeEncoder(BaseEstimator):
    """
    Weight of Evidence encoder for categorical columns against a binary label.

    ``fit`` returns a new ``WoeModel`` holding one WOE table per input column;
    the encoder itself keeps no fitted state and can be fit repeatedly.

    Parameters
    ----------
    input_cols : list of str, optional
        Categorical columns to encode, in output order. Required before fit.
    label_col : str, optional
        Binary label column. Boolean, or numeric with values 0 and 1.
        Required before fit.
    output_col_postfix : str, optional
        Text appended to each input column name, joined by "_", to name its
        WOE column. Required before fit.
    n_jobs : int, optional
        Number of columns fit concurrently. ``None`` fits them one after
        another; ``-1`` uses all processors.
    aggregation : AggregationService, optional
        Group-by backend producing per-category label counts.
        Defaults to ``PandasAggregationService``.
    uid : str, optional
        Identifier given to fitted models. A random ``woe_...`` id is generated
        per fit when not set.

    Examples:
    --------
    >>> encoder = WoeEncoder(input_cols=["grade"], label_col="default", output_col_postfix="woe")
    >>> model = encoder.fit(df)
    >>> scored = model.transform(df)  # adds "grade_woe"
    """

    def __init__(
        self,
        input_cols: Optional[list[str]] = None,
        label_col: Optional[str] = None,
        output_col_postfix: Optional[str] = None,
        n_jobs: Optional[int] = None,
        aggregation: Optional[AggregationService] = None,
        uid: Optional[str] = None,
    ):
        self.input_cols = input_cols
        self.label_col = label_col
        self.output_col_postfix = output_col_postfix
        self.n_jobs = n_jobs
        self.aggregation = aggregation
        self.uid = uid

    def _check_params(self) -> list[str]:
        if self.input_cols is None or isinstance(self.input_cols, str):
            raise ValueError("WoeEncoder requires input_cols as a list of column names")
        input_cols = list(self.input_cols)
        if not input_cols:
            raise ValueError("WoeEncoder requires at least one input column")
        if len(set(input_cols)) != len(input_cols):
            raise ValueError(f"Duplicate input columns: {input_cols}")
        if self.label_col is None:
            raise ValueError("WoeEncoder requires label_col")
        if self.output_col_postfix is None:
            raise ValueError("WoeEncoder requires output_col_postfix")
        return input_cols

    def get_output_col_name(self, input_col: str) -> str:
        if self.output_col_postfix is None:
            raise ValueError("WoeEncoder requires output_col_postfix")
        return output_col_name(input_col, self.output_col_postfix)

    def transform_schema(self, columns) -> list[str]:
        """
        Columns produced by transforming data with ``columns`` using a fitted model.

        Raises
        ------
        DuplicateColumnError
            If an output column name is already one of ``columns``.
        """
        input_cols = self._check_params()
        columns = list(columns)
        output_cols = []
        for input_col in input_cols:
            output_col = self.get_output_col_name(input_col)
            if output_col in columns:
                raise DuplicateColumnError(output_col)
            output_cols.append(output_col)
        return columns + output_cols

    def fit(self, X: Union[pd.DataFrame, np.ndarray, pd.Series]) -> WoeModel:
        """
        Fit one WOE table per input column.

        Parameters
        ----------
        X : Union[pd.DataFrame, np.ndarray, pd.Series]
            Data holding the input columns and the label column.

        Returns:
        -------
        WoeModel
            New model with one table per input column, in input column order.

        Raises
        ------
        DuplicateColumnError
            If an output column already exists in ``X``. Raised before any
            aggregation runs.
        InvalidLabelError
            If the label is not a binary 0/1 measure.
        DegenerateLabelError
            If the label has no positives or no negatives.
        """
        X = as_dataframe(X, "fit")
        input_cols = self._check_params()
        self.transform_schema(X.columns)
        check_columns_present(X, [*input_cols, self.label_col])

        aggregation = self.aggregation
        if aggregation is None:
            aggregation = PandasAggregationService()

        tables = Parallel(n_jobs=self.n_jobs, prefer="threads")(
            delayed(_woe_table)(X, input_col, self.label_col, aggregation)
            for input_col in input_cols
        )
        wrappers = [
            WoeTableWrapper(input_col, self.get_output_col_name(input_col), table)
            for input_col, table in zip(input_cols, tables)
        ]

        uid = self.uid if self.uid is not None else f"woe_{uuid.uuid4().hex[:12]}"
        logger.info(f"Fitted WOE tables for {input_cols} against '{self.label_col}'")
        return WoeModel(
            uid,
            wrappers,
            output_col_postfix=self.output_col_postfix,
            label_col=self.label_col,
            parent=self,
        )

    def fit_transform(self, X: Union[pd.DataFrame, np.ndarray, pd.Series]) -> pd.DataFrame:
        """Fit and transform in one step."""
        return self.fit(X).transform(X)
