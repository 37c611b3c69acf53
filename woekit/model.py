"""
model.py.

Fitted WOE lookup tables and their application to new data.
"""

import json
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import numpy as np
import pandas as pd

from .aggregation import CATEGORY
from .exceptions import DuplicateColumnError, ModelLoadError, ModelSaveError
from .logging_config import logger
from .table import (
    WOE_TABLE_COLUMNS,
    apply_woe_mapping,
    information_value,
    is_missing,
    predictive_power,
    woe_mapping,
)
from .utils import as_dataframe, check_columns_present

METADATA_FILE = "metadata.json"
_CATEGORY_KINDS = ("null", "bool", "int", "float", "str", "timestamp")


def output_col_name(input_col: str, output_col_postfix: str) -> str:
    """Name of the WOE column produced for ``input_col``."""
    return f"{input_col}_{output_col_postfix}"


@dataclass(frozen=True, eq=False)
class WoeTableWrapper:
    """A WOE table bound to the input column it was fit on and the column it produces."""

    input_col: str
    output_col: str
    woe_table: pd.DataFrame = field(repr=False)


class WoeModel:
    """
    Immutable set of per-column WOE tables produced by ``WoeEncoder.fit``.

    Each table has columns ``["category", "p1", "p0", "woe"]``. ``transform``
    adds one WOE column per table; categories not seen at fit time get NaN.

    Parameters
    ----------
    uid : str
        Identifier shared with the encoder that produced the model.
    woe_table_wrappers : sequence of WoeTableWrapper
        One wrapper per input column, in input column order.
    output_col_postfix : str
        Postfix appended to input column names for the output columns.
    label_col : str
        Label column the tables were fit against.
    parent : WoeEncoder, optional
        The encoder that produced this model.
    """

    def __init__(
        self,
        uid: str,
        woe_table_wrappers,
        output_col_postfix: str,
        label_col: str,
        parent=None,
    ):
        self._uid = uid
        self._woe_table_wrappers = tuple(
            WoeTableWrapper(w.input_col, w.output_col, w.woe_table.copy())
            for w in woe_table_wrappers
        )
        self._output_col_postfix = output_col_postfix
        self._label_col = label_col
        self._parent = parent

    @property
    def uid(self) -> str:
        return self._uid

    @property
    def woe_table_wrappers(self) -> tuple:
        """Wrappers holding copies of the fitted tables."""
        return tuple(
            WoeTableWrapper(w.input_col, w.output_col, w.woe_table.copy())
            for w in self._woe_table_wrappers
        )

    @property
    def output_col_postfix(self) -> str:
        return self._output_col_postfix

    @property
    def label_col(self) -> str:
        return self._label_col

    @property
    def parent(self):
        return self._parent

    @property
    def input_cols(self) -> list[str]:
        return [w.input_col for w in self._woe_table_wrappers]

    @property
    def output_cols(self) -> list[str]:
        return [w.output_col for w in self._woe_table_wrappers]

    def __repr__(self) -> str:
        return (
            f"WoeModel(uid={self._uid!r}, input_cols={self.input_cols}, "
            f"label_col={self._label_col!r}, output_col_postfix={self._output_col_postfix!r})"
        )

    def _get_wrapper(self, input_col: str) -> WoeTableWrapper:
        for wrapper in self._woe_table_wrappers:
            if wrapper.input_col == input_col:
                return wrapper
        raise ValueError(f"Feature '{input_col}' not found in fitted features")

    def get_output_col_name(self, input_col: str) -> str:
        return output_col_name(input_col, self._output_col_postfix)

    def get_woe_table(self, input_col: str) -> pd.DataFrame:
        """Copy of the WOE table fitted for ``input_col``."""
        return self._get_wrapper(input_col).woe_table.copy()

    def get_all_woe_tables(self) -> dict[str, pd.DataFrame]:
        """Copies of all WOE tables keyed by input column (useful for audit or storage)."""
        return {w.input_col: w.woe_table.copy() for w in self._woe_table_wrappers}

    def information_value(self, input_col: str) -> float:
        """Information Value of the table fitted for ``input_col``."""
        return information_value(self._get_wrapper(input_col).woe_table)

    def information_values(self) -> dict[str, float]:
        return {
            w.input_col: information_value(w.woe_table) for w in self._woe_table_wrappers
        }

    def get_iv_analysis(self) -> pd.DataFrame:
        """
        Per-feature IV summary.

        Returns:
        -------
        pd.DataFrame
            Columns ``feature``, ``output_col``, ``n_categories``, ``iv`` and
            ``predictive_power``, in input column order.
        """
        rows = []
        for wrapper in self._woe_table_wrappers:
            iv = information_value(wrapper.woe_table)
            rows.append(
                {
                    "feature": wrapper.input_col,
                    "output_col": wrapper.output_col,
                    "n_categories": len(wrapper.woe_table),
                    "iv": iv,
                    "predictive_power": predictive_power(iv),
                }
            )
        return pd.DataFrame(
            rows, columns=["feature", "output_col", "n_categories", "iv", "predictive_power"]
        )

    def transform_schema(self, columns) -> list[str]:
        """
        Columns of ``transform``'s output for input data with ``columns``.

        Raises
        ------
        DuplicateColumnError
            If an output column already exists in ``columns``.
        """
        columns = list(columns)
        for output_col in self.output_cols:
            if output_col in columns:
                raise DuplicateColumnError(output_col)
        return columns + self.output_cols

    def transform(self, X: Union[pd.DataFrame, np.ndarray, pd.Series]) -> pd.DataFrame:
        """
        Add one WOE column per fitted input column.

        Parameters
        ----------
        X : Union[pd.DataFrame, np.ndarray, pd.Series]
            Data holding every fitted input column.

        Returns:
        -------
        pd.DataFrame
            Copy of ``X`` with the output columns appended. Rows whose category
            was not seen during fit get NaN.
        """
        X = as_dataframe(X, "transform")
        check_columns_present(X, self.input_cols)
        self.transform_schema(X.columns)

        result = X.copy()
        for wrapper in self._woe_table_wrappers:
            iv = information_value(wrapper.woe_table)
            logger.info(f"iv value for {wrapper.input_col} is: {iv}")

            lookup = woe_mapping(wrapper.woe_table)
            result[wrapper.output_col] = apply_woe_mapping(result[wrapper.input_col], lookup)
        return result

    def copy(self, **params) -> "WoeModel":
        """
        New model with the same uid and tables and ``params`` overridden.

        Accepted params are ``output_col_postfix`` and ``label_col``. Output
        column names follow a changed postfix.
        """
        unknown = set(params) - {"output_col_postfix", "label_col"}
        if unknown:
            raise ValueError(f"Invalid parameters for WoeModel: {sorted(unknown)}")
        postfix = params.get("output_col_postfix", self._output_col_postfix)
        wrappers = [
            WoeTableWrapper(w.input_col, output_col_name(w.input_col, postfix), w.woe_table)
            for w in self._woe_table_wrappers
        ]
        return WoeModel(
            self._uid,
            wrappers,
            output_col_postfix=postfix,
            label_col=params.get("label_col", self._label_col),
            parent=self._parent,
        )

    def save(self, path: Union[str, Path], overwrite: bool = False) -> None:
        """
        Write the model to the directory ``path``.

        The directory holds ``metadata.json`` and one ``data_<input_col>.parquet``
        file per WOE table. Files are written to a sibling staging directory that
        replaces ``path`` only once everything is on disk, so a failed save leaves
        any previously saved model untouched.

        Raises
        ------
        FileExistsError
            If ``path`` is a file or a non-empty directory and ``overwrite`` is False.
        ModelSaveError
            If a category value cannot be stored. Raised before anything is written.
        """
        path = Path(path)
        if path.exists() and not overwrite and (path.is_file() or any(path.iterdir())):
            raise FileExistsError(f"Path {path} already exists. Use overwrite=True to replace it.")

        tables = []
        frames = {}
        for wrapper in self._woe_table_wrappers:
            data_file = f"data_{wrapper.input_col}.parquet"
            frame, encoding = _encode_woe_table(wrapper.woe_table, wrapper.input_col)
            frames[data_file] = frame
            tables.append(
                {
                    "input_col": wrapper.input_col,
                    "output_col": wrapper.output_col,
                    "data": data_file,
                    "category_encoding": encoding,
                }
            )

        metadata = {
            "class": type(self).__name__,
            "uid": self._uid,
            "woekit_version": _version(),
            "params": {
                "output_col_postfix": self._output_col_postfix,
                "label_col": self._label_col,
            },
            "tables": tables,
        }

        path.parent.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix=f".{path.name}-", dir=path.parent))
        try:
            for data_file, frame in frames.items():
                frame.to_parquet(staging / data_file, index=False)
            (staging / METADATA_FILE).write_text(json.dumps(metadata, indent=2))
        except Exception:
            shutil.rmtree(staging, ignore_errors=True)
            raise

        if path.is_dir():
            shutil.rmtree(path)
        elif path.exists():
            path.unlink()
        staging.rename(path)
        logger.debug(f"Saved WoeModel {self._uid} with {len(tables)} tables to {path}")

    @classmethod
    def load(cls, path: Union[str, Path]) -> "WoeModel":
        """Rebuild a model written by ``save``."""
        path = Path(path)
        metadata_path = path / METADATA_FILE
        if not metadata_path.is_file():
            raise ModelLoadError(f"No {METADATA_FILE} found in {path}")

        try:
            metadata = json.loads(metadata_path.read_text())
        except json.JSONDecodeError as e:
            raise ModelLoadError(f"Malformed {METADATA_FILE} in {path}") from e

        if metadata.get("class") != cls.__name__:
            raise ModelLoadError(
                f"Expected metadata for {cls.__name__}, found {metadata.get('class')!r}"
            )

        try:
            uid = metadata["uid"]
            params = metadata["params"]
            entries = metadata["tables"]
            wrappers = [
                WoeTableWrapper(
                    entry["input_col"],
                    entry["output_col"],
                    _read_woe_table(path / entry["data"], entry["category_encoding"]),
                )
                for entry in entries
            ]
            model = cls(
                uid,
                wrappers,
                output_col_postfix=params["output_col_postfix"],
                label_col=params["label_col"],
            )
        except (KeyError, TypeError) as e:
            raise ModelLoadError(f"Incomplete {METADATA_FILE} in {path}: {e}") from e

        logger.debug(f"Loaded WoeModel {uid} with {len(wrappers)} tables from {path}")
        return model


def _encode_category(value) -> str:
    """JSON ``[type, value]`` pair for a category of an object column."""
    if is_missing(value):
        return json.dumps(["null", None])
    if isinstance(value, (bool, np.bool_)):
        return json.dumps(["bool", bool(value)])
    if isinstance(value, (int, np.integer)):
        return json.dumps(["int", int(value)])
    if isinstance(value, (float, np.floating)):
        return json.dumps(["float", float(value)])
    if isinstance(value, str):
        return json.dumps(["str", value])
    if isinstance(value, pd.Timestamp):
        return json.dumps(["timestamp", value.isoformat()])
    raise ModelSaveError(
        f"Cannot save category {value!r} of type {type(value).__name__}"
    )


def _decode_category(encoded: str):
    kind, value = json.loads(encoded)
    if kind == "null":
        return None
    if kind == "timestamp":
        return pd.Timestamp(value)
    if kind not in _CATEGORY_KINDS:
        raise ModelLoadError(f"Unknown category type {kind!r}")
    return value


def _encode_woe_table(woe_table: pd.DataFrame, input_col: str) -> tuple[pd.DataFrame, str]:
    """
    Table ready for parquet plus its category encoding.

    Columns parquet stores natively are kept as they are. Object columns that
    hold anything other than strings are written as tagged JSON values so
    mixed scalar types survive the round trip.
    """
    categories = woe_table[CATEGORY]
    if categories.dtype != object or pd.api.types.infer_dtype(categories, skipna=True) in (
        "string",
        "empty",
    ):
        return woe_table, "native"

    try:
        encoded = categories.map(_encode_category).astype(object)
    except ModelSaveError as e:
        raise ModelSaveError(f"WOE table for '{input_col}': {e}") from e
    return woe_table.assign(**{CATEGORY: encoded}), "tagged"


def _read_woe_table(data_path: Path, category_encoding: str) -> pd.DataFrame:
    if category_encoding not in ("native", "tagged"):
        raise ModelLoadError(f"Unknown category encoding {category_encoding!r}")
    if not data_path.is_file():
        raise ModelLoadError(f"Missing WOE table file {data_path}")
    table = pd.read_parquet(data_path)
    if list(table.columns) != WOE_TABLE_COLUMNS:
        raise ModelLoadError(
            f"WOE table {data_path.name} has columns {list(table.columns)}, "
            f"expected {WOE_TABLE_COLUMNS}"
        )
    if category_encoding == "tagged":
        decoded = [_decode_category(value) for value in table[CATEGORY]]
        table[CATEGORY] = pd.Series(decoded, index=table.index, dtype=object)
    return table


def _version() -> Optional[str]:
    from . import __version__

    return __version__
