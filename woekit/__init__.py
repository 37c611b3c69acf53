"""
woekit: Weight of Evidence encoding for categorical features.

This package fits per-category Weight of Evidence (WOE) lookup tables against a
binary label and applies them to new data, with Information Value (IV)
diagnostics.

Features:
- WoeEncoder: Configures and fits WOE tables for a set of categorical columns
- WoeModel: Immutable fitted tables with transform, IV analysis and save/load
- get_information_value: IV of a single column without fitting a model
"""

__version__ = "0.1.0"
__author__ = "xRiskLab"
__email__ = "contact@xrisklab.ai"

from .aggregation import AggregationService, PandasAggregationService
from .encoder import WoeEncoder, get_information_value
from .exceptions import (
    DegenerateLabelError,
    DuplicateColumnError,
    InvalidLabelError,
    ModelLoadError,
    ModelSaveError,
    WoeError,
)
from .model import WoeModel, WoeTableWrapper
from .table import WOE_SMOOTHING, build_woe_table, information_value

__all__ = [
    "WoeEncoder",
    "WoeModel",
    "WoeTableWrapper",
    "AggregationService",
    "PandasAggregationService",
    "get_information_value",
    "build_woe_table",
    "information_value",
    "WOE_SMOOTHING",
    "WoeError",
    "DegenerateLabelError",
    "DuplicateColumnError",
    "InvalidLabelError",
    "ModelLoadError",
    "ModelSaveError",
]
