"""
Console rendering of fitted WOE models.

Tables are printed with rich so IV summaries and WOE tables read well in a
terminal or notebook.
"""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .model import WoeModel
from .table import is_missing

console = Console()

_POWER_STYLES = {
    "Not useful": "red",
    "Weak": "yellow",
    "Medium": "green",
    "Strong": "bold green",
    "Suspicious": "magenta",
}


def iv_summary_table(model: WoeModel) -> Table:
    """Rich table with one row per feature: categories, IV and predictive power."""
    analysis = model.get_iv_analysis()

    table = Table(title=f"Information Value ({model.uid})", show_header=True)
    table.add_column("Feature")
    table.add_column("Output column")
    table.add_column("Categories", justify="right")
    table.add_column("IV", justify="right")
    table.add_column("Predictive power")

    for row in analysis.itertuples(index=False):
        style = _POWER_STYLES.get(row.predictive_power, "")
        table.add_row(
            escape(str(row.feature)),
            escape(str(row.output_col)),
            str(row.n_categories),
            f"{row.iv:.4f}",
            f"[{style}]{row.predictive_power}[/{style}]" if style else row.predictive_power,
        )
    return table


def woe_table(model: WoeModel, input_col: str, max_rows: Optional[int] = 20) -> Table:
    """Rich table of the WOE lookup for one feature, largest WOE first."""
    mapping = model.get_woe_table(input_col).sort_values("woe", ascending=False)
    if max_rows is not None:
        mapping = mapping.head(max_rows)

    table = Table(title=f"WOE: {input_col}", show_lines=False)
    table.add_column("Category")
    table.add_column("p1", justify="right")
    table.add_column("p0", justify="right")
    table.add_column("WOE", justify="right")

    for category, p1, p0, woe in mapping.itertuples(index=False, name=None):
        label = "<missing>" if is_missing(category) else escape(str(category))
        table.add_row(label, f"{p1:.4f}", f"{p0:.4f}", f"{woe:7.4f}")
    return table


def print_iv_summary(model: WoeModel) -> None:
    console.print(iv_summary_table(model))


def print_woe_table(model: WoeModel, input_col: str, max_rows: Optional[int] = 20) -> None:
    console.print(woe_table(model, input_col, max_rows=max_rows))
