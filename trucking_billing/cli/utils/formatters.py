"""Terminal output helpers for the billing CLI.

Status lines are colored with ``click.style``; money is always printed
through ``format_amount`` so every command shows amounts the same way.
"""

from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence

import click


def _status(symbol: str, message: str, color: str, bold: bool = True) -> str:
    return click.style(f"{symbol} {message}", fg=color, bold=bold)


def format_success(message: str) -> str:
    """Green status line, e.g. after amounts were repaired."""
    return _status("✓", message, "green")


def format_error(message: str) -> str:
    """Red status line for a failed command.

    Example:
        >>> click.unstyle(format_error("Invoice INV-9 not found"))
        '✗ Invoice INV-9 not found'
    """
    return _status("✗", message, "red")


def format_warning(message: str) -> str:
    """Yellow status line for data that degraded a total."""
    return _status("⚠", message, "yellow")


def format_info(message: str) -> str:
    return _status("ℹ", message, "blue", bold=False)


def format_amount(amount: Optional[Decimal]) -> str:
    """Format a money amount as ``$1,234.50`` (``-`` when absent)."""
    if amount is None:
        return "-"
    return f"${amount:,.2f}"


def _cell_text(cell: Any) -> str:
    if cell is None:
        return "-"
    if isinstance(cell, Decimal):
        return format_amount(cell)
    return str(cell)


def format_table(
    headers: Sequence[str],
    rows: Iterable[Sequence[Any]],
    amount_columns: Iterable[int] = (),
    max_width: int = 40,
) -> str:
    """Render rows as a boxed table.

    Decimal cells are printed with ``format_amount`` and ``None`` as ``-``.
    Columns listed in ``amount_columns`` are right-aligned, header included,
    so the cents line up.

    Args:
        headers: Column titles
        rows: Cell values, one sequence per row (extra cells are dropped)
        amount_columns: Indexes of the columns holding money
        max_width: Longest cell kept before truncation

    Returns:
        The table as a single string, or ``""`` without headers

    Example:
        >>> print(format_table(["Job", "Amount"], [["J-1", Decimal("380")]], amount_columns=[1]))
        +-----+---------+
        | Job |  Amount |
        +-----+---------+
        | J-1 | $380.00 |
        +-----+---------+
    """
    if not headers:
        return ""

    right = set(amount_columns)
    body: List[List[str]] = [
        [_cell_text(cell)[:max_width] for cell in row[: len(headers)]] for row in rows
    ]
    widths = [len(h) for h in headers]
    for cells in body:
        for i, text in enumerate(cells):
            widths[i] = max(widths[i], len(text))
    widths = [min(w, max_width) for w in widths]

    def render(cells: Sequence[str]) -> str:
        padded = []
        for i, width in enumerate(widths):
            text = cells[i] if i < len(cells) else ""
            padded.append(f" {text:>{width}} " if i in right else f" {text:<{width}} ")
        return "|" + "|".join(padded) + "|"

    border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"
    lines = [border, render([h[:max_width] for h in headers]), border]
    if body:
        lines.extend(render(cells) for cells in body)
        lines.append(border)
    return "\n".join(lines)
