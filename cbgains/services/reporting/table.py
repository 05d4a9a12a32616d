"""Right-aligned text table for gains reports."""

from collections.abc import Sequence
from decimal import Decimal

from cbgains.services.gains.types import GainsReport

HEADERS = ("", "Cost Basis", "Amount", "Value", "$", "%")

# Minimum width of a separator rule cell
_MIN_RULE_WIDTH = 8
_PADDING = 1


def sign(value: Decimal) -> str:
    return "-" if value < 0 else "+"


def format_usd(value: Decimal) -> str:
    return f"${value:.2f}"


def format_amount(value: Decimal) -> str:
    return f"{value:.2f}"


def format_percent(value: Decimal) -> str:
    """Format a fraction as a percentage; non-finite values render empty."""
    if not value.is_finite():
        return ""
    return f"{value * 100:.2f}%"


def format_signed_usd(value: Decimal) -> str:
    return sign(value) + format_usd(abs(value))


def format_signed_percent(profit: Decimal, percent: Decimal) -> str:
    """Signed percentage, signed by profit. Empty when percent is non-finite."""
    text = format_percent(abs(percent))
    return sign(profit) + text if text else ""


def separator(headers: Sequence[str]) -> list[str]:
    return ["-" * max(len(header), _MIN_RULE_WIDTH) for header in headers]


def align_rows(rows: Sequence[Sequence[str]]) -> list[str]:
    """Right-align every cell to its column width plus padding."""
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    return ["".join(cell.rjust(w + _PADDING) for cell, w in zip(row, widths)) for row in rows]


def build_rows(report: GainsReport) -> list[list[str]]:
    """Lay out header, rules, per-currency rows and the totals row as cells."""
    rows = [list(HEADERS), separator(HEADERS)]

    for holding in report.holdings:
        rows.append(
            [
                holding.currency,
                format_usd(holding.cost_basis),
                format_amount(holding.net_amount),
                format_amount(holding.market_value),
                format_signed_usd(holding.profit),
                format_signed_percent(holding.profit, holding.profit_percent),
            ]
        )

    totals = report.totals
    rows.append(separator(HEADERS))
    rows.append(
        [
            "Total",
            format_usd(totals.cost_basis),
            "",
            format_usd(totals.market_value),
            format_signed_usd(totals.profit),
            format_signed_percent(totals.profit, totals.profit_percent),
        ]
    )
    return rows


def render_report(report: GainsReport) -> str:
    """Render a gains report as an aligned text table."""
    return "\n".join(align_rows(build_rows(report))) + "\n"
