from __future__ import annotations

import math
import numbers
import re
from typing import Any

"""Cell value parsing.

Turns one raw spreadsheet cell (string / number / blank) into a typed value.
Parsing never fails a cell: anything that is not recognisably a number degrades
to its trimmed text so one bad cell cannot abort a whole report import.

Percentages are whole numbers throughout (55.6 means 55.6%). Excel stores
percent-formatted cells as fractions (0.01 == 1%), so numeric cells read from a
percentage column are rescaled with to_percentage_scale(). This heuristic
misreads a literal 0.8 (meaning 0.8%) as 80%; kept as-is for compatibility with
reports already stored by the dashboard.
"""

__all__ = [
    "PLACEHOLDER",
    "parse_value",
    "to_percentage_scale",
    "cell_number",
    "cell_text",
    "format_percent",
]

PLACEHOLDER = "-"

# 符号・桁区切り・通貨記号を除去した後の数値表現
_NUMERIC_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")


def _is_number(raw: Any) -> bool:
    return isinstance(raw, numbers.Real) and not isinstance(raw, bool)


def _parse_numeric_text(text: str) -> float | None:
    """Parse "1,234.5", "$1,234", "-$12", "(1,234)" style text. None if not numeric."""
    s = text.strip()
    negative = False
    if len(s) >= 2 and s[0] == "(" and s[-1] == ")":
        negative = True
        s = s[1:-1].strip()
    s = s.replace(",", "").replace("$", "").replace(" ", "")
    if not _NUMERIC_RE.match(s):
        return None
    value = float(s)
    if not math.isfinite(value):
        return None
    return -value if negative else value


def to_percentage_scale(value: float) -> float:
    """Rescale a numeric percentage cell to whole-number percent.

    |v| in [0.99, 1.01] -> exactly 100 (sign kept); 0 < |v| <= 1 -> v * 100;
    anything else is already percentage-scale and returned unchanged.
    """
    magnitude = abs(value)
    if 0.99 <= magnitude <= 1.01:
        return math.copysign(100.0, value)
    if 0 < magnitude <= 1:
        return value * 100
    return float(value)


def parse_value(raw: Any, *, percentage: bool = False) -> float | str | None:
    """Parse one raw cell.

    Args:
        raw: Cell content as delivered by the reader (str, int, float, None) or
            anything else a caller happens to pass.
        percentage: True when the cell comes from a percentage-typed column;
            enables the fractional-percent rescaling for numeric cells.

    Returns:
        None for blank cells and the "-" placeholder, a float for numbers and
        "NN%" strings, otherwise the trimmed text of the cell.
    """
    if raw is None:
        return None
    if _is_number(raw):
        value = float(raw)
        if math.isnan(value):
            return None
        if not math.isfinite(value):
            return str(raw)
        return to_percentage_scale(value) if percentage else value
    if not isinstance(raw, str):
        try:
            return str(raw).strip()
        except Exception:  # __str__ 自体が壊れたオブジェクト
            return repr(type(raw))

    text = raw.strip()
    if text == "" or text == PLACEHOLDER:
        return None
    if text.endswith("%"):
        number = _parse_numeric_text(text[:-1])
        return text if number is None else number
    number = _parse_numeric_text(text)
    if number is None:
        return text
    return to_percentage_scale(number) if percentage else number


def cell_number(raw: Any, *, percentage: bool = False) -> float:
    """Numeric value of a cell for report columns; blanks and text count as 0."""
    value = parse_value(raw, percentage=percentage)
    return value if isinstance(value, float) else 0.0


def cell_text(raw: Any) -> str:
    """Display text of a cell: "" for blanks, integral floats without ".0"."""
    if raw is None:
        return ""
    if _is_number(raw):
        value = float(raw)
        if math.isnan(value):
            return ""
        if value.is_integer() and not isinstance(raw, numbers.Integral):
            return str(int(value))
        return str(raw)
    if isinstance(raw, str):
        return raw.strip()
    return str(raw).strip()


def format_percent(value: float, digits: int = 2) -> str:
    """Render a whole-number percentage, e.g. 55.6 -> "55.60%"."""
    return f"{value:.{digits}f}%"
