r"""backend/app/services/response_parser.py

Turn a raw predictor response into a :class:`ParsedPrediction`.

Two response shapes are understood:

* the versioned structured record, where the first element is a mapping such
  as ``{"version": 1, "predictedUnits": 120, "riskLevel": "LOW",
  "rationale": "Base Demand"}``;
* the legacy text line emitted by the hosted model, for example
  ``"📊 500 units, Critical risk, High Temperature"``.

Only structural problems raise :class:`ParseError`.  Anything the parser
cannot extract falls back to ``0`` / ``MEDIUM`` / ``"No additional context"``
because the caller still needs a record to persist.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from typing import Any

from ..core.errors import ParseError
from ..models.schemas import ParsedPrediction, RiskLevel

DEFAULT_COMMENT = "No additional context"
STRUCTURED_VERSIONS = {1}

_UNITS_PATTERN = re.compile(r"(\d+)\s*units")
_COMMENT_PATTERN = re.compile(r"(?:Critical|High|Medium|Low)\s*risk,\s*(.+)$")

# First match wins. "Medium risk" is deliberately absent: MEDIUM is the
# fallback for both an explicit medium line and an unclassifiable one.
_RISK_MARKERS = (
    ("Critical risk", RiskLevel.CRITICAL),
    ("High risk", RiskLevel.HIGH),
    ("Low risk", RiskLevel.LOW),
)


def parse_prediction(raw: Any) -> ParsedPrediction:
    """Parse the response sequence returned by a predictor client."""

    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise ParseError("Invalid prediction data format: expected a sequence")
    if len(raw) == 0:
        raise ParseError("Invalid prediction data format: empty response")

    first = raw[0]
    if isinstance(first, Mapping):
        return parse_structured(first)
    if not isinstance(first, str):
        raise ParseError("Invalid prediction data format: first element is not text")
    return parse_text_line(first)


def parse_text_line(line: str) -> ParsedPrediction:
    """Legacy parser for the stylised ``<n> units, <Risk> risk, <comment>`` line."""

    units_match = _UNITS_PATTERN.search(line)
    stock_predicted = int(units_match.group(1)) if units_match else 0

    risk_level = RiskLevel.MEDIUM
    for marker, level in _RISK_MARKERS:
        if marker in line:
            risk_level = level
            break

    comment_match = _COMMENT_PATTERN.search(line)
    comment = comment_match.group(1).strip() if comment_match else ""

    return ParsedPrediction(
        stock_predicted=stock_predicted,
        risk_level=risk_level,
        comment=comment or DEFAULT_COMMENT,
    )


def parse_structured(record: Mapping) -> ParsedPrediction:
    """Parse the tagged ``{predictedUnits, riskLevel, rationale}`` record."""

    version = record.get("version", 1)
    if isinstance(version, bool) or not isinstance(version, int) or version not in STRUCTURED_VERSIONS:
        raise ParseError(f"Unsupported prediction record version: {version!r}")

    stock_predicted = _coerce_units(record.get("predictedUnits"))

    raw_level = record.get("riskLevel")
    try:
        risk_level = RiskLevel(str(raw_level).upper()) if raw_level is not None else RiskLevel.MEDIUM
    except ValueError:
        risk_level = RiskLevel.MEDIUM

    rationale = record.get("rationale")
    comment = rationale.strip() if isinstance(rationale, str) and rationale.strip() else DEFAULT_COMMENT

    return ParsedPrediction(stock_predicted=stock_predicted, risk_level=risk_level, comment=comment)


def _coerce_units(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    if isinstance(value, (int, float)):
        return max(int(value), 0)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return 0
