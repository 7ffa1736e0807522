from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional


FILTER_OPERATORS = ("equals", "not_equals", "contains", "greater_than", "less_than")


@dataclass(frozen=True)
class FilterRule:
    id: str
    column: str
    operator: str = "equals"
    value: str = ""


@dataclass(frozen=True)
class MoveRequest:
    x: float = 0.0
    y: float = 0.0


def _as_float(value: Any) -> float:
    try:
        out = float(value)
    except Exception:
        return 0.0
    if math.isnan(out) or math.isinf(out):
        return 0.0
    return out


def normalize_filter_rule(raw: dict, *, default_column: Optional[str] = None) -> FilterRule:
    operator = str(raw.get("operator") or "equals").strip().lower()
    if operator not in FILTER_OPERATORS:
        operator = "equals"
    column = str(raw.get("column") or default_column or "").strip()
    value = raw.get("value")
    return FilterRule(
        id=str(raw.get("id") or ""),
        column=column,
        operator=operator,
        value="" if value is None else str(value),
    )


def normalize_move(raw: dict) -> MoveRequest:
    return MoveRequest(x=_as_float(raw.get("x")), y=_as_float(raw.get("y")))
