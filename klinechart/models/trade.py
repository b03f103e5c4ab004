"""Externally recommended trade price levels.

Levels come from an AI recommendation service and are treated as opaque,
possibly sloppy input: a non-numeric, non-finite or zero price simply
means "nothing to draw" for that side.
"""

import logging
import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


class TradeTerm(str, Enum):
    """Recommendation horizon."""

    SHORT = "shortTerm"
    MID = "midTerm"
    LONG = "longTerm"


class TradeSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


def _coerce_price(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (int, float)):
        logger.debug("Ignoring non-numeric trade price %r", value)
        return None
    if not math.isfinite(value):
        return None
    return float(value)


class TradeLevel(BaseModel):
    """Buy/sell recommendation for one term."""

    model_config = ConfigDict(frozen=True)

    term: TradeTerm
    buy: float | None = None
    sell: float | None = None
    reason: str = ""

    @field_validator("buy", "sell", mode="before")
    @classmethod
    def _lenient_price(cls, value: Any) -> float | None:
        return _coerce_price(value)

    @field_validator("reason", mode="before")
    @classmethod
    def _lenient_reason(cls, value: Any) -> str:
        return "" if value is None else str(value)

    def price(self, side: TradeSide) -> float | None:
        """Drawable price for a side, or None when it should be skipped."""
        value = self.buy if side is TradeSide.BUY else self.sell
        if value is None or value == 0:
            return None
        return value


class TradeLevels(BaseModel):
    """Per-term recommendation set (any term may be missing)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    short_term: TradeLevel | None = Field(default=None, alias="shortTerm")
    mid_term: TradeLevel | None = Field(default=None, alias="midTerm")
    long_term: TradeLevel | None = Field(default=None, alias="longTerm")

    @model_validator(mode="before")
    @classmethod
    def _inject_terms(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        fields = {
            TradeTerm.SHORT: ("shortTerm", "short_term"),
            TradeTerm.MID: ("midTerm", "mid_term"),
            TradeTerm.LONG: ("longTerm", "long_term"),
        }
        result: dict[str, Any] = {}
        for term, keys in fields.items():
            raw = next((data[k] for k in keys if k in data), None)
            if isinstance(raw, TradeLevel):
                result[term.value] = raw
            elif isinstance(raw, dict):
                result[term.value] = {**raw, "term": term.value}
            else:
                if raw is not None:
                    logger.debug("Ignoring malformed %s trade level: %r", term.value, raw)
                result[term.value] = None
        return result

    def items(self) -> list[tuple[TradeTerm, TradeLevel | None]]:
        """Terms in short, mid, long order."""
        return [
            (TradeTerm.SHORT, self.short_term),
            (TradeTerm.MID, self.mid_term),
            (TradeTerm.LONG, self.long_term),
        ]
