from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class TickEvent:
    id: str
    tick: Decimal
    timestamp: int
    block_number: int
    log_index: int
    transaction_log_index: int
    initial_tick: Decimal


@dataclass(frozen=True)
class TickSample:
    timestamp: int
    tick: Decimal
    block: int
    log_index: int = 0


@dataclass(frozen=True)
class CumulativePoint:
    timestamp: int
    cumulative_tick: Decimal
    block: int | None = None


@dataclass(frozen=True)
class TwapPoint:
    timestamp: int
    block: int | None
    twap: Decimal
    price: Decimal | None = None


@dataclass(frozen=True)
class ChartSeries:
    name: str
    x: list[int]
    y: list[float]
