from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Protocol, Sequence

from .cumulative import integrate_cumulative
from .models import ChartSeries, CumulativePoint, TickEvent, TwapPoint
from .price import PriceConvention
from .timeline import build_tick_timeline, feed_events
from .twap import apply_price, evaluate_twap
from .windows import window_label

logger = logging.getLogger(__name__)


class TickEventSource(Protocol):
    async def fetch_tick_events(self, pool_id: str) -> list[TickEvent]: ...


@dataclass(frozen=True)
class WindowSeries:
    label: str
    window_seconds: int
    points: list[TwapPoint]


@dataclass(frozen=True)
class TwapReport:
    pool_id: str
    convention: PriceConvention
    initial_tick: Decimal | None
    initial_time: int | None
    event_count: int
    sample_count: int
    series: list[WindowSeries] = field(default_factory=list)

    def get(self, window_seconds: int) -> WindowSeries | None:
        for item in self.series:
            if item.window_seconds == window_seconds:
                return item
        return None


def compute_twap_series(
    events: Sequence[TickEvent],
    duration_seconds: int,
    convention: PriceConvention,
) -> list[TwapPoint]:
    samples = build_tick_timeline(events)
    cumulative = integrate_cumulative(samples)
    return apply_price(evaluate_twap(cumulative, duration_seconds), convention)


def _evaluate_window(
    cumulative: Sequence[CumulativePoint],
    window_seconds: int,
    convention: PriceConvention,
) -> WindowSeries:
    points = apply_price(evaluate_twap(cumulative, window_seconds), convention)
    return WindowSeries(label=window_label(window_seconds), window_seconds=window_seconds, points=points)


async def build_report(
    source: TickEventSource,
    pool_id: str,
    windows: Sequence[int],
    convention: PriceConvention,
) -> TwapReport:
    """Fetch a pool's events once and evaluate every window over the shared series.

    Window passes only read the cumulative series, so they run in worker
    threads side by side. Any failure aborts the whole report.
    """
    if not windows:
        raise ValueError("at least one window is required")

    events = await source.fetch_tick_events(pool_id)

    builder = feed_events(events)
    samples = builder.samples()
    cumulative = tuple(integrate_cumulative(samples))

    series = list(
        await asyncio.gather(
            *(
                asyncio.to_thread(_evaluate_window, cumulative, window_seconds, convention)
                for window_seconds in windows
            )
        )
    )
    logger.info(
        "[TWAP] Report for %s: %s event(s), %s sample(s), windows=%s, convention=%s",
        pool_id,
        len(events),
        len(samples),
        ",".join(item.label for item in series),
        convention.describe(),
    )
    return TwapReport(
        pool_id=pool_id,
        convention=convention,
        initial_tick=builder.initial_tick,
        initial_time=builder.initial_time,
        event_count=len(events),
        sample_count=len(samples),
        series=series,
    )


def to_chart_series(report: TwapReport) -> list[ChartSeries]:
    charts: list[ChartSeries] = []
    for item in report.series:
        x: list[int] = []
        y: list[float] = []
        for point in item.points:
            if point.price is None:
                continue
            x.append(point.block if point.block is not None else point.timestamp)
            y.append(float(point.price))
        charts.append(ChartSeries(name=item.label, x=x, y=y))
    return charts
