from __future__ import annotations

import logging
from dataclasses import replace
from decimal import localcontext
from typing import Sequence

from .boundary import resolve_cumulative
from .cumulative import DECIMAL_PRECISION
from .errors import OutOfRangeQueryError
from .models import CumulativePoint, TwapPoint
from .price import PriceConvention, tick_to_price

logger = logging.getLogger(__name__)


def evaluate_twap(points: Sequence[CumulativePoint], duration_seconds: int) -> list[TwapPoint]:
    """Average tick over ``[ts, ts + duration]`` for every sample with a full window ahead.

    Window ends that fall between samples are linearly interpolated. A window
    longer than the observed span yields an empty list.
    """
    if duration_seconds <= 0:
        raise ValueError("duration_seconds must be > 0")
    if not points:
        return []

    timestamps = [point.timestamp for point in points]
    cumulative_by_ts = {point.timestamp: point.cumulative_tick for point in points}
    last_ts = timestamps[-1]

    results: list[TwapPoint] = []
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        for point in points:
            end_ts = point.timestamp + duration_seconds
            if end_ts > last_ts:
                break

            try:
                end_cumulative = resolve_cumulative(end_ts, timestamps, cumulative_by_ts)
            except OutOfRangeQueryError as exc:
                raise RuntimeError(f"window end escaped the sample range: {exc}") from exc

            results.append(
                TwapPoint(
                    timestamp=point.timestamp,
                    block=point.block,
                    twap=(end_cumulative - point.cumulative_tick) / duration_seconds,
                )
            )

    logger.debug("[TWAP] %ss window: %s point(s) from %s sample(s)", duration_seconds, len(results), len(points))
    return results


def apply_price(points: Sequence[TwapPoint], convention: PriceConvention) -> list[TwapPoint]:
    return [replace(point, price=tick_to_price(point.twap, convention)) for point in points]
