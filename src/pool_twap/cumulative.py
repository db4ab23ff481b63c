from __future__ import annotations

from decimal import Decimal, localcontext
from typing import Sequence

from .errors import EmptyInputError
from .models import CumulativePoint, TickSample

DECIMAL_PRECISION = 50


def integrate_cumulative(samples: Sequence[TickSample]) -> list[CumulativePoint]:
    """Running left-endpoint integral of the step-held tick timeline.

    The first point is pinned at zero; only differences between points are
    meaningful.
    """
    if not samples:
        raise EmptyInputError("cannot integrate an empty tick timeline")

    first = samples[0]
    points = [CumulativePoint(timestamp=first.timestamp, cumulative_tick=Decimal(0), block=first.block)]

    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        running = Decimal(0)
        for previous, current in zip(samples, samples[1:]):
            elapsed = current.timestamp - previous.timestamp
            if elapsed <= 0:
                raise ValueError(
                    f"sample timestamps must be strictly increasing: {previous.timestamp} -> {current.timestamp}"
                )
            running = running + previous.tick * elapsed
            points.append(
                CumulativePoint(
                    timestamp=current.timestamp,
                    cumulative_tick=running,
                    block=current.block,
                )
            )

    return points
