from __future__ import annotations

from bisect import bisect_left
from decimal import Decimal, localcontext
from typing import Mapping, Sequence

from .cumulative import DECIMAL_PRECISION
from .errors import OutOfRangeQueryError


def resolve_cumulative(
    query_ts: int,
    timestamps: Sequence[int],
    cumulative_by_ts: Mapping[int, Decimal],
) -> Decimal:
    """Cumulative tick at ``query_ts``, interpolated between bracketing samples.

    ``timestamps`` must be sorted ascending and every entry must be a key of
    ``cumulative_by_ts``.
    """
    if not timestamps:
        raise OutOfRangeQueryError(query_ts, None, None)

    exact = cumulative_by_ts.get(query_ts)
    if exact is not None:
        return exact

    index = bisect_left(timestamps, query_ts)
    if index == 0 or index >= len(timestamps):
        raise OutOfRangeQueryError(query_ts, timestamps[0], timestamps[-1])

    lower_ts = timestamps[index - 1]
    upper_ts = timestamps[index]
    lower = cumulative_by_ts[lower_ts]
    upper = cumulative_by_ts[upper_ts]

    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return lower + (upper - lower) * (query_ts - lower_ts) / (upper_ts - lower_ts)
