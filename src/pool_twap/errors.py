from __future__ import annotations


class TwapError(Exception):
    pass


class EmptyInputError(TwapError, ValueError):
    """No tick events were available to build a timeline from."""


class OutOfRangeQueryError(TwapError, ValueError):
    """A cumulative lookup fell outside the observed sample span."""

    def __init__(self, query_ts: int, first_ts: int | None, last_ts: int | None) -> None:
        super().__init__(
            f"timestamp {query_ts} is outside the sample range [{first_ts}, {last_ts}]"
        )
        self.query_ts = query_ts
        self.first_ts = first_ts
        self.last_ts = last_ts


class DataSourceError(TwapError, RuntimeError):
    """The tick event source failed or returned malformed data."""
