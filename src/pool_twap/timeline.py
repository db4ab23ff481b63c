from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Iterable

from .errors import EmptyInputError
from .models import TickEvent, TickSample

logger = logging.getLogger(__name__)


@dataclass
class TickTimelineBuilder:
    """Condenses raw tick-change events into one sample per tick transition.

    Events are consumed in the order given (``feed_events`` sorts them by
    time first). A new sample is opened only when the
    tick value differs from the last accepted one; an event landing on a
    timestamp that already has a sample replaces it when its log index is
    strictly greater, so the last event in a block wins.
    """

    _samples: dict[int, TickSample] = field(default_factory=dict, init=False, repr=False)
    _last_tick: Decimal | None = field(default=None, init=False, repr=False)
    _first_event: TickEvent | None = field(default=None, init=False, repr=False)
    _dropped: int = field(default=0, init=False, repr=False)

    @property
    def initial_tick(self) -> Decimal | None:
        return self._first_event.initial_tick if self._first_event else None

    @property
    def initial_time(self) -> int | None:
        return self._first_event.timestamp if self._first_event else None

    @property
    def dropped(self) -> int:
        return self._dropped

    def add_event(self, event: TickEvent) -> TickSample | None:
        if self._first_event is None:
            self._first_event = event

        existing = self._samples.get(event.timestamp)
        if existing is not None:
            if event.log_index > existing.log_index:
                updated = replace(
                    existing,
                    tick=event.tick,
                    block=event.block_number,
                    log_index=event.log_index,
                )
                self._samples[event.timestamp] = updated
                self._last_tick = event.tick
                return updated
            self._dropped += 1
            return None

        # Decimal == compares by value, so Decimal("5") and Decimal("5.0") match.
        if self._last_tick is not None and event.tick == self._last_tick:
            self._dropped += 1
            return None

        sample = TickSample(
            timestamp=event.timestamp,
            tick=event.tick,
            block=event.block_number,
            log_index=event.log_index,
        )
        self._samples[event.timestamp] = sample
        self._last_tick = event.tick
        return sample

    def samples(self) -> list[TickSample]:
        if self._first_event is None:
            raise EmptyInputError("no tick events to build a timeline from")
        return sorted(self._samples.values(), key=lambda sample: sample.timestamp)


def order_events(events: Iterable[TickEvent]) -> list[TickEvent]:
    """Stable time order; the index does not guarantee ids follow timestamps."""
    return sorted(events, key=lambda event: (event.timestamp, event.block_number, event.log_index))


def feed_events(events: Iterable[TickEvent]) -> TickTimelineBuilder:
    builder = TickTimelineBuilder()
    for event in order_events(events):
        builder.add_event(event)
    return builder


def build_tick_timeline(events: Iterable[TickEvent]) -> list[TickSample]:
    builder = feed_events(events)

    samples = builder.samples()
    logger.debug(
        "[TWAP] Timeline built: %s sample(s), %s redundant event(s) dropped",
        len(samples),
        builder.dropped,
    )
    return samples
