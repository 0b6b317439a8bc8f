"""Timing setters and cutoff repair for the selected sample."""

from __future__ import annotations

from typing import Callable

from .events import EventBus
from .models import Cutoff, CutoffKind, TimedSample


def repair_cutoff(sample: TimedSample, total_duration_ms: float) -> bool:
    """Pull the cutoff up to the minimum allowed point if it lies before it.

    Returns True if the cutoff was changed.
    """
    cutoff = sample.cutoff_ms(total_duration_ms)
    min_cutoff = sample.min_cutoff_ms()
    if cutoff < min_cutoff:
        sample.cutoff = Cutoff.offset_relative(min_cutoff - sample.offset)
        return True
    return False


class TimingModel:
    """Mutates the selected :class:`TimedSample` through absolute-ms setters.

    Every setter re-establishes the cutoff invariant, then reports the edit
    through ``on_modified`` (marks the voicebank dirty) and emits
    ``timing.changed`` with ``external_origin=False``.  With no sample
    selected every setter is a silent no-op.  A negative offset is clamped
    to zero.
    """

    def __init__(self, event_bus: EventBus | None = None,
                 on_modified: Callable[[], None] | None = None):
        self._bus = event_bus
        self._on_modified = on_modified
        self._sample: TimedSample | None = None

    @property
    def sample(self) -> TimedSample | None:
        return self._sample

    @sample.setter
    def sample(self, sample: TimedSample | None) -> None:
        self._sample = sample

    def set_offset(self, value: float, total_duration_ms: float) -> None:
        s = self._sample
        if s is None:
            return
        value = max(value, 0.0)
        delta = value - s.offset
        s.offset += delta
        s.consonant -= delta
        s.preutter -= delta
        s.overlap -= delta
        if s.cutoff.kind is CutoffKind.FROM_OFFSET:
            s.cutoff = Cutoff.from_raw(s.cutoff.raw + delta)
        self._commit(total_duration_ms)

    def set_overlap(self, value: float, total_duration_ms: float) -> None:
        s = self._sample
        if s is None:
            return
        s.overlap = value - s.offset
        self._commit(total_duration_ms)

    def set_preutter(self, value: float, total_duration_ms: float) -> None:
        s = self._sample
        if s is None:
            return
        s.preutter = value - s.offset
        self._commit(total_duration_ms)

    def set_consonant(self, value: float, total_duration_ms: float) -> None:
        s = self._sample
        if s is None:
            return
        s.consonant = value - s.offset
        self._commit(total_duration_ms)

    def set_cutoff(self, value: float, total_duration_ms: float) -> None:
        s = self._sample
        if s is None or value < s.offset:
            return
        s.cutoff = Cutoff.offset_relative(value - s.offset)
        self._commit(total_duration_ms)

    def repair(self, total_duration_ms: float) -> bool:
        if self._sample is None:
            return False
        return repair_cutoff(self._sample, total_duration_ms)

    def _commit(self, total_duration_ms: float) -> None:
        repair_cutoff(self._sample, total_duration_ms)
        if self._on_modified is not None:
            self._on_modified()
        if self._bus is not None:
            self._bus.publish_timing(self._sample)
