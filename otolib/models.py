from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class CutoffKind(Enum):
    FROM_END = "from_end"
    FROM_OFFSET = "from_offset"


@dataclass(frozen=True)
class Cutoff:
    """End boundary of the usable window.

    The catalog stores the cutoff as one signed number: a value >= 0 is the
    distance back from the end of the file, a negative value is the distance
    forward from the offset.  The tagged form keeps that reference explicit.

    Attributes:
        kind:      Which reference point ``magnitude`` is measured from.
        magnitude: Distance in ms from the reference point.
    """
    kind: CutoffKind
    magnitude: float

    @classmethod
    def from_raw(cls, raw: float) -> Cutoff:
        if raw >= 0:
            return cls(CutoffKind.FROM_END, float(raw))
        return cls(CutoffKind.FROM_OFFSET, float(-raw))

    @classmethod
    def offset_relative(cls, distance: float) -> Cutoff:
        """Cutoff *distance* ms after the offset, as the catalog encodes it.

        A non-positive distance has no offset-relative catalog encoding and
        therefore comes back as a file-end cutoff.
        """
        return cls.from_raw(-distance)

    @property
    def raw(self) -> float:
        if self.kind is CutoffKind.FROM_END:
            return self.magnitude
        return -self.magnitude

    def absolute(self, offset: float, total_duration_ms: float) -> float:
        """Absolute cutoff point in ms."""
        if self.kind is CutoffKind.FROM_END:
            return total_duration_ms - self.magnitude
        return offset + self.magnitude


@dataclass
class TimedSample:
    """One recording's timing annotation (one ``oto.ini`` line).

    ``consonant``, ``preutter`` and ``overlap`` are relative to ``offset``;
    all values are milliseconds.
    """
    file: str
    alias: str
    offset: float = 0.0
    consonant: float = 0.0
    cutoff: Cutoff = field(default_factory=lambda: Cutoff.from_raw(0.0))
    preutter: float = 0.0
    overlap: float = 0.0
    set_name: str = ""

    def cutoff_ms(self, total_duration_ms: float) -> float:
        return self.cutoff.absolute(self.offset, total_duration_ms)

    def min_cutoff_ms(self) -> float:
        # 1 ms between consonant end and cutoff avoids resampler artifacts
        return self.offset + max(self.overlap, self.preutter, self.consonant + 1.0)

    @property
    def consonant_ms(self) -> float:
        return self.offset + self.consonant

    @property
    def preutter_ms(self) -> float:
        return self.offset + self.preutter

    @property
    def overlap_ms(self) -> float:
        return self.offset + self.overlap


@dataclass
class VoicebankInfo:
    """Singer metadata from the voicebank's ``character.txt``.

    Attributes:
        name:    Character name; empty when the file does not give one.
        author:  Who recorded or packaged the voicebank.
        voice:   Voice provider (the ``CV:`` line).
        web:     Homepage.
        version: Release string.
        other:   Remaining free-text lines, in file order.
    """
    name: str = ""
    author: str = ""
    voice: str = ""
    web: str = ""
    version: str = ""
    other: list[str] = field(default_factory=list)


@dataclass
class Voicebank:
    location: str
    name: str
    samples: list[TimedSample] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    encoding: str = "shift_jis"
    dirty: bool = False
    info: VoicebankInfo = field(default_factory=VoicebankInfo)

    @property
    def title(self) -> str:
        """Character name if ``character.txt`` gives one, else the directory name."""
        return self.info.name or self.name

    def find(self, alias: str) -> TimedSample | None:
        for sample in self.samples:
            if sample.alias == alias:
                return sample
        return None

    def index_of(self, sample: TimedSample) -> int:
        for i, s in enumerate(self.samples):
            if s is sample:
                return i
        return -1
