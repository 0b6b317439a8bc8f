"""Read and write the ``oto.ini`` timing catalog of a voicebank.

Each catalog line has the form::

    file.wav=alias,offset,consonant,cutoff,preutter,overlap

A voicebank may keep one catalog per sub-directory; every record remembers
the directory it came from (``set_name``) so it is written back there.
"""

from __future__ import annotations

import logging
import os
import tempfile

from .models import Cutoff, TimedSample, Voicebank, VoicebankInfo

log = logging.getLogger(__name__)

CATALOG_FILENAME = "oto.ini"
CHARACTER_FILENAME = "character.txt"

# character.txt keys, lower-cased, to VoicebankInfo fields
_INFO_KEYS = {
    "name": "name",
    "author": "author",
    "cv": "voice",
    "voice": "voice",
    "web": "web",
    "version": "version",
}
# keys the UTAU host uses for artwork, not shown as text
_INFO_IGNORED = ("image", "sample", "portrait")


class CatalogError(Exception):
    """Raised when a catalog cannot be read or written."""
    pass


# ---------------------------------------------------------------------------
# Parsing / formatting
# ---------------------------------------------------------------------------

def _parse_ms(text: str) -> float:
    text = text.strip()
    return float(text) if text else 0.0


def _format_ms(value: float) -> str:
    value = round(float(value), 3)
    if value == int(value):
        return str(int(value))
    return f"{value:g}"


def parse_line(line: str, set_dir: str, set_name: str) -> TimedSample:
    """Parse one catalog line.  Raises ValueError on malformed input."""
    if "=" not in line:
        raise ValueError("missing '='")
    wav, _, rest = line.partition("=")
    wav = wav.strip()
    if not wav:
        raise ValueError("empty file name")
    parts = rest.split(",")
    if len(parts) > 6:
        raise ValueError(f"expected at most 6 fields, got {len(parts)}")
    parts += [""] * (6 - len(parts))
    alias = parts[0].strip() or os.path.splitext(os.path.basename(wav))[0]
    offset = _parse_ms(parts[1])
    return TimedSample(
        file=os.path.join(set_dir, wav),
        alias=alias,
        offset=max(offset, 0.0),
        consonant=_parse_ms(parts[2]),
        cutoff=Cutoff.from_raw(_parse_ms(parts[3])),
        preutter=_parse_ms(parts[4]),
        overlap=_parse_ms(parts[5]),
        set_name=set_name,
    )


def format_line(sample: TimedSample, set_dir: str) -> str:
    wav = os.path.relpath(sample.file, set_dir)
    fields = [
        sample.alias,
        _format_ms(sample.offset),
        _format_ms(sample.consonant),
        _format_ms(sample.cutoff.raw),
        _format_ms(sample.preutter),
        _format_ms(sample.overlap),
    ]
    return f"{wav}={','.join(fields)}"


# ---------------------------------------------------------------------------
# Load / Save
# ---------------------------------------------------------------------------

def _find_catalogs(location: str) -> list[str]:
    found: list[str] = []
    for root, dirs, files in os.walk(location):
        dirs.sort()
        for name in sorted(files):
            if name.lower() == CATALOG_FILENAME:
                found.append(os.path.join(root, name))
    return found


def read_character_info(location: str, encoding: str = "shift_jis") -> VoicebankInfo:
    """Read the optional ``character.txt`` at the voicebank root.

    Lines are ``key=value`` (or ``key:value``, as in ``CV:name``).  A missing
    or unreadable file gives an empty :class:`VoicebankInfo`; the catalog is
    usable without it.
    """
    info = VoicebankInfo()
    path = os.path.join(location, CHARACTER_FILENAME)
    if not os.path.isfile(path):
        return info
    try:
        with open(path, "r", encoding=encoding) as f:
            lines = f.read().splitlines()
    except (OSError, UnicodeDecodeError) as e:
        log.warning("Cannot read %s: %s", path, e)
        return info
    for line in lines:
        line = line.strip()
        if not line:
            continue
        key, sep, value = line.partition("=")
        if not sep:
            key, sep, value = line.partition(":")
        key = key.strip().lower()
        if sep and key in _INFO_KEYS:
            setattr(info, _INFO_KEYS[key], value.strip())
        elif not (sep and key in _INFO_IGNORED):
            info.other.append(line)
    return info


def load_timing_catalog(location: str, encoding: str = "shift_jis") -> Voicebank:
    """Load every ``oto.ini`` below *location* into a :class:`Voicebank`.

    Malformed lines are skipped and reported in ``Voicebank.errors``.
    Raises :class:`CatalogError` if the directory or a catalog file cannot
    be read.
    """
    if not os.path.isdir(location):
        raise CatalogError(f"Voicebank directory not found: {location}")
    bank = Voicebank(
        location=os.path.abspath(location),
        name=os.path.basename(os.path.normpath(os.path.abspath(location))),
        encoding=encoding,
    )
    bank.info = read_character_info(bank.location, encoding)
    for path in _find_catalogs(bank.location):
        set_dir = os.path.dirname(path)
        set_name = os.path.relpath(set_dir, bank.location)
        if set_name == os.curdir:
            set_name = ""
        try:
            with open(path, "r", encoding=encoding) as f:
                lines = f.read().splitlines()
        except (OSError, UnicodeDecodeError) as e:
            raise CatalogError(f"Cannot read catalog {path}: {e}") from e
        for lineno, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                bank.samples.append(parse_line(line, set_dir, set_name))
            except ValueError as e:
                bank.errors.append(f"{path}:{lineno}: {e}: {line.strip()}")
    log.info("Loaded %d samples from %s (%d errors)",
             len(bank.samples), bank.location, len(bank.errors))
    return bank


def save_timing_catalog(bank: Voicebank) -> None:
    """Write the records of *bank* back to their ``oto.ini`` files.

    Each file is written to a temporary sibling first and then moved into
    place.  Raises :class:`CatalogError` on failure; the in-memory records
    and the dirty flag are left untouched in that case.
    """
    by_set: dict[str, list[TimedSample]] = {}
    for sample in bank.samples:
        by_set.setdefault(sample.set_name, []).append(sample)

    for set_name, samples in by_set.items():
        set_dir = os.path.join(bank.location, set_name) if set_name else bank.location
        path = os.path.join(set_dir, CATALOG_FILENAME)
        try:
            text = "".join(format_line(s, set_dir) + "\r\n" for s in samples)
            data = text.encode(bank.encoding)
        except (UnicodeEncodeError, LookupError) as e:
            raise CatalogError(f"Cannot encode catalog {path} as {bank.encoding}: {e}") from e
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=".oto-", suffix=".tmp", dir=set_dir)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
            tmp_path = None
        except OSError as e:
            raise CatalogError(f"Cannot write catalog {path}: {e}") from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)
        log.info("Saved %d samples to %s", len(samples), path)
    bank.dirty = False
