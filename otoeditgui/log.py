"""Debug tracing for the oto editor GUI.

Usage::

    from otoeditgui.log import dbg, dbg_timed

    dbg("merged heatmap for %s", path)
    with dbg_timed("load_voicebank"):
        editor.load_voicebank(location)

Nothing is printed unless ``OTO_DEBUG`` is ``1`` or ``true``.  Lines go to
stderr as ``[HH:MM:SS.mmm Caller] message`` where *Caller* is the class
of the calling method, or the module name for plain functions.
"""

from __future__ import annotations

import os
import sys
import time
from contextlib import contextmanager
from typing import Iterator

_ENABLED: bool | None = None


def enabled() -> bool:
    global _ENABLED
    if _ENABLED is None:
        _ENABLED = os.environ.get("OTO_DEBUG", "").strip().lower() in ("1", "true")
    return _ENABLED


def _caller(depth: int) -> str:
    try:
        frame = sys._getframe(depth + 1)
    except ValueError:
        return "?"
    owner = frame.f_locals.get("self")
    if owner is not None:
        return type(owner).__name__
    return frame.f_globals.get("__name__", "?").rsplit(".", 1)[-1]


def _write(caller: str, text: str) -> None:
    now = time.time()
    stamp = time.strftime("%H:%M:%S", time.localtime(now))
    print(f"[{stamp}.{int(now % 1 * 1000):03d} {caller}] {text}",
          file=sys.stderr, flush=True)


def dbg(msg: str, *args) -> None:
    """Trace *msg* (``%``-formatted with *args* only when tracing is on)."""
    if not enabled():
        return
    _write(_caller(1), msg % args if args else msg)


@contextmanager
def dbg_timed(label: str) -> Iterator[None]:
    """Trace how long the ``with`` body took, in ms."""
    if not enabled():
        yield
        return
    caller = _caller(2)
    t0 = time.perf_counter()
    try:
        yield
    finally:
        _write(caller, f"{label}: {(time.perf_counter() - t0) * 1000:.1f} ms")
