"""Background spectrogram computation with stale-result discarding."""

from __future__ import annotations

import logging
import queue
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable

import numpy as np

from .config import default_config
from .spectrogram import compute_mel_heatmap

log = logging.getLogger(__name__)


@dataclass
class SpectrogramResult:
    """Outcome of one background heatmap computation.

    Attributes:
        generation: Submission counter value the work was stamped with.
        tag:        Identity of the sample the work belongs to (its file).
        heatmap:    (mel_bands, n_frames) matrix, or None if nothing usable
                    was produced.
        error:      Text of the exception raised by the computation, if any.
    """
    generation: int
    tag: Any
    heatmap: np.ndarray | None
    error: str | None = None
    elapsed_ms: float = 0.0


class SpectrogramPipeline:
    """One-shot background heatmap jobs delivered to the interactive loop.

    :meth:`submit` hands work to a thread pool and stamps it with a new
    generation.  Finished work is posted to a result queue that only the
    interactive context reads, via :meth:`drain`; results whose generation
    is older than the latest submission (or :meth:`invalidate`) are dropped
    there, so a slow job for a previous selection can never overwrite the
    current one.
    """

    def __init__(self, config: dict[str, Any] | None = None, *,
                 compute: Callable[..., np.ndarray | None] | None = None,
                 max_workers: int | None = None):
        cfg = config if config is not None else default_config()
        self._compute_kwargs = {
            "fft_size": cfg.get("fft_size", 1024),
            "mel_bands": cfg.get("mel_bands", 80),
            "frame_rate_hz": cfg.get("frame_rate_hz", 400),
            "log_floor": cfg.get("log_floor", 1e-4),
            "window": cfg.get("window", "hann"),
        }
        self._compute = compute or compute_mel_heatmap
        workers = max_workers if max_workers is not None else cfg.get("max_workers", 1)
        self._executor = ThreadPoolExecutor(max_workers=workers,
                                            thread_name_prefix="spectrogram")
        self._results: queue.Queue[SpectrogramResult] = queue.Queue()
        self._lock = threading.Lock()
        self._generation = 0
        self._pending: set[Future] = set()

    @property
    def generation(self) -> int:
        return self._generation

    def submit(self, samples: np.ndarray, sample_rate: int, tag: Any = None) -> int:
        """Schedule a heatmap computation.  Returns its generation."""
        with self._lock:
            self._generation += 1
            generation = self._generation
        future = self._executor.submit(self._run, generation, tag,
                                       samples, sample_rate)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._on_future_done)
        log.debug("spectrogram job %d submitted for %s", generation, tag)
        return generation

    def invalidate(self) -> int:
        """Make every in-flight job stale without submitting a new one."""
        with self._lock:
            self._generation += 1
            return self._generation

    def drain(self) -> list[SpectrogramResult]:
        """Return finished results that are still current.  Never blocks."""
        current: list[SpectrogramResult] = []
        while True:
            try:
                result = self._results.get_nowait()
            except queue.Empty:
                break
            if result.generation != self._generation:
                log.debug("discarding stale spectrogram %d for %s (current %d)",
                          result.generation, result.tag, self._generation)
                continue
            current.append(result)
        return current

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until all in-flight jobs have finished.  True if idle."""
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _done, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait_for_jobs: bool = False) -> None:
        self._executor.shutdown(wait=wait_for_jobs, cancel_futures=True)

    # ── Internal helpers ────────────────────────────────────────────────────

    def _run(self, generation: int, tag: Any, samples: np.ndarray,
             sample_rate: int) -> None:
        t0 = time.perf_counter()
        try:
            heatmap = self._compute(samples, sample_rate, **self._compute_kwargs)
            error = None
        except Exception as exc:
            heatmap = None
            error = f"{type(exc).__name__}: {exc}"
        elapsed = (time.perf_counter() - t0) * 1000
        self._results.put(SpectrogramResult(generation, tag, heatmap,
                                            error, elapsed))

    def _on_future_done(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
