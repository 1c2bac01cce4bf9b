"""Concurrent loading of trade files into the repository."""

from __future__ import annotations

import logging
import os
import queue
import threading
import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .env import get_env_int
from .parser import parse_txt_file
from .repository import TradeRepository

logger = logging.getLogger(__name__)

_DONE = object()


def _default_workers() -> int:
    return (os.cpu_count() or 1) * 2


@dataclass(frozen=True)
class ProcessorSettings:
    """Tuning of the file processor."""

    batch_size: int = 1000
    num_workers: int = field(default_factory=_default_workers)
    buffer_size: int = 10000
    ticker_seconds: int = 2

    def __post_init__(self) -> None:
        for name, lowest in (
            ("batch_size", 1), ("num_workers", 1), ("buffer_size", 0), ("ticker_seconds", 1)
        ):
            if getattr(self, name) < lowest:
                raise ValueError(f"{name} must be at least {lowest}, got {getattr(self, name)}")

    @classmethod
    def from_env(cls) -> ProcessorSettings:
        """Read BATCH_SIZE, NUM_WORKERS, MAX_CHANNEL_BUFFER and TICKER_SECONDS."""
        return cls(
            batch_size=get_env_int("BATCH_SIZE", 1000),
            num_workers=get_env_int("NUM_WORKERS", _default_workers()),
            buffer_size=get_env_int("MAX_CHANNEL_BUFFER", 10000),
            ticker_seconds=get_env_int("TICKER_SECONDS", 2),
        )


def _put(trades: queue.Queue, item: object, stop: threading.Event) -> bool:
    """Put ``item``, waiting for room; return False once ``stop`` is set."""
    while True:
        try:
            trades.put(item, timeout=0.1)
            return True
        except queue.Full:
            if stop.is_set():
                return False


class Processor:
    """Parses trade files in parallel and saves the trades in batches."""

    def __init__(self, repo: TradeRepository, settings: ProcessorSettings | None = None) -> None:
        self._repo = repo
        self._settings = settings or ProcessorSettings.from_env()

    def process_files(self, files: Iterable[str]) -> None:
        """Load every trade of ``files``; raise the first error met, if any.

        Each file is read by its own thread while a pool of workers saves what
        was read. A failing file or batch does not stop the others.
        """
        s = self._settings
        trades: queue.Queue = queue.Queue(maxsize=max(s.buffer_size, 1))
        errors: list[BaseException] = []
        lock = threading.Lock()
        stop = threading.Event()
        now = datetime.now(timezone.utc)

        def report(exc: BaseException) -> None:
            with lock:
                if len(errors) < s.num_workers:
                    errors.append(exc)

        def read(path: str) -> None:
            try:
                for trade in parse_txt_file(path, now, stop):
                    if not _put(trades, trade, stop):
                        return
            except Exception as exc:
                logger.error("Error processing file %s: %s", path, exc)
                report(exc)

        def close() -> None:
            for reader in readers:
                reader.join()
            for _ in range(s.num_workers):
                if not _put(trades, _DONE, stop):
                    return

        logger.info(
            "Starting %d workers (batch size %d, buffer size %d)",
            s.num_workers, s.batch_size, s.buffer_size,
        )
        workers = [
            threading.Thread(target=self._work, args=(trades, report), daemon=True)
            for _ in range(s.num_workers)
        ]
        readers = [threading.Thread(target=read, args=(p,), daemon=True) for p in files]
        closer = threading.Thread(target=close, daemon=True)
        for thread in (*workers, *readers, closer):
            thread.start()
        for worker in workers:
            worker.join()
        stop.set()
        closer.join()
        if errors:
            raise errors[0]

    def _work(self, trades: queue.Queue, report) -> None:
        try:
            with self._repo.connection() as conn:
                self._consume(conn, trades, report)
        except Exception as exc:
            logger.error("Worker failed: %s", exc)
            report(exc)

    def _consume(self, conn, trades: queue.Queue, report) -> None:
        batch: list = []
        interval = self._settings.ticker_seconds

        def flush() -> None:
            if batch:
                try:
                    self._repo.save_batch(conn, tuple(batch))
                except Exception as exc:
                    logger.error("Error during batch insert: %s", exc)
                    report(exc)
                batch.clear()

        deadline = time.monotonic() + interval
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                flush()
                deadline = time.monotonic() + interval
                continue
            try:
                item = trades.get(timeout=remaining)
            except queue.Empty:
                continue
            if item is _DONE:
                flush()
                return
            batch.append(item)
            if len(batch) >= self._settings.batch_size:
                flush()