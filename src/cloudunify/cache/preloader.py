"""Background cache warming on a bounded worker pool."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, Optional, Sequence

logger = logging.getLogger(__name__)

FolderLoader = Callable[[str, Optional[str]], object]


class FolderPreloader:
    """
    Fire-and-forget folder preloading.

    Notes:
        - Jobs run on a bounded pool; submitted futures are tracked only so
          close() and wait_idle() can account for them.
        - Load failures are logged and swallowed; they never reach the
          caller that triggered the job.
        - At most one subfolder job is in flight at a time. Requests made
          while one is running are dropped.
        - The delay between two loads is spent waiting on the stop event,
          outside any cache lock, so close() interrupts it.
    """

    def __init__(
        self,
        load: FolderLoader,
        *,
        max_subfolders: int = 5,
        delay_sec: float = 0.5,
        workers: int = 1,
    ) -> None:
        self._load = load
        self._max_subfolders = max_subfolders
        self._delay_sec = delay_sec
        self._executor = ThreadPoolExecutor(
            max_workers=workers,
            thread_name_prefix="cloudunify-preload",
        )
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._subfolder_job_running = False
        self._pending: set[Future] = set()

    @property
    def closed(self) -> bool:
        return self._stop.is_set()

    def schedule_subfolders(self, paths: Sequence[str], provider_id: Optional[str] = None) -> bool:
        """
        Queue a job loading up to max_subfolders of paths.

        Returns False when nothing was queued (no paths, a job already in
        flight, or the preloader is closed).
        """
        selected = list(dict.fromkeys(paths))[: self._max_subfolders]
        if not selected or self.closed:
            return False

        with self._lock:
            if self._subfolder_job_running:
                return False
            self._subfolder_job_running = True

        if not self._submit(self._run_subfolder_job, selected, provider_id):
            with self._lock:
                self._subfolder_job_running = False
            return False
        logger.debug("Scheduled preload of %d subfolders", len(selected))
        return True

    def schedule_paths(self, paths: Sequence[str], provider_id: Optional[str] = None) -> bool:
        """Queue a job loading every path in order (used for startup warming)."""
        selected = list(dict.fromkeys(paths))
        if not selected or self.closed:
            return False
        return self._submit(self._run_paths, selected, provider_id)

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until every queued job finished. Returns False on timeout."""
        with self._lock:
            pending = set(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def close(self) -> None:
        """Stop sleeping jobs, drop queued ones, and release the pool."""
        self._stop.set()
        self._executor.shutdown(wait=False, cancel_futures=True)

    # ----------------------------
    # Internals
    # ----------------------------
    def _submit(self, fn: Callable[..., None], *args: object) -> bool:
        try:
            future = self._executor.submit(fn, *args)
        except RuntimeError:
            # Pool already shut down.
            return False
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return True

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def _run_subfolder_job(self, paths: list[str], provider_id: Optional[str]) -> None:
        try:
            self._run_paths(paths, provider_id)
        finally:
            with self._lock:
                self._subfolder_job_running = False

    def _run_paths(self, paths: list[str], provider_id: Optional[str]) -> None:
        for index, path in enumerate(paths):
            if index and self._stop.wait(self._delay_sec):
                return
            if self._stop.is_set():
                return
            try:
                self._load(path, provider_id)
            except Exception as exc:
                logger.warning("Preload of %s failed: %s", path, exc)
