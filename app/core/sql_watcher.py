# app/core/sql_watcher.py
import logging
import threading
from pathlib import Path
from typing import Callable, List, Optional, Set, Tuple

from watchfiles import Change, DefaultFilter, watch

logger = logging.getLogger(__name__)

FileChanges = Set[Tuple[Change, str]]


class SqlFileFilter(DefaultFilter):
    """Only let ``*.sql`` files through, minus the usual editor/VCS noise"""

    def __call__(self, change: Change, path: str) -> bool:
        return path.lower().endswith(".sql") and super().__call__(change, path)


class SqlFileWatcher:
    """Runs watchfiles on a daemon thread and reports batches of SQL file changes"""

    def __init__(
        self,
        paths: List[Path],
        on_change: Callable[[FileChanges], None],
        debounce: int = 400,
        force_polling: Optional[bool] = None,
    ):
        self.paths = [Path(p) for p in paths]
        self._on_change = on_change
        self._debounce = debounce
        self._force_polling = force_polling
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="sql-file-watcher", daemon=True)
        self._thread.start()
        logger.info(f"Watching SQL files under {', '.join(str(p) for p in self.paths)}")

    def _run(self) -> None:
        try:
            for changes in watch(
                *self.paths,
                watch_filter=SqlFileFilter(),
                debounce=self._debounce,
                stop_event=self._stop,
                force_polling=self._force_polling,
                raise_interrupt=False,
            ):
                self._on_change(changes)
        except Exception:
            logger.exception("SQL file watcher stopped unexpectedly")

    def close(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
            logger.info("SQL file watcher stopped")
