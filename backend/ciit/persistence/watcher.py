"""Polling file watcher that reloads the catalog cache after external edits."""
from __future__ import annotations
import logging
import os
import threading
import time
from typing import Callable, Dict, Optional, Tuple

from ciit.persistence.repositories.files.yaml_catalog_repository import (
    BARRIERS,
    CONCEPTS,
    TOPICS,
    YamlCatalogRepository,
)

logger = logging.getLogger(__name__)

Signature = Tuple[Tuple[str, int, int], ...]


def _file_signature(path: str) -> Signature:
    try:
        st = os.stat(path)
    except OSError:
        return ()
    return ((os.path.basename(path), st.st_mtime_ns, st.st_size),)


def _dir_signature(path: str, suffix: str) -> Signature:
    try:
        names = sorted(n for n in os.listdir(path) if n.endswith(suffix))
    except OSError:
        return ()
    entries = []
    for name in names:
        try:
            st = os.stat(os.path.join(path, name))
        except OSError:
            continue
        entries.append((name, st.st_mtime_ns, st.st_size))
    return tuple(entries)


class CatalogWatcher:
    """
    Compares a (name, mtime, size) signature per catalog collection on every
    poll. A changed collection is reloaded only once its signature has stayed
    the same for ``debounce`` seconds, so a file still being written is not
    read half-way.
    """

    def __init__(
        self,
        repo: YamlCatalogRepository,
        poll_interval: float = 1.0,
        debounce: float = 0.3,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.repo = repo
        self.poll_interval = poll_interval
        self.debounce = debounce
        self._clock = clock
        self._applied: Dict[str, Signature] = self._signatures()
        self._pending: Dict[str, Tuple[Signature, float]] = {}
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def _signatures(self) -> Dict[str, Signature]:
        return {
            TOPICS: _file_signature(self.repo.topics_file),
            BARRIERS: _file_signature(self.repo.barriers_file),
            CONCEPTS: _dir_signature(self.repo.concepts_dir, ".yaml"),
        }

    def check(self) -> list:
        """One polling pass. Returns the collections that were reloaded."""
        now = self._clock()
        reloaded = []
        for collection, signature in self._signatures().items():
            if signature == self._applied.get(collection):
                self._pending.pop(collection, None)
                continue
            pending = self._pending.get(collection)
            if pending is None or pending[0] != signature:
                # First sighting of this state; wait for it to settle.
                self._pending[collection] = (signature, now)
                continue
            if now - pending[1] < self.debounce:
                continue
            logger.info("Catalog %s changed on disk, reloading", collection)
            self.repo.reload(collection)
            self._applied[collection] = signature
            del self._pending[collection]
            reloaded.append(collection)
        return reloaded

    # ------------------------------------------------------------------
    # Background thread
    # ------------------------------------------------------------------
    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="catalog-watcher", daemon=True)
        self._thread.start()
        logger.info("Watching catalog files every %.1fs", self.poll_interval)

    def stop(self) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=self.poll_interval * 2)
            self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self.poll_interval):
            try:
                self.check()
            except Exception:
                logger.exception("Catalog reload failed")
