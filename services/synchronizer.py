"""
Canvas state synchronizer.

The editor keeps a private, mutable working document while an external
owner (the host window) holds the authoritative value and may overwrite
the working copy at any time, for example after a load. Two one-way
channels connect them:

    apply_external()        owner  -> working document
    on_internal_mutation()  working document -> owner (via on_change)

The applying_external guard keeps the two from feeding each other. It is
set while an external value is being applied and released on the next
scheduling turn, once the view has re-rendered the new document; any
mutation callbacks fired by that re-render are not user edits.
"""

import logging
from typing import Any, Callable, Optional

from models import CanvasDocument, documents_equal

logger = logging.getLogger(__name__)

Scheduler = Callable[[Callable[[], None]], None]


class DeferredCallQueue:
    """
    Minimal scheduler that runs callbacks when asked to.

    Used when there is no Qt event loop (tests, headless use). The Qt
    views use QTimer.singleShot(0, ...) instead.
    """

    def __init__(self):
        self._pending: list[Callable[[], None]] = []

    def __call__(self, callback: Callable[[], None]):
        self._pending.append(callback)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def run_pending(self) -> int:
        """Run everything scheduled so far; returns how many ran."""
        batch, self._pending = self._pending, []
        for callback in batch:
            callback()
        return len(batch)


class CanvasStateSynchronizer:
    """
    Reconciles the external document value with the working document.

    Args:
        initial: Optional initial external value.
        on_change: Called with a snapshot of the working document whenever
            an internal edit should be reported to the owner.
        schedule: Runs a callback on the next scheduling turn.
        on_replaced: Called after the working document was replaced by an
            external value, so a view can rebuild itself.
    """

    def __init__(
        self,
        initial: Any = None,
        on_change: Optional[Callable[[CanvasDocument], None]] = None,
        schedule: Optional[Scheduler] = None,
        on_replaced: Optional[Callable[[CanvasDocument], None]] = None,
    ):
        self.on_change = on_change
        self.on_replaced = on_replaced
        self._schedule = schedule or DeferredCallQueue()

        self._external_value: Optional[CanvasDocument] = None
        self._last_external_value: Optional[CanvasDocument] = None
        self._last_emitted_value: Optional[CanvasDocument] = None
        self._applying_external = False

        if initial is not None:
            self._external_value = CanvasDocument.from_dict(initial)
            self._working = self._external_value.copy()
            self._last_external_value = self._external_value
        else:
            self._working = CanvasDocument()

    @property
    def working_document(self) -> CanvasDocument:
        return self._working

    @property
    def external_value(self) -> Optional[CanvasDocument]:
        return self._external_value

    @property
    def last_external_value(self) -> Optional[CanvasDocument]:
        return self._last_external_value

    @property
    def last_emitted_value(self) -> Optional[CanvasDocument]:
        return self._last_emitted_value

    @property
    def applying_external(self) -> bool:
        return self._applying_external

    @property
    def scheduler(self) -> Scheduler:
        return self._schedule

    def apply_external(self, value: Any) -> bool:
        """
        Accept a new value from the owner.

        None means the owner is not controlling the document and is ignored.
        Anything else is normalized (malformed data becomes an empty
        document). Returns True if the working document was replaced.
        """
        if value is None:
            return False

        external = CanvasDocument.from_dict(value)
        self._external_value = external

        if documents_equal(self._working, external):
            return False

        self._applying_external = True
        self._working = external.copy()
        self._last_external_value = external
        # Never echo the owner's own value back to it
        self._last_emitted_value = external
        logger.debug(
            f"Applied external document ({len(external.nodes)} nodes, {len(external.edges)} edges)"
        )

        if self.on_replaced:
            self.on_replaced(self._working)

        self._schedule(self._release_guard)
        return True

    def _release_guard(self):
        self._applying_external = False

    def on_internal_mutation(self) -> bool:
        """
        Evaluate the working document after an edit.

        Returns True if the owner was notified.
        """
        if self._applying_external:
            return False
        if documents_equal(self._working, self._external_value):
            return False
        if documents_equal(self._working, self._last_emitted_value):
            return False

        self._emit(self._working.copy())
        return True

    def flush(self) -> CanvasDocument:
        """Send the current working document to the owner unconditionally."""
        snapshot = self._working.copy()
        self._emit(snapshot)
        return snapshot

    def _emit(self, snapshot: CanvasDocument):
        self._last_emitted_value = snapshot
        if self.on_change is None:
            return
        try:
            self.on_change(snapshot)
        except Exception:
            logger.exception("Document change handler failed")
