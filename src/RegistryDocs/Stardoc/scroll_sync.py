# === NAVMAP v1 ===
# {
#   "module": "RegistryDocs.Stardoc.scroll_sync",
#   "purpose": "Reference state machine for navigation scroll sync and copy-link controls",
#   "sections": [
#     {"id": "protocols", "name": "Host protocols", "anchor": "HOST", "kind": "class"},
#     {"id": "syncstate", "name": "SyncState", "anchor": "class-syncstate", "kind": "class"},
#     {"id": "scrollsynccontroller", "name": "ScrollSyncController", "anchor": "class-scrollsynccontroller", "kind": "class"},
#     {"id": "copylinkcontrol", "name": "CopyLinkControl", "anchor": "class-copylinkcontrol", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""
Scroll-Sync Controller

The browser runtime (``static/stardoc.js``) keeps the sidebar highlight, the
URL fragment, and the scroll position in agreement. This module is the same
machine written against small host protocols, so its behaviour can be
exercised without a browser and so ``stardoc.js`` has an executable
reference.

States:

``idle``
    Scroll events recompute the active section: the last flattened nav entry
    whose element starts at or above ``scroll_y + header_offset``.
``user-navigating``
    Entered on a nav click. Scroll events are ignored until ``settle_delay``
    elapses, so the programmatic jump is not overridden mid-flight.

Controller state (active id, expanded set, pending timers) exists only
between :meth:`ScrollSyncController.mount` and
:meth:`ScrollSyncController.unmount`.

An :class:`asyncio.AbstractEventLoop` satisfies :class:`Scheduler` directly.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Iterable, List, Optional, Protocol, Set

from .logging_utils import log_event
from .navigation import NavNode, flatten_nav
from .settings import RenderCfg

__all__ = [
    "Viewport",
    "Location",
    "Clipboard",
    "Scheduler",
    "TimerHandle",
    "SyncState",
    "ScrollSyncController",
    "CopyLinkControl",
]

LOGGER = logging.getLogger("RegistryDocs.Stardoc.scroll_sync")

# --- Host protocols --------------------------------------------------------------


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class Viewport(Protocol):
    def element_offset(self, anchor_id: str) -> Optional[float]:
        """Vertical offset of the element with ``anchor_id``; ``None`` if absent."""

    def scroll_into_view(self, anchor_id: str, *, smooth: bool) -> None: ...


class Location(Protocol):
    origin: str
    pathname: str
    fragment: str

    def push_fragment(self, anchor_id: str) -> None: ...


class Clipboard(Protocol):
    async def write_text(self, text: str) -> None: ...


# --- Controller -----------------------------------------------------------------


class SyncState(str, Enum):
    IDLE = "idle"
    USER_NAVIGATING = "user-navigating"


class ScrollSyncController:
    """Keep the active nav entry, the fragment, and the scroll position in sync."""

    def __init__(
        self,
        nav: Iterable[NavNode],
        *,
        viewport: Viewport,
        location: Location,
        scheduler: Scheduler,
        header_offset: float = 100,
        settle_delay: float = 1.0,
        hash_settle_delay: float = 0.1,
    ) -> None:
        self._nav = tuple(nav)
        self._entries = [node.id for node in flatten_nav(self._nav)]
        self._viewport = viewport
        self._location = location
        self._scheduler = scheduler
        self.header_offset = header_offset
        self.settle_delay = settle_delay
        self.hash_settle_delay = hash_settle_delay
        self._mounted = False
        self._state = SyncState.IDLE
        self._active = ""
        self._expanded: Set[str] = set()
        self._settle_timer: Optional[TimerHandle] = None
        self._timers: List[TimerHandle] = []

    @classmethod
    def from_settings(
        cls,
        nav: Iterable[NavNode],
        cfg: RenderCfg,
        *,
        viewport: Viewport,
        location: Location,
        scheduler: Scheduler,
    ) -> "ScrollSyncController":
        return cls(
            nav,
            viewport=viewport,
            location=location,
            scheduler=scheduler,
            header_offset=cfg.header_offset_px,
            settle_delay=cfg.settle_delay_ms / 1000,
            hash_settle_delay=cfg.hash_settle_delay_ms / 1000,
        )

    # -- state ------------------------------------------------------------------

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def active(self) -> str:
        return self._active

    @property
    def expanded(self) -> frozenset:
        return frozenset(self._expanded)

    @property
    def mounted(self) -> bool:
        return self._mounted

    def _require_mounted(self) -> None:
        if not self._mounted:
            raise RuntimeError("ScrollSyncController is not mounted")

    @property
    def pending_timers(self) -> int:
        """Number of scheduled callbacks that have neither fired nor been cancelled."""

        return len(self._timers)

    def _later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        def fire() -> None:
            self._discard(handle)
            callback()

        handle = self._scheduler.call_later(delay, fire)
        self._timers.append(handle)
        return handle

    def _discard(self, handle: TimerHandle) -> None:
        if handle in self._timers:
            self._timers.remove(handle)

    # -- lifecycle ----------------------------------------------------------------

    def mount(self) -> None:
        """Create controller state and adopt the current URL fragment."""

        self._mounted = True
        self._state = SyncState.IDLE
        self._active = ""
        self._expanded = set()
        self._adopt_fragment()

    def unmount(self) -> None:
        """Cancel pending timers and drop all controller state."""

        for handle in self._timers:
            handle.cancel()
        self._timers = []
        self._settle_timer = None
        self._expanded = set()
        self._active = ""
        self._state = SyncState.IDLE
        self._mounted = False

    # -- events -------------------------------------------------------------------

    def toggle(self, node_id: str) -> bool:
        """Flip the expanded flag of ``node_id``; return the new value."""

        self._require_mounted()
        if node_id in self._expanded:
            self._expanded.discard(node_id)
            return False
        self._expanded.add(node_id)
        return True

    def scroll_to_section(self, anchor_id: str) -> bool:
        """Jump to ``anchor_id`` and suppress scroll tracking for the settle window.

        Returns ``False`` (and changes nothing) when no element carries the id.
        """

        self._require_mounted()
        if self._viewport.element_offset(anchor_id) is None:
            return False
        self._state = SyncState.USER_NAVIGATING
        self._active = anchor_id
        self._viewport.scroll_into_view(anchor_id, smooth=False)
        self._location.push_fragment(anchor_id)
        if self._settle_timer is not None:
            self._settle_timer.cancel()
            self._discard(self._settle_timer)
        self._settle_timer = self._later(self.settle_delay, self._settle)
        return True

    def _settle(self) -> None:
        self._settle_timer = None
        if self._mounted:
            self._state = SyncState.IDLE

    def click(self, node: NavNode) -> None:
        """Handle a nav click: parents toggle and scroll once expanded, leaves scroll."""

        self._require_mounted()
        if node.has_children:
            self.toggle(node.id)
            self._later(self.hash_settle_delay, lambda: self._scroll_if_mounted(node.id))
        else:
            self.scroll_to_section(node.id)

    def _scroll_if_mounted(self, anchor_id: str) -> None:
        if self._mounted:
            self.scroll_to_section(anchor_id)

    def on_scroll(self, scroll_y: float) -> Optional[str]:
        """Recompute the active section; returns it, or ``None`` when suppressed."""

        self._require_mounted()
        if self._state is SyncState.USER_NAVIGATING:
            return None
        position = scroll_y + self.header_offset
        for anchor_id in reversed(self._entries):
            offset = self._viewport.element_offset(anchor_id)
            if offset is not None and offset <= position:
                self._active = anchor_id
                return anchor_id
        return None

    def on_popstate(self) -> None:
        """Adopt the fragment after browser back/forward navigation."""

        self._require_mounted()
        self._adopt_fragment()

    def _adopt_fragment(self) -> None:
        anchor_id = (self._location.fragment or "").lstrip("#")
        if not anchor_id:
            return
        self._active = anchor_id
        self._later(self.hash_settle_delay, lambda: self._smooth_scroll(anchor_id))

    def _smooth_scroll(self, anchor_id: str) -> None:
        if self._mounted and self._viewport.element_offset(anchor_id) is not None:
            self._viewport.scroll_into_view(anchor_id, smooth=True)


# --- Copy link ------------------------------------------------------------------


class CopyLinkControl:
    """Copy absolute section links to the clipboard with transient feedback."""

    def __init__(
        self,
        *,
        location: Location,
        clipboard: Clipboard,
        scheduler: Scheduler,
        feedback_delay: float = 2.0,
    ) -> None:
        self._location = location
        self._clipboard = clipboard
        self._scheduler = scheduler
        self.feedback_delay = feedback_delay
        self._copied: Set[str] = set()

    def link_for(self, anchor_id: str) -> str:
        return f"{self._location.origin}{self._location.pathname}#{anchor_id}"

    def is_copied(self, anchor_id: str) -> bool:
        """Whether the success indicator for ``anchor_id`` is showing."""

        return anchor_id in self._copied

    async def copy(self, anchor_id: str) -> bool:
        """Write the section link to the clipboard.

        Clipboard failures are logged and reported as ``False``; they never
        raise and never show the success indicator.
        """

        url = self.link_for(anchor_id)
        try:
            await self._clipboard.write_text(url)
        except Exception as exc:  # noqa: BLE001 - any host clipboard failure
            log_event(
                LOGGER,
                "error",
                "Failed to copy link",
                stage="clipboard",
                error_code="CLIPBOARD_WRITE",
                anchor=anchor_id,
                error=str(exc),
            )
            return False
        self._copied.add(anchor_id)
        self._scheduler.call_later(self.feedback_delay, lambda: self._copied.discard(anchor_id))
        return True
