"""Session layout model and its conversion to and from a live view.

The view is reached only through the ``ViewSource``/``ViewSink`` protocols, so
this module never depends on a UI toolkit. ``extract`` reads a normalized
snapshot; ``apply`` pushes a snapshot back, dropping items the catalog no
longer knows about.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Protocol

from core.errors import FormatError

LOG = logging.getLogger(__name__)

STATE_VERSION = "1.0.0"
TAB_COUNT = 5
TAB_NUMBERS = tuple(range(1, TAB_COUNT + 1))


class AssignmentKind(str, Enum):
    HOTKEYS = "hotkeys"
    HOLDING_TANK = "holdingTank"
    SOUNDBOARD = "soundboard"

    @property
    def entries_key(self) -> str:
        return _ENTRIES_KEYS[self]

    @property
    def ordered(self) -> bool:
        return self is AssignmentKind.HOLDING_TANK


_ENTRIES_KEYS = {
    AssignmentKind.HOTKEYS: "hotkeys",
    AssignmentKind.HOLDING_TANK: "songIds",
    AssignmentKind.SOUNDBOARD: "buttons",
}


@dataclass
class TabAssignment:
    """Contents of one tab: slot->item for keyed kinds, a list for the holding tank."""

    kind: AssignmentKind
    tab_number: int
    tab_name: str | None = None
    entries: dict[str, str] | list[str] | None = None

    def __post_init__(self):
        self.kind = AssignmentKind(self.kind)
        if self.entries is None:
            self.entries = [] if self.kind.ordered else {}
        elif self.kind.ordered:
            self.entries = [str(item) for item in self.entries]
        else:
            self.entries = {str(slot): str(item) for slot, item in dict(self.entries).items()}

    def is_empty(self) -> bool:
        return not self.entries and not self.tab_name

    def to_payload(self) -> dict:
        entries = list(self.entries) if self.kind.ordered else dict(self.entries)
        return {
            "tabNumber": self.tab_number,
            "tabName": self.tab_name,
            self.kind.entries_key: entries,
        }

    @classmethod
    def from_payload(cls, kind: AssignmentKind, data: dict) -> "TabAssignment":
        tab_number = int(data["tabNumber"])
        entries = data.get(kind.entries_key)
        if kind.ordered:
            if not isinstance(entries, list):
                entries = []
            entries = [item for item in entries if item is not None]
        else:
            if not isinstance(entries, dict):
                entries = {}
            entries = {slot: item for slot, item in entries.items() if item is not None}
        tab_name = data.get("tabName")
        return cls(kind, tab_number, str(tab_name) if tab_name else None, entries)


@dataclass
class SessionState:
    """Snapshot of every tab of every kind, always TAB_COUNT tabs per kind."""

    version: str = STATE_VERSION
    timestamp: int = field(default_factory=lambda: int(time.time() * 1000))
    tabs: dict[AssignmentKind, dict[int, TabAssignment]] = field(default_factory=dict)

    def __post_init__(self):
        normalized = {}
        for kind in AssignmentKind:
            given = self.tabs.get(kind, {})
            normalized[kind] = {
                number: given.get(number) or TabAssignment(kind, number) for number in TAB_NUMBERS
            }
        self.tabs = normalized

    @classmethod
    def empty(cls) -> "SessionState":
        return cls()

    def tabs_for(self, kind: AssignmentKind) -> list[TabAssignment]:
        return [self.tabs[kind][number] for number in TAB_NUMBERS]

    def set_tab(self, tab: TabAssignment) -> None:
        if tab.tab_number not in TAB_NUMBERS:
            raise ValueError(f"Tab number must be within 1..{TAB_COUNT}, got {tab.tab_number}")
        self.tabs[tab.kind][tab.tab_number] = tab

    def is_empty(self) -> bool:
        return all(tab.is_empty() for kind in AssignmentKind for tab in self.tabs_for(kind))

    def item_count(self, kind: AssignmentKind | None = None) -> int:
        kinds = [kind] if kind else list(AssignmentKind)
        return sum(len(tab.entries) for k in kinds for tab in self.tabs_for(k))

    def layout_equals(self, other: "SessionState") -> bool:
        """Compare tab contents, ignoring version and timestamp."""
        return all(
            self.tabs_for(kind) == other.tabs_for(kind) for kind in AssignmentKind
        )

    def to_payload(self) -> dict:
        payload = {"version": self.version, "timestamp": self.timestamp}
        for kind in AssignmentKind:
            payload[kind.value] = [tab.to_payload() for tab in self.tabs_for(kind)]
        return payload

    @classmethod
    def from_payload(cls, data: object) -> "SessionState":
        """Build a state from decoded JSON; missing collections become empty."""
        if not isinstance(data, dict):
            raise FormatError(f"Session state must be a JSON object, not {type(data).__name__}")
        state = cls(
            version=str(data.get("version") or STATE_VERSION),
            timestamp=_as_int(data.get("timestamp")),
        )
        for kind in AssignmentKind:
            collection = data.get(kind.value)
            if collection is None:
                continue
            if not isinstance(collection, list):
                LOG.warning("[PROFILE_STATE] ignoring non-list %s collection", kind.value)
                continue
            for raw_tab in collection:
                try:
                    tab = TabAssignment.from_payload(kind, raw_tab)
                except (KeyError, TypeError, ValueError, AttributeError):
                    LOG.warning("[PROFILE_STATE] ignoring malformed %s tab: %r", kind.value, raw_tab)
                    continue
                if tab.tab_number not in TAB_NUMBERS:
                    LOG.warning("[PROFILE_STATE] ignoring %s tab %s out of range", kind.value, tab.tab_number)
                    continue
                state.set_tab(tab)
        return state


def _as_int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class ViewSource(Protocol):
    def get_assignments(self, kind: AssignmentKind) -> Iterable[TabAssignment]: ...


class ViewSink(Protocol):
    def supports(self, kind: AssignmentKind) -> bool: ...

    def has_tab(self, kind: AssignmentKind, tab_number: int) -> bool: ...

    def apply_assignments(self, kind: AssignmentKind, tabs: list[TabAssignment]) -> None: ...


class Catalog(Protocol):
    def lookup(self, item_id: str): ...


@dataclass
class ApplyReport:
    restored: int = 0
    dropped: int = 0
    skipped_tabs: int = 0
    skipped_kinds: list[AssignmentKind] = field(default_factory=list)


def extract(view_source: ViewSource) -> SessionState:
    """Read the current layout from the view. Pure and synchronous."""
    state = SessionState()
    for kind in AssignmentKind:
        for tab in view_source.get_assignments(kind) or ():
            if tab.tab_number not in TAB_NUMBERS:
                LOG.debug("[PROFILE_STATE] ignoring %s tab %s", kind.value, tab.tab_number)
                continue
            state.set_tab(TabAssignment(kind, tab.tab_number, tab.tab_name, tab.entries))
    LOG.debug(
        "[PROFILE_STATE] extracted hotkeys=%d holdingTank=%d soundboard=%d",
        state.item_count(AssignmentKind.HOTKEYS),
        state.item_count(AssignmentKind.HOLDING_TANK),
        state.item_count(AssignmentKind.SOUNDBOARD),
    )
    return state


def _known(item_id: str, catalog: Catalog, kind: AssignmentKind, tab_number: int) -> bool:
    if catalog.lookup(item_id) is not None:
        return True
    LOG.warning(
        "[PROFILE_STATE] skipping missing item %r in %s tab %s", item_id, kind.value, tab_number
    )
    return False


def _validated(tab: TabAssignment, catalog: Catalog) -> tuple[TabAssignment, int]:
    if tab.kind.ordered:
        kept = [item for item in tab.entries if _known(item, catalog, tab.kind, tab.tab_number)]
    else:
        kept = {
            slot: item
            for slot, item in tab.entries.items()
            if _known(item, catalog, tab.kind, tab.tab_number)
        }
    return TabAssignment(tab.kind, tab.tab_number, tab.tab_name, kept), len(tab.entries) - len(kept)


def apply(
    state: SessionState,
    view_sink: ViewSink,
    catalog: Catalog,
    kinds: Iterable[AssignmentKind] | None = None,
) -> ApplyReport:
    """Push ``state`` into the view, tab 1 to 5, dropping unknown items.

    Tabs the view has not created yet are skipped, as are kinds the view does
    not host, so this may run against a partially built view.
    """
    report = ApplyReport()
    for kind in kinds or AssignmentKind:
        if not view_sink.supports(kind):
            LOG.info("[PROFILE_STATE] view has no %s section; skipping", kind.value)
            report.skipped_kinds.append(kind)
            continue
        tabs = []
        for tab in state.tabs_for(kind):
            if not view_sink.has_tab(kind, tab.tab_number):
                report.skipped_tabs += 1
                continue
            checked, dropped = _validated(tab, catalog)
            report.dropped += dropped
            report.restored += len(checked.entries)
            tabs.append(checked)
        view_sink.apply_assignments(kind, tabs)
    return report


class InMemoryView:
    """Plain-Python view holding assignments per kind; implements source and sink."""

    def __init__(self, kinds=tuple(AssignmentKind), tab_numbers=TAB_NUMBERS):
        self.tabs = {
            AssignmentKind(kind): {number: TabAssignment(kind, number) for number in tab_numbers}
            for kind in kinds
        }

    def supports(self, kind):
        return kind in self.tabs

    def has_tab(self, kind, tab_number):
        return tab_number in self.tabs.get(kind, {})

    def add_tab(self, kind, tab_number):
        self.tabs.setdefault(kind, {})[tab_number] = TabAssignment(kind, tab_number)

    def assign(self, kind, tab_number, item_id, slot=None):
        tab = self.tabs[kind][tab_number]
        if kind.ordered:
            tab.entries.append(item_id)
        else:
            tab.entries[slot] = item_id

    def rename_tab(self, kind, tab_number, name):
        self.tabs[kind][tab_number].tab_name = name or None

    def get_assignments(self, kind):
        return [
            TabAssignment(kind, number, tab.tab_name, tab.entries)
            for number, tab in sorted(self.tabs.get(kind, {}).items())
        ]

    def apply_assignments(self, kind, tabs):
        for tab in tabs:
            self.tabs[kind][tab.tab_number] = TabAssignment(kind, tab.tab_number, tab.tab_name, tab.entries)
