"""Qt widgets holding tabbed assignments, and the view adapter the session layer uses."""
from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QListWidget, QListWidgetItem, QTabWidget

from app.ui.theme import Styles
from core.session_state import TAB_NUMBERS, AssignmentKind, TabAssignment

ITEM_ID_ROLE = Qt.ItemDataRole.UserRole
SLOT_ROLE = Qt.ItemDataRole.UserRole + 1


class AssignmentTabs(QTabWidget):
    """One assignment kind: a tab per TAB_NUMBERS entry, each a list of items.

    A tab whose title is its own number has not been renamed; ``tab_name``
    reports None for it.
    """

    def __init__(self, kind, tab_numbers=TAB_NUMBERS, parent=None):
        super().__init__(parent)
        self.kind = AssignmentKind(kind)
        for number in tab_numbers:
            self.add_tab(number)

    def add_tab(self, tab_number):
        tab_list = QListWidget()
        tab_list.setStyleSheet(Styles.assignment_list())
        tab_list.setProperty("tab_number", tab_number)
        self.addTab(tab_list, str(tab_number))
        return tab_list

    def tab_numbers(self):
        return [self.widget(index).property("tab_number") for index in range(self.count())]

    def has_tab(self, tab_number):
        return self._index_of(tab_number) is not None

    def _index_of(self, tab_number):
        for index in range(self.count()):
            if self.widget(index).property("tab_number") == tab_number:
                return index
        return None

    def list_for(self, tab_number) -> QListWidget:
        index = self._index_of(tab_number)
        if index is None:
            raise KeyError(f"{self.kind.value} has no tab {tab_number}")
        return self.widget(index)

    def rename_tab(self, tab_number, name):
        self.setTabText(self._index_of(tab_number), name or str(tab_number))

    def tab_name(self, tab_number):
        text = self.tabText(self._index_of(tab_number)).strip()
        if not text or text == str(tab_number):
            return None
        return text

    def add_item(self, tab_number, item_id, label=None, slot=None):
        tab_list = self.list_for(tab_number)
        if not self.kind.ordered:
            if slot is None:
                raise ValueError(f"{self.kind.value} assignments need a slot")
            self._remove_slot(tab_list, slot)
        text = label or item_id
        item = QListWidgetItem(f"{slot}: {text}" if slot is not None else text)
        item.setData(ITEM_ID_ROLE, item_id)
        item.setData(SLOT_ROLE, slot)
        tab_list.addItem(item)
        return item

    @staticmethod
    def _remove_slot(tab_list, slot):
        for row in reversed(range(tab_list.count())):
            if tab_list.item(row).data(SLOT_ROLE) == slot:
                tab_list.takeItem(row)

    def assignment(self, tab_number) -> TabAssignment:
        tab_list = self.list_for(tab_number)
        items = [tab_list.item(row) for row in range(tab_list.count())]
        if self.kind.ordered:
            entries = [item.data(ITEM_ID_ROLE) for item in items]
        else:
            entries = {item.data(SLOT_ROLE): item.data(ITEM_ID_ROLE) for item in items}
        return TabAssignment(self.kind, tab_number, self.tab_name(tab_number), entries)

    def set_assignment(self, tab: TabAssignment, label_for=None):
        tab_list = self.list_for(tab.tab_number)
        tab_list.clear()
        self.rename_tab(tab.tab_number, tab.tab_name)
        label_for = label_for or (lambda item_id: item_id)
        if self.kind.ordered:
            for item_id in tab.entries:
                self.add_item(tab.tab_number, item_id, label_for(item_id))
        else:
            for slot, item_id in tab.entries.items():
                self.add_item(tab.tab_number, item_id, label_for(item_id), slot=slot)


class QtLayoutView:
    """ViewSource and ViewSink over a set of AssignmentTabs widgets.

    Sections may be registered while the window is still being built; kinds
    without a section are reported as unsupported.
    """

    def __init__(self, catalog=None):
        self.catalog = catalog
        self.sections: dict[AssignmentKind, AssignmentTabs] = {}

    def register(self, tabs: AssignmentTabs):
        self.sections[tabs.kind] = tabs

    def supports(self, kind):
        return kind in self.sections

    def has_tab(self, kind, tab_number):
        section = self.sections.get(kind)
        return section is not None and section.has_tab(tab_number)

    def get_assignments(self, kind):
        section = self.sections.get(kind)
        if section is None:
            return []
        return [section.assignment(number) for number in section.tab_numbers()]

    def apply_assignments(self, kind, tabs):
        section = self.sections[kind]
        for tab in tabs:
            section.set_assignment(tab, self._label)

    def _label(self, item_id):
        if self.catalog is None:
            return item_id
        record = self.catalog.lookup(item_id)
        return getattr(record, "label", None) or item_id
