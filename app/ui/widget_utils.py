from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QLabel, QPushButton, QWidget

from app.ui.theme import Styles


def disable_widget_interaction(widget: QWidget):
    """Disable interactive/focus states for display-only widgets."""
    widget.setFocusPolicy(Qt.FocusPolicy.NoFocus)
    if isinstance(widget, QLabel):
        widget.setTextInteractionFlags(Qt.TextInteractionFlag.NoTextInteraction)


def disable_button_focus_rect(button: QPushButton):
    """Disable focus rectangle on button while keeping it clickable."""
    button.setFocusPolicy(Qt.FocusPolicy.NoFocus)


def make_section_label(text: str) -> QLabel:
    """Create the dark title strip shown above each assignment section."""
    label = QLabel(text)
    label.setStyleSheet(Styles.section_title())
    disable_widget_interaction(label)
    return label
