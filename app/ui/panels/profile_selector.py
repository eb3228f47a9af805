from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from app.app_state import app_state
from app.controllers.profile_controller import ProfileController
from app.ui.theme import Styles
from app.ui.widget_utils import disable_button_focus_rect, disable_widget_interaction, make_section_label


class ProfileSelectorPanel(QWidget):
    def __init__(self, controller=None):
        super().__init__()
        self.profile_controller = controller or ProfileController()
        self.selected_btn = None
        self.profile_buttons = {}

        self.body_layout = QVBoxLayout()
        self.body_layout.setAlignment(Qt.AlignmentFlag.AlignTop)

        container = QWidget()
        container.setLayout(self.body_layout)
        container.setFocusPolicy(Qt.FocusPolicy.NoFocus)

        scroll = QScrollArea()
        scroll.setWidget(container)
        scroll.setWidgetResizable(True)
        scroll.setFocusPolicy(Qt.FocusPolicy.NoFocus)

        create_btn = QPushButton("Create Profile")
        create_btn.setStyleSheet(Styles.button())
        disable_button_focus_rect(create_btn)
        create_btn.clicked.connect(self.create_profile)

        duplicate_btn = QPushButton("Duplicate Active Profile")
        duplicate_btn.setStyleSheet(Styles.button())
        disable_button_focus_rect(duplicate_btn)
        duplicate_btn.clicked.connect(self.duplicate_profile)

        layout = QVBoxLayout()
        layout.addWidget(make_section_label("Profiles"))
        layout.addWidget(scroll)
        layout.addWidget(create_btn)
        layout.addWidget(duplicate_btn)
        self.setLayout(layout)

        self.refresh_profiles()

    def refresh_profiles(self):
        self.selected_btn = None
        self.profile_buttons = {}
        while self.body_layout.count():
            item = self.body_layout.takeAt(0)
            if item.widget():
                item.widget().deleteLater()
            elif item.layout():
                _clear_layout(item.layout())

        success, names, message = self.profile_controller.list_profiles()
        if not success:
            msg = QLabel(message)
            disable_widget_interaction(msg)
            msg.setStyleSheet(Styles.info_label())
            self.body_layout.addWidget(msg)
            return

        for name in names:
            row = QHBoxLayout()

            select_btn = QPushButton(name)
            select_btn.setStyleSheet(Styles.button())
            disable_button_focus_rect(select_btn)
            select_btn.clicked.connect(lambda _, n=name: self.select_profile(n))
            if app_state.active_profile == name:
                self.selected_btn = select_btn
                self.selected_btn.setStyleSheet(Styles.selected_button())
            self.profile_buttons[name] = select_btn

            delete_btn = QPushButton("Delete")
            delete_btn.setStyleSheet(Styles.button())
            disable_button_focus_rect(delete_btn)
            delete_btn.clicked.connect(lambda _, n=name: self.delete_profile(n))

            row.addWidget(select_btn, 1)
            row.addWidget(delete_btn)
            self.body_layout.addLayout(row)

    def select_profile(self, name):
        success, message = self.profile_controller.select_profile(name)
        if not success:
            QMessageBox.warning(self, "Select Profile", message)
            return
        self.refresh_profiles()

    def create_profile(self):
        name, ok = QInputDialog.getText(self, "Create Profile", "Profile name:")
        if not ok or not name.strip():
            return
        description, _ = QInputDialog.getText(self, "Create Profile", "Description (optional):")

        success, message = self.profile_controller.create_profile(name.strip(), description.strip())
        if not success:
            QMessageBox.warning(self, "Create Profile", message)
            return
        self.refresh_profiles()

    def duplicate_profile(self):
        source = app_state.active_profile
        if not source:
            QMessageBox.warning(self, "Duplicate Profile", "Select a profile first.")
            return
        name, ok = QInputDialog.getText(self, "Duplicate Profile", f"Copy '{source}' as:")
        if not ok or not name.strip():
            return
        success, message = self.profile_controller.duplicate_profile(source, name.strip())
        if not success:
            QMessageBox.warning(self, "Duplicate Profile", message)
            return
        self.refresh_profiles()

    def delete_profile(self, name):
        confirm = QMessageBox.question(
            self,
            "Delete Profile",
            f"Delete profile '{name}' and all of its data?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if confirm != QMessageBox.StandardButton.Yes:
            return
        success, message = self.profile_controller.delete_profile(name)
        if not success:
            QMessageBox.warning(self, "Delete Profile", message)
            return
        self.refresh_profiles()


def _clear_layout(layout):
    while layout.count():
        item = layout.takeAt(0)
        if item.widget():
            item.widget().deleteLater()
