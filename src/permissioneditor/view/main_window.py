"""
Main Application Window
=======================
The primary GUI container that holds the Menu Bar, the entry list and the
entry form.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. Routing: It connects global actions (like File -> Save) to the
   DocumentState and reports store and validation errors to the user.
"""
from typing import Optional

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QSplitter, QListWidget,
    QListWidgetItem, QPushButton, QFileDialog, QMessageBox
)
from PySide6.QtCore import Qt
from PySide6.QtGui import QAction

from permissioneditor.config import APP_NAME, FILE_FILTER
from permissioneditor.model.entries import Kind
from permissioneditor.model.errors import StoreError
from permissioneditor.model.state import DocumentState
from permissioneditor.model.validation import ValidationResult
from permissioneditor.view.widgets.entry_form import EntryForm


class MainWindow(QMainWindow):
    def __init__(self, state: DocumentState) -> None:
        super().__init__()
        self.state: DocumentState = state
        self.resize(1100, 800)

        # --- MAIN CONTAINER ---
        splitter = QSplitter(Qt.Horizontal)
        self.setCentralWidget(splitter)

        # --- LEFT SIDE: Entry list + buttons ---
        left = QWidget()
        left_layout = QVBoxLayout(left)
        left_layout.setContentsMargins(4, 4, 4, 4)

        self.entry_list = QListWidget()
        self.entry_list.currentRowChanged.connect(self.on_row_changed)
        left_layout.addWidget(self.entry_list)

        buttons = QHBoxLayout()
        self.btn_add = QPushButton("Add")
        self.btn_add.clicked.connect(self.on_add)
        self.btn_duplicate = QPushButton("Duplicate")
        self.btn_duplicate.clicked.connect(self.on_duplicate)
        self.btn_delete = QPushButton("Delete")
        self.btn_delete.clicked.connect(self.on_delete)
        for btn in (self.btn_add, self.btn_duplicate, self.btn_delete):
            buttons.addWidget(btn)
        left_layout.addLayout(buttons)

        splitter.addWidget(left)

        # --- RIGHT SIDE: Form ---
        self.form = EntryForm(self.state)
        self.form.entry_renamed.connect(self.refresh_list_labels)
        splitter.addWidget(self.form)
        splitter.setSizes([300, 800])

        # --- ACTIONS & MENUS ---
        self._create_actions()
        self._create_menus()

        self.state.subscribe(self.on_state_changed)
        self.refresh_ui_from_state()

    def _create_actions(self) -> None:
        self.act_new_incident = QAction("New Incident File", self)
        self.act_new_incident.triggered.connect(lambda: self.on_file_new(Kind.INCIDENT))

        self.act_new_change = QAction("New Change File", self)
        self.act_new_change.triggered.connect(lambda: self.on_file_new(Kind.CHANGE))

        self.act_open = QAction("Open...", self)
        self.act_open.setShortcut("Ctrl+O")
        self.act_open.triggered.connect(lambda: self.on_file_open())

        self.act_save = QAction("Save", self)
        self.act_save.setShortcut("Ctrl+S")
        self.act_save.triggered.connect(self.on_file_save)

        self.act_save_as = QAction("Save As...", self)
        self.act_save_as.setShortcut("Ctrl+Shift+S")
        self.act_save_as.triggered.connect(self.on_file_save_as)

        self.act_close = QAction("Close", self)
        self.act_close.triggered.connect(self.on_file_close)

        self.act_exit = QAction("Exit", self)
        self.act_exit.triggered.connect(self.close)

        self.act_add = QAction("Add Permission", self)
        self.act_add.setShortcut("Ctrl+N")
        self.act_add.triggered.connect(self.on_add)

        self.act_duplicate = QAction("Duplicate", self)
        self.act_duplicate.setShortcut("Ctrl+D")
        self.act_duplicate.triggered.connect(self.on_duplicate)

        self.act_delete = QAction("Delete", self)
        self.act_delete.setShortcut("Del")
        self.act_delete.triggered.connect(self.on_delete)

        self.act_validate = QAction("Validate", self)
        self.act_validate.setShortcut("F5")
        self.act_validate.triggered.connect(self.on_validate)

    def _create_menus(self) -> None:
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("&File")
        file_menu.addAction(self.act_new_incident)
        file_menu.addAction(self.act_new_change)
        file_menu.addSeparator()
        file_menu.addAction(self.act_open)
        file_menu.addSeparator()
        file_menu.addAction(self.act_save)
        file_menu.addAction(self.act_save_as)
        file_menu.addAction(self.act_close)
        file_menu.addSeparator()
        file_menu.addAction(self.act_exit)

        edit_menu = menu_bar.addMenu("&Edit")
        edit_menu.addAction(self.act_add)
        edit_menu.addAction(self.act_duplicate)
        edit_menu.addAction(self.act_delete)
        edit_menu.addSeparator()
        edit_menu.addAction(self.act_validate)

    # --- HELPER METHODS ---

    def update_window_title(self) -> None:
        """Updates the window title based on filename and dirty state."""
        title = f"{APP_NAME} - [{self.state.filename}"
        if self.state.has_unsaved_changes:
            title += "*"
        title += "]"
        self.setWindowTitle(title)

    def update_actions(self) -> None:
        has_file = self.state.kind is not None
        has_selection = self.state.selected is not None
        self.act_save.setEnabled(has_file and self.state.has_unsaved_changes)
        self.act_save_as.setEnabled(has_file)
        self.act_close.setEnabled(has_file)
        self.act_validate.setEnabled(has_file)
        self.act_add.setEnabled(has_file)
        self.btn_add.setEnabled(has_file)
        for widget in (self.act_duplicate, self.act_delete, self.btn_duplicate, self.btn_delete):
            widget.setEnabled(has_selection)

    def refresh_list(self) -> None:
        self.entry_list.blockSignals(True)
        try:
            self.entry_list.clear()
            for entry in self.state.entries:
                self.entry_list.addItem(QListWidgetItem(self._label(entry)))
            if self.state.selected is not None:
                self.entry_list.setCurrentRow(self._selected_row())
        finally:
            self.entry_list.blockSignals(False)

    def refresh_list_labels(self) -> None:
        for row, entry in enumerate(self.state.entries):
            item = self.entry_list.item(row)
            if item is not None:
                item.setText(self._label(entry))

    def refresh_ui_from_state(self) -> None:
        """Force every widget to read from the state again."""
        self.refresh_list()
        self.form.set_entry(self.state.selected)
        self.on_state_changed()

    def on_state_changed(self) -> None:
        """Listener registered on the DocumentState."""
        self.update_window_title()
        self.update_actions()
        self.statusBar().showMessage(self.state.status_message)

    @staticmethod
    def _label(entry) -> str:
        return f"{entry.id} - {entry.display_name}"

    def _selected_row(self) -> int:
        for row, entry in enumerate(self.state.entries):
            if entry is self.state.selected:
                return row
        return -1

    def _confirm_discard(self) -> bool:
        """Offer to save pending changes. False means the user cancelled."""
        if not self.state.has_unsaved_changes:
            return True

        reply = QMessageBox.question(
            self,
            "Save changes?",
            "The file has been modified. Do you want to save your changes?",
            QMessageBox.Save | QMessageBox.Discard | QMessageBox.Cancel
        )
        if reply == QMessageBox.Save:
            return self.on_file_save()
        return reply == QMessageBox.Discard

    def _show_validation_errors(self, result: ValidationResult, title: str) -> None:
        QMessageBox.warning(self, title, "\n".join(result.errors))

    # --- FILE SLOTS ---

    def on_file_new(self, kind: Kind) -> None:
        if not self._confirm_discard():
            return
        self.state.new_file(kind)
        self.refresh_ui_from_state()

    def on_file_open(self, filepath: Optional[str] = None) -> None:
        if not self._confirm_discard():
            return

        fname = filepath
        if not fname:
            fname, _ = QFileDialog.getOpenFileName(self, "Open Permission File", "", FILE_FILTER)
        if not fname:
            return

        try:
            opened = self.state.open_file(fname)
        except StoreError as e:
            QMessageBox.critical(self, "Error", f"Could not open file:\n{e}")
            return

        if not opened:
            QMessageBox.warning(self, "Error", f"Unable to determine the file type of:\n{fname}")
            return

        self.refresh_ui_from_state()

    def on_file_save(self) -> bool:
        if not self.state.filepath:
            return self.on_file_save_as()
        return self._save_to(self.state.filepath)

    def on_file_save_as(self) -> bool:
        fname, _ = QFileDialog.getSaveFileName(self, "Save Permission File", "", FILE_FILTER)
        if not fname:
            return False
        if not fname.lower().endswith(".json"):
            fname += ".json"
        return self._save_to(fname)

    def _save_to(self, fname: str) -> bool:
        try:
            result = self.state.save_as(fname)
        except StoreError as e:
            QMessageBox.critical(self, "Error", f"Could not save file:\n{e}")
            return False

        if not result.is_valid:
            self._show_validation_errors(result, "Validation failed")
            return False
        return True

    def on_file_close(self) -> None:
        if not self._confirm_discard():
            return
        self.state.close_file()
        self.refresh_ui_from_state()

    # --- EDIT SLOTS ---

    def on_row_changed(self, row: int) -> None:
        entry = self.state.entries[row] if 0 <= row < len(self.state.entries) else None
        self.state.select(entry)
        self.form.set_entry(entry)
        self.update_actions()

    def on_add(self) -> None:
        if self.state.kind is None:
            return
        self.state.add_entry()
        self.refresh_ui_from_state()

    def on_duplicate(self) -> None:
        if self.state.duplicate_selected() is not None:
            self.refresh_ui_from_state()

    def on_delete(self) -> None:
        if self.state.delete_selected() is not None:
            self.refresh_ui_from_state()

    def on_validate(self) -> None:
        result = self.state.validate()
        if result.is_valid:
            QMessageBox.information(self, "Validation", "All permissions are valid.")
        else:
            self._show_validation_errors(result, "Validation")

    def closeEvent(self, event, /) -> None:
        """Handle window close event to prompt for saving if modified."""
        if not self._confirm_discard():
            event.ignore()
            return

        self.state.unsubscribe(self.on_state_changed)
        event.accept()
