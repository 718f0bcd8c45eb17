"""
Entry Form
==========
Edits one incident or change permission: id, display name and the
Grant/Revoke sections.

Every edit goes through DocumentState so that the dirty flag and the
listeners stay in sync. Only user-triggered signals (textEdited, clicked)
are connected, so filling the widgets from the model never marks the
document as modified.
"""
from typing import Dict, Optional

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QGroupBox, QFormLayout, QLineEdit, QCheckBox,
    QMessageBox, QScrollArea, QLabel
)

from permissioneditor.model.entries import Entry, SectionName, flag_fields, text_fields
from permissioneditor.model.state import DocumentState


class SectionGroup(QGroupBox):
    """Checkable group box with one row per section field."""
    field_edited = Signal(str, object)
    toggle_requested = Signal(bool)

    def __init__(self, title: str, section_type: type, parent=None) -> None:
        super().__init__(title, parent)
        self.section_type = section_type
        self.setCheckable(True)

        form = QFormLayout(self)
        self.text_edits: Dict[str, QLineEdit] = {}
        self.flag_boxes: Dict[str, QCheckBox] = {}

        for f in text_fields(section_type):
            edit = QLineEdit()
            edit.textEdited.connect(lambda text, name=f.name: self.field_edited.emit(name, text or None))
            form.addRow(f"{f.metadata['label']}:", edit)
            self.text_edits[f.name] = edit

        for f in flag_fields(section_type):
            box = QCheckBox(f.metadata["label"])
            box.clicked.connect(lambda checked, name=f.name: self.field_edited.emit(name, checked))
            form.addRow("", box)
            self.flag_boxes[f.name] = box

        self.clicked.connect(self.toggle_requested.emit)

    def load(self, section, enabled: bool) -> None:
        self.blockSignals(True)
        try:
            self.setChecked(enabled)
            for name, edit in self.text_edits.items():
                value = getattr(section, name) if section is not None else None
                edit.setText(value or "")
            for name, box in self.flag_boxes.items():
                box.setChecked(bool(getattr(section, name)) if section is not None else False)
        finally:
            self.blockSignals(False)


class EntryForm(QWidget):
    # Emitted after id or display name changed, so the list can relabel
    entry_renamed = Signal()

    def __init__(self, state: DocumentState, parent=None) -> None:
        super().__init__(parent)
        self.state = state
        self.entry: Optional[Entry] = None
        self.groups: Dict[SectionName, SectionGroup] = {}

        outer = QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        outer.addWidget(scroll)

        self.content = QWidget()
        self.layout_content = QVBoxLayout(self.content)
        scroll.setWidget(self.content)

        # --- General ---
        general = QGroupBox("Permission")
        form = QFormLayout(general)
        self.id_edit = QLineEdit()
        self.id_edit.textEdited.connect(lambda text: self._on_top_level_edited("id", text))
        form.addRow("Id:", self.id_edit)

        self.name_edit = QLineEdit()
        self.name_edit.textEdited.connect(lambda text: self._on_top_level_edited("display_name", text))
        form.addRow("Display name:", self.name_edit)
        self.layout_content.addWidget(general)

        self.placeholder = QLabel("No permission selected.")
        self.layout_content.addWidget(self.placeholder)
        self.layout_content.addStretch()

        self.set_entry(None)

    # --- LOADING ---

    def set_entry(self, entry: Optional[Entry]) -> None:
        self.entry = entry
        self.setEnabled(entry is not None)
        self.placeholder.setVisible(entry is None)

        if entry is None:
            self.id_edit.clear()
            self.name_edit.clear()
            for group in self.groups.values():
                group.setVisible(False)
            return

        self._ensure_groups(entry.section_type)
        self.id_edit.setText(entry.id)
        self.name_edit.setText(entry.display_name)
        for section, group in self.groups.items():
            group.setVisible(True)
            group.load(getattr(entry, section.value), self.state.is_section_enabled(entry, section))

    def _ensure_groups(self, section_type: type) -> None:
        """(Re)build the section boxes when switching between incident and change files."""
        if self.groups and next(iter(self.groups.values())).section_type is section_type:
            return

        for group in self.groups.values():
            self.layout_content.removeWidget(group)
            group.deleteLater()
        self.groups = {}

        # Insert before the placeholder and the stretch
        insert_at = self.layout_content.indexOf(self.placeholder)
        for offset, section in enumerate(SectionName):
            group = SectionGroup(section.value.capitalize(), section_type, self.content)
            group.field_edited.connect(lambda name, value, s=section: self._on_section_edited(s, name, value))
            group.toggle_requested.connect(lambda enabled, s=section: self._on_section_toggled(s, enabled))
            self.layout_content.insertWidget(insert_at + offset, group)
            self.groups[section] = group

    # --- SLOTS ---

    def _on_top_level_edited(self, name: str, text: str) -> None:
        if self.entry is None:
            return
        self.state.update_field(self.entry, name, text)
        self.entry_renamed.emit()

    def _on_section_edited(self, section: SectionName, name: str, value) -> None:
        if self.entry is None:
            return
        self.state.update_section_field(self.entry, section, name, value)

    def _on_section_toggled(self, section: SectionName, enabled: bool) -> None:
        if self.entry is None:
            return

        if not enabled and self.state.section_has_data(self.entry, section):
            title = section.value.capitalize()
            reply = QMessageBox.question(
                self,
                "Data Loss Warning",
                f"The {title} section contains data. Disabling it will discard this data when saving. Continue?",
                QMessageBox.Yes | QMessageBox.No
            )
            if reply == QMessageBox.No:
                group = self.groups[section]
                group.blockSignals(True)
                group.setChecked(True)
                group.blockSignals(False)
                return

        self.state.set_section_enabled(self.entry, section, enabled)
