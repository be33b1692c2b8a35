from __future__ import annotations

from typing import Optional, Sequence

from PySide6.QtCore import Qt, Signal, Slot
from PySide6.QtWidgets import QLabel, QListWidget, QListWidgetItem, QVBoxLayout, QWidget

from ...core.models import MachineProfile


def machine_caption(profile: MachineProfile) -> str:
    return f"{profile.name}  ({profile.category})  |  {profile.max_db:g} dB max"


class MachinesTab(QWidget):
    """List of catalog machines; activating one arms a diagnostic for it."""

    machine_selected = Signal(object)

    def __init__(
        self,
        catalog: Sequence[MachineProfile] = (),
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.addWidget(QLabel("Select a machine to diagnose:", self))

        self._list = QListWidget(self)
        layout.addWidget(self._list, stretch=1)
        self._list.itemActivated.connect(self._on_item_activated)

        self.set_catalog(catalog)

    def set_catalog(self, catalog: Sequence[MachineProfile]) -> None:
        self._list.clear()
        for profile in catalog:
            item = QListWidgetItem(machine_caption(profile))
            item.setData(Qt.UserRole, profile)
            self._list.addItem(item)

    @Slot(QListWidgetItem)
    def _on_item_activated(self, item: QListWidgetItem) -> None:
        profile = item.data(Qt.UserRole)
        if profile is not None:
            self.machine_selected.emit(profile)
