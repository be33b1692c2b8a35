from __future__ import annotations

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
pytest.importorskip("PySide6.QtWidgets")

from PySide6.QtCore import QCoreApplication
from PySide6.QtWidgets import QApplication

from acousticdiag.config.catalog import load_catalog
from acousticdiag.gui.tabs.tab_machines import MachinesTab


@pytest.fixture(scope="module")
def qapp():
    app = QCoreApplication.instance()
    if app is None:
        app = QApplication([])
    elif not isinstance(app, QApplication):
        pytest.skip("a non-widget Qt application is already running")
    yield app


def test_activation_selects_machine_once(qapp) -> None:
    catalog = load_catalog()
    tab = MachinesTab(catalog)
    selected = []
    tab.machine_selected.connect(selected.append)

    item = tab._list.item(0)
    tab._list.itemClicked.emit(item)
    tab._list.itemActivated.emit(item)

    assert selected == [catalog[0]]
