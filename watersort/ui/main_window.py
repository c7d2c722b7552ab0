from __future__ import annotations

from typing import Dict, Iterable

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import (
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from watersort.core.bottle import Position
from watersort.core.engine import LevelEngine, PourCompletionSignal, UnlockOutcome
from watersort.core.events import (
    BottleUnlocked,
    EngineEvent,
    LevelSolved,
    PourRejected,
    UnlockRequired,
)
from watersort.core.levels import LevelRepository
from watersort.ui.bottle_widget import BottleWidget
from watersort.ui.colors import BoardColors
from watersort.ui.models import BottleView, next_level_available


class MainWindow(QMainWindow):
    """Board screen: bottle grid, status line, restart and next-level buttons.

    Pours are held open for ``pour_delay_ms`` before the engine's completion
    signal fires, standing in for the pour animation.
    """

    def __init__(self, engine: LevelEngine, levels: LevelRepository, pour_delay_ms: int) -> None:
        super().__init__()
        self._engine = engine
        self._levels = levels
        self._pour_delay_ms = pour_delay_ms
        self._slots: Dict[Position, BottleWidget] = {}

        self.setWindowTitle("Water Sort")

        central = QWidget()
        central.setStyleSheet(
            f"background: qlineargradient(x1:0, y1:0, x2:0, y2:1, "
            f"stop:0 {BoardColors.BG_TOP}, stop:1 {BoardColors.BG_BOTTOM});"
        )
        root = QVBoxLayout(central)
        root.setContentsMargins(24, 24, 24, 24)
        root.setSpacing(16)

        self._title = QLabel("")
        self._title.setAlignment(Qt.AlignCenter)
        self._title.setStyleSheet(f"color: {BoardColors.PRIMARY_DARK}; font-size: 22px; font-weight: 700;")
        root.addWidget(self._title)

        grid = QGridLayout()
        grid.setHorizontalSpacing(18)
        grid.setVerticalSpacing(28)
        layout = engine.layout
        for row in range(layout.rows):
            for col in range(layout.columns):
                widget = BottleWidget(on_click=self._on_bottle_clicked)
                widget.setVisible(False)
                grid.addWidget(widget, row, col, Qt.AlignCenter)
                self._slots[Position(row, col)] = widget
        root.addLayout(grid, 1)

        self._status = QLabel("")
        self._status.setAlignment(Qt.AlignCenter)
        self._status.setStyleSheet(f"color: {BoardColors.TEXT_MUTED}; font-size: 14px;")
        root.addWidget(self._status)

        buttons = QHBoxLayout()
        self._restart_button = QPushButton("Restart")
        self._restart_button.clicked.connect(self._restart)
        self._next_button = QPushButton("Next level")
        self._next_button.clicked.connect(self._next_level)
        buttons.addStretch(1)
        buttons.addWidget(self._restart_button)
        buttons.addWidget(self._next_button)
        buttons.addStretch(1)
        root.addLayout(buttons)

        self.setCentralWidget(central)
        self._refresh()

    def _on_bottle_clicked(self, bottle_id: int) -> None:
        outcome = self._engine.handle_bottle_tap(bottle_id)
        if outcome.ignored:
            return
        self._handle_events(outcome.events)
        if outcome.completion is not None:
            self._status.setText("Pouring...")
            QTimer.singleShot(self._pour_delay_ms, lambda: self._finish_pour(outcome.completion))
        self._refresh()

    def _finish_pour(self, signal: PourCompletionSignal) -> None:
        self._handle_events(signal())
        self._refresh()

    def _handle_events(self, events: Iterable[EngineEvent]) -> None:
        for event in events:
            if isinstance(event, PourRejected):
                self._status.setText("That bottle can't take this color.")
            elif isinstance(event, BottleUnlocked):
                self._status.setText("Bottle unlocked.")
            elif isinstance(event, UnlockRequired):
                self._ask_unlock(event.bottle_id)
            elif isinstance(event, LevelSolved):
                self._status.setText(f"Level {event.level_number} solved!")
            else:
                self._status.setText("")

    def _ask_unlock(self, bottle_id: int) -> None:
        answer = QMessageBox.question(
            self,
            "Locked bottle",
            "Watch an ad to unlock this bottle?",
            QMessageBox.Yes | QMessageBox.No,
        )
        if answer == QMessageBox.Yes and self._engine.unlock_bottle(bottle_id) is UnlockOutcome.UNLOCKED:
            self._status.setText("Bottle unlocked.")

    def _restart(self) -> None:
        self._engine.restart_level()
        self._status.setText("")
        self._refresh()

    def _next_level(self) -> None:
        upcoming = self._levels.next_after(self._engine.level_number)
        if upcoming is None:
            return
        self._engine.load_level(upcoming)
        self._status.setText("")
        self._refresh()

    def _refresh(self) -> None:
        self._title.setText(f"Level {self._engine.level_number}")
        self._next_button.setEnabled(next_level_available(self._engine, self._levels))
        selected = self._engine.selected_bottle_id
        lifted = self._engine.lifted_run_length
        views = {
            bottle.position: BottleView.from_bottle(bottle, selected, lifted)
            for bottle in self._engine.bottles()
        }
        for position, widget in self._slots.items():
            widget.set_view(views.get(position))
