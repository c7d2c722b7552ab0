"""Board UI: a single bottle drawn as a stack of colored blocks."""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QMouseEvent, QPainter, QPen
from PySide6.QtWidgets import QWidget

from watersort.core.bottle import LockStatus
from watersort.core.config import CAPACITY
from watersort.ui.colors import BoardColors, lighten, pattern_color
from watersort.ui.models import BottleView

LIFT_OFFSET = 18
LIFT_HIGHLIGHT = 0.35


class BottleWidget(QWidget):
    """Clickable bottle. Selected bottles are drawn raised with the lifted run highlighted."""

    def __init__(self, on_click: Callable[[int], None], parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._on_click = on_click
        self._view: Optional[BottleView] = None
        self.setFixedSize(72, 240)
        self.setCursor(Qt.PointingHandCursor)

    @property
    def view(self) -> Optional[BottleView]:
        return self._view

    def set_view(self, view: Optional[BottleView]) -> None:
        self._view = view
        self.setVisible(view is not None)
        self.update()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if self._view is not None and event.button() == Qt.LeftButton:
            self._on_click(self._view.bottle_id)
        super().mouseReleaseEvent(event)

    def paintEvent(self, event) -> None:
        super().paintEvent(event)
        view = self._view
        if view is None:
            return
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)

        margin = 6
        top = margin + (0 if view.selected else LIFT_OFFSET)
        width = self.width() - 2 * margin
        height = self.height() - LIFT_OFFSET - 2 * margin
        slot = (height - 8) // CAPACITY

        glass = BoardColors.LOCKED_TINT if view.locked else BoardColors.GLASS
        border = BoardColors.SELECTED_BORDER if view.selected else BoardColors.GLASS_BORDER
        painter.setBrush(QColor(glass))
        painter.setPen(QPen(QColor(border), 3 if view.selected else 2))
        painter.drawRoundedRect(margin, top, width, height, 12, 12)

        painter.setPen(Qt.NoPen)
        first_lifted = len(view.blocks) - view.lifted
        for index, pattern in enumerate(view.blocks):
            color = pattern_color(pattern)
            if index >= first_lifted:
                color = lighten(color, LIFT_HIGHLIGHT)
            painter.setBrush(QColor(color))
            y = top + height - 4 - (index + 1) * slot
            painter.drawRoundedRect(margin + 5, y + 2, width - 10, slot - 4, 6, 6)

        if view.locked:
            painter.setPen(QColor(BoardColors.TEXT_PRIMARY))
            badge = "AD" if view.lock_status == LockStatus.AD_UNLOCK else "LOCK"
            painter.drawText(margin, top, width, height, Qt.AlignCenter, badge)
