"""Reusable widgets: background, cards, progress bar and letter tiles."""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QPoint, Qt
from PySide6.QtGui import QColor, QLinearGradient, QPainter, QRadialGradient
from PySide6.QtWidgets import (
    QFrame,
    QGraphicsDropShadowEffect,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from milim.ui.colors import GameColors


class CoolBackground(QWidget):
    """Gradient background with faint Hebrew letters."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)

        gradient = QLinearGradient(0, 0, self.width(), self.height())
        gradient.setColorAt(0.0, QColor(GameColors.BG_TOP))
        gradient.setColorAt(0.5, QColor(GameColors.BG_MIDDLE))
        gradient.setColorAt(1.0, QColor(GameColors.BG_BOTTOM))
        painter.fillRect(self.rect(), gradient)

        painter.setPen(Qt.NoPen)
        glow = QRadialGradient(self.width() * 0.85, self.height() * 0.15, 220)
        glow.setColorAt(0, QColor(255, 255, 255, 25))
        glow.setColorAt(1, QColor(255, 255, 255, 0))
        painter.setBrush(glow)
        painter.drawEllipse(QPoint(int(self.width() * 0.85), int(self.height() * 0.15)), 220, 220)

        painter.setOpacity(0.05)
        font = painter.font()
        font.setPointSize(90)
        font.setBold(True)
        painter.setFont(font)
        painter.setPen(QColor(GameColors.PRIMARY_LIGHT))
        letters = [("א", 0.08, 0.22), ("ב", 0.86, 0.35), ("ג", 0.14, 0.78), ("ש", 0.78, 0.83), ("מ", 0.48, 0.52)]
        for letter, x, y in letters:
            painter.drawText(int(self.width() * x), int(self.height() * y), letter)


class GlassCard(QFrame):
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("glassCard")
        self.setStyleSheet(
            f"""
            QFrame#glassCard {{
                background: {GameColors.CARD_BG};
                border: 1px solid {GameColors.CARD_BORDER};
                border-radius: 20px;
            }}
            """
        )
        shadow = QGraphicsDropShadowEffect(self)
        shadow.setBlurRadius(30)
        shadow.setOffset(0, 8)
        shadow.setColor(QColor(0, 0, 0, 80))
        self.setGraphicsEffect(shadow)


class StatCard(QFrame):
    """HUD counter: an icon badge beside a caption and a large number."""

    def __init__(self, icon: str, label: str, value: str, bg_color: str, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("statCard")
        accent = QColor(bg_color)
        self.setStyleSheet(
            f"""
            QFrame#statCard {{
                background: rgba({accent.red()}, {accent.green()}, {accent.blue()}, 0.22);
                border-left: 4px solid {accent.name()};
                border-radius: 10px;
            }}
            QLabel {{ background: transparent; border: none; }}
            """
        )
        row = QHBoxLayout(self)
        row.setContentsMargins(10, 8, 14, 8)
        row.setSpacing(10)

        badge = QLabel(icon)
        badge.setFixedSize(36, 36)
        badge.setAlignment(Qt.AlignCenter)
        badge.setStyleSheet(
            f"background: {accent.name()}; color: {GameColors.TEXT_PRIMARY};"
            " border-radius: 18px; font-size: 18px;"
        )
        row.addWidget(badge)

        column = QVBoxLayout()
        column.setSpacing(0)
        caption = QLabel(label.upper())
        caption.setStyleSheet(f"color: {GameColors.TEXT_SECONDARY}; font-size: 10px; letter-spacing: 1px;")
        column.addWidget(caption)
        self.value_label = QLabel()
        self.value_label.setStyleSheet(f"color: {GameColors.TEXT_PRIMARY}; font-size: 22px; font-weight: 800;")
        column.addWidget(self.value_label)
        row.addLayout(column, 1)
        self.set_value(value)

    def set_value(self, value) -> None:
        self.value_label.setText(str(value))


class ProgressBar(QWidget):
    """Rounded progress bar; the fill color can change per update."""

    def __init__(self, parent: Optional[QWidget] = None, height: int = 10) -> None:
        super().__init__(parent)
        self._value = 0.0
        self._max_value = 100.0
        self._color = GameColors.PRIMARY
        self.setFixedHeight(height)
        self.setMinimumWidth(100)

    def set_progress(self, value: float, max_value: float, color: Optional[str] = None) -> None:
        self._value = max(0.0, float(value))
        self._max_value = float(max_value) if max_value > 0 else 1.0
        if color:
            self._color = color
        self.update()

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        painter.setPen(Qt.NoPen)
        radius = min(8, self.height() // 2)
        painter.setBrush(QColor(255, 255, 255, 30))
        painter.drawRoundedRect(0, 0, self.width(), self.height(), radius, radius)
        width = int(min(1.0, self._value / self._max_value) * self.width())
        if width > 0:
            painter.setBrush(QColor(self._color))
            painter.drawRoundedRect(0, 0, width, self.height(), radius, radius)


class LetterTile(QPushButton):
    """One shuffled letter. Dimmed once it has been used in the answer."""

    SIZE = 72

    def __init__(self, letter: str, index: int, parent: Optional[QWidget] = None) -> None:
        super().__init__(letter, parent)
        self.index = index
        self.setFixedSize(self.SIZE, self.SIZE)
        self.setCursor(Qt.CursorShape.PointingHandCursor)
        self.set_selected(False)

    def set_selected(self, selected: bool) -> None:
        bg = GameColors.TILE_SELECTED if selected else GameColors.TILE_BG
        self.setStyleSheet(
            f"""
            QPushButton {{
                background: {bg};
                color: {GameColors.TILE_TEXT};
                border-radius: 14px;
                font-size: 34px;
                font-weight: 900;
            }}
            """
        )
