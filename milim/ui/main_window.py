from __future__ import annotations

import logging
import time
from typing import List

from PySide6.QtCore import QPropertyAnimation, Qt
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QGraphicsOpacityEffect,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QPushButton,
    QScrollArea,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from milim.core.controller import GameController, GamePhase
from milim.core.feedback import EventKind, GameEvent, GameFeedback
from milim.core.levels import word_length_for_level
from milim.core.progress import GameDataStore, HighScore
from milim.core.settings import SettingsStore
from milim.ui.colors import GameColors, countdown_color
from milim.ui.widgets import CoolBackground, GlassCard, LetterTile, ProgressBar, StatCard

logger = logging.getLogger(__name__)


def _button_style(color: str = GameColors.PRIMARY) -> str:
    return f"""
        QPushButton {{
            background: {color};
            color: {GameColors.BG_TOP};
            padding: 10px 22px;
            border: none;
            border-radius: 12px;
            font-weight: 700;
            font-size: 15px;
        }}
        QPushButton:disabled {{
            background: {GameColors.TEXT_MUTED};
        }}
        """


def _label(text: str = "", size: int = 14, color: str = GameColors.TEXT_PRIMARY, bold: bool = False) -> QLabel:
    label = QLabel(text)
    weight = 800 if bold else 500
    label.setStyleSheet(f"color: {color}; font-size: {size}px; font-weight: {weight};")
    label.setAlignment(Qt.AlignCenter)
    return label


def format_high_scores(scores: List[HighScore]) -> str:
    if not scores:
        return "No high scores yet"
    lines = []
    for rank, entry in enumerate(scores, start=1):
        when = time.strftime("%Y-%m-%d", time.localtime(entry.date))
        name = entry.player_name or "Player"
        lines.append(f"{rank}. {name} - {entry.score} (level {entry.level}, {entry.words_completed} words) {when}")
    return "\n".join(lines)


class _FlashFeedback(GameFeedback):
    """Desktop stand-in for haptics: a short colored flash over the window."""

    def __init__(self, window: "MainWindow") -> None:
        self._window = window

    def on_correct_answer(self) -> None:
        self._window.flash(GameColors.MINT)

    def on_wrong_answer(self) -> None:
        self._window.flash(GameColors.ERROR)

    def on_level_up(self) -> None:
        self._window.flash(GameColors.AMBER)


class MainWindow(QMainWindow):
    """Start, game, bonus, end and dictionary screens around one :class:`GameController`."""

    def __init__(self, controller: GameController, store: GameDataStore, settings: SettingsStore) -> None:
        super().__init__()
        self._controller = controller
        self._store = store
        self._settings = settings
        self._tiles: List[LetterTile] = []
        self._bonus_buttons: List[QPushButton] = []

        self._build_ui()
        controller.subscribe(self._on_game_event)
        controller.add_feedback(_FlashFeedback(self))
        self._show_start_screen()

    # -- construction -------------------------------------------------------

    def _build_ui(self) -> None:
        self.setWindowTitle("Milim - Hebrew Word Adventure")
        self.setMinimumSize(900, 680)

        self._stack = QStackedWidget()
        self._start_screen = self._build_start_screen()
        self._game_screen = self._build_game_screen()
        self._bonus_screen = self._build_bonus_screen()
        self._end_screen = self._build_end_screen()
        self._dictionary_screen = self._build_dictionary_screen()
        for screen in (
            self._start_screen,
            self._game_screen,
            self._bonus_screen,
            self._end_screen,
            self._dictionary_screen,
        ):
            self._stack.addWidget(screen)
        self.setCentralWidget(self._stack)

        self._flash_overlay = QWidget(self)
        self._flash_overlay.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        self._flash_effect = QGraphicsOpacityEffect(self._flash_overlay)
        self._flash_effect.setOpacity(0.0)
        self._flash_overlay.setGraphicsEffect(self._flash_effect)
        self._flash_overlay.hide()
        self._flash_anim = QPropertyAnimation(self._flash_effect, b"opacity", self)
        self._flash_anim.setDuration(250)
        self._flash_anim.setKeyValueAt(0.0, 0.0)
        self._flash_anim.setKeyValueAt(0.2, 0.3)
        self._flash_anim.setKeyValueAt(1.0, 0.0)
        self._flash_anim.finished.connect(self._flash_overlay.hide)

    def _build_start_screen(self) -> QWidget:
        screen = CoolBackground()
        layout = QVBoxLayout(screen)
        layout.setContentsMargins(40, 40, 40, 40)
        layout.setSpacing(18)
        layout.addStretch(1)
        layout.addWidget(_label("מילים", 64, GameColors.PRIMARY_LIGHT, bold=True))
        layout.addWidget(_label("HEBREW WORD ADVENTURE", 14, GameColors.TEXT_SECONDARY, bold=True))

        self._new_game_button = QPushButton("New game")
        self._new_game_button.setStyleSheet(_button_style())
        self._new_game_button.clicked.connect(self._new_game)
        self._continue_button = QPushButton("Continue")
        self._continue_button.setStyleSheet(_button_style(GameColors.MINT))
        self._continue_button.clicked.connect(self._continue_game)
        dictionary_button = QPushButton("Dictionary")
        dictionary_button.setStyleSheet(_button_style(GameColors.LAVENDER))
        dictionary_button.clicked.connect(self._show_dictionary)
        for button in (self._new_game_button, self._continue_button, dictionary_button):
            layout.addWidget(button, 0, Qt.AlignHCenter)

        toggles = QHBoxLayout()
        self._sound_toggle = QCheckBox("Sound")
        self._flash_toggle = QCheckBox("Flash feedback")
        self._continue_toggle = QCheckBox("Offer Continue")
        for box in (self._sound_toggle, self._flash_toggle, self._continue_toggle):
            box.setStyleSheet(f"color: {GameColors.TEXT_SECONDARY}; font-size: 13px;")
            toggles.addWidget(box)
        self._sound_toggle.toggled.connect(lambda on: self._settings.update(audio_muted=not on))
        self._flash_toggle.toggled.connect(lambda on: self._settings.update(haptics_enabled=on))
        self._continue_toggle.toggled.connect(self._on_continue_toggled)
        layout.addLayout(toggles)

        card = GlassCard()
        card_layout = QVBoxLayout(card)
        card_layout.addWidget(_label("High scores", 16, bold=True))
        self._start_scores_label = _label("", 13, GameColors.TEXT_SECONDARY)
        card_layout.addWidget(self._start_scores_label)
        layout.addWidget(card)
        layout.addStretch(1)
        return screen

    def _build_game_screen(self) -> QWidget:
        screen = CoolBackground()
        layout = QVBoxLayout(screen)
        layout.setContentsMargins(24, 20, 24, 24)
        layout.setSpacing(16)

        header = QHBoxLayout()
        home_button = QPushButton("Home")
        home_button.setStyleSheet(_button_style(GameColors.TEXT_SECONDARY))
        home_button.clicked.connect(self._leave_game)
        header.addWidget(home_button)
        self._level_label = _label("", 20, GameColors.PRIMARY_LIGHT, bold=True)
        header.addWidget(self._level_label, 1)
        layout.addLayout(header)

        stats = QHBoxLayout()
        self._score_card = StatCard("★", "Score", "0", GameColors.PRIMARY_DARK)
        self._lives_card = StatCard("♥", "Lives", "0", GameColors.CORAL)
        self._hints_card = StatCard("?", "Hints", "0", GameColors.LAVENDER)
        self._streak_card = StatCard("🔥", "Streak", "0", GameColors.AMBER)
        for card in (self._score_card, self._lives_card, self._hints_card, self._streak_card):
            stats.addWidget(card)
        layout.addLayout(stats)

        self._level_progress = ProgressBar(height=12)
        layout.addWidget(self._level_progress)

        self._message_label = _label("", 18, GameColors.AMBER, bold=True)
        layout.addWidget(self._message_label)

        self._meaning_label = _label("", 15, GameColors.TEXT_SECONDARY)
        layout.addWidget(self._meaning_label)

        self._answer_label = _label("", 48, GameColors.TEXT_PRIMARY, bold=True)
        self._answer_label.setMinimumHeight(80)
        layout.addWidget(self._answer_label)

        self._tiles_row = QHBoxLayout()
        self._tiles_row.setSpacing(12)
        tiles_holder = QWidget()
        tiles_holder.setLayoutDirection(Qt.RightToLeft)
        tiles_holder.setLayout(self._tiles_row)
        layout.addWidget(tiles_holder, 0, Qt.AlignHCenter)

        actions = QHBoxLayout()
        self._hint_button = QPushButton("Hint")
        self._hint_button.setStyleSheet(_button_style(GameColors.LAVENDER))
        self._hint_button.clicked.connect(self._controller.request_hint)
        reset_button = QPushButton("Reset")
        reset_button.setStyleSheet(_button_style(GameColors.TEXT_SECONDARY))
        reset_button.clicked.connect(self._controller.reset_selection)
        actions.addStretch(1)
        actions.addWidget(self._hint_button)
        actions.addWidget(reset_button)
        actions.addStretch(1)
        layout.addLayout(actions)
        layout.addStretch(1)
        return screen

    def _build_bonus_screen(self) -> QWidget:
        screen = CoolBackground()
        layout = QVBoxLayout(screen)
        layout.setContentsMargins(40, 40, 40, 40)
        layout.setSpacing(18)
        layout.addWidget(_label("BONUS ROUND", 28, GameColors.AMBER, bold=True))
        layout.addWidget(_label("How is this letter pronounced?", 16, GameColors.TEXT_SECONDARY))
        self._bonus_letter_label = _label("", 96, GameColors.TEXT_PRIMARY, bold=True)
        layout.addWidget(self._bonus_letter_label)
        self._bonus_time_label = _label("", 18, GameColors.TEXT_PRIMARY, bold=True)
        layout.addWidget(self._bonus_time_label)
        self._bonus_bar = ProgressBar(height=12)
        layout.addWidget(self._bonus_bar)
        self._bonus_options = QGridLayout()
        self._bonus_options.setSpacing(12)
        layout.addLayout(self._bonus_options)
        self._bonus_message_label = _label("", 18, GameColors.AMBER, bold=True)
        layout.addWidget(self._bonus_message_label)
        layout.addStretch(1)
        return screen

    def _build_end_screen(self) -> QWidget:
        screen = CoolBackground()
        layout = QVBoxLayout(screen)
        layout.setContentsMargins(40, 40, 40, 40)
        layout.setSpacing(16)
        layout.addStretch(1)
        self._end_title_label = _label("", 40, GameColors.PRIMARY_LIGHT, bold=True)
        layout.addWidget(self._end_title_label)
        self._end_summary_label = _label("", 18, GameColors.TEXT_PRIMARY)
        layout.addWidget(self._end_summary_label)
        card = GlassCard()
        card_layout = QVBoxLayout(card)
        card_layout.addWidget(_label("High scores", 16, bold=True))
        self._end_scores_label = _label("", 13, GameColors.TEXT_SECONDARY)
        card_layout.addWidget(self._end_scores_label)
        self._name_row = QWidget()
        name_layout = QHBoxLayout(self._name_row)
        name_layout.setContentsMargins(0, 0, 0, 0)
        self._name_box = QLineEdit()
        self._name_box.setPlaceholderText("Your name")
        self._name_box.setMaxLength(24)
        self._name_box.returnPressed.connect(self._save_player_name)
        save_name = QPushButton("Save name")
        save_name.setStyleSheet(_button_style(GameColors.MINT))
        save_name.clicked.connect(self._save_player_name)
        name_layout.addWidget(self._name_box, 1)
        name_layout.addWidget(save_name)
        card_layout.addWidget(self._name_row)
        layout.addWidget(card)
        buttons = QHBoxLayout()
        again = QPushButton("Play again")
        again.setStyleSheet(_button_style())
        again.clicked.connect(self._new_game)
        home = QPushButton("Home")
        home.setStyleSheet(_button_style(GameColors.TEXT_SECONDARY))
        home.clicked.connect(self._show_start_screen)
        buttons.addStretch(1)
        buttons.addWidget(again)
        buttons.addWidget(home)
        buttons.addStretch(1)
        layout.addLayout(buttons)
        layout.addStretch(1)
        return screen

    def _build_dictionary_screen(self) -> QWidget:
        screen = CoolBackground()
        layout = QVBoxLayout(screen)
        layout.setContentsMargins(32, 24, 32, 24)
        layout.setSpacing(12)
        header = QHBoxLayout()
        back = QPushButton("Back")
        back.setStyleSheet(_button_style(GameColors.TEXT_SECONDARY))
        back.clicked.connect(self._show_start_screen)
        header.addWidget(back)
        header.addWidget(_label("Learned words", 22, GameColors.PRIMARY_LIGHT, bold=True), 1)
        layout.addLayout(header)
        filters = QHBoxLayout()
        self._search_box = QLineEdit()
        self._search_box.setPlaceholderText("Search Hebrew, transliteration or meaning")
        self._search_box.textChanged.connect(self._refresh_dictionary)
        filters.addWidget(self._search_box, 1)
        self._level_filter = QComboBox()
        self._level_filter.addItem("All levels", None)
        for level in range(1, self._controller.rules.max_level + 1):
            self._level_filter.addItem(f"Level {level}", level)
        self._level_filter.currentIndexChanged.connect(self._refresh_dictionary)
        filters.addWidget(self._level_filter)
        layout.addLayout(filters)
        self._dictionary_label = _label("", 16, GameColors.TEXT_PRIMARY)
        self._dictionary_label.setAlignment(Qt.AlignTop | Qt.AlignHCenter)
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setStyleSheet("background: transparent; border: none;")
        scroll.setWidget(self._dictionary_label)
        layout.addWidget(scroll, 1)
        return screen

    # -- navigation ---------------------------------------------------------

    def _show_start_screen(self) -> None:
        settings = self._settings.settings
        for box, value in (
            (self._sound_toggle, not settings.audio_muted),
            (self._flash_toggle, settings.haptics_enabled),
            (self._continue_toggle, settings.continue_enabled),
        ):
            box.blockSignals(True)
            box.setChecked(value)
            box.blockSignals(False)
        self._continue_button.setVisible(settings.continue_enabled)
        self._continue_button.setEnabled(self._store.has_snapshot())
        self._start_scores_label.setText(format_high_scores(self._store.high_scores()))
        self._stack.setCurrentWidget(self._start_screen)

    def _show_dictionary(self) -> None:
        self._search_box.clear()
        self._level_filter.setCurrentIndex(0)
        self._refresh_dictionary()
        self._stack.setCurrentWidget(self._dictionary_screen)

    def _refresh_dictionary(self) -> None:
        words = self._store.learned_words(level=self._level_filter.currentData(), search=self._search_box.text())
        if not words:
            self._dictionary_label.setText("Solve puzzles to fill your dictionary")
            return
        self._dictionary_label.setText(
            "\n".join(f"{w.script}  ·  {w.transliteration}  ·  {w.meaning}" for w in words)
        )

    def _save_player_name(self) -> None:
        if not self._controller.name_high_score(self._name_box.text()):
            return
        self._name_row.setVisible(False)
        self._end_scores_label.setText(format_high_scores(self._store.high_scores()))

    def _on_continue_toggled(self, enabled: bool) -> None:
        self._settings.update(continue_enabled=enabled)
        self._continue_button.setVisible(enabled)

    def _new_game(self) -> None:
        self._controller.start()

    def _continue_game(self) -> None:
        self._controller.continue_game()

    def _leave_game(self) -> None:
        self._controller.save()
        self._controller.teardown()
        self._show_start_screen()

    # -- game events --------------------------------------------------------

    def _on_game_event(self, event: GameEvent) -> None:
        phase = self._controller.phase
        if phase is GamePhase.IN_BONUS_ROUND:
            self._render_bonus(event)
        elif phase.is_terminal:
            self._render_end()
        else:
            self._render_game(event)

    def _render_game(self, event: GameEvent) -> None:
        session = self._controller.session
        if self._stack.currentWidget() is not self._game_screen:
            self._stack.setCurrentWidget(self._game_screen)
        if event.kind in (EventKind.WORD_READY, EventKind.STARTED, EventKind.RESTORED):
            self._rebuild_tiles()
        if event.message:
            self._message_label.setText(event.message)
        elif event.kind is EventKind.WORD_READY:
            self._message_label.setText("")

        length = word_length_for_level(session.level, self._controller.rules)
        self._level_label.setText(f"Level {session.level} · {length}-letter words")
        self._score_card.set_value(f"{session.score:,}")
        self._lives_card.set_value(f"{session.lives}/{session.max_lives}")
        self._hints_card.set_value(str(session.hints_remaining))
        streak = f"{session.streak} ×1.5" if session.bonus_active else str(session.streak)
        self._streak_card.set_value(streak)
        self._level_progress.set_progress(session.level_progress_percent, 100, GameColors.MINT)
        self._hint_button.setEnabled(session.hints_remaining > 0)

        word = session.current_word
        if word is not None and session.animating_correct:
            self._meaning_label.setText(f"{word.transliteration} · {word.meaning}")
        else:
            self._meaning_label.setText("")
        self._answer_label.setText(session.selected_text() or "·")
        selected = set(session.selected_indices)
        for tile in self._tiles:
            tile.set_selected(tile.index in selected)

    def _rebuild_tiles(self) -> None:
        while self._tiles_row.count():
            item = self._tiles_row.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.setParent(None)
                widget.deleteLater()
        self._tiles = []
        for index, letter in enumerate(self._controller.session.shuffled_letters):
            tile = LetterTile(letter, index)
            tile.clicked.connect(lambda _=False, i=index: self._controller.select_letter(i))
            self._tiles_row.addWidget(tile)
            self._tiles.append(tile)

    def _render_bonus(self, event: GameEvent) -> None:
        session = self._controller.session
        challenge = session.current_bonus_challenge
        if event.kind is EventKind.BONUS_STARTED and challenge is not None:
            self._bonus_letter_label.setText(challenge.letter)
            self._bonus_message_label.setText("")
            self._rebuild_bonus_options(challenge.options)
            self._stack.setCurrentWidget(self._bonus_screen)
        if event.kind is EventKind.BONUS_RESOLVED:
            self._bonus_message_label.setText(event.message)
            for button in self._bonus_buttons:
                button.setEnabled(False)
        total = self._controller_duration()
        remaining = session.bonus_time_remaining
        self._bonus_time_label.setText(f"{remaining}s")
        self._bonus_bar.set_progress(remaining, total, countdown_color(remaining, total))

    def _controller_duration(self) -> int:
        return max(1, self._controller.rules.bonus_duration_s)

    def _rebuild_bonus_options(self, options) -> None:
        for button in self._bonus_buttons:
            button.setParent(None)
            button.deleteLater()
        self._bonus_buttons = []
        for i, option in enumerate(options):
            button = QPushButton(option)
            button.setStyleSheet(_button_style(GameColors.PRIMARY))
            button.clicked.connect(lambda _=False, o=option: self._controller.select_bonus_option(o))
            self._bonus_options.addWidget(button, i // 2, i % 2)
            self._bonus_buttons.append(button)

    def _render_end(self) -> None:
        session = self._controller.session
        if self._controller.phase is GamePhase.GAME_OVER:
            self._end_title_label.setText("GAME OVER")
        else:
            self._end_title_label.setText("ALL WORDS SOLVED!")
        self._end_summary_label.setText(
            f"Score {session.score:,} · Level {session.level} · {session.total_completed()} words"
        )
        self._end_scores_label.setText(format_high_scores(self._store.high_scores()))
        self._name_box.clear()
        self._name_row.setVisible(self._controller.last_high_score_id is not None)
        self._stack.setCurrentWidget(self._end_screen)

    # -- feedback -----------------------------------------------------------

    def flash(self, color: str) -> None:
        if not self._settings.settings.haptics_enabled:
            return
        self._flash_overlay.setStyleSheet(f"background-color: {color};")
        self._flash_overlay.setGeometry(self.rect())
        self._flash_overlay.raise_()
        self._flash_overlay.show()
        self._flash_anim.stop()
        self._flash_anim.start()

    def closeEvent(self, event: QCloseEvent) -> None:
        """Save the running game and stop its timers when closing the app."""
        self._controller.save()
        self._controller.teardown()
        self._store.save()
        super().closeEvent(event)
