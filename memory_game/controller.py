from __future__ import annotations

import logging
import random
from collections.abc import Callable
from uuid import UUID

from statemachine.exceptions import TransitionNotAllowed

from memory_game.api.models import CardState, CardView, GameSnapshot, OutcomeView
from memory_game.cards import Card, generate_cards
from memory_game.config import Timings
from memory_game.fsm import GameFSM
from memory_game.levels import Level, LevelConfig, parse_level
from memory_game.scheduler import Callback, Scheduler, TimerHandle
from memory_game.session import GamePhase, GameSession, Outcome, TimerName, format_clock

logger = logging.getLogger(__name__)

Listener = Callable[[GameSession], None]


class GameController:
    """Owns one GameSession and drives it through setup -> preview -> playing -> ended.

    Every action returns True when accepted and False when it was ignored; nothing
    here raises for bad gameplay input. Listeners are notified after each
    observable change, whether caused by an action or by a timer.
    """

    def __init__(
        self,
        *,
        scheduler: Scheduler,
        timings: Timings | None = None,
        rng: random.Random | None = None,
        session: GameSession | None = None,
    ) -> None:
        self.scheduler = scheduler
        self.timings = timings or Timings()
        self.rng = rng or random.Random()
        self.session = session or GameSession()
        self.fsm = GameFSM(self.session)
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.session)

    def _fire(self, event: str) -> bool:
        previous = self.session.phase
        try:
            self.fsm.send(event)
        except TransitionNotAllowed:
            logger.debug("Rejected %s in phase %s", event, previous.value)
            return False
        self.fsm.sync_phase_to_model()
        logger.info("Game phase %s -> %s (%s)", previous.value, self.session.phase.value, event)
        return True

    def _set_timeout(self, name: TimerName, delay_ms: int, fn: Callback) -> None:
        self.session.cancel_timer(name)
        epoch = self.session.epoch
        handle: TimerHandle | None = None

        def _run() -> None:
            if self.session.timers.get(name) is handle:
                del self.session.timers[name]
            if self.session.epoch != epoch:
                return
            fn()

        handle = self.scheduler.call_later(delay_ms, _run)
        self.session.timers[name] = handle

    def _set_interval(self, name: TimerName, interval_ms: int, fn: Callback) -> None:
        self.session.cancel_timer(name)
        epoch = self.session.epoch

        def _run() -> None:
            if self.session.epoch != epoch:
                return
            fn()

        self.session.timers[name] = self.scheduler.call_every(interval_ms, _run)

    def select_level(self, level: Level | str) -> bool:
        if self.session.phase != GamePhase.setup:
            logger.debug("Ignoring level selection outside setup")
            return False
        parsed = parse_level(level)
        if parsed is None:
            logger.debug("Ignoring unknown level %r", level)
            return False
        self.session.selected_level = parsed
        self._notify()
        return True

    def start_game(self) -> bool:
        if self.session.selected_level is None:
            logger.debug("Ignoring start without a selected level")
            return False
        if not self._fire("start_game"):
            return False

        s = self.session
        s.level = s.selected_level
        cfg = self._config

        s.epoch += 1
        s.cards = generate_cards(cfg, rng=self.rng)
        for card in s.cards:
            card.face_up = True
        s.matched_pairs = 0
        s.flipped_indices = []
        s.input_enabled = False
        s.outcome = None
        s.remaining_seconds = cfg.time_limit_seconds
        s.preview_remaining = cfg.preview_seconds

        if s.preview_remaining <= 0:
            self._begin_play()
        else:
            self._set_interval(TimerName.preview_countdown, self.timings.tick_ms, self._on_preview_tick)

        self._notify()
        return True

    def flip_card(self, index: int) -> bool:
        s = self.session
        if s.phase != GamePhase.playing or not s.input_enabled or len(s.flipped_indices) >= 2:
            return False
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(s.cards):
            logger.debug("Ignoring flip of invalid index %r", index)
            return False

        # A wrong pair still showing from the last mismatch goes face-down once play resumes.
        hid = self._hide_wrong_cards()

        card = s.cards[index]
        if card.face_up or card.matched:
            if hid:
                self._notify()
            return False

        card.face_up = True
        s.flipped_indices.append(index)

        if len(s.flipped_indices) == 2:
            s.input_enabled = False
            self._set_timeout(TimerName.evaluate, self.timings.evaluate_delay_ms, self._evaluate)

        self._notify()
        return True

    def reset_game(self) -> bool:
        self.session.cancel_all_timers()
        self._fire("reset_game")
        self.session.clear()
        self._notify()
        return True

    def dispose(self) -> None:
        """Cancel everything and detach listeners; the controller must not be used afterwards."""

        self.session.cancel_all_timers()
        self.session.epoch += 1
        self._listeners.clear()

    def _on_preview_tick(self) -> None:
        s = self.session
        s.preview_remaining -= 1
        if s.preview_remaining <= 0:
            s.preview_remaining = 0
            s.cancel_timer(TimerName.preview_countdown)
            self._begin_play()
        self._notify()

    def _begin_play(self) -> None:
        if not self._fire("preview_done"):
            return
        s = self.session
        for card in s.cards:
            card.hide()
        s.input_enabled = True
        s.remaining_seconds = self._config.time_limit_seconds
        self._set_interval(TimerName.main_countdown, self.timings.tick_ms, self._on_main_tick)

    def _on_main_tick(self) -> None:
        s = self.session
        s.remaining_seconds -= 1
        if s.remaining_seconds <= 0:
            s.remaining_seconds = 0
            self._end(won=False)
        self._notify()

    def _evaluate(self) -> None:
        s = self.session
        if s.phase != GamePhase.playing or len(s.flipped_indices) != 2:
            return

        first, second = s.flipped_indices
        a, b = s.cards[first], s.cards[second]
        s.flipped_indices = []

        if a.symbol == b.symbol:
            a.matched = b.matched = True
            s.matched_pairs += 1
            logger.debug("Matched pair %s (%d/%d)", a.symbol, s.matched_pairs, s.pair_count)
            if s.matched_pairs == s.pair_count:
                # Freeze the clock: a secured win cannot be overtaken by a timeout.
                s.cancel_timer(TimerName.main_countdown)
                self._set_timeout(TimerName.win, self.timings.win_delay_ms, self._on_win)
        else:
            a.wrong = b.wrong = True
            logger.debug("Mismatch at %d/%d", first, second)
            self._set_timeout(
                TimerName.mismatch_hide,
                self.timings.mismatch_hide_ms,
                lambda: self._hide_pair(first, second),
            )

        self._set_timeout(TimerName.unlock, self.timings.unlock_delay_ms, self._unlock)
        self._notify()

    def _hide_wrong_cards(self) -> bool:
        self.session.cancel_timer(TimerName.mismatch_hide)
        hid = False
        for card in self.session.cards:
            if card.wrong and not card.matched:
                card.hide()
                hid = True
        return hid

    def _hide_pair(self, first: int, second: int) -> None:
        for idx in (first, second):
            card = self.session.cards[idx]
            if not card.matched:
                card.hide()
        self._notify()

    def _unlock(self) -> None:
        if self.session.phase != GamePhase.playing:
            return
        self.session.input_enabled = True
        self._notify()

    def _on_win(self) -> None:
        self._end(won=True)
        self._notify()

    def _end(self, *, won: bool) -> None:
        if not self._fire("all_matched" if won else "time_up"):
            return
        s = self.session
        s.cancel_all_timers()
        s.input_enabled = False
        s.flipped_indices = []
        s.outcome = Outcome(won=won)
        logger.info("Game over: %s with %d/%d pairs", "won" if won else "lost", s.matched_pairs, s.pair_count)

    @property
    def _config(self) -> LevelConfig:
        cfg = self.session.config
        if cfg is None:
            raise RuntimeError("No level committed")
        return cfg

    @property
    def phase(self) -> GamePhase:
        return self.session.phase

    @property
    def selected_level(self) -> Level | None:
        return self.session.selected_level

    @property
    def level(self) -> Level | None:
        return self.session.level

    @property
    def cards(self) -> list[Card]:
        return self.session.cards

    @property
    def matched_pairs(self) -> int:
        return self.session.matched_pairs

    @property
    def pair_count(self) -> int:
        return self.session.pair_count

    @property
    def match_counter(self) -> str:
        return f"{self.session.matched_pairs} / {self.session.pair_count}"

    @property
    def preview_remaining(self) -> int:
        return self.session.preview_remaining

    @property
    def remaining_seconds(self) -> int:
        return self.session.remaining_seconds

    @property
    def timer_display(self) -> str:
        return format_clock(self.session.remaining_seconds)

    @property
    def flipped_indices(self) -> list[int]:
        return list(self.session.flipped_indices)

    @property
    def input_enabled(self) -> bool:
        return self.session.input_enabled

    @property
    def outcome(self) -> Outcome | None:
        return self.session.outcome

    @property
    def active_timers(self) -> list[TimerName]:
        return self.session.active_timers

    def snapshot(self, *, game_id: UUID | None = None) -> GameSnapshot:
        s = self.session
        return GameSnapshot(
            game_id=game_id,
            phase=s.phase,
            selected_level=s.selected_level,
            level=s.level,
            cards=[_card_view(idx, card) for idx, card in enumerate(s.cards)],
            matched_pairs=s.matched_pairs,
            pair_count=s.pair_count,
            match_counter=self.match_counter,
            preview_remaining=s.preview_remaining,
            remaining_seconds=s.remaining_seconds,
            timer_display=self.timer_display,
            flipped_indices=list(s.flipped_indices),
            input_enabled=s.input_enabled,
            outcome=OutcomeView(won=s.outcome.won) if s.outcome is not None else None,
        )


def card_state(card: Card) -> CardState:
    if card.matched:
        return CardState.matched
    if card.wrong:
        return CardState.wrong
    if card.face_up:
        return CardState.face_up
    return CardState.face_down


def _card_view(index: int, card: Card) -> CardView:
    state = card_state(card)
    visible = state != CardState.face_down
    return CardView(index=index, state=state, symbol=card.symbol if visible else None)
