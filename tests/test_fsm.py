from __future__ import annotations

import pytest
from statemachine.exceptions import TransitionNotAllowed

from memory_game.fsm import GameFSM
from memory_game.levels import Level
from memory_game.session import GamePhase, GameSession


def test_start_requires_selected_level() -> None:
    fsm = GameFSM(GameSession())
    with pytest.raises(TransitionNotAllowed):
        fsm.send("start_game")
    assert fsm.current_state == fsm.setting_up


def test_happy_path_and_sync_to_model() -> None:
    session = GameSession(selected_level=Level.easy)
    fsm = GameFSM(session)

    fsm.send("start_game")
    fsm.sync_phase_to_model()
    assert session.phase == GamePhase.preview

    fsm.send("preview_done")
    fsm.send("time_up")
    fsm.sync_phase_to_model()
    assert session.phase == GamePhase.ended


def test_fsm_resumes_from_model_phase() -> None:
    session = GameSession(phase=GamePhase.playing, selected_level=Level.hard, level=Level.hard)
    fsm = GameFSM(session)
    assert fsm.current_state == fsm.playing


@pytest.mark.parametrize("phase", list(GamePhase))
def test_reset_is_allowed_from_every_phase(phase: GamePhase) -> None:
    session = GameSession(phase=phase, selected_level=Level.easy)
    fsm = GameFSM(session)
    fsm.send("reset_game")
    fsm.sync_phase_to_model()
    assert session.phase == GamePhase.setup


def test_ended_rejects_a_second_terminal_transition() -> None:
    fsm = GameFSM(GameSession(phase=GamePhase.playing))
    fsm.send("all_matched")
    with pytest.raises(TransitionNotAllowed):
        fsm.send("time_up")


def test_no_gameplay_transitions_during_preview() -> None:
    fsm = GameFSM(GameSession(phase=GamePhase.preview))
    for event in ("all_matched", "time_up", "start_game"):
        with pytest.raises(TransitionNotAllowed):
            fsm.send(event)
