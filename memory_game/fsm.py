from __future__ import annotations

from statemachine import State, StateMachine

from memory_game.session import GamePhase, GameSession


class GameFSM(StateMachine):
    """FSM wrapper around GameSession.

    Lifecycle: setup -> preview -> playing -> ended, with `reset_game` leading
    back to setup from anywhere. The controller mutates the session; the FSM
    only guards which transitions are legal.
    """

    setting_up = State(GamePhase.setup.value, value=GamePhase.setup.value, initial=True)
    previewing = State(GamePhase.preview.value, value=GamePhase.preview.value)
    playing = State(GamePhase.playing.value, value=GamePhase.playing.value)
    # Not `final=True`: final states cannot have the outgoing reset transition.
    ended = State(GamePhase.ended.value, value=GamePhase.ended.value)

    start_game = setting_up.to(previewing, cond="level_selected")
    preview_done = previewing.to(playing)
    all_matched = playing.to(ended)
    time_up = playing.to(ended)
    reset_game = (
        setting_up.to.itself()
        | previewing.to(setting_up)
        | playing.to(setting_up)
        | ended.to(setting_up)
    )

    def __init__(self, session: GameSession):
        self.session = session
        super().__init__(start_value=session.phase.value)

    def level_selected(self) -> bool:
        return self.session.selected_level is not None

    def sync_phase_to_model(self) -> None:
        self.session.phase = GamePhase(str(self.current_state.value))
