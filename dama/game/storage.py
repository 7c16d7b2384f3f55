from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from dama import config
from dama.errors import ConfigurationError, IllegalAction

from .engine import (
    Action, ApplyResult, CaptureSequence, GameResult, Position, Reason, Side,
    apply_action, check_game_over, create_initial_position, from_index,
    legal_actions, notation,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameSettings:
    tie_break: str = field(default_factory=lambda: config.TIE_BREAK)
    no_capture_limit: int = field(default_factory=lambda: config.NO_CAPTURE_LIMIT)

    def __post_init__(self):
        if self.tie_break not in config.TIE_BREAK_POLICIES:
            raise ConfigurationError(
                f"unknown tie-break policy {self.tie_break!r}; "
                f"expected one of {', '.join(config.TIE_BREAK_POLICIES)}"
            )
        limit = self.no_capture_limit
        if not isinstance(limit, int) or isinstance(limit, bool) or limit < 0:
            raise ConfigurationError(f"no_capture_limit must be a non-negative int, got {self.no_capture_limit!r}")

    def updated(self, **changes) -> "GameSettings":
        return replace(self, **changes)


@dataclass(frozen=True)
class HistoryEntry:
    side: Side
    fr: int
    action: Action


@dataclass
class GameSession:
    gid: str

    settings: GameSettings = field(default_factory=GameSettings)

    # game state
    position: Position = field(default_factory=create_initial_position)
    turn: Side = Side.A
    result: GameResult = field(default_factory=GameResult)
    no_capture_counter: int = 0
    history: List[HistoryEntry] = field(default_factory=list)

    # selection (click routing lives with the caller, it only reads these)
    selected: Optional[int] = None
    options: List[Action] = field(default_factory=list)

    last_activity: float = field(default_factory=lambda: time.time())

    # where undo replays from
    start_position: Position = field(init=False, repr=False)
    start_turn: Side = field(init=False, repr=False)

    def __post_init__(self):
        self.start_position = self.position
        self.start_turn = self.turn

    def touch(self):
        self.last_activity = time.time()

    @property
    def finished(self) -> bool:
        return self.result.over

    @property
    def winner(self) -> Optional[Side]:
        return self.result.winner

    def legal_actions(self) -> List[Action]:
        if self.finished:
            return []
        return legal_actions(self.position, self.turn, self.settings)

    def select(self, index: int) -> List[Action]:
        """
        Selects the piece on `index` and returns the actions starting from it.

        Anything other than a piece of the side to move clears the selection.
        While a capture exists anywhere for the side, only captures are offered.
        """
        from_index(index)
        self.touch()
        piece = self.position[index]
        if self.finished or piece is None or piece.side is not self.turn:
            self.clear_selection()
            return []
        self.selected = index
        self.options = [a for a in self.legal_actions() if a.fr == index]
        return list(self.options)

    def clear_selection(self):
        self.selected = None
        self.options = []

    def play(self, action: Action) -> ApplyResult:
        if self.finished:
            raise IllegalAction(f"game {self.gid} is finished")
        legal = self.legal_actions()
        if action not in legal:
            if not isinstance(action, CaptureSequence) and legal and isinstance(legal[0], CaptureSequence):
                reason = "capture is mandatory"
            else:
                reason = "not a legal action"
            log.warning("Rejected %s in game %s (%s to move): %s", notation(action), self.gid, self.turn.value, reason)
            raise IllegalAction(f"{notation(action)}: {reason}")

        self.touch()
        res = apply_action(self.position, action)
        self._commit(self.turn, action, res)
        return res

    def play_to(self, fr: int, to: int) -> ApplyResult:
        """Plays the single legal action that starts on `fr` and ends on `to`."""
        matches = [a for a in self.legal_actions() if a.fr == fr and a.to == to]
        if len(matches) != 1:
            what = "no legal action" if not matches else f"{len(matches)} legal actions"
            raise IllegalAction(f"{what} from {fr} to {to}")
        return self.play(matches[0])

    def _commit(self, side: Side, action: Action, res: ApplyResult):
        self._record(side, action, res)
        self.clear_selection()
        log.debug("Game %s: %s played %s", self.gid, side.value, notation(action))
        self._conclude(side)

    def _record(self, side: Side, action: Action, res: ApplyResult):
        self.position = res.position
        self.history.append(HistoryEntry(side, action.fr, action))
        self.no_capture_counter = 0 if res.captured else self.no_capture_counter + 1

    def _conclude(self, side: Side, draw_by_limit: bool = True):
        """Settles the result after `side` moved; hands the turn over unless the game ended."""
        self.result = check_game_over(self.position, side.opponent)
        limit = self.settings.no_capture_limit if draw_by_limit else 0
        if not self.result.over and limit and self.no_capture_counter >= limit:
            self.result = GameResult(True, None, Reason.NO_CAPTURE_LIMIT)

        if self.result.over:
            log.info(
                "Game %s over: winner=%s reason=%s moves=%d",
                self.gid,
                self.result.winner.value if self.result.winner else None,
                self.result.reason.value,
                len(self.history),
            )
            return
        self.turn = side.opponent

    def undo(self) -> Optional[HistoryEntry]:
        """Drops the last action by replaying the rest of the history."""
        if not self.history:
            return None
        *kept, last = self.history
        self._reset(self.start_position, self.start_turn)
        # every kept entry was played in a live game, so only the last one is settled
        # and the no-capture limit waits for the next action
        for entry in kept:
            self._record(entry.side, entry.action, apply_action(self.position, entry.action))
            self.turn = entry.side.opponent
        if kept:
            self._conclude(kept[-1].side, draw_by_limit=False)
        self.touch()
        return last

    def restart(self):
        self._reset(create_initial_position(), Side.A)
        self.start_position = self.position
        self.start_turn = self.turn
        self.touch()

    def update_settings(self, **changes) -> GameSettings:
        self.settings = self.settings.updated(**changes)
        return self.settings

    def _reset(self, position: Position, turn: Side):
        self.position = position
        self.turn = turn
        self.result = GameResult()
        self.no_capture_counter = 0
        self.history = []
        self.clear_selection()


class MemoryStore:
    def __init__(self):
        self.games: Dict[str, GameSession] = {}

    def new_gid(self) -> str:
        while True:
            gid = secrets.token_hex(3)  # 6 chars
            if gid not in self.games:
                return gid


STORE = MemoryStore()


def create_game(settings: Optional[GameSettings] = None, store: MemoryStore = STORE) -> GameSession:
    gs = GameSession(gid=store.new_gid(), settings=settings or GameSettings())
    store.games[gs.gid] = gs
    log.info("Game %s created (tie_break=%s)", gs.gid, gs.settings.tie_break)
    return gs


def get_game(gid: str, store: MemoryStore = STORE) -> Optional[GameSession]:
    return store.games.get(gid)


def end_game(gid: str, store: MemoryStore = STORE) -> Optional[GameSession]:
    return store.games.pop(gid, None)
