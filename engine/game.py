"""High-level match orchestration: lobby, start and completion."""

from __future__ import annotations

from dataclasses import dataclass, field
from random import Random
from typing import List, Optional

from .deck import HAND_SIZE, deal, shuffled_deck
from .errors import ErrorCode, GameStateError, ResourceExhausted
from .house_rules import HouseRules
from .scoring import MatchScoreResult
from .state import MatchState, MatchStatus, new_match_state

MIN_PLAYERS = 2
MAX_PLAYERS = 10
DEFAULT_MAX_PLAYERS = 4


@dataclass(frozen=True)
class GameConfig:
    is_private: bool = False
    max_players: int = DEFAULT_MAX_PLAYERS
    house_rules: HouseRules = field(default_factory=HouseRules)

    def __post_init__(self) -> None:
        if not MIN_PLAYERS <= self.max_players <= MAX_PLAYERS:
            raise ValueError(f"max_players must be between {MIN_PLAYERS} and {MAX_PLAYERS}.")


@dataclass
class Match:
    """A single UNO match from lobby to final scores."""

    match_id: str
    host_id: str
    config: GameConfig = field(default_factory=GameConfig)
    players: List[str] = field(init=False)
    status: MatchStatus = field(init=False, default=MatchStatus.WAITING)
    deck_seed: Optional[str] = field(init=False, default=None)
    state: Optional[MatchState] = field(init=False, default=None)
    _score_result: Optional[MatchScoreResult] = field(init=False, default=None)

    def __post_init__(self) -> None:
        self.players = [self.host_id]

    def join(self, player_id: str) -> None:
        if self.status is not MatchStatus.WAITING:
            raise GameStateError(ErrorCode.GAME_ALREADY_STARTED, "Match has already started.")
        if player_id in self.players:
            return
        if len(self.players) >= self.config.max_players:
            raise ResourceExhausted(
                ErrorCode.MAX_PLAYERS_REACHED,
                "Match is full.",
                {"maxPlayers": self.config.max_players},
            )
        self.players.append(player_id)

    def start(self, seed: str, *, hand_size: int = HAND_SIZE) -> MatchState:
        if self.status is not MatchStatus.WAITING:
            raise GameStateError(ErrorCode.GAME_ALREADY_STARTED, "Match has already started.")
        if len(self.players) < MIN_PLAYERS:
            raise GameStateError(
                ErrorCode.MIN_PLAYERS_NOT_MET,
                f"Match needs at least {MIN_PLAYERS} players to start.",
                {"players": len(self.players)},
            )
        rng = Random(seed)
        hands, draw_pile = deal(self.players, shuffled_deck(rng=rng), hand_size=hand_size)
        self.state = new_match_state(
            self.players,
            hands,
            draw_pile,
            house_rules=self.config.house_rules,
            rng=rng,
        )
        self.deck_seed = seed
        self.status = MatchStatus.IN_PROGRESS
        return self.state

    def sync_status(self) -> None:
        """Pull the completion status up from the turn state after an action."""
        if self.state is not None and self.state.status is MatchStatus.COMPLETED:
            self.status = MatchStatus.COMPLETED

    def require_state(self) -> MatchState:
        if self.state is None or self.status is MatchStatus.WAITING:
            raise GameStateError(ErrorCode.GAME_NOT_IN_PROGRESS, "Match has not started.")
        return self.state

    def final_scores(self) -> MatchScoreResult:
        if self._score_result is None:
            self._score_result = self.require_state().final_scores()
        return self._score_result

    @property
    def winner(self) -> Optional[str]:
        return self.state.winner if self.state is not None else None
