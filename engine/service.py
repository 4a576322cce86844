"""Service layer for the HTTP surface and tests.

Every action follows the same commit protocol: load a private copy of the
match at a known version, run the engine on it, then write it back only if the
stored version has not moved. A stale commit is retried from a fresh load.
"""

from __future__ import annotations

import copy
import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple, TypeVar

from .cards import Color, card_label, serialize_card
from .errors import ErrorCode, GameStateError, StaleState
from .game import GameConfig, Match
from .metrics import NullRecorder, PerfRecorder
from .rules_schema import MatchRecord
from .state import MatchStatus

logger = logging.getLogger(__name__)

COMMIT_RETRIES = 3

T = TypeVar("T")


@dataclass
class _Entry:
    match: Match
    version: int
    lock: threading.Lock


class MatchStore:
    """In-memory versioned match storage."""

    def __init__(self) -> None:
        self._entries: Dict[str, _Entry] = {}
        self._guard = threading.Lock()

    def insert(self, match: Match) -> int:
        with self._guard:
            if match.match_id in self._entries:
                raise ValueError(f"Match {match.match_id} already exists.")
            self._entries[match.match_id] = _Entry(copy.deepcopy(match), 0, threading.Lock())
        return 0

    def load(self, match_id: str) -> Tuple[Match, int]:
        entry = self._entry(match_id)
        with entry.lock:
            return copy.deepcopy(entry.match), entry.version

    def commit(self, match_id: str, match: Match, expected_version: int) -> int:
        entry = self._entry(match_id)
        with entry.lock:
            if entry.version != expected_version:
                raise StaleState(match_id, expected_version, entry.version)
            entry.match = copy.deepcopy(match)
            entry.version += 1
            return entry.version

    def version(self, match_id: str) -> int:
        return self._entry(match_id).version

    def _entry(self, match_id: str) -> _Entry:
        with self._guard:
            entry = self._entries.get(match_id)
        if entry is None:
            raise GameStateError(ErrorCode.GAME_NOT_FOUND, f"Match {match_id} not found.", {"matchId": match_id})
        return entry


@dataclass
class PlayerView:
    player_id: str
    card_count: int
    has_called_uno: bool
    must_call_uno: bool
    is_current: bool


@dataclass
class ScoreView:
    player_id: str
    rank: int
    card_count: int
    hand_points: int
    score: int


@dataclass
class MatchView:
    match_id: str
    status: str
    version: int
    players: list[PlayerView]
    house_rules: list[str]
    max_players: int
    current_player: Optional[str]
    direction: Optional[str]
    current_color: Optional[str]
    must_draw: int
    top_card: Optional[dict]
    top_card_label: Optional[str]
    draw_pile_count: int
    hand: list[dict]
    hand_labels: list[str]
    playable: list[int]
    winner: Optional[str]
    final_scores: Optional[list[ScoreView]]
    record: Optional[dict]


class MatchService:
    """Facade running engine actions against a ``MatchStore``."""

    def __init__(
        self,
        store: Optional[MatchStore] = None,
        *,
        recorder: Optional[PerfRecorder] = None,
        retries: int = COMMIT_RETRIES,
        seed_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ) -> None:
        if retries < 1:
            raise ValueError("retries must be at least 1.")
        self.store = store or MatchStore()
        self.recorder = recorder or NullRecorder()
        self.retries = retries
        self.seed_factory = seed_factory

    # Lobby -------------------------------------------------------------

    def create_match(self, host_id: str, config: Optional[GameConfig] = None) -> str:
        match_id = uuid.uuid4().hex
        self.store.insert(Match(match_id=match_id, host_id=host_id, config=config or GameConfig()))
        logger.info("Created match %s for host %s", match_id, host_id)
        return match_id

    def join_match(self, match_id: str, player_id: str) -> MatchView:
        self._transact(match_id, "join", lambda match: match.join(player_id))
        return self.get_match_view(match_id, player_id)

    def start_match(self, match_id: str, seed: Optional[str] = None) -> MatchView:
        deck_seed = seed or self.seed_factory()
        match = self._transact(match_id, "start", lambda match: match.start(deck_seed))
        logger.info("Started match %s with %d players", match_id, len(match.players))
        return self.get_match_view(match_id, match.host_id)

    # Turn actions ------------------------------------------------------

    def play_card(self, match_id: str, player_id: str, card_index: int, chosen_color: Optional[Color] = None) -> MatchView:
        self._transact(
            match_id,
            "play",
            lambda match: match.require_state().play_card(player_id, card_index, chosen_color),
        )
        return self.get_match_view(match_id, player_id)

    def draw_cards(self, match_id: str, player_id: str, count: int = 1) -> MatchView:
        self._transact(match_id, "draw", lambda match: match.require_state().draw_cards(player_id, count))
        return self.get_match_view(match_id, player_id)

    def pass_turn(self, match_id: str, player_id: str) -> MatchView:
        self._transact(match_id, "pass", lambda match: match.require_state().pass_turn(player_id))
        return self.get_match_view(match_id, player_id)

    def call_uno(self, match_id: str, player_id: str) -> MatchView:
        self._transact(match_id, "uno", lambda match: match.require_state().call_uno(player_id))
        return self.get_match_view(match_id, player_id)

    # Views -------------------------------------------------------------

    def get_match_view(self, match_id: str, perspective: Optional[str] = None) -> MatchView:
        match, version = self.store.load(match_id)
        state = match.state
        if perspective is not None and perspective not in match.players:
            raise GameStateError(ErrorCode.NOT_IN_GAME, f"Player {perspective} is not in this match.")

        players = [
            PlayerView(
                player_id=player,
                card_count=len(state.hands[player]) if state else 0,
                has_called_uno=state.has_called_uno[player] if state else False,
                must_call_uno=state.must_call_uno[player] if state else False,
                is_current=state is not None and state.current_player_id == player,
            )
            for player in match.players
        ]

        hand = list(state.hands[perspective]) if state is not None and perspective is not None else []
        playable = state.playable_indices(perspective) if state is not None and perspective is not None else []

        final_scores: Optional[list[ScoreView]] = None
        if match.status is MatchStatus.COMPLETED:
            result = match.final_scores()
            final_scores = [
                ScoreView(
                    player_id=entry.player_id,
                    rank=entry.rank,
                    card_count=entry.card_count,
                    hand_points=entry.hand_points,
                    score=entry.score,
                )
                for entry in result.rankings
            ]

        return MatchView(
            match_id=match.match_id,
            status=match.status.value,
            version=version,
            players=players,
            house_rules=match.config.house_rules.names(),
            max_players=match.config.max_players,
            current_player=state.current_player_id if state else None,
            direction=state.direction.value if state else None,
            current_color=state.current_color.value if state and state.current_color else None,
            must_draw=state.must_draw if state else 0,
            top_card=serialize_card(state.top_card) if state else None,
            top_card_label=card_label(state.top_card) if state else None,
            draw_pile_count=len(state.draw_pile) if state else 0,
            hand=[serialize_card(card) for card in hand],
            hand_labels=[card_label(card) for card in hand],
            playable=playable,
            winner=match.winner,
            final_scores=final_scores,
            record=MatchRecord.from_state(state).model_dump(by_alias=True) if state else None,
        )

    # Helpers -----------------------------------------------------------

    def _transact(self, match_id: str, label: str, action: Callable[[Match], T]) -> Match:
        last_error: Optional[StaleState] = None
        for attempt in range(1, self.retries + 1):
            match, version = self.store.load(match_id)
            with self.recorder.timer(label):
                action(match)
                match.sync_status()
            try:
                new_version = self.store.commit(match_id, match, version)
            except StaleState as exc:
                logger.warning("Stale commit on match %s (%s), attempt %d/%d", match_id, label, attempt, self.retries)
                last_error = exc
                continue
            logger.debug("Committed %s on match %s at version %d", label, match_id, new_version)
            if match.status is MatchStatus.COMPLETED and label == "play":
                logger.info("Match %s won by %s", match_id, match.winner)
            return match
        assert last_error is not None
        raise last_error
