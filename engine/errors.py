"""Domain errors shared by the engine, the service layer and the HTTP surface.

Every error carries an ``ErrorCode`` so callers branch on the code rather than
on message text. ``ERROR_STATUS`` maps codes onto the caller-facing status
category used by ``server.play_service``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    # Validation
    INVALID_CARD_INDEX = "INVALID_CARD_INDEX"
    INVALID_REQUEST = "INVALID_REQUEST"
    CARD_NOT_PLAYABLE = "CARD_NOT_PLAYABLE"
    WILD_COLOR_REQUIRED = "WILD_COLOR_REQUIRED"
    INVALID_DRAW_COUNT = "INVALID_DRAW_COUNT"
    MUST_DRAW_CARDS = "MUST_DRAW_CARDS"
    HAND_NOT_EMPTY = "HAND_NOT_EMPTY"
    INVALID_COLOR = "INVALID_COLOR"

    # Game state
    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    GAME_NOT_IN_PROGRESS = "GAME_NOT_IN_PROGRESS"
    GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    NOT_IN_GAME = "NOT_IN_GAME"
    MAX_PLAYERS_REACHED = "MAX_PLAYERS_REACHED"
    MIN_PLAYERS_NOT_MET = "MIN_PLAYERS_NOT_MET"

    # Rule violations
    ILLEGAL_WILD_DRAW_FOUR = "ILLEGAL_WILD_DRAW_FOUR"
    UNO_NOT_ALLOWED = "UNO_NOT_ALLOWED"

    # Resources and concurrency
    DECK_EXHAUSTED = "DECK_EXHAUSTED"
    CONFLICT = "CONFLICT"

    INTERNAL_ERROR = "INTERNAL_ERROR"


ERROR_STATUS: Dict[ErrorCode, str] = {
    ErrorCode.INVALID_CARD_INDEX: "invalid-argument",
    ErrorCode.INVALID_REQUEST: "invalid-argument",
    ErrorCode.CARD_NOT_PLAYABLE: "invalid-argument",
    ErrorCode.WILD_COLOR_REQUIRED: "invalid-argument",
    ErrorCode.INVALID_DRAW_COUNT: "invalid-argument",
    ErrorCode.INVALID_COLOR: "invalid-argument",
    ErrorCode.MUST_DRAW_CARDS: "failed-precondition",
    ErrorCode.HAND_NOT_EMPTY: "failed-precondition",
    ErrorCode.NOT_YOUR_TURN: "failed-precondition",
    ErrorCode.GAME_NOT_IN_PROGRESS: "failed-precondition",
    ErrorCode.GAME_ALREADY_STARTED: "failed-precondition",
    ErrorCode.MIN_PLAYERS_NOT_MET: "failed-precondition",
    ErrorCode.ILLEGAL_WILD_DRAW_FOUR: "failed-precondition",
    ErrorCode.UNO_NOT_ALLOWED: "failed-precondition",
    ErrorCode.GAME_NOT_FOUND: "not-found",
    ErrorCode.PLAYER_NOT_FOUND: "not-found",
    ErrorCode.NOT_IN_GAME: "not-found",
    ErrorCode.MAX_PLAYERS_REACHED: "resource-exhausted",
    ErrorCode.DECK_EXHAUSTED: "resource-exhausted",
    ErrorCode.CONFLICT: "aborted",
    ErrorCode.INTERNAL_ERROR: "internal",
}


class UnoError(RuntimeError):
    """Base class for errors reported back to the acting player."""

    def __init__(self, code: ErrorCode, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = dict(details or {})

    @property
    def status(self) -> str:
        return ERROR_STATUS.get(self.code, "internal")

    def to_response(self) -> Dict[str, Any]:
        response: Dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.details:
            response["details"] = self.details
        return response


class ValidationFailure(UnoError):
    """Malformed action input (bad index, missing color, bad draw count)."""


class GameStateError(UnoError):
    """Match or player missing, or the match is in the wrong status."""


class RuleViolation(UnoError):
    """The action is understood but the rules do not allow it right now."""


class ResourceExhausted(UnoError):
    """Deck or seats ran out."""


class StaleState(UnoError):
    """A commit was attempted against a match version that has since moved."""

    def __init__(self, match_id: str, expected: int, actual: int) -> None:
        super().__init__(
            ErrorCode.CONFLICT,
            "Match changed while the action was being applied.",
            {"matchId": match_id, "expectedVersion": expected, "actualVersion": actual},
        )
