"""
Custom exception hierarchy for the Fore engine.

Every rejected command raises a subclass of `GameError`. Each carries a
stable `error_code` and whether the caller can recover by refreshing state
and retrying with corrected input. Internal invariant violations are defects
and raise `GameInvariantError`, which sits outside the `GameError` tree.
"""

from __future__ import annotations

from typing import Any, Optional

from fore.money import Money


class GameError(Exception):
    """Base exception for all command rejections."""

    error_code = "GAME_ERROR"
    recoverable = True

    def __init__(self, message: str, *, error_code: Optional[str] = None, recoverable: Optional[bool] = None):
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code
        if recoverable is not None:
            self.recoverable = recoverable


class NotFoundError(GameError):
    """An id is unknown to the session or host. Not recoverable."""

    error_code = "NOT_FOUND"
    recoverable = False


class GameNotFoundError(NotFoundError):
    error_code = "GAME_NOT_FOUND"

    def __init__(self, game_id: Any):
        super().__init__(f"Game not found: {game_id}")
        self.game_id = game_id


class PlayerNotFoundError(NotFoundError):
    error_code = "PLAYER_NOT_FOUND"

    def __init__(self, player_id: Any):
        super().__init__(f"Player not found: {player_id}")
        self.player_id = player_id


class PropertyNotFoundError(NotFoundError):
    error_code = "PROPERTY_NOT_FOUND"

    def __init__(self, property_id: Any):
        super().__init__(f"Property not found: {property_id}")
        self.property_id = property_id


class InvalidGameStatusError(GameError):
    """Command issued while the game is in the wrong lifecycle status."""

    error_code = "INVALID_GAME_STATUS"


class InvalidTurnPhaseError(GameError):
    """Command issued in the wrong phase of the current turn."""

    error_code = "INVALID_TURN_PHASE"


class NotYourTurnError(GameError):
    error_code = "NOT_YOUR_TURN"

    def __init__(self, player_id: Any):
        super().__init__(f"It is not your turn. Player: {player_id}")
        self.player_id = player_id


class InvalidActionError(GameError):
    """An action-specific precondition was violated."""

    error_code = "INVALID_ACTION"


class InvalidPositionError(InvalidActionError):
    error_code = "INVALID_POSITION"

    def __init__(self, position: int):
        super().__init__(f"Invalid tile position: {position}")
        self.position = position


class InsufficientFundsError(GameError):
    error_code = "INSUFFICIENT_FUNDS"

    def __init__(self, available: Money, required: Money, what: str = ""):
        detail = f" for {what}" if what else ""
        super().__init__(f"Insufficient funds{detail}. Available: {available}, Required: {required}")
        self.available = available
        self.required = required


class GameInvariantError(RuntimeError):
    """An internal invariant was violated. The session must be discarded."""
