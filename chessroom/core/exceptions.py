"""
Errors raised by the domain and service layers.

All of them are recoverable: a rejected request leaves the game untouched and can simply be retried with other input.
The `code` is what the service layer hands back to the host in a typed response.
"""


class ChessError(Exception):
    """Base class for everything the engine rejects."""

    code: str = "chess_error"


class InvalidPositionError(ChessError):
    """A square name that is not a file letter a-h followed by a rank digit 1-8."""

    code = "invalid_position"


class InvalidFENError(ChessError):
    code = "invalid_fen"


class EmptySquareError(ChessError):
    """Asked for the moves of a piece on a square that holds no piece."""

    code = "empty_square"


class NoPieceAtSourceError(EmptySquareError):
    code = "no_piece_at_source"


class NotYourTurnError(ChessError):
    code = "not_your_turn"


class IllegalMoveError(ChessError):
    code = "illegal_move"


class CannotCaptureOwnPieceError(IllegalMoveError):
    code = "cannot_capture_own_piece"


class PromotionKindRequiredError(IllegalMoveError):
    code = "promotion_kind_required"


class GameStateError(ChessError):
    """Request does not fit the current lifecycle stage of the game (seating, ending, ...)."""

    code = "game_state"


class GameNotActiveError(GameStateError):
    code = "game_not_active"


class UnknownGameError(ChessError):
    code = "unknown_game"
