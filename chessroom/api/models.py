"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from chessroom.chess.fen import is_valid_fen
from chessroom.chess.moves import AppliedMove
from chessroom.chess.square import is_valid_square
from chessroom.core.exceptions import InvalidFENError, InvalidPositionError
from chessroom.core.shared_types import CastlingSide, Color, GameStatus, PieceType

PlayerId = str


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    starting_fen: Optional[str] = None

    @field_validator("starting_fen")
    @classmethod
    def validate_starting_fen(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value

        value = value.strip()
        if not is_valid_fen(value):
            raise InvalidFENError(f"Cannot interpret {value!r} as a FEN string.")
        return value


class JoinGameRequest(BaseModel):
    game_id: UUID
    player_id: PlayerId


class LegalMovesRequest(BaseModel):
    game_id: UUID
    player_id: PlayerId


class MoveRequest(BaseModel):
    game_id: UUID
    player_id: PlayerId
    from_square: str
    to_square: str
    promote_to: Optional[PieceType] = None

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        value = value.strip().lower()
        if not is_valid_square(value):
            raise InvalidPositionError(
                f"Cannot interpret {value!r} as a valid square name."
            )
        return value


class CastleRequest(BaseModel):
    game_id: UUID
    player_id: PlayerId
    side: CastlingSide


class BoardViewRequest(BaseModel):
    game_id: UUID
    viewer: Color = Color.WHITE


class GetGameRequest(BaseModel):
    game_id: UUID


class DrawRequest(BaseModel):
    game_id: UUID


class DeleteGameRequest(BaseModel):
    game_id: UUID


# --- RESPONSE MODELS ---
class AppliedMoveModel(BaseModel):
    """One entry of the move history, as the host renders it."""

    from_square: str
    to_square: str
    piece: PieceType
    color: Color
    promote_to: Optional[PieceType] = None
    is_capture: bool = False
    is_en_passant: bool = False
    is_promotion: bool = False
    is_castle: bool = False
    uci: str

    @classmethod
    def from_applied(cls, applied: AppliedMove) -> "AppliedMoveModel":
        return cls(
            from_square=applied.move.from_square.to_algebraic(),
            to_square=applied.move.to_square.to_algebraic(),
            piece=applied.moving_piece,
            color=applied.color,
            promote_to=applied.move.promote_to,
            is_capture=applied.is_capture,
            is_en_passant=applied.is_en_passant,
            is_promotion=applied.is_promotion,
            is_castle=applied.is_castle,
            uci=applied.move.to_uci(),
        )


class GameResponse(BaseModel):
    game_id: UUID
    players: dict[Color, PlayerId]
    status: GameStatus
    turn: Color
    fen_state: str


class MoveResponse(BaseModel):
    """Outcome of a move command. A rejected move carries the error code instead of the move (and no status if the game is unknown)."""

    game_id: UUID
    accepted: bool
    status: Optional[GameStatus] = None
    move: Optional[AppliedMoveModel] = None
    error: Optional[str] = None
    message: Optional[str] = None


class BoardViewResponse(BaseModel):
    game_id: UUID
    viewer: Color
    squares: list[str]


class StatusResponse(BaseModel):
    game_id: UUID
    status: GameStatus
    turn: Color
    winner: Optional[PlayerId] = None


class HistoryResponse(BaseModel):
    game_id: UUID
    moves: list[AppliedMoveModel]


class LegalMovesResponse(BaseModel):
    game_id: UUID
    player_id: PlayerId
    color: Color
    legal_moves: list[str]
