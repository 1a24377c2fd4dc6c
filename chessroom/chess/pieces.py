"""Defines the chess pieces"""

from dataclasses import dataclass
from typing import Self

from chessroom.core.exceptions import InvalidFENError
from chessroom.core.shared_types import Color, PieceType

FEN_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}

PIECE_TO_FEN: dict[PieceType, str] = {value: key for key, value in FEN_TO_PIECE.items()}

# A pawn can promote into any of these (never into a king, or stay a pawn)
PROMOTION_OPTIONS: tuple[PieceType, ...] = (
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
)


@dataclass
class Piece:
    """
    A piece and the transient state the special rules need.

    * has_moved: set the first time the piece moves. Kings and rooks lose castling rights with it.
    * en_passant_capturable: only ever True for a pawn that just advanced two squares.
    """

    type: PieceType
    color: Color
    has_moved: bool = False
    en_passant_capturable: bool = False

    @classmethod
    def from_fen(cls, character: str) -> Self:
        """Upper case letters are white pieces, lower case black ones"""
        piece_type = FEN_TO_PIECE.get(character.lower())
        if piece_type is None:
            raise InvalidFENError(f"Not a piece character: {character!r}")
        return cls(piece_type, Color.WHITE if character.isupper() else Color.BLACK)

    def to_fen(self) -> str:
        letter = PIECE_TO_FEN[self.type]
        return letter.upper() if self.color == Color.WHITE else letter

    @property
    def symbol(self) -> str:
        """Board rendering uses the same letters as FEN"""
        return self.to_fen()

    def promote_to(self, new_type: PieceType) -> None:
        self.type = new_type
