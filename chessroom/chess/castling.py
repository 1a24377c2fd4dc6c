"""Castling: which squares take part, and which of the four rights are still held"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Self

from chessroom.chess.square import Square
from chessroom.core.shared_types import CastlingSide, Color


class CastlingDirection(Enum):
    """One per color and side. The value is the letter used for the right in FEN."""

    WHITE_KING_SIDE = "K"
    WHITE_QUEEN_SIDE = "Q"
    BLACK_KING_SIDE = "k"
    BLACK_QUEEN_SIDE = "q"

    @classmethod
    def of(cls, color: Color, side: CastlingSide) -> Self:
        return cls[f"{color.name}_{side.name}"]

    @property
    def color(self) -> Color:
        return Color.WHITE if self.value.isupper() else Color.BLACK

    @property
    def side(self) -> CastlingSide:
        return (
            CastlingSide.KING_SIDE
            if self.value.lower() == "k"
            else CastlingSide.QUEEN_SIDE
        )


CASTLING_ORDER: tuple[CastlingDirection, ...] = (
    CastlingDirection.WHITE_KING_SIDE,
    CastlingDirection.WHITE_QUEEN_SIDE,
    CastlingDirection.BLACK_KING_SIDE,
    CastlingDirection.BLACK_QUEEN_SIDE,
)


@dataclass(frozen=True)
class CastlingSquares:
    """
    Where king and rook stand before castling, and where they end up.
    NOTE: A right that was never revoked implies both pieces still stand on their `*_from` squares.
    """

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square

    @classmethod
    def from_algebraic(cls, *squares: str) -> Self:
        """Square names in field order: king from, king to, rook from, rook to"""
        return cls(*(Square.from_algebraic(name) for name in squares))

    def squares_between(self) -> list[Square]:
        """Squares strictly between king and rook. All of them must be empty to castle."""
        low, high = sorted((self.king_from.file, self.rook_from.file))
        return [Square(file, self.king_from.rank) for file in range(low + 1, high)]

    def king_path(self) -> list[Square]:
        """The king's current square, the square it passes through and its destination. None may be attacked."""
        step = 1 if self.king_to.file > self.king_from.file else -1
        return [
            Square(file, self.king_from.rank)
            for file in range(self.king_from.file, self.king_to.file + step, step)
        ]


CASTLING_RULES: dict[CastlingDirection, CastlingSquares] = {
    CastlingDirection.WHITE_KING_SIDE: CastlingSquares.from_algebraic("e1", "g1", "h1", "f1"),
    CastlingDirection.WHITE_QUEEN_SIDE: CastlingSquares.from_algebraic("e1", "c1", "a1", "d1"),
    CastlingDirection.BLACK_KING_SIDE: CastlingSquares.from_algebraic("e8", "g8", "h8", "f8"),
    CastlingDirection.BLACK_QUEEN_SIDE: CastlingSquares.from_algebraic("e8", "c8", "a8", "d8"),
}


def _all_rights() -> dict[CastlingDirection, bool]:
    return {direction: True for direction in CastlingDirection}


@dataclass
class CastlingRights:
    """Four independent rights. Once revoked, a right never comes back."""

    rights: dict[CastlingDirection, bool] = field(default_factory=_all_rights)

    @classmethod
    def from_fen(cls, castle_fen: str) -> Self:
        """parse the part of the FEN string that encodes castling rights"""
        return cls(
            {
                direction: (direction.value in castle_fen)
                for direction in CastlingDirection
            }
        )

    def to_fen(self) -> str:
        """create the part of the FEN string that encodes castling rights"""
        castling_chars = "".join(
            [direction.value for direction in CASTLING_ORDER if self.rights[direction]]
        )
        return castling_chars or "-"

    def has_right(self, color: Color, side: CastlingSide) -> bool:
        return self.rights[CastlingDirection.of(color, side)]

    def has_any(self, color: Color) -> bool:
        return any(self.has_right(color, side) for side in CastlingSide)

    def revoke(self, color: Color, side: CastlingSide) -> None:
        self.rights[CastlingDirection.of(color, side)] = False

    def revoke_all(self, color: Color) -> None:
        for side in CastlingSide:
            self.revoke(color, side)

    def revoke_for_rook_square(self, square: Square) -> None:
        """A rook leaving (or captured on) its corner takes the matching right with it."""
        for direction, rule in CASTLING_RULES.items():
            if rule.rook_from == square:
                self.rights[direction] = False
