"""
FEN parsing and validation. Used to set up a board in an arbitrary position (and to export the current one).

FEN, or Forsyth-Edwards Notation, is a standard notation for describing a particular board position of a chess game.

<board position string> <active color> <castling rights> <en passant square> <# half move clock> <number turns played>

* The board position lists the ranks from the 8th down to the 1st, separated by slashes.
  Letters are pieces (upper case white, lower case black), digits count consecutive empty squares.
* The active color is either "w" or "b"
* Castling rights: "K"/"Q" for white king/queen side, "k"/"q" for black, "-" if all rights have been revoked.
* The en passant square indicates the square a pawn can take on. If not available a "-" is used.
* The half move clock counts moves since the last pawn move or capture, the turn number goes up after black moves.

ex) The standard starting position has a FEN
rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1
"""

from dataclasses import dataclass
from typing import Optional, Self

from chessroom.chess.castling import CastlingRights
from chessroom.chess.pieces import FEN_TO_PIECE
from chessroom.chess.square import BOARD_DIMENSIONS, Square, is_valid_square
from chessroom.core.exceptions import InvalidFENError
from chessroom.core.shared_types import Color

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
VALID_CASTLING_CHARACTERS = "KQkq"
COLOR_CODES: dict[str, Color] = {"w": Color.WHITE, "b": Color.BLACK}
NUM_FEN_FIELDS = 6


def is_valid_fen(fen: str) -> bool:
    """
    Check if given string follows proper FEN notation.

    The placement alone is accepted too, the remaining fields then take their defaults.
    """
    fields = fen.split(" ")
    if len(fields) not in (1, NUM_FEN_FIELDS):
        return False
    if len(fields) == 1:
        return is_valid_position(fields[0]) and is_valid_setup(fields[0])

    position, color, castling, en_passant, half_moves, full_moves = fields
    return (
        is_valid_position(position)
        and is_valid_setup(position)
        and is_valid_color_code(color)
        and is_valid_castling_rights(castling)
        and is_valid_en_passant(en_passant)
        and is_valid_move_counter(half_moves)
        and is_valid_move_counter(full_moves)
    )


def _rank_width(rank_fen: str) -> Optional[int]:
    """Number of squares a single rank describes, None if it holds an unknown character"""
    width = 0
    for character in rank_fen:
        if character.isdigit():
            width += int(character)
        elif character.lower() in FEN_TO_PIECE:
            width += 1
        else:
            return None
    return width


def is_valid_position(position: str) -> bool:
    """Only check the part of the FEN encoding for the board position: 8 ranks of 8 squares each."""
    num_files, num_ranks = BOARD_DIMENSIONS
    ranks = position.split("/")
    return len(ranks) == num_ranks and all(
        _rank_width(rank_fen) == num_files for rank_fen in ranks
    )


def is_valid_setup(position: str) -> bool:
    """
    A well formed placement can still be impossible to play from:
    * each side needs exactly one king
    * a pawn never stands on the 1st or 8th rank (it promotes on arrival)
    """
    ranks = position.split("/")
    placement = "".join(ranks)
    if placement.count("K") != 1 or placement.count("k") != 1:
        return False
    return not any(character in "Pp" for character in ranks[0] + ranks[-1])


def is_valid_color_code(color: str) -> bool:
    return color in COLOR_CODES


def is_valid_castling_rights(castling: str) -> bool:
    """Either '-' or a subset of 'KQkq', written in that order."""
    if castling == "-":
        return True
    if not castling or len(set(castling)) != len(castling):
        return False
    if not all(character in VALID_CASTLING_CHARACTERS for character in castling):
        return False
    order = [VALID_CASTLING_CHARACTERS.index(character) for character in castling]
    return order == sorted(order)


def is_valid_en_passant(en_passant: str) -> bool:
    """A square on the 3rd or 6th rank (the one a pawn just skipped), or '-'"""
    if en_passant == "-":
        return True
    return is_valid_square(en_passant) and en_passant[1] in {"3", "6"}


def is_valid_move_counter(counter: str) -> bool:
    return counter.isdigit()


@dataclass
class FENState:
    """Everything a FEN string describes, parsed."""

    position: str
    color_to_move: Color
    castling_rights: CastlingRights
    en_passant_square: Optional[Square]
    half_move_clock: int
    num_turns: int

    @classmethod
    def from_fen(cls, fen: str) -> Self:
        if not is_valid_fen(fen):
            raise InvalidFENError(f"Cannot interpret supplied string as FEN: {fen}")

        fields = fen.split(" ")
        if len(fields) == 1:
            # placement only: white to move, no castling, no en passant
            return cls(fields[0], Color.WHITE, CastlingRights.from_fen("-"), None, 0, 1)

        position, color_code, castling, en_passant, half_moves, full_moves = fields
        return cls(
            position=position,
            color_to_move=COLOR_CODES[color_code],
            castling_rights=CastlingRights.from_fen(castling),
            en_passant_square=(
                None if en_passant == "-" else Square.from_algebraic(en_passant)
            ),
            half_move_clock=int(half_moves),
            num_turns=int(full_moves),
        )

    def to_fen(self) -> str:
        """reverse operation: write a FEN from the given data"""
        color_code = next(
            code for code, color in COLOR_CODES.items() if color == self.color_to_move
        )
        en_passant = (
            "-" if self.en_passant_square is None else self.en_passant_square.to_algebraic()
        )
        fields = [
            self.position,
            color_code,
            self.castling_rights.to_fen(),
            en_passant,
            str(self.half_move_clock),
            str(self.num_turns),
        ]
        return " ".join(fields)
