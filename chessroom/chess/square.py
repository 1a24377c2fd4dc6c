"""
A square on the board

(placed in its own module as multiple other modules need to import it)

Three equivalent representations are used throughout:
* (file, rank) coordinates, both 0-based: (0, 0) is a1, (7, 7) is h8
* an index 0..63, counted rank by rank: index = rank * 8 + file
* the algebraic name, 'a1' - 'h8'
"""

from __future__ import annotations

from dataclasses import dataclass
from string import ascii_lowercase

from chessroom.core.exceptions import InvalidPositionError

# Chess board is always 8x8. Just in case we want to try some funky stuff, make it adjustable
BOARD_DIMENSIONS = (8, 8)
NUM_SQUARES = BOARD_DIMENSIONS[0] * BOARD_DIMENSIONS[1]

FILE_NAMES = ascii_lowercase[: BOARD_DIMENSIONS[0]]


def is_valid_square(square: str) -> bool:
    """Valid square should be a letter for the file + a single digit for the rank"""
    if not isinstance(square, str) or len(square) != 2:
        return False

    file_char, rank_char = square[0], square[1]
    if file_char not in FILE_NAMES:
        return False

    if not rank_char.isdigit():
        return False

    return 1 <= int(rank_char) <= BOARD_DIMENSIONS[1]


def position_to_coordinates(position: str) -> tuple[int, int]:
    """'a1' -> (0, 0), 'h8' -> (7, 7)"""
    if not is_valid_square(position):
        raise InvalidPositionError(
            f"Cannot interpret {position!r} as a square. Expected a file a-h followed by a rank 1-8."
        )
    return FILE_NAMES.index(position[0]), int(position[1]) - 1


def coordinates_to_position(file: int, rank: int) -> str:
    """(0, 0) -> 'a1', (7, 7) -> 'h8'"""
    if not (0 <= file < BOARD_DIMENSIONS[0] and 0 <= rank < BOARD_DIMENSIONS[1]):
        raise InvalidPositionError(f"Coordinates ({file}, {rank}) are off the board.")
    return f"{FILE_NAMES[file]}{rank + 1}"


@dataclass(frozen=True)
class Square:
    file: int
    rank: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (0,0) - (7,7)"""
        file, rank = position_to_coordinates(sq)
        return cls(file, rank)

    @classmethod
    def from_index(cls, index: int) -> Square:
        if not 0 <= index < NUM_SQUARES:
            raise InvalidPositionError(f"Square index {index} is off the board.")
        rank, file = divmod(index, BOARD_DIMENSIONS[0])
        return cls(file, rank)

    @property
    def index(self) -> int:
        return self.rank * BOARD_DIMENSIONS[0] + self.file

    def to_algebraic(self) -> str:
        return coordinates_to_position(self.file, self.rank)

    def is_within_bounds(self) -> bool:
        return (0 <= self.file < BOARD_DIMENSIONS[0]) and (
            0 <= self.rank < BOARD_DIMENSIONS[1]
        )

    def offset(self, df: int, dr: int) -> Square:
        """Square shifted by a (file, rank) vector. May lie off the board, check with `is_within_bounds()`."""
        return Square(self.file + df, self.rank + dr)

    def __str__(self) -> str:
        return self.to_algebraic()


def all_squares() -> list[Square]:
    """Every square on the board, in index order (a1, b1, ..., h8)"""
    return [Square.from_index(index) for index in range(NUM_SQUARES)]
