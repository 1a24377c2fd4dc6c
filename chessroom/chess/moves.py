"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define the pseudo-legal move sets for each piece type.

Legality (not leaving your own king in check) is checked later by the Board.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Self

from chessroom.chess.pieces import FEN_TO_PIECE, PIECE_TO_FEN, Piece
from chessroom.chess.square import BOARD_DIMENSIONS, Square
from chessroom.core.exceptions import InvalidPositionError
from chessroom.core.shared_types import CastlingSide, Color, PieceType


class Board(Protocol):
    """Just the parts the movement strategies need"""

    en_passant_target: Optional[Square]

    def piece_at(self, square: Square) -> Optional[Piece]: ...
    def is_attacked(self, square: Square, by_color: Color) -> bool: ...


Vector = tuple[int, int]

STRAIGHTS: list[Vector] = [(1, 0), (-1, 0), (0, 1), (0, -1)]
DIAGONALS: list[Vector] = [(1, 1), (-1, 1), (1, -1), (-1, -1)]
KNIGHT_DELTAS: list[Vector] = [
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
]
KING_DELTAS: list[Vector] = STRAIGHTS + DIAGONALS


def pawn_direction(color: Color) -> int:
    """White moves UP the board, black moves DOWN"""
    return 1 if color == Color.WHITE else -1


def pawn_home_rank(color: Color) -> int:
    return 1 if color == Color.WHITE else BOARD_DIMENSIONS[1] - 2


def promotion_rank(color: Color) -> int:
    return BOARD_DIMENSIONS[1] - 1 if color == Color.WHITE else 0


@dataclass(frozen=True)
class Move:
    """basic definition of a move to be made"""

    from_square: Square
    to_square: Square
    promote_to: Optional[PieceType] = None

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        Universal Chess Interface:
        ---
        One of the standard chess notations for moves

        examples:
        * "e2e4": move the piece that was on e2 to e4
        * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)
        """
        if len(uci) not in (4, 5):
            raise InvalidPositionError(f"Cannot interpret {uci!r} as a UCI move.")
        from_sq = Square.from_algebraic(uci[:2])
        to_sq = Square.from_algebraic(uci[2:4])
        promote_to = None
        if len(uci) == 5:
            if uci[4] not in FEN_TO_PIECE:
                raise InvalidPositionError(f"Unknown promotion piece in {uci!r}.")
            promote_to = FEN_TO_PIECE[uci[4]]
        return cls(from_sq, to_sq, promote_to)

    def to_uci(self) -> str:
        """Convert into UCI notation"""
        piece_char = PIECE_TO_FEN[self.promote_to] if self.promote_to else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"


@dataclass(frozen=True)
class AppliedMove:
    """A move after the board accepted it, annotated for the history and for rendering."""

    move: Move
    moving_piece: PieceType
    color: Color
    captured_piece: Optional[PieceType] = None
    is_en_passant: bool = False
    is_promotion: bool = False
    castling_side: Optional[CastlingSide] = None

    @property
    def is_capture(self) -> bool:
        return self.captured_piece is not None

    @property
    def is_castle(self) -> bool:
        return self.castling_side is not None


# --- MOVEMENT RULES ---
def _is_opponent(piece: Optional[Piece], color: Color) -> bool:
    return piece is not None and piece.color != color


def raycasting_move(
    square: Square, board: Board, directions: list[Vector]
) -> list[Square]:
    """
    Raycasting algorithm
    -----

    The main trick we use to check the 'line of sight of a piece'.
    We define move directions and move along them until we hit another piece or
    the edge of the board.
    """
    player_color = board.piece_at(square).color

    targets: list[Square] = []
    for df, dr in directions:
        target_square = square
        while True:
            target_square = target_square.offset(df, dr)
            if not target_square.is_within_bounds():
                break

            occupant = board.piece_at(target_square)
            if occupant is not None:
                # only need to add the first occupied square found if it is the opponent's: then it can be captured.
                if occupant.color != player_color:
                    targets.append(target_square)
                break

            targets.append(target_square)
    return targets


def single_step_move(
    square: Square, board: Board, deltas: list[Vector]
) -> list[Square]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just can move a single step along a direction"""
    player_color = board.piece_at(square).color
    targets: list[Square] = []
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if not target_square.is_within_bounds():
            continue

        occupant = board.piece_at(target_square)
        if occupant is None or occupant.color != player_color:
            targets.append(target_square)

    return targets


def candidate_pawn_moves(square: Square, board: Board) -> list[Square]:
    """
    A pawn:
    - moves by a single square forward, onto an empty square.
    - can move by two in their first move (so when on their home rank), if both squares are empty.
    - takes diagonally
    - takes en passant: onto the en passant target, if the pawn beside it just advanced two squares
    """
    color = board.piece_at(square).color
    direction = pawn_direction(color)
    targets: list[Square] = []

    # Pawn pushes
    one_step = square.offset(0, direction)
    if one_step.is_within_bounds() and board.piece_at(one_step) is None:
        targets.append(one_step)
        two_steps = square.offset(0, 2 * direction)
        if square.rank == pawn_home_rank(color) and board.piece_at(two_steps) is None:
            targets.append(two_steps)

    # pawns take diagonally
    for df in (-1, 1):
        target_square = square.offset(df, direction)
        if not target_square.is_within_bounds():
            continue

        if _is_opponent(board.piece_at(target_square), color):
            targets.append(target_square)
        elif target_square == board.en_passant_target:
            # the pawn to be taken stands on the target file, on the same rank as the capturing pawn
            victim = board.piece_at(Square(target_square.file, square.rank))
            if (
                _is_opponent(victim, color)
                and victim.type == PieceType.PAWN
                and victim.en_passant_capturable
            ):
                targets.append(target_square)
    return targets


def candidate_knight_moves(square: Square, board: Board) -> list[Square]:
    """Knights always move such that |delta_rank| + |delta_file| = 3"""
    return single_step_move(square, board, KNIGHT_DELTAS)


def candidate_bishop_moves(square: Square, board: Board) -> list[Square]:
    """Bishops move diagonally: |delta_rank| = |delta_file|"""
    return raycasting_move(square, board, DIAGONALS)


def candidate_rook_moves(square: Square, board: Board) -> list[Square]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(square, board, STRAIGHTS)


def candidate_queen_moves(square: Square, board: Board) -> list[Square]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return candidate_rook_moves(square, board) + candidate_bishop_moves(square, board)


def candidate_king_moves(square: Square, board: Board) -> list[Square]:
    """
    The king can move by a single square at the time, but never onto a square the opponent attacks.

    Castling is modelled separately (see `Board.can_castle`).
    """
    opponent_color = board.piece_at(square).color.opponent
    return [
        target
        for target in single_step_move(square, board, KING_DELTAS)
        if not board.is_attacked(target, opponent_color)
    ]


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Square, Board], list[Square]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


# --- CAPTURING RULES / ATTACKING RULES ---
def raycasting_attack(
    square: Square,
    by_color: Color,
    by_piece_types: tuple[PieceType, ...],
    board: Board,
    directions: list[Vector],
) -> bool:
    """
    Raycasting algorithm for attacks.
    ---

    Where `raycasting_move()` determines
    _"What is the line-of-sight of the piece standing on the specified square?"_

    This function determines:
    _"Is the specified square in the line-of-sight of a piece of the specified color that
    is allowed to move along the given direction?"_

    Returns TRUE if the first piece encountered along a direction is of the given color and one of the given types.
    """
    for df, dr in directions:
        target_square = square
        while True:
            target_square = target_square.offset(df, dr)
            if not target_square.is_within_bounds():
                break

            piece_found = board.piece_at(target_square)
            if piece_found is not None:
                if piece_found.color == by_color and piece_found.type in by_piece_types:
                    return True
                break
    return False


def single_step_attack(
    square: Square,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    deltas: list[Vector],
) -> bool:
    """
    The equivalent of `raycasting_attack()` for pieces that only move a single step along a direction.
    """
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if not target_square.is_within_bounds():
            continue

        piece_found = board.piece_at(target_square)
        if (
            piece_found is not None
            and piece_found.color == by_color
            and piece_found.type == by_piece_type
        ):
            return True

    return False


def is_attacked_by_pawn(square: Square, by_color: Color, board: Board) -> bool:
    """
    Pawns take diagonally
    ----

    NOTE: Pawn moves are not symmetric, so to check IF a white pawn could take on your square -->
    Must look one rank DOWN the board. That is, you are asking "Could a white pawn, that moves UP the board, take on the specified square?"
    """
    backwards = -pawn_direction(by_color)
    return single_step_attack(
        square, by_color, PieceType.PAWN, board, [(1, backwards), (-1, backwards)]
    )


def is_attacked_by_knight(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KNIGHT, board, KNIGHT_DELTAS)


def is_attacked_by_diagonal_slider(
    square: Square, by_color: Color, board: Board
) -> bool:
    """Bishops and queens"""
    return raycasting_attack(
        square, by_color, (PieceType.BISHOP, PieceType.QUEEN), board, DIAGONALS
    )


def is_attacked_by_straight_slider(
    square: Square, by_color: Color, board: Board
) -> bool:
    """Rooks and queens"""
    return raycasting_attack(
        square, by_color, (PieceType.ROOK, PieceType.QUEEN), board, STRAIGHTS
    )


def is_attacked_by_king(square: Square, by_color: Color, board: Board) -> bool:
    """
    Raw adjacency: whether that king could legally go there does not matter for the square being controlled.
    (Also keeps two kings from asking each other about their moves forever.)
    """
    return single_step_attack(square, by_color, PieceType.KING, board, KING_DELTAS)


# --- STRATEGY PATTERN: ATTACKING RULES ---
IsAttackedFn = Callable[[Square, Color, Board], bool]
ATTACK_RULES: tuple[IsAttackedFn, ...] = (
    is_attacked_by_pawn,
    is_attacked_by_knight,
    is_attacked_by_diagonal_slider,
    is_attacked_by_straight_slider,
    is_attacked_by_king,
)
