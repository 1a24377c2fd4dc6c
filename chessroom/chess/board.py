"""The Game board implements all rules that effect the `position` (in chess: the configuration of pieces on the board)"""

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Optional, Self

from chessroom.chess.castling import (
    CASTLING_RULES,
    CastlingDirection,
    CastlingRights,
    CastlingSquares,
)
from chessroom.chess.fen import STARTING_FEN, FENState
from chessroom.chess.moves import (
    ATTACK_RULES,
    MOVEMENT_RULES,
    AppliedMove,
    CandidateMovesFn,
    Move,
    pawn_direction,
    promotion_rank,
)
from chessroom.chess.pieces import PROMOTION_OPTIONS, Piece
from chessroom.chess.square import BOARD_DIMENSIONS, Square, all_squares
from chessroom.core.exceptions import (
    EmptySquareError,
    IllegalMoveError,
    NoPieceAtSourceError,
    PromotionKindRequiredError,
)
from chessroom.core.shared_types import CastlingSide, Color, PieceType

EMPTY_SQUARE_SYMBOL = "."


def _empty_position() -> dict[Square, Optional[Piece]]:
    return {square: None for square in all_squares()}


@dataclass
class Board:
    position: dict[Square, Optional[Piece]] = field(default_factory=_empty_position)
    castling_rights: CastlingRights = field(default_factory=CastlingRights)
    en_passant_target: Optional[Square] = None
    empty_symbol: str = EMPTY_SQUARE_SYMBOL

    # -- CREATION LOGIC ---
    @classmethod
    def starting_position(cls, empty_symbol: str = EMPTY_SQUARE_SYMBOL) -> Self:
        return cls.from_fen(STARTING_FEN, empty_symbol=empty_symbol)

    @classmethod
    def empty(cls, empty_symbol: str = EMPTY_SQUARE_SYMBOL) -> Self:
        """No pieces and no castling rights. Handy to set up a position piece by piece."""
        return cls(
            castling_rights=CastlingRights.from_fen("-"), empty_symbol=empty_symbol
        )

    @classmethod
    def from_fen(cls, fen_str: str, empty_symbol: str = EMPTY_SQUARE_SYMBOL) -> Self:
        """Construct a board using a given FEN string (full FEN, or only the part denoting the board position).

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank, starting with rook on a8, knight on b8, etc.
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank are the white pieces.
        """
        state = FENState.from_fen(fen_str)
        position = _empty_position()
        for rank_idx, fen_one_rank in enumerate(state.position.split("/")):
            # FEN string is read from top rank (8th) to bottom rank (1st)
            rank = BOARD_DIMENSIONS[1] - 1 - rank_idx
            # ... but the first character is the a-file, so reads in normal direction
            file = 0
            for character in fen_one_rank:
                if character.isalpha():
                    position[Square(file, rank)] = Piece.from_fen(character)
                    file += 1
                else:
                    # A number denotes the amount of empty squares after each other
                    file += int(character)

        board = cls(position, state.castling_rights, None, empty_symbol)
        if state.en_passant_square is not None:
            board._restore_en_passant(state.en_passant_square)
        return board

    def _restore_en_passant(self, target: Square) -> None:
        """The pawn that skipped over the target stands one rank further (seen from its own side)."""
        # a target on the 6th rank was left behind by a black pawn, on the 3rd rank by a white one
        color = Color.BLACK if target.rank >= BOARD_DIMENSIONS[1] // 2 else Color.WHITE
        pawn = self.piece_at(target.offset(0, pawn_direction(color)))
        if pawn == Piece(PieceType.PAWN, color):
            pawn.en_passant_capturable = True
            self.en_passant_target = target

    def placement_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(
            self._rank_to_fen(rank) for rank in range(BOARD_DIMENSIONS[1] - 1, -1, -1)
        )

    def _rank_to_fen(self, rank: int) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for file in range(BOARD_DIMENSIONS[0]):
            piece = self.piece_at(Square(file, rank))

            if piece is not None:
                if empty_count > 0:
                    fen_characters.append(str(empty_count))
                    empty_count = 0
                fen_characters.append(piece.to_fen())
            else:
                empty_count += 1

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    def to_fen(
        self, color_to_move: Color, half_move_clock: int = 0, num_turns: int = 1
    ) -> str:
        """The board knows everything but whose turn it is and the counters."""
        state = FENState(
            self.placement_fen(),
            color_to_move,
            self.castling_rights,
            self.en_passant_target,
            half_move_clock,
            num_turns,
        )
        return state.to_fen()

    def copy(self) -> Self:
        return deepcopy(self)

    # -- QUERIES ---
    def piece_at(self, square: Square) -> Optional[Piece]:
        return self.position[square]

    def place_piece(self, piece: Piece, square: Square) -> None:
        """Set up helper. Regular play goes through `apply_move()` / `castle()`."""
        self.position[square] = piece

    def remove_piece(self, square: Square) -> None:
        self.position[square] = None

    def locate_color(self, color: Color) -> list[Square]:
        return [
            square
            for square, piece in self.position.items()
            if piece is not None and piece.color == color
        ]

    def locate_king(self, color: Color) -> Optional[Square]:
        return next(
            (
                square
                for square, piece in self.position.items()
                if piece is not None
                and piece.color == color
                and piece.type == PieceType.KING
            ),
            None,
        )

    def pseudo_legal_moves(self, square: Square) -> list[Square]:
        """
        Every square the piece can reach following its movement rule,
        ignoring whether that leaves its own king in check.
        """
        piece = self.piece_at(square)
        if piece is None:
            raise EmptySquareError(f"There is no piece on {square}.")
        movement_rule: CandidateMovesFn = MOVEMENT_RULES[piece.type]
        return movement_rule(square, self)

    def is_attacked(self, square: Square, by_color: Color) -> bool:
        """Could any piece of `by_color` take on this square (if there was something to take)?"""
        return any(rule(square, by_color, self) for rule in ATTACK_RULES)

    def is_king_in_check(self, color: Color) -> bool:
        king_square = self.locate_king(color)
        if king_square is None:
            return False
        return self.is_attacked(king_square, color.opponent)

    def legal_moves(self, square: Square) -> list[Square]:
        """
        Pseudo-legal moves, keeping only those that do not leave the mover's own king in check.

        The same filter applies to every piece (the king included): a pinned piece has no legal moves off the pin line.
        """
        return [
            target
            for target in self.pseudo_legal_moves(square)
            if not self._leaves_king_in_check(square, target)
        ]

    def all_legal_moves(self, color: Color) -> dict[Square, list[Square]]:
        """Legal moves of every piece of the given color that has at least one."""
        moves_per_square = {
            square: self.legal_moves(square) for square in self.locate_color(color)
        }
        return {square: targets for square, targets in moves_per_square.items() if targets}

    def has_legal_move(self, color: Color) -> bool:
        return any(self.legal_moves(square) for square in self.locate_color(color))

    def is_promotion_move(self, from_square: Square, to_square: Square) -> bool:
        piece = self.piece_at(from_square)
        return (
            piece is not None
            and piece.type == PieceType.PAWN
            and to_square.rank == promotion_rank(piece.color)
        )

    def _leaves_king_in_check(self, from_square: Square, to_square: Square) -> bool:
        """
        plan:
        1. Copy the board
        2. make the candidate move
        3. determine if king is in check on the new board
        """
        color = self.piece_at(from_square).color
        board = self.copy()
        board._relocate(from_square, to_square)
        return board.is_king_in_check(color)

    # -- CASTLING ---
    def can_castle(self, color: Color, side: CastlingSide) -> bool:
        """
        **you are allowed to castle if**

        * Castling rights are not yet revoked (king and rook never moved, rook never got captured).
        * All squares in between king and rook are empty.
        * The king is not in check, does not pass through an attacked square and does not land on one.
        """
        if not self.castling_rights.has_right(color, side):
            return False

        rule = self._castling_rule(color, side)
        king = self.piece_at(rule.king_from)
        rook = self.piece_at(rule.rook_from)
        if king is None or (king.type, king.color) != (PieceType.KING, color):
            return False
        if rook is None or (rook.type, rook.color) != (PieceType.ROOK, color):
            return False

        if any(self.piece_at(square) is not None for square in rule.squares_between()):
            return False

        opponent_color = color.opponent
        return not any(
            self.is_attacked(square, opponent_color) for square in rule.king_path()
        )

    def castle(self, color: Color, side: CastlingSide) -> AppliedMove:
        """Move both the King and the Rook in one step"""
        if not self.can_castle(color, side):
            raise IllegalMoveError(f"{color} cannot castle {side} side right now.")

        rule = self._castling_rule(color, side)
        self._clear_en_passant_flags(color)
        self._relocate(rule.king_from, rule.king_to)
        self._relocate(rule.rook_from, rule.rook_to)
        self.castling_rights.revoke_all(color)
        self.en_passant_target = None
        return AppliedMove(
            move=Move(rule.king_from, rule.king_to),
            moving_piece=PieceType.KING,
            color=color,
            castling_side=side,
        )

    def _castling_rule(self, color: Color, side: CastlingSide) -> CastlingSquares:
        return CASTLING_RULES[CastlingDirection.of(color, side)]

    # -- MUTATION ---
    def apply_move(self, move: Move) -> AppliedMove:
        """
        Update the position on the board.
        ----

        Everything that can go wrong is checked before the first change is made.

        1. clear the en passant flag of the mover's pawns (the chance to take them has passed)
        2. move the piece, taking the en passant victim from its actual square if needed
        3. promote
        4. revoke castling rights
        5. set / clear the en passant target
        """
        piece = self.piece_at(move.from_square)
        if piece is None:
            raise NoPieceAtSourceError(f"There is no piece on {move.from_square}.")

        is_promotion = self.is_promotion_move(move.from_square, move.to_square)
        if is_promotion:
            if move.promote_to is None:
                raise PromotionKindRequiredError(
                    f"Pawn reaching {move.to_square} must promote. Choose one of {', '.join(PROMOTION_OPTIONS)}."
                )
            if move.promote_to not in PROMOTION_OPTIONS:
                raise IllegalMoveError(f"A pawn cannot promote to a {move.promote_to}.")

        moving_type = piece.type
        self._clear_en_passant_flags(piece.color)
        captured, is_en_passant = self._relocate(move.from_square, move.to_square)

        if is_promotion:
            piece.promote_to(move.promote_to)

        self._revoke_castling_rights_if_needed(move, moving_type, piece.color)
        self._update_en_passant_target(move, moving_type, piece)

        return AppliedMove(
            move=Move(
                move.from_square,
                move.to_square,
                move.promote_to if is_promotion else None,
            ),
            moving_piece=moving_type,
            color=piece.color,
            captured_piece=captured.type if captured else None,
            is_en_passant=is_en_passant,
            is_promotion=is_promotion,
        )

    def _relocate(
        self, from_square: Square, to_square: Square
    ) -> tuple[Optional[Piece], bool]:
        """Move the piece without any rule checks. Returns the captured piece (if any) and whether it was taken en passant."""
        piece = self.position[from_square]
        is_en_passant = (
            piece.type == PieceType.PAWN
            and from_square.file != to_square.file
            and self.position[to_square] is None
            and to_square == self.en_passant_target
        )
        # NOTE: en passant takes the pawn standing beside the moving pawn, not the one on the target square
        captured_square = (
            Square(to_square.file, from_square.rank) if is_en_passant else to_square
        )
        captured = self.position[captured_square]
        self.position[captured_square] = None
        self.position[from_square] = None
        self.position[to_square] = piece
        piece.has_moved = True
        return captured, is_en_passant

    def _clear_en_passant_flags(self, color: Color) -> None:
        for square in self.locate_color(color):
            self.position[square].en_passant_capturable = False

    def _revoke_castling_rights_if_needed(
        self, move: Move, moving_type: PieceType, color: Color
    ) -> None:
        """
        1. If you are moving your king --> revoke both
        2. A move from a rook's corner (the rook moved) or onto it (the rook got taken) --> revoke that right
        """
        if moving_type == PieceType.KING:
            self.castling_rights.revoke_all(color)
        self.castling_rights.revoke_for_rook_square(move.from_square)
        self.castling_rights.revoke_for_rook_square(move.to_square)

    def _update_en_passant_target(
        self, move: Move, moving_type: PieceType, piece: Piece
    ) -> None:
        """A two square pawn advance makes the skipped square the new target. Any other move clears it."""
        ranks_moved = abs(move.to_square.rank - move.from_square.rank)
        if moving_type == PieceType.PAWN and ranks_moved == 2:
            self.en_passant_target = move.from_square.offset(
                0, pawn_direction(piece.color)
            )
            piece.en_passant_capturable = True
        else:
            self.en_passant_target = None

    # -- RENDERING ---
    def get_distribution(self) -> list[str]:
        """Rank-major snapshot of the 64 squares: 8th rank first, a-file to h-file within a rank."""
        distribution: list[str] = []
        for rank in range(BOARD_DIMENSIONS[1] - 1, -1, -1):
            for file in range(BOARD_DIMENSIONS[0]):
                piece = self.piece_at(Square(file, rank))
                distribution.append(piece.symbol if piece else self.empty_symbol)
        return distribution
