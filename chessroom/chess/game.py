"""
The GameController is the entrypoint into the domain layer for the service layer.
It is responsible for orchestrating everything required to play a turn:
seating the players, checking whose turn it is, validating the move against the Board, recording it and
deciding whether the game has ended.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol, Self

from chessroom.chess.board import EMPTY_SQUARE_SYMBOL, Board
from chessroom.chess.fen import STARTING_FEN, FENState
from chessroom.chess.moves import AppliedMove, Move
from chessroom.chess.pieces import PROMOTION_OPTIONS
from chessroom.chess.square import BOARD_DIMENSIONS, Square
from chessroom.core.exceptions import (
    CannotCaptureOwnPieceError,
    GameNotActiveError,
    GameStateError,
    IllegalMoveError,
    NoPieceAtSourceError,
    NotYourTurnError,
)
from chessroom.core.shared_types import CastlingSide, Color, GameStatus, PieceType

logger = logging.getLogger(__name__)

# Opaque to the engine: the host decides what identifies a player.
PlayerId = str

# Fifty moves by each side without a pawn move or a capture, counted in half-moves
HALF_MOVE_DRAW_LIMIT = 100
REPETITION_DRAW_COUNT = 3


class GameObserver(Protocol):
    """Where the host wants to hear about accepted moves and the end of the game."""

    def board_updated(self, move: AppliedMove, distribution: list[str]) -> None: ...

    def game_over(self, status: GameStatus, winner: Optional[PlayerId]) -> None: ...


def flip_for_viewer(distribution: list[str], viewer: Color) -> list[str]:
    """Black sees the board from the other side: the ranks are listed in reverse order."""
    if viewer == Color.WHITE:
        return list(distribution)
    num_files = BOARD_DIMENSIONS[0]
    rows = [
        distribution[start : start + num_files]
        for start in range(0, len(distribution), num_files)
    ]
    return [symbol for row in reversed(rows) for symbol in row]


@dataclass
class GameController:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    board: Board
    status: GameStatus = GameStatus.PREPARED
    turn: Color = Color.WHITE
    players: dict[Color, PlayerId] = field(default_factory=dict)
    history: list[AppliedMove] = field(default_factory=list)
    observer: Optional[GameObserver] = None
    first_to_move: Color = Color.WHITE
    half_move_clock: int = 0
    full_move_number: int = 1
    # every position reached (incl. the starting one), keyed without the move counters
    positions: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.positions:
            self.positions.append(self._position_key())

    @classmethod
    def new_game(
        cls,
        starting_fen: Optional[str] = None,
        observer: Optional[GameObserver] = None,
        empty_symbol: str = EMPTY_SQUARE_SYMBOL,
    ) -> Self:
        """A prepared game: board set up (standard layout unless a FEN is given), no players seated yet."""
        fen = starting_fen if starting_fen is not None else STARTING_FEN
        state = FENState.from_fen(fen)
        return cls(
            board=Board.from_fen(fen, empty_symbol=empty_symbol),
            turn=state.color_to_move,
            observer=observer,
            first_to_move=state.color_to_move,
            half_move_clock=state.half_move_clock,
            full_move_number=state.num_turns,
        )

    @property
    def winner(self) -> Optional[PlayerId]:
        """
        Only checkmate has a winner.
        Given we know it is checkmate, the player who is requested to move just got mated and the opponent must be the winner
        """
        if self.status != GameStatus.CHECKMATE:
            return None
        return self.players.get(self.turn.opponent)

    def seat_player(self, player: PlayerId) -> Color:
        """First player to join plays white, the second one black. Seating the second player starts the game."""
        if self.status != GameStatus.PREPARED:
            raise GameStateError(
                f"Cannot join this game. Game is not accepting new players. status: {self.status}"
            )
        if player in self.players.values():
            raise GameStateError(f"Player {player} is already seated in this game.")

        color = Color.WHITE if Color.WHITE not in self.players else Color.BLACK
        self.players[color] = player
        logger.info("Player %s seated as %s", player, color)

        if len(self.players) == 2:
            self.turn = self.first_to_move
            self._change_status(GameStatus.ACTIVE)
            # a position set up from FEN may already be over
            self._update_game_status()
            if self.status.is_terminal:
                self._notify_game_over()
        return color

    def color_of(self, player: PlayerId) -> Optional[Color]:
        return next(
            (color for color, name in self.players.items() if name == player), None
        )

    def legal_moves(self, player: PlayerId) -> list[str]:
        """
        Legal moves of the player to move, in UCI notation.
        ----

        A pawn push to the last rank shows up once for every piece type it can promote into.
        Castling is requested separately (see `offer_castle()`), so it is not listed here.
        """
        self._assert_active()
        self._assert_your_turn(player)

        moves: list[str] = []
        for from_square, targets in self.board.all_legal_moves(self.turn).items():
            for to_square in targets:
                if self.board.is_promotion_move(from_square, to_square):
                    moves.extend(
                        Move(from_square, to_square, piece_type).to_uci()
                        for piece_type in PROMOTION_OPTIONS
                    )
                else:
                    moves.append(Move(from_square, to_square).to_uci())
        return moves

    def submit_move(
        self,
        player: PlayerId,
        from_position: str,
        to_position: str,
        promotion: Optional[PieceType] = None,
    ) -> AppliedMove:
        """
        Attempt to make a move
        -----

        1. the game must be in progress and it must be your turn
        2. the move must be one of the legal moves of your piece on the starting square
        3. update the board
        4. update the history, pass the turn, update game status (if needed)

        Nothing changes unless every check passed.
        """
        self._assert_active()
        self._assert_your_turn(player)

        from_square = Square.from_algebraic(from_position)
        to_square = Square.from_algebraic(to_position)
        if from_square == to_square:
            raise IllegalMoveError(f"A move must leave its square: {from_position}.")

        piece = self.board.piece_at(from_square)
        if piece is None:
            raise NoPieceAtSourceError(f"There is no piece on {from_position}.")
        if piece.color != self.turn:
            raise IllegalMoveError(
                f"The piece on {from_position} belongs to your opponent."
            )

        target = self.board.piece_at(to_square)
        if target is not None and target.color == piece.color:
            raise CannotCaptureOwnPieceError(
                f"Cannot capture your own {target.type} on {to_position}."
            )

        if to_square not in self.board.legal_moves(from_square):
            raise IllegalMoveError(
                f"Move not allowed: {piece.type} {from_position} to {to_position}"
            )

        applied = self.board.apply_move(Move(from_square, to_square, promotion))
        self._complete_turn(applied)
        return applied

    def offer_castle(self, player: PlayerId, side: CastlingSide) -> AppliedMove:
        """King and rook move together. Afterwards the turn passes exactly like after a normal move."""
        self._assert_active()
        self._assert_your_turn(player)

        if not self.board.can_castle(self.turn, side):
            raise IllegalMoveError(f"Cannot castle {side} side right now.")

        applied = self.board.castle(self.turn, side)
        self._complete_turn(applied)
        return applied

    def declare_draw(self) -> None:
        """The host ends the game as a draw (agreed by both players, claimed by the rules it enforces, ...)."""
        self._assert_active()
        self._change_status(GameStatus.DRAW)
        self._notify_game_over()

    def board_view(self, viewer: Color = Color.WHITE) -> list[str]:
        return flip_for_viewer(self.board.get_distribution(), viewer)

    def history_uci(self) -> list[str]:
        return [applied.move.to_uci() for applied in self.history]

    def to_fen(self) -> str:
        return self.board.to_fen(self.turn, self.half_move_clock, self.full_move_number)

    # -- PRIVATE HELPERS ---
    def _assert_active(self) -> None:
        if self.status != GameStatus.ACTIVE:
            raise GameNotActiveError(f"Game is not in progress. status: {self.status}")

    def _assert_your_turn(self, player: PlayerId) -> None:
        """You must wait for your turn before calculating legal moves / making a move."""
        player_to_move = self.players[self.turn]
        if player != player_to_move:
            raise NotYourTurnError(
                f"It is not your turn. Waiting for player {player_to_move} to make a move first."
            )

    def _complete_turn(self, applied: AppliedMove) -> None:
        self.history.append(applied)
        logger.info(
            "%s played %s%s",
            self.players[self.turn],
            applied.move.to_uci(),
            " (castling)" if applied.is_castle else "",
        )
        self._update_move_counters(applied)
        self.turn = self.turn.opponent
        self.positions.append(self._position_key())
        self._update_game_status()

        if self.observer is not None:
            self.observer.board_updated(applied, self.board.get_distribution())
        if self.status.is_terminal:
            self._notify_game_over()

    def _update_move_counters(self, applied: AppliedMove) -> None:
        """Pawn moves and captures reset the half-move clock. The full move number goes up once black has moved."""
        if applied.moving_piece == PieceType.PAWN or applied.is_capture:
            self.half_move_clock = 0
        else:
            self.half_move_clock += 1

        if applied.color == Color.BLACK:
            self.full_move_number += 1

    def _position_key(self) -> str:
        """Placement, side to move, castling rights and en passant square: the FEN without its counters"""
        return " ".join(self.board.to_fen(self.turn).split(" ")[:4])

    def _update_game_status(self) -> None:
        """
        The turn has already passed. The player to move now ...
        * is in check and has no legal move: checkmate
        * is not in check and has no legal move: stalemate
        * can still move, but the last 50 moves saw no pawn move or capture,
          or the position occurred for the 3rd time: draw
        """
        if not self.board.has_legal_move(self.turn):
            if self.board.is_king_in_check(self.turn):
                self._change_status(GameStatus.CHECKMATE)
            else:
                self._change_status(GameStatus.STALEMATE)
        elif self._is_half_move_draw() or self._is_three_fold_repetition():
            self._change_status(GameStatus.DRAW)

    def _is_half_move_draw(self) -> bool:
        return self.half_move_clock >= HALF_MOVE_DRAW_LIMIT

    def _is_three_fold_repetition(self) -> bool:
        """Check if the current position occurs 3 times in the history"""
        return self.positions.count(self.positions[-1]) >= REPETITION_DRAW_COUNT

    def _change_status(self, new_status: GameStatus) -> None:
        logger.info("Game status: %s -> %s", self.status, new_status)
        self.status = new_status

    def _notify_game_over(self) -> None:
        if self.observer is not None:
            self.observer.game_over(self.status, self.winner)
