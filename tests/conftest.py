"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/helpers required for testing multiple layers.
"""

from typing import Callable, Optional

import pytest

from chessroom.chess.board import Board
from chessroom.chess.game import GameController
from chessroom.chess.moves import AppliedMove
from chessroom.chess.pieces import Piece
from chessroom.chess.square import Square
from chessroom.core.shared_types import GameStatus

WHITE_PLAYER = "player_white"
BLACK_PLAYER = "player_black"


class RecordingObserver:
    """Stands in for the host: remembers every notification it gets."""

    def __init__(self) -> None:
        self.updates: list[tuple[AppliedMove, list[str]]] = []
        self.endings: list[tuple[GameStatus, Optional[str]]] = []

    def board_updated(self, move: AppliedMove, distribution: list[str]) -> None:
        self.updates.append((move, distribution))

    def game_over(self, status: GameStatus, winner: Optional[str]) -> None:
        self.endings.append((status, winner))


@pytest.fixture
def board_with_pieces() -> Callable[[dict[str, str]], Board]:
    """Call the inner function with {square name: FEN character}, ex. {"e1": "K", "e8": "k"}"""

    def _create_board(pieces: dict[str, str]) -> Board:
        board = Board.empty()
        for square_name, fen_char in pieces.items():
            board.place_piece(Piece.from_fen(fen_char), Square.from_algebraic(square_name))
        return board

    return _create_board


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def active_game(observer: RecordingObserver) -> GameController:
    """Standard starting position, both players seated, white to move."""
    game = GameController.new_game(observer=observer)
    game.seat_player(WHITE_PLAYER)
    game.seat_player(BLACK_PLAYER)
    return game


@pytest.fixture
def game_from_fen(
    observer: RecordingObserver,
) -> Callable[[str], GameController]:
    def _create_game(fen: str) -> GameController:
        game = GameController.new_game(starting_fen=fen, observer=observer)
        game.seat_player(WHITE_PLAYER)
        game.seat_player(BLACK_PLAYER)
        return game

    return _create_game
