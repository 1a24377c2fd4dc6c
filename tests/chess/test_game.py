"""Unit tests for /chessroom/chess/game.py"""

from typing import Callable
from unittest.mock import Mock

import pytest

from chessroom.chess.game import (
    Color,
    GameController,
    GameStatus,
    PieceType,
    Square,
    flip_for_viewer,
)
from chessroom.core.exceptions import (
    CannotCaptureOwnPieceError,
    GameNotActiveError,
    GameStateError,
    IllegalMoveError,
    InvalidPositionError,
    NoPieceAtSourceError,
    NotYourTurnError,
    PromotionKindRequiredError,
)
from chessroom.core.shared_types import CastlingSide
from conftest import BLACK_PLAYER, WHITE_PLAYER, RecordingObserver

GameFactory = Callable[[str], GameController]
CASTLING_FEN = "r3k2r/pppppppp/8/8/8/8/PPPPPPPP/R3K2R w KQkq - 0 1"
PROMOTION_FEN = "4k3/P7/8/8/8/8/8/4K3 w - - 0 1"
FOOLS_MATE = [("f2", "f3"), ("e7", "e5"), ("g2", "g4"), ("d8", "h4")]


def play(game: GameController, moves: list[tuple[str, str]]) -> None:
    for from_position, to_position in moves:
        player = WHITE_PLAYER if game.turn == Color.WHITE else BLACK_PLAYER
        game.submit_move(player, from_position, to_position)


# -- SEATING ---
def test_new_game_is_prepared() -> None:
    game = GameController.new_game()
    assert game.status == GameStatus.PREPARED
    assert game.turn == Color.WHITE
    assert game.players == {}
    assert game.history == []


def test_seating_players() -> None:
    game = GameController.new_game()
    assert game.seat_player(WHITE_PLAYER) == Color.WHITE
    assert game.status == GameStatus.PREPARED

    with pytest.raises(GameStateError):
        game.seat_player(WHITE_PLAYER)

    assert game.seat_player(BLACK_PLAYER) == Color.BLACK
    assert game.status == GameStatus.ACTIVE
    assert game.color_of(BLACK_PLAYER) == Color.BLACK
    assert game.color_of("spectator") is None


def test_third_player_is_rejected(active_game: GameController) -> None:
    with pytest.raises(GameStateError):
        active_game.seat_player("player_late")


def test_no_moves_before_game_starts() -> None:
    game = GameController.new_game()
    game.seat_player(WHITE_PLAYER)
    with pytest.raises(GameNotActiveError):
        game.legal_moves(WHITE_PLAYER)
    with pytest.raises(GameNotActiveError):
        game.submit_move(WHITE_PLAYER, "e2", "e4")


def test_game_from_fen_starts_with_side_to_move(game_from_fen: GameFactory) -> None:
    game = game_from_fen("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1")
    assert game.turn == Color.BLACK
    with pytest.raises(NotYourTurnError):
        game.submit_move(WHITE_PLAYER, "d2", "d4")
    game.submit_move(BLACK_PLAYER, "e7", "e5")
    assert game.turn == Color.WHITE


# -- LEGAL MOVES ---
def test_legal_moves_in_starting_position(active_game: GameController) -> None:
    moves = active_game.legal_moves(WHITE_PLAYER)
    assert len(moves) == 20
    assert "e2e4" in moves
    assert "g1f3" in moves


def test_legal_moves_only_for_player_to_move(active_game: GameController) -> None:
    with pytest.raises(NotYourTurnError):
        active_game.legal_moves(BLACK_PLAYER)


def test_legal_moves_list_every_promotion(game_from_fen: GameFactory) -> None:
    moves = game_from_fen(PROMOTION_FEN).legal_moves(WHITE_PLAYER)
    assert {"a7a8q", "a7a8r", "a7a8b", "a7a8n"} <= set(moves)
    assert "a7a8" not in moves


def test_legal_moves_do_not_list_castling(game_from_fen: GameFactory) -> None:
    moves = game_from_fen(CASTLING_FEN).legal_moves(WHITE_PLAYER)
    assert "e1g1" not in moves
    assert "e1c1" not in moves
    assert "e1f1" in moves


# -- MAKING MOVES ---
def test_submit_move(active_game: GameController, observer: RecordingObserver) -> None:
    applied = active_game.submit_move(WHITE_PLAYER, "e2", "e4")
    assert applied.moving_piece == PieceType.PAWN
    assert active_game.turn == Color.BLACK
    assert active_game.history_uci() == ["e2e4"]
    assert active_game.status == GameStatus.ACTIVE

    assert len(observer.updates) == 1
    move, distribution = observer.updates[0]
    assert move == applied
    assert distribution == active_game.board.get_distribution()
    assert observer.endings == []


def test_to_fen_after_move(active_game: GameController) -> None:
    active_game.submit_move(WHITE_PLAYER, "e2", "e4")
    assert (
        active_game.to_fen()
        == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"
    )


@pytest.mark.parametrize(
    "player, from_position, to_position, expected_error",
    [
        (WHITE_PLAYER, "e2", "e2", IllegalMoveError),
        (WHITE_PLAYER, "e4", "e5", NoPieceAtSourceError),
        (BLACK_PLAYER, "e7", "e5", NotYourTurnError),
        (WHITE_PLAYER, "e7", "e5", IllegalMoveError),
        (WHITE_PLAYER, "a1", "a2", CannotCaptureOwnPieceError),
        (WHITE_PLAYER, "e2", "e5", IllegalMoveError),
        (WHITE_PLAYER, "b1", "b3", IllegalMoveError),
        (WHITE_PLAYER, "e2", "e9", InvalidPositionError),
        (WHITE_PLAYER, "i2", "e4", InvalidPositionError),
    ],
)
def test_rejected_move_leaves_game_untouched(
    active_game: GameController,
    observer: RecordingObserver,
    player: str,
    from_position: str,
    to_position: str,
    expected_error: type[Exception],
) -> None:
    board_before = active_game.board.copy()
    with pytest.raises(expected_error):
        active_game.submit_move(player, from_position, to_position)
    assert active_game.board == board_before
    assert active_game.turn == Color.WHITE
    assert active_game.history == []
    assert observer.updates == []


def test_king_cannot_castle_by_moving_two_squares(game_from_fen: GameFactory) -> None:
    game = game_from_fen(CASTLING_FEN)
    with pytest.raises(IllegalMoveError):
        game.submit_move(WHITE_PLAYER, "e1", "g1")


def test_promotion_requires_kind(game_from_fen: GameFactory) -> None:
    game = game_from_fen(PROMOTION_FEN)
    board_before = game.board.copy()
    with pytest.raises(PromotionKindRequiredError):
        game.submit_move(WHITE_PLAYER, "a7", "a8")
    assert game.board == board_before
    assert game.turn == Color.WHITE


def test_promotion(game_from_fen: GameFactory) -> None:
    game = game_from_fen(PROMOTION_FEN)
    applied = game.submit_move(WHITE_PLAYER, "a7", "a8", PieceType.QUEEN)
    assert applied.is_promotion
    assert game.board.piece_at(Square.from_algebraic("a8")).type == PieceType.QUEEN
    assert game.history_uci() == ["a7a8q"]
    # the new queen gives check along the 8th rank, black can still walk away
    assert game.board.is_king_in_check(Color.BLACK)
    assert game.status == GameStatus.ACTIVE


def test_en_passant_through_game(active_game: GameController) -> None:
    play(active_game, [("e2", "e4"), ("a7", "a6"), ("e4", "e5"), ("d7", "d5")])
    assert "e5d6" in active_game.legal_moves(WHITE_PLAYER)
    applied = active_game.submit_move(WHITE_PLAYER, "e5", "d6")
    assert applied.is_en_passant
    assert active_game.board.piece_at(Square.from_algebraic("d5")) is None


# -- CASTLING ---
def test_offer_castle(game_from_fen: GameFactory, observer: RecordingObserver) -> None:
    game = game_from_fen(CASTLING_FEN)
    applied = game.offer_castle(WHITE_PLAYER, CastlingSide.KING_SIDE)
    assert applied.is_castle
    assert game.turn == Color.BLACK
    assert game.history_uci() == ["e1g1"]
    assert game.board.piece_at(Square.from_algebraic("f1")).type == PieceType.ROOK
    assert observer.updates[0][0].is_castle

    game.offer_castle(BLACK_PLAYER, CastlingSide.QUEEN_SIDE)
    assert game.history_uci() == ["e1g1", "e8c8"]
    assert game.board.castling_rights.to_fen() == "-"


def test_offer_castle_out_of_turn(game_from_fen: GameFactory) -> None:
    game = game_from_fen(CASTLING_FEN)
    with pytest.raises(NotYourTurnError):
        game.offer_castle(BLACK_PLAYER, CastlingSide.KING_SIDE)


def test_offer_castle_not_allowed(active_game: GameController) -> None:
    board_before = active_game.board.copy()
    with pytest.raises(IllegalMoveError):
        active_game.offer_castle(WHITE_PLAYER, CastlingSide.KING_SIDE)
    assert active_game.board == board_before
    assert active_game.turn == Color.WHITE


# -- END OF GAME ---
def test_fools_mate(active_game: GameController, observer: RecordingObserver) -> None:
    play(active_game, FOOLS_MATE)
    assert active_game.status == GameStatus.CHECKMATE
    assert active_game.winner == BLACK_PLAYER
    assert active_game.board.is_king_in_check(Color.WHITE)
    assert active_game.board.all_legal_moves(Color.WHITE) == {}
    assert len(observer.updates) == 4
    assert observer.endings == [(GameStatus.CHECKMATE, BLACK_PLAYER)]


def test_no_moves_after_checkmate(active_game: GameController) -> None:
    play(active_game, FOOLS_MATE)
    board_before = active_game.board.copy()
    with pytest.raises(GameNotActiveError):
        active_game.submit_move(WHITE_PLAYER, "a2", "a3")
    with pytest.raises(GameNotActiveError):
        active_game.legal_moves(WHITE_PLAYER)
    assert active_game.board == board_before


def test_stalemate(game_from_fen: GameFactory, observer: RecordingObserver) -> None:
    """Queen b5-b6 leaves the black king on a8 without a move, but not in check"""
    game = game_from_fen("k7/8/2K5/1Q6/8/8/8/8 w - - 0 1")
    game.submit_move(WHITE_PLAYER, "b5", "b6")
    assert game.status == GameStatus.STALEMATE
    assert game.winner is None
    assert observer.endings == [(GameStatus.STALEMATE, None)]


def test_declare_draw(active_game: GameController, observer: RecordingObserver) -> None:
    active_game.submit_move(WHITE_PLAYER, "e2", "e4")
    active_game.declare_draw()
    assert active_game.status == GameStatus.DRAW
    assert active_game.winner is None
    assert observer.endings == [(GameStatus.DRAW, None)]

    with pytest.raises(GameNotActiveError):
        active_game.submit_move(BLACK_PLAYER, "e7", "e5")
    with pytest.raises(GameNotActiveError):
        active_game.declare_draw()


def test_winner_while_playing(active_game: GameController) -> None:
    assert active_game.winner is None


# -- RENDERING ---
def test_flip_for_viewer() -> None:
    distribution = [str(idx) for idx in range(64)]
    assert flip_for_viewer(distribution, Color.WHITE) == distribution

    flipped = flip_for_viewer(distribution, Color.BLACK)
    assert flipped[:8] == distribution[56:]
    assert flipped[56:] == distribution[:8]
    assert sorted(flipped) == sorted(distribution)


def test_board_view(active_game: GameController) -> None:
    white_view = active_game.board_view(Color.WHITE)
    black_view = active_game.board_view(Color.BLACK)
    assert "".join(white_view[:8]) == "rnbqkbnr"
    assert "".join(black_view[:8]) == "RNBQKBNR"
    assert "".join(black_view[56:]) == "rnbqkbnr"


def test_observer_hears_about_the_end() -> None:
    observer = Mock()
    game = GameController.new_game(observer=observer)
    game.seat_player(WHITE_PLAYER)
    game.seat_player(BLACK_PLAYER)
    play(game, FOOLS_MATE)

    assert observer.board_updated.call_count == 4
    observer.game_over.assert_called_once_with(GameStatus.CHECKMATE, BLACK_PLAYER)


# -- MOVE COUNTERS ---
def test_move_counters_carried_from_fen(game_from_fen: GameFactory) -> None:
    fen = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 7 20"
    game = game_from_fen(fen)
    assert game.to_fen() == fen

    game.submit_move(WHITE_PLAYER, "g1", "f3")
    assert game.to_fen().endswith(" b KQkq - 8 20")
    game.submit_move(BLACK_PLAYER, "g8", "f6")
    assert game.to_fen().endswith(" w KQkq - 9 21")

    # a pawn move resets the half-move clock
    game.submit_move(WHITE_PLAYER, "e2", "e4")
    assert game.to_fen().endswith(" b KQkq e3 0 21")


def test_capture_resets_half_move_clock(game_from_fen: GameFactory) -> None:
    game = game_from_fen("4k3/8/8/3r4/8/8/8/3RK3 w - - 12 40")
    game.submit_move(WHITE_PLAYER, "d1", "d5")
    assert game.half_move_clock == 0
    assert game.full_move_number == 40


def test_full_move_number_when_black_starts(game_from_fen: GameFactory) -> None:
    game = game_from_fen("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1")
    game.submit_move(BLACK_PLAYER, "e7", "e5")
    assert game.to_fen() == "rnbqkbnr/pppp1ppp/8/4p3/4P3/8/PPPP1PPP/RNBQKBNR w KQkq e6 0 2"


# -- DRAWS ---
def test_fifty_move_rule(game_from_fen: GameFactory, observer: RecordingObserver) -> None:
    """The 100th half-move without a pawn move or capture ends the game"""
    game = game_from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 98 60")
    game.submit_move(WHITE_PLAYER, "a1", "a2")
    assert game.status == GameStatus.ACTIVE

    game.submit_move(BLACK_PLAYER, "e8", "d8")
    assert game.status == GameStatus.DRAW
    assert game.winner is None
    assert observer.endings == [(GameStatus.DRAW, None)]


def test_three_fold_repetition(active_game: GameController, observer: RecordingObserver) -> None:
    """Knights out and back twice: the starting position appears for the 3rd time"""
    knight_dance = [("g1", "f3"), ("g8", "f6"), ("f3", "g1"), ("f6", "g8")]
    play(active_game, knight_dance)
    assert active_game.status == GameStatus.ACTIVE

    play(active_game, knight_dance)
    assert active_game.status == GameStatus.DRAW
    assert observer.endings == [(GameStatus.DRAW, None)]


def test_checkmate_beats_fifty_move_rule(game_from_fen: GameFactory) -> None:
    """Mate delivered on the 100th half-move still counts as mate"""
    game = game_from_fen("6k1/5ppp/8/8/8/8/8/R5K1 w - - 99 70")
    game.submit_move(WHITE_PLAYER, "a1", "a8")
    assert game.status == GameStatus.CHECKMATE


# -- GAMES SET UP FROM FEN ---
def test_seating_on_checkmate(game_from_fen: GameFactory, observer: RecordingObserver) -> None:
    game = game_from_fen("R5k1/5ppp/8/8/8/8/8/6K1 b - - 0 1")
    assert game.status == GameStatus.CHECKMATE
    assert game.winner == WHITE_PLAYER
    assert observer.endings == [(GameStatus.CHECKMATE, WHITE_PLAYER)]
    with pytest.raises(GameNotActiveError):
        game.submit_move(BLACK_PLAYER, "g8", "h8")


def test_seating_on_stalemate(game_from_fen: GameFactory, observer: RecordingObserver) -> None:
    game = game_from_fen("k7/8/1QK5/8/8/8/8/8 b - - 0 1")
    assert game.status == GameStatus.STALEMATE
    assert observer.endings == [(GameStatus.STALEMATE, None)]


def test_seating_on_playable_position(game_from_fen: GameFactory, observer: RecordingObserver) -> None:
    game = game_from_fen("4k3/8/8/8/8/8/8/R3K3 b - - 0 1")
    assert game.status == GameStatus.ACTIVE
    assert observer.endings == []
