"""Orchestration of communication from the host (chat room, web app, ...) to the game logic and the game registry."""

import logging
from typing import Callable, Optional
from uuid import UUID

from chessroom.api.models import (
    AppliedMoveModel,
    BoardViewRequest,
    BoardViewResponse,
    CastleRequest,
    CreateGameRequest,
    DeleteGameRequest,
    DrawRequest,
    GameResponse,
    GetGameRequest,
    HistoryResponse,
    JoinGameRequest,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    MoveResponse,
    StatusResponse,
)
from chessroom.chess.game import GameController, GameObserver
from chessroom.chess.moves import AppliedMove
from chessroom.core.config import Settings
from chessroom.core.exceptions import ChessError, UnknownGameError
from chessroom.core.logging_setup import configure_logging
from chessroom.db.memory_repository import InMemoryGameRepository
from chessroom.db.repository import GameRepository

logger = logging.getLogger(__name__)


class ChessService:
    """Orchestration of layers for chess game."""

    def __init__(
        self, repository: GameRepository, settings: Optional[Settings] = None
    ) -> None:
        self.repo = repository
        self.settings = settings or Settings()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ChessService":
        """Standalone setup: in-memory game registry and package logging configured from the settings."""
        settings = settings or Settings()
        configure_logging(settings)
        return cls(InMemoryGameRepository(max_games=settings.max_games), settings)

    # -- Host facing logic ---
    def create_game(
        self, request: CreateGameRequest, observer: Optional[GameObserver] = None
    ) -> GameResponse:
        """A room opened a new game. Players join afterwards."""
        game = GameController.new_game(
            starting_fen=request.starting_fen,
            observer=observer,
            empty_symbol=self.settings.empty_square_symbol,
        )
        game_id = self.repo.create_game(game)
        logger.info("Created game %s", game_id)
        return self._create_game_response(game_id, game)

    def join_game(self, request: JoinGameRequest) -> GameResponse:
        """A player takes a seat. The second one starts the game."""
        game = self._fetch_game(request.game_id)
        game.seat_player(request.player_id)
        return self._create_game_response(request.game_id, game)

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        game = self._fetch_game(request.game_id)
        legal_moves = game.legal_moves(request.player_id)
        return LegalMovesResponse(
            game_id=request.game_id,
            player_id=request.player_id,
            color=game.turn,
            legal_moves=legal_moves,
        )

    def submit_move(self, request: MoveRequest) -> MoveResponse:
        """Make a move attempt. A rejected move is reported in the response, not raised."""
        return self._attempt(
            request.game_id,
            lambda game: game.submit_move(
                request.player_id,
                request.from_square,
                request.to_square,
                request.promote_to,
            ),
        )

    def offer_castle(self, request: CastleRequest) -> MoveResponse:
        return self._attempt(
            request.game_id,
            lambda game: game.offer_castle(request.player_id, request.side),
        )

    def declare_draw(self, request: DrawRequest) -> StatusResponse:
        game = self._fetch_game(request.game_id)
        game.declare_draw()
        return self._create_status_response(request.game_id, game)

    def get_board_view(self, request: BoardViewRequest) -> BoardViewResponse:
        game = self._fetch_game(request.game_id)
        return BoardViewResponse(
            game_id=request.game_id,
            viewer=request.viewer,
            squares=game.board_view(request.viewer),
        )

    def get_status(self, request: GetGameRequest) -> StatusResponse:
        game = self._fetch_game(request.game_id)
        return self._create_status_response(request.game_id, game)

    def get_history(self, request: GetGameRequest) -> HistoryResponse:
        game = self._fetch_game(request.game_id)
        return HistoryResponse(
            game_id=request.game_id,
            moves=[AppliedMoveModel.from_applied(applied) for applied in game.history],
        )

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        game = self._fetch_game(request.game_id)
        return self._create_game_response(request.game_id, game)

    def delete_game(self, request: DeleteGameRequest) -> None:
        """The room closed: the game goes with it."""
        if self.repo.delete_game(request.game_id) is None:
            raise UnknownGameError(f"Game with {request.game_id=} not found.")
        logger.info("Deleted game %s", request.game_id)

    # -- Internal helpers --
    def _attempt(
        self,
        game_id: UUID,
        command: Callable[[GameController], AppliedMove],
    ) -> MoveResponse:
        """Run a move command and convert its outcome (or the reason it got rejected) into a MoveResponse."""
        game: Optional[GameController] = None
        try:
            game = self._fetch_game(game_id)
            applied = command(game)
        except ChessError as error:
            logger.debug("Rejected move in game %s: %s", game_id, error)
            return MoveResponse(
                game_id=game_id,
                accepted=False,
                status=game.status if game is not None else None,
                error=error.code,
                message=str(error),
            )
        return MoveResponse(
            game_id=game_id,
            accepted=True,
            status=game.status,
            move=AppliedMoveModel.from_applied(applied),
        )

    def _create_game_response(self, game_id: UUID, game: GameController) -> GameResponse:
        return GameResponse(
            game_id=game_id,
            players=game.players,
            status=game.status,
            turn=game.turn,
            fen_state=game.to_fen(),
        )

    def _create_status_response(
        self, game_id: UUID, game: GameController
    ) -> StatusResponse:
        return StatusResponse(
            game_id=game_id, status=game.status, turn=game.turn, winner=game.winner
        )

    def _fetch_game(self, game_id: UUID) -> GameController:
        """Attempt to find the game in the repository and raise error if it fails."""
        game = self.repo.get_game(game_id)
        if game is None:
            raise UnknownGameError(f"Game with {game_id=} not found.")
        return game
