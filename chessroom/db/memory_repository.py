"""Implementation of (Game)Repository keeping the games in memory"""

import logging
from typing import Optional
from uuid import UUID, uuid4

from chessroom.chess.game import GameController
from chessroom.core.exceptions import GameStateError

logger = logging.getLogger(__name__)


class InMemoryGameRepository:
    """One dictionary per service instance. Games live as long as their room does, nothing is written to storage."""

    def __init__(self, max_games: Optional[int] = None) -> None:
        self._games: dict[UUID, GameController] = {}
        self.max_games = max_games

    def get_game(self, game_id: UUID) -> GameController | None:
        """Get game by ID, if it exists."""
        return self._games.get(game_id)

    def create_game(self, game: GameController) -> UUID:
        """Register a new game and return its newly created ID."""
        if self.max_games is not None and len(self._games) >= self.max_games:
            raise GameStateError(
                f"Cannot create another game: limit of {self.max_games} live games reached."
            )
        new_id = uuid4()
        self._games[new_id] = game
        logger.debug("Registered game %s (%d live)", new_id, len(self._games))
        return new_id

    def delete_game(self, game_id: UUID) -> GameController | None:
        """Remove a game."""
        return self._games.pop(game_id, None)

    def __len__(self) -> int:
        return len(self._games)
