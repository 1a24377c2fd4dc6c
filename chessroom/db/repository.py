"""Protocol repository: where the service finds the live games (the host may swap in its own room registry)"""

from typing import Protocol
from uuid import UUID

from chessroom.chess.game import GameController


class GameRepository(Protocol):
    """Registry of live games"""

    def get_game(self, game_id: UUID) -> GameController | None:
        """Get game by ID, if it exists."""
        ...

    def create_game(self, game: GameController) -> UUID:
        """Register a new game and return its newly created ID."""
        ...

    def delete_game(self, game_id: UUID) -> GameController | None:
        """Remove a game (its room closed)."""
        ...
