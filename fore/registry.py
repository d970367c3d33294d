from __future__ import annotations

import asyncio
import logging
import random
import uuid
from typing import Callable, Dict, List, Optional, TypeVar

from fore.config import GameConfig
from fore.enums import Difficulty
from fore.events import GameEvent
from fore.exceptions import GameError, GameInvariantError, GameNotFoundError
from fore.game import GameSession
from fore.snapshot import GameSnapshot, restore_session, take_snapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Entry:
    def __init__(self, session: GameSession):
        self.session = session
        self.lock = asyncio.Lock()
        self.history: List[GameEvent] = []
        self.snapshot: GameSnapshot = take_snapshot(session)


class GameRegistry:
    """
    In-memory registry of running games.

    Commands against one game run one at a time under that game's lock.
    After every command the raised events are appended to the game's
    history. A successful command refreshes the stored snapshot; a defect
    (GameInvariantError) discards the in-memory session and reloads the
    last good snapshot.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        self._config = config or GameConfig()
        self._games: Dict[uuid.UUID, _Entry] = {}
        self._lock = asyncio.Lock()

    async def create_game(
        self,
        creator_id: uuid.UUID,
        creator_name: str,
        *,
        vs_npc: bool = False,
        difficulty: Optional[Difficulty] = None,
        rng: Optional[random.Random] = None,
    ) -> uuid.UUID:
        session = GameSession.create(
            creator_id, creator_name, vs_npc, difficulty, config=self._config, rng=rng
        )
        entry = _Entry(session)
        entry.history.extend(session.drain_events())

        async with self._lock:
            self._games[session.game_id] = entry
        return session.game_id

    async def join(self, game_id: uuid.UUID, player_id: uuid.UUID, player_name: str) -> None:
        await self.execute(game_id, lambda s: s.join_game(player_id, player_name))

    async def execute(self, game_id: uuid.UUID, command: Callable[[GameSession], T]) -> T:
        """Run `command` against the game's session with exclusive access."""
        entry = self._entry(game_id)
        async with entry.lock:
            session = entry.session
            try:
                result = command(session)
            except GameInvariantError:
                logger.exception(f"Invariant broken in game {game_id}; reloading last snapshot")
                entry.session = restore_session(entry.snapshot, config=session.config, rng=session.rng)
                raise
            except GameError as e:
                logger.info(f"Rejected command for game {game_id}: [{e.error_code}] {e.message}")
                # Validation failures leave the session untouched; nothing to discard.
                session.drain_events()
                raise

            entry.history.extend(session.drain_events())
            entry.snapshot = take_snapshot(session)
            return result

    async def get(self, game_id: uuid.UUID) -> GameSession:
        return self._entry(game_id).session

    async def snapshot(self, game_id: uuid.UUID) -> GameSnapshot:
        return self._entry(game_id).snapshot

    async def history(self, game_id: uuid.UUID) -> List[GameEvent]:
        return list(self._entry(game_id).history)

    async def remove(self, game_id: uuid.UUID) -> bool:
        async with self._lock:
            return self._games.pop(game_id, None) is not None

    def game_ids(self) -> List[uuid.UUID]:
        return list(self._games)

    def _entry(self, game_id: uuid.UUID) -> _Entry:
        entry = self._games.get(game_id)
        if entry is None:
            raise GameNotFoundError(game_id)
        return entry
