"""
Game session registry for two-player matches.
Owns every live GameSession, maps players to sessions, assigns roles and
fans messages out to the connections of a session.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Protocol

from endofline.engine import MAX_PLAYERS
from endofline.engine.events import ServerMessageBase, serialize_message
from endofline.engine.queries import territory_control
from endofline.engine.state import GameState, CORP, RUNNER
from endofline.engine.utils import create_player, generate_session_id, initialize_game_state

logger = logging.getLogger(__name__)

# Session lifecycle (discarded sessions simply leave the registry)
WAITING = "WAITING"
ACTIVE = "ACTIVE"


class GameError(ValueError):
    """A rejected player action. The message is the reason sent back to the player."""

    @property
    def reason(self) -> str:
        return str(self)


class RegistryConsistencyError(RuntimeError):
    """The player and session maps disagree. Always a bug, never a rejection."""


class Connection(Protocol):
    """What the registry needs from a transport connection."""

    def send(self, data: str) -> None: ...


@dataclass
class PlayerConnection:
    player_id: str
    connection: Connection
    role: str  # CORP | RUNNER


@dataclass
class GameSession:
    id: str
    players: list[PlayerConnection]
    state: GameState
    created_at: float = field(default_factory=time.time)

    @property
    def status(self) -> str:
        return ACTIVE if len(self.players) >= MAX_PLAYERS else WAITING

    def summary(self) -> dict:
        return {
            "id": self.id,
            "status": self.status,
            "players": [{"playerId": p.player_id, "role": p.role} for p in self.players],
            "currentTurn": self.state.current_turn.player_id,
            "control": territory_control(self.state),
            "createdAt": self.created_at,
        }


class SessionRegistry:
    """
    In-memory directory of active sessions.

    Invariant: every entry in _player_sessions names a session present in
    _sessions, and every player of a session in _sessions has an entry.
    Each method below updates both maps before returning.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, GameSession] = {}
        self._player_sessions: dict[str, str] = {}  # player_id -> session_id

    def __len__(self) -> int:
        return len(self._sessions)

    def _new_session_id(self) -> str:
        for _ in range(20):
            session_id = generate_session_id()
            if session_id not in self._sessions:
                return session_id
        raise RuntimeError("Could not generate unique session id")

    def create_session(self, player_id: str, connection: Connection) -> GameSession:
        """New session with player_id as CORP holding the first turn."""
        session = GameSession(
            id=self._new_session_id(),
            players=[PlayerConnection(player_id, connection, CORP)],
            state=initialize_game_state(player_id),
        )
        self._sessions[session.id] = session
        self._player_sessions[player_id] = session.id
        logger.info("Session %s created by %s", session.id, player_id)
        return session

    def join_session(self, session_id: str, player_id: str, connection: Connection) -> GameSession:
        """
        Add player_id in the vacant role: RUNNER, or CORP when the corp has left.
        Raises GameError("Game not found") or GameError("Game full").
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise GameError("Game not found")
        if len(session.players) >= MAX_PLAYERS:
            raise GameError("Game full")

        taken = {p.role for p in session.players}
        role = RUNNER if RUNNER not in taken else CORP
        session.players.append(PlayerConnection(player_id, connection, role))
        session.state.players.append(create_player(player_id, role))
        self._player_sessions[player_id] = session.id
        logger.info("Player %s joined session %s as %s", player_id, session.id, role)
        return session

    def get_session(self, session_id: str) -> GameSession | None:
        return self._sessions.get(session_id)

    def get_session_by_player(self, player_id: str) -> GameSession | None:
        session_id = self._player_sessions.get(player_id)
        if session_id is None:
            return None
        session = self._sessions.get(session_id)
        if session is None:
            raise RegistryConsistencyError(
                f"Player {player_id} maps to missing session {session_id}"
            )
        return session

    def list_sessions(self) -> list[GameSession]:
        return list(self._sessions.values())

    def remove_player(self, player_id: str) -> GameSession | None:
        """
        Drop the player's connection and Player record.
        An emptied session is discarded; the (possibly empty) session is still
        returned so the caller can decide whether to broadcast.
        """
        session = self.get_session_by_player(player_id)
        if session is None:
            return None

        session.players = [p for p in session.players if p.player_id != player_id]
        session.state.players = [p for p in session.state.players if p.id != player_id]
        del self._player_sessions[player_id]
        logger.info("Player %s left session %s", player_id, session.id)

        if not session.players:
            del self._sessions[session.id]
            logger.info("Session %s discarded", session.id)

        return session

    def clear(self) -> None:
        self._sessions.clear()
        self._player_sessions.clear()

    @staticmethod
    def is_player_turn(session: GameSession, player_id: str) -> bool:
        return session.state.current_turn.player_id == player_id

    @staticmethod
    def get_player_role(session: GameSession, player_id: str) -> str | None:
        conn = next((p for p in session.players if p.player_id == player_id), None)
        return conn.role if conn else None

    @staticmethod
    def broadcast_to_session(
        session: GameSession,
        message: ServerMessageBase,
        exclude_player_id: str | None = None,
    ) -> int:
        """
        Serialize once and send to every participant except exclude_player_id.
        A failing connection is logged and skipped. Returns the number of sends
        that went through.
        """
        data = serialize_message(message)
        delivered = 0
        for player in session.players:
            if player.player_id == exclude_player_id:
                continue
            try:
                player.connection.send(data)
            except Exception:
                logger.warning(
                    "Send to %s in session %s failed", player.player_id, session.id, exc_info=True
                )
                continue
            delivered += 1
        return delivered
