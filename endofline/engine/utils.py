"""
Utility functions for the game engine.
"""

import random
import secrets
import string
import time

from endofline.engine import (
    ACTIONS_PER_TURN,
    STARTING_CREDITS,
    STARTING_HEALTH,
    STARTING_FACTION_RESOURCES,
)
from endofline.engine.hexgrid import create_hex_grid
from endofline.engine.state import GameState, Faction, Player, TurnState, CORP, RUNNER, PHASE_ACTION

SESSION_ID_CHARS = string.ascii_lowercase + string.digits
SESSION_ID_LENGTH = 7

# Role -> faction id used in Player.faction_id
FACTION_IDS = {CORP: "corp", RUNNER: "runner"}


def generate_session_id() -> str:
    return "".join(secrets.choice(SESSION_ID_CHARS) for _ in range(SESSION_ID_LENGTH))


def generate_player_id() -> str:
    """Unique-enough id handed to each new connection."""
    suffix = "".join(secrets.choice(SESSION_ID_CHARS) for _ in range(5))
    return f"player-{int(time.time() * 1000)}-{suffix}"


def generate_scenario_id(prefix: str = "scenario") -> str:
    return f"{prefix}-{secrets.token_hex(4)}"


def coin_flip() -> bool:
    """Default fair boolean source for run resolution."""
    return random.random() < 0.5


def create_player(player_id: str, role: str) -> Player:
    return Player(
        id=player_id,
        name=f"Player {player_id[:4]}",
        faction_id=FACTION_IDS[role],
        credits=STARTING_CREDITS,
        actions=ACTIONS_PER_TURN,
        health=STARTING_HEALTH,
    )


def initialize_game_state(first_player_id: str) -> GameState:
    """
    Fresh match state: new board, both factions, the creating player (CORP)
    and the turn handed to that player.
    """
    return GameState(
        territories=create_hex_grid(),
        factions=[
            Faction(id=FACTION_IDS[CORP], type=CORP, resources=STARTING_FACTION_RESOURCES),
            Faction(id=FACTION_IDS[RUNNER], type=RUNNER, resources=STARTING_FACTION_RESOURCES),
        ],
        players=[create_player(first_player_id, CORP)],
        current_turn=TurnState(
            player_id=first_player_id,
            phase=PHASE_ACTION,
            actions_remaining=ACTIONS_PER_TURN,
        ),
    )
