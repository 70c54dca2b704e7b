"""
Server -> client messages.
Built through the factory functions below and serialized once per broadcast
with serialize_message().
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

# ===== Message Type Constants =====

STATE_DELTA = "STATE_DELTA"
ACTION_REJECTED = "ACTION_REJECTED"
GAME_CREATED = "GAME_CREATED"
SCENARIO_STARTED = "SCENARIO_STARTED"
SCENARIO_ENDED = "SCENARIO_ENDED"
GAME_OVER = "GAME_OVER"

# Scenario outcomes
CORP_WIN = "CORP_WIN"
RUNNER_WIN = "RUNNER_WIN"
DRAW = "DRAW"


class ServerMessageBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StateDelta(ServerMessageBase):
    """
    Partial state. Each entry carries an "id" plus its fields; receivers merge by id
    (see queries.merge_by_id).
    """
    territories: list[dict[str, Any]] | None = None
    factions: list[dict[str, Any]] | None = None
    players: list[dict[str, Any]] | None = None
    cards: list[dict[str, Any]] | None = None


class StateDeltaMessage(ServerMessageBase):
    type: Literal["STATE_DELTA"] = STATE_DELTA
    delta: StateDelta


class ActionRejected(ServerMessageBase):
    type: Literal["ACTION_REJECTED"] = ACTION_REJECTED
    reason: str


class GameCreated(ServerMessageBase):
    type: Literal["GAME_CREATED"] = GAME_CREATED
    game_id: str


class ScenarioStarted(ServerMessageBase):
    type: Literal["SCENARIO_STARTED"] = SCENARIO_STARTED
    scenario_id: str
    territory_id: str


class ScenarioRewards(ServerMessageBase):
    credits: int | None = None
    victory_points: int | None = None
    cards: list[str] | None = None


class ScenarioEnded(ServerMessageBase):
    type: Literal["SCENARIO_ENDED"] = SCENARIO_ENDED
    scenario_id: str
    outcome: Literal["CORP_WIN", "RUNNER_WIN", "DRAW"]
    rewards: ScenarioRewards = Field(default_factory=ScenarioRewards)


class GameOver(ServerMessageBase):
    """Reserved for win-condition detection; nothing emits it yet."""
    type: Literal["GAME_OVER"] = GAME_OVER
    winner_id: str
    reason: str


ServerMessage = Annotated[
    Union[StateDeltaMessage, ActionRejected, GameCreated, ScenarioStarted, ScenarioEnded, GameOver],
    Field(discriminator="type"),
]

_server_message_adapter = TypeAdapter(ServerMessage)


def serialize_message(message: ServerMessageBase) -> str:
    """camelCase JSON; absent optional fields are left out rather than sent as null."""
    return message.model_dump_json(by_alias=True, exclude_none=True)


def parse_server_message(raw: str | bytes) -> ServerMessageBase:
    """Client-side decode, used by tests and tooling."""
    return _server_message_adapter.validate_json(raw)


# ===== Message Factory Functions =====

def state_delta(
    territories: list[dict[str, Any]] | None = None,
    factions: list[dict[str, Any]] | None = None,
    players: list[dict[str, Any]] | None = None,
    cards: list[dict[str, Any]] | None = None,
) -> StateDeltaMessage:
    return StateDeltaMessage(delta=StateDelta(
        territories=territories,
        factions=factions,
        players=players,
        cards=cards,
    ))


def action_rejected(reason: str) -> ActionRejected:
    return ActionRejected(reason=reason)


def game_created(game_id: str) -> GameCreated:
    return GameCreated(game_id=game_id)


def scenario_started(scenario_id: str, territory_id: str) -> ScenarioStarted:
    return ScenarioStarted(scenario_id=scenario_id, territory_id=territory_id)


def scenario_ended(
    scenario_id: str,
    outcome: str,  # CORP_WIN | RUNNER_WIN | DRAW
    credits: int | None = None,
    victory_points: int | None = None,
    cards: list[str] | None = None,
) -> ScenarioEnded:
    return ScenarioEnded(
        scenario_id=scenario_id,
        outcome=outcome,
        rewards=ScenarioRewards(credits=credits, victory_points=victory_points, cards=cards),
    )


def game_over(winner_id: str, reason: str) -> GameOver:
    return GameOver(winner_id=winner_id, reason=reason)
