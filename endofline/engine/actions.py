"""
Client -> server messages.
A closed set of variants discriminated on "type"; anything that does not parse
as one of them is a protocol error.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

JOIN_GAME = "JOIN_GAME"
PLAY_CARD = "PLAY_CARD"
END_TURN = "END_TURN"
PLACE_INFLUENCE = "PLACE_INFLUENCE"
RUN_TERRITORY = "RUN_TERRITORY"
TRIGGER_SCENARIO = "TRIGGER_SCENARIO"
LEAVE_GAME = "LEAVE_GAME"


class ClientMessageBase(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class JoinGame(ClientMessageBase):
    """Join an existing game by id, or create one when game_id is omitted."""
    type: Literal["JOIN_GAME"] = JOIN_GAME
    game_id: str | None = None


class PlayCard(ClientMessageBase):
    type: Literal["PLAY_CARD"] = PLAY_CARD
    card_id: str
    target_id: str | None = None


class EndTurn(ClientMessageBase):
    type: Literal["END_TURN"] = END_TURN


class PlaceInfluence(ClientMessageBase):
    type: Literal["PLACE_INFLUENCE"] = PLACE_INFLUENCE
    territory_id: str
    amount: int = Field(gt=0)


class RunTerritory(ClientMessageBase):
    type: Literal["RUN_TERRITORY"] = RUN_TERRITORY
    territory_id: str


class TriggerScenario(ClientMessageBase):
    type: Literal["TRIGGER_SCENARIO"] = TRIGGER_SCENARIO
    territory_id: str


class LeaveGame(ClientMessageBase):
    type: Literal["LEAVE_GAME"] = LEAVE_GAME


ClientMessage = Annotated[
    Union[JoinGame, PlayCard, EndTurn, PlaceInfluence, RunTerritory, TriggerScenario, LeaveGame],
    Field(discriminator="type"),
]

# type -> model; the router checks it has a handler for every key
CLIENT_MESSAGE_MODELS: dict[str, type[ClientMessageBase]] = {
    JOIN_GAME: JoinGame,
    PLAY_CARD: PlayCard,
    END_TURN: EndTurn,
    PLACE_INFLUENCE: PlaceInfluence,
    RUN_TERRITORY: RunTerritory,
    TRIGGER_SCENARIO: TriggerScenario,
    LEAVE_GAME: LeaveGame,
}

_client_message_adapter = TypeAdapter(ClientMessage)


def parse_client_message(raw: str | bytes | dict[str, Any]) -> ClientMessageBase:
    """
    Parse a raw frame (JSON text or an already decoded dict).
    Raises pydantic.ValidationError for bad JSON, unknown types or missing fields.
    """
    if isinstance(raw, dict):
        return _client_message_adapter.validate_python(raw)
    return _client_message_adapter.validate_json(raw)
