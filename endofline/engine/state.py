"""
Game state representation.
Plain dataclasses owned by a session; to_dict() produces the camelCase wire form
used in STATE_DELTA payloads, from_dict() reads it back.
"""

from dataclasses import dataclass, field
from typing import Any

# Territory types
CORPORATE = "CORPORATE"
FRINGE = "FRINGE"
UNDERGROUND = "UNDERGROUND"

# Faction types (also the two player roles)
CORP = "CORP"
RUNNER = "RUNNER"

# Card types
OVERWORLD = "OVERWORLD"
SCENARIO = "SCENARIO"

# Turn phases; only ACTION is exercised
PHASE_ACTION = "ACTION"
PHASE_DISCARD = "DISCARD"
PHASE_DRAW = "DRAW"

# Damage types
NET = "NET"
MEAT = "MEAT"
BRAIN = "BRAIN"
DAMAGE_TYPES = (NET, MEAT, BRAIN)


def _int(value: Any, default: int) -> int:
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default


@dataclass
class Territory:
    """A node of the hex board. Bounded fields are clamped by hexgrid.modify_territory."""
    id: str  # e.g. "hex-1-1"
    name: str
    type: str  # CORPORATE | FRINGE | UNDERGROUND
    security_level: int  # 1-5
    resource_value: int  # 1-5
    stability_index: int  # 0-100
    corporate_influence: int  # 0-100, the contested value
    adjacent_territory_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "securityLevel": self.security_level,
            "resourceValue": self.resource_value,
            "stabilityIndex": self.stability_index,
            "corporateInfluence": self.corporate_influence,
            "adjacentTerritoryIds": list(self.adjacent_territory_ids),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Territory":
        adjacent = data.get("adjacentTerritoryIds")
        if not isinstance(adjacent, list):
            adjacent = []
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            type=str(data.get("type") or FRINGE),
            security_level=_int(data.get("securityLevel"), 1),
            resource_value=_int(data.get("resourceValue"), 3),
            stability_index=_int(data.get("stabilityIndex"), 100),
            corporate_influence=_int(data.get("corporateInfluence"), 50),
            adjacent_territory_ids=[str(x) for x in adjacent],
        )


@dataclass
class Faction:
    """Aggregate resources and victory points for one side."""
    id: str  # "corp" or "runner"
    type: str  # CORP | RUNNER
    resources: int
    victory_points: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "resources": self.resources,
            "victoryPoints": self.victory_points,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Faction":
        return cls(
            id=str(data.get("id") or ""),
            type=str(data.get("type") or CORP),
            resources=_int(data.get("resources"), 0),
            victory_points=_int(data.get("victoryPoints"), 0),
        )


@dataclass
class Player:
    """A connected participant. credits and actions never go below zero."""
    id: str
    name: str
    faction_id: str
    credits: int
    actions: int
    health: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "factionId": self.faction_id,
            "credits": self.credits,
            "actions": self.actions,
            "health": self.health,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Player":
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            faction_id=str(data.get("factionId") or ""),
            credits=_int(data.get("credits"), 0),
            actions=_int(data.get("actions"), 0),
            health=_int(data.get("health"), 0),
        )


@dataclass(frozen=True)
class CardComponent:
    """
    A typed unit of cost, targeting or effect behaviour attached to a card.
    Data only: the behaviour for each tag lives in components.py.
    """
    type: str  # e.g. "CREDIT_COST", "DEAL_DAMAGE"
    amount: int = 0
    damage_type: str | None = None  # DEAL_DAMAGE only

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.type}
        if self.amount:
            out["amount"] = self.amount
        if self.damage_type is not None:
            out["damageType"] = self.damage_type
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CardComponent":
        damage_type = data.get("damageType")
        return cls(
            type=str(data.get("type") or ""),
            amount=_int(data.get("amount"), 0),
            damage_type=str(damage_type) if damage_type is not None else None,
        )


@dataclass(frozen=True)
class Card:
    """Immutable card definition from a deck catalog."""
    id: str
    name: str
    type: str  # OVERWORLD | SCENARIO
    faction: str  # CORP | RUNNER
    cost: int
    components: tuple[CardComponent, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "faction": self.faction,
            "cost": self.cost,
            "components": [c.to_dict() for c in self.components],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Card":
        components = data.get("components") or []
        if not isinstance(components, list):
            components = []
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            type=str(data.get("type") or OVERWORLD),
            faction=str(data.get("faction") or CORP),
            cost=_int(data.get("cost"), 0),
            components=tuple(
                CardComponent.from_dict(c) for c in components if isinstance(c, dict)
            ),
        )


@dataclass
class InstalledCard:
    """
    One copy of a catalog card in play. id is unique within the session so
    repeated installs of the same card stay distinct entries in deltas.
    Trashed copies are flagged rather than removed.
    """
    id: str  # e.g. "weyland-005-2"
    card_id: str  # catalog id
    owner_id: str
    trashed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "cardId": self.card_id,
            "ownerId": self.owner_id,
            "trashed": self.trashed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InstalledCard":
        return cls(
            id=str(data.get("id") or ""),
            card_id=str(data.get("cardId") or ""),
            owner_id=str(data.get("ownerId") or ""),
            trashed=bool(data.get("trashed", False)),
        )


@dataclass
class TurnState:
    """Whose turn it is. Only end-turn transitions replace it."""
    player_id: str
    phase: str = PHASE_ACTION
    actions_remaining: int = 3

    def to_dict(self) -> dict[str, Any]:
        return {
            "playerId": self.player_id,
            "phase": self.phase,
            "actionsRemaining": self.actions_remaining,
        }


@dataclass
class GameState:
    """Complete state of one match."""
    territories: list[Territory]
    factions: list[Faction]
    players: list[Player]
    current_turn: TurnState
    # Cards installed during play (INSTALL_CARD effects)
    cards: list[InstalledCard] = field(default_factory=list)
    install_count: int = 0

    def install_card(self, card_id: str, owner_id: str) -> InstalledCard:
        self.install_count += 1
        installed = InstalledCard(
            id=f"{card_id}-{self.install_count}",
            card_id=card_id,
            owner_id=owner_id,
        )
        self.cards.append(installed)
        return installed

    def trash_card(self, card_id: str, owner_id: str) -> InstalledCard | None:
        """
        Flag one live copy as trashed: the copy with that installed id, else the
        owner's earliest live copy of that catalog card. None if nothing matches.
        """
        live = [c for c in self.cards if not c.trashed]
        target = next((c for c in live if c.id == card_id), None)
        if target is None:
            target = next(
                (c for c in live if c.card_id == card_id and c.owner_id == owner_id), None
            )
        if target is not None:
            target.trashed = True
        return target

    def get_player(self, player_id: str) -> Player | None:
        return next((p for p in self.players if p.id == player_id), None)

    def get_territory(self, territory_id: str) -> Territory | None:
        return next((t for t in self.territories if t.id == territory_id), None)

    def replace_territory(self, territory: Territory) -> None:
        """Swap in an updated territory, keeping board order."""
        for i, existing in enumerate(self.territories):
            if existing.id == territory.id:
                self.territories[i] = territory
                return
        raise KeyError(territory.id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "territories": [t.to_dict() for t in self.territories],
            "factions": [f.to_dict() for f in self.factions],
            "players": [p.to_dict() for p in self.players],
            "cards": [c.to_dict() for c in self.cards],
            "currentTurn": self.current_turn.to_dict(),
        }
