"""
Static card definitions.
Starter decks live under data/decks/<deck_id>.json: { id, display_name, faction, cards: [...] }.
Each card's components are data records ({"type": ..., "amount": ..., "damageType": ...}).
"""

import json
from functools import lru_cache
from pathlib import Path

from endofline.engine.components import COMPONENT_EXECUTORS
from endofline.engine.state import Card, CardComponent

DATA_DIR = Path(__file__).parent.parent / "data"
DECKS_DIR = DATA_DIR / "decks"


def list_decks(decks_dir: Path | str | None = None) -> list[dict]:
    """Return [{ id, display_name, faction, size }, ...] for every deck file."""
    decks_dir = Path(decks_dir) if decks_dir is not None else DECKS_DIR
    out = []
    if not decks_dir.exists():
        return out
    for path in sorted(decks_dir.glob("*.json")):
        with open(path, "r") as f:
            data = json.load(f)
        out.append({
            "id": data.get("id", path.stem),
            "display_name": data.get("display_name", path.stem),
            "faction": data.get("faction"),
            "size": len(data.get("cards") or []),
        })
    return out


def load_deck(deck_id: str, decks_dir: Path | str | None = None) -> list[Card]:
    """
    Load one deck by id. Cards inherit the deck's faction unless they name their own.
    Raises FileNotFoundError for a missing deck and ValueError for unknown component types.
    """
    decks_dir = Path(decks_dir) if decks_dir is not None else DECKS_DIR
    path = decks_dir / f"{deck_id}.json"
    if not path.exists():
        raise FileNotFoundError(f"Deck not found: {deck_id}")
    with open(path, "r") as f:
        data = json.load(f)

    deck_faction = data.get("faction")
    cards = []
    for raw in data.get("cards") or []:
        if deck_faction and "faction" not in raw:
            raw = {**raw, "faction": deck_faction}
        card = Card.from_dict(raw)
        for component in card.components:
            _check_component(card, component)
        cards.append(card)
    return cards


def _check_component(card: Card, component: CardComponent) -> None:
    if component.type not in COMPONENT_EXECUTORS:
        raise ValueError(f"Card {card.id} has unknown component type: {component.type}")


@lru_cache(maxsize=None)
def load_card_catalog() -> dict[str, Card]:
    """All cards from every bundled deck, keyed by card id."""
    catalog: dict[str, Card] = {}
    for deck in list_decks():
        for card in load_deck(deck["id"]):
            if card.id in catalog:
                raise ValueError(f"Duplicate card id across decks: {card.id}")
            catalog[card.id] = card
    return catalog


def get_card(card_id: str) -> Card | None:
    return load_card_catalog().get(card_id)


def cards_for_faction(faction: str) -> list[Card]:
    return [c for c in load_card_catalog().values() if c.faction == faction]
