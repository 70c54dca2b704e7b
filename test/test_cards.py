"""
Deck files and the card catalog.
"""

import json

import pytest

from endofline.engine.cards import cards_for_faction, get_card, list_decks, load_card_catalog, load_deck
from endofline.engine.state import CORP, RUNNER


def test_bundled_decks_are_listed():
    decks = {d["id"]: d for d in list_decks()}
    assert set(decks) == {"anarch", "weyland"}
    assert decks["weyland"]["faction"] == CORP
    assert decks["weyland"]["size"] == 15
    assert decks["anarch"]["size"] == 12


def test_cards_inherit_deck_faction():
    cards = load_deck("anarch")
    assert all(c.faction == RUNNER for c in cards)
    sure_gamble = cards[0]
    assert sure_gamble.name == "Sure Gamble"
    assert [(c.type, c.amount) for c in sure_gamble.components] == [
        ("CREDIT_COST", 5), ("GAIN_CREDITS", 9),
    ]


def test_missing_deck_raises():
    with pytest.raises(FileNotFoundError):
        load_deck("jinteki")


def test_unknown_component_in_deck_file_raises(tmp_path):
    (tmp_path / "broken.json").write_text(json.dumps({
        "id": "broken",
        "faction": "CORP",
        "cards": [{"id": "b-1", "name": "Bad", "type": "OVERWORLD", "cost": 0,
                   "components": [{"type": "TELEPORT"}]}],
    }))
    with pytest.raises(ValueError, match="TELEPORT"):
        load_deck("broken", decks_dir=tmp_path)


def test_list_decks_of_missing_dir_is_empty(tmp_path):
    assert list_decks(tmp_path / "nope") == []


def test_catalog_lookup():
    catalog = load_card_catalog()
    assert len(catalog) == 27
    assert get_card("anarch-005").faction == RUNNER
    assert get_card("weyland-009").components[-1].damage_type == "MEAT"
    assert get_card("missing-card") is None


def test_cards_for_faction():
    assert len(cards_for_faction(CORP)) == 15
    assert all(c.id.startswith("anarch-") for c in cards_for_faction(RUNNER))
