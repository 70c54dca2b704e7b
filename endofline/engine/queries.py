"""
Read-side helpers.
These never mutate their inputs: the merge functions implement how a client
folds STATE_DELTA payloads into its copy of the state, and territory_control
summarises the board for listings.
"""

from typing import Any

from endofline.engine.events import StateDelta
from endofline.engine.hexgrid import is_corp_controlled, is_runner_controlled
from endofline.engine.state import GameState

DELTA_KEYS = ("territories", "factions", "players", "cards")


def merge_by_id(existing: list[dict[str, Any]], updates: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Merge updates into existing by "id".
    Matching entries are replaced whole, unknown ids are appended, nothing is
    removed and the existing order is kept.
    """
    merged = list(existing)
    index = {entry.get("id"): i for i, entry in enumerate(merged)}
    for update in updates:
        entry_id = update.get("id")
        if entry_id in index:
            merged[index[entry_id]] = update
        else:
            index[entry_id] = len(merged)
            merged.append(update)
    return merged


def apply_state_delta(snapshot: dict[str, Any], delta: StateDelta | dict[str, Any]) -> dict[str, Any]:
    """
    Return a new snapshot with every collection present in delta merged by id.
    Collections absent from the delta are left as they were.
    """
    if isinstance(delta, StateDelta):
        delta = delta.model_dump(exclude_none=True)
    out = dict(snapshot)
    for key in DELTA_KEYS:
        updates = delta.get(key)
        if updates is None:
            continue
        out[key] = merge_by_id(snapshot.get(key) or [], updates)
    return out


def territory_control(state: GameState) -> dict[str, int]:
    """Count territories by controller: corp (>= 60), runner (<= 40), contested."""
    corp = sum(1 for t in state.territories if is_corp_controlled(t))
    runner = sum(1 for t in state.territories if is_runner_controlled(t))
    return {
        "corp": corp,
        "runner": runner,
        "contested": len(state.territories) - corp - runner,
    }
