"""
Card components: factories for the data records and the behaviour behind each tag.
Each behaviour reads the execution context and returns a ComponentResult holding
declarative state changes; nothing here mutates game state.
"""

from dataclasses import dataclass, field
from typing import Any, Callable

from endofline.engine.state import Card, CardComponent, GameState, DAMAGE_TYPES

# Cost components
CREDIT_COST = "CREDIT_COST"
ACTION_COST = "ACTION_COST"
TRASH_COST = "TRASH_COST"
# Target components
SELF_TARGET = "SELF_TARGET"
SINGLE_TARGET = "SINGLE_TARGET"
MULTI_TARGET = "MULTI_TARGET"
# Effect components
DEAL_DAMAGE = "DEAL_DAMAGE"
GAIN_CREDITS = "GAIN_CREDITS"
DRAW_CARDS = "DRAW_CARDS"
INSTALL_CARD = "INSTALL_CARD"

# State change types
MODIFY_CREDITS = "MODIFY_CREDITS"
MODIFY_ACTIONS = "MODIFY_ACTIONS"
DAMAGE = "DEAL_DAMAGE"
DRAW_CARD = "DRAW_CARD"
INSTALL = "INSTALL_CARD"
TRASH_CARD = "TRASH_CARD"

# Pause reasons
AWAITING_TARGET_SELECTION = "AWAITING_TARGET_SELECTION"
AWAITING_USER_INPUT = "AWAITING_USER_INPUT"
AWAITING_RESPONSE = "AWAITING_RESPONSE"


@dataclass
class StateChange:
    """One declarative change produced by a component."""
    type: str
    target_id: str
    amount: int | None = None
    damage_type: str | None = None
    card_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.type, "targetId": self.target_id}
        if self.amount is not None:
            out["amount"] = self.amount
        if self.damage_type is not None:
            out["damageType"] = self.damage_type
        if self.card_id is not None:
            out["cardId"] = self.card_id
        return out


@dataclass
class ExecutionContext:
    game_state: GameState
    source_card: Card
    source_player_id: str
    targets: list[str] = field(default_factory=list)
    user_input: dict[str, Any] | None = None


@dataclass
class ComponentResult:
    success: bool = True
    reason: str | None = None
    state_changes: list[StateChange] = field(default_factory=list)
    pause_reason: str | None = None


def _fail(reason: str) -> ComponentResult:
    return ComponentResult(success=False, reason=reason)


# ===== Factories =====

def credit_cost(amount: int) -> CardComponent:
    return CardComponent(CREDIT_COST, amount=amount)


def action_cost(amount: int) -> CardComponent:
    return CardComponent(ACTION_COST, amount=amount)


def trash_cost() -> CardComponent:
    return CardComponent(TRASH_COST)


def self_target() -> CardComponent:
    return CardComponent(SELF_TARGET)


def single_target() -> CardComponent:
    return CardComponent(SINGLE_TARGET)


def multi_target(amount: int) -> CardComponent:
    return CardComponent(MULTI_TARGET, amount=amount)


def deal_damage(amount: int, damage_type: str) -> CardComponent:
    if damage_type not in DAMAGE_TYPES:
        raise ValueError(f"Unknown damage type: {damage_type}")
    return CardComponent(DEAL_DAMAGE, amount=amount, damage_type=damage_type)


def gain_credits(amount: int) -> CardComponent:
    return CardComponent(GAIN_CREDITS, amount=amount)


def draw_cards(amount: int) -> CardComponent:
    return CardComponent(DRAW_CARDS, amount=amount)


def install_card() -> CardComponent:
    return CardComponent(INSTALL_CARD)


# ===== Behaviour per tag =====

def _execute_credit_cost(component: CardComponent, ctx: ExecutionContext) -> ComponentResult:
    player = ctx.game_state.get_player(ctx.source_player_id)
    if player is None:
        return _fail("Player not found")
    if player.credits < component.amount:
        return _fail("Insufficient credits")
    return ComponentResult(state_changes=[
        StateChange(MODIFY_CREDITS, ctx.source_player_id, amount=-component.amount),
    ])


def _execute_action_cost(component: CardComponent, ctx: ExecutionContext) -> ComponentResult:
    player = ctx.game_state.get_player(ctx.source_player_id)
    if player is None:
        return _fail("Player not found")
    if player.actions < component.amount:
        return _fail("Insufficient actions")
    return ComponentResult(state_changes=[
        StateChange(MODIFY_ACTIONS, ctx.source_player_id, amount=-component.amount),
    ])


def _execute_trash_cost(component: CardComponent, ctx: ExecutionContext) -> ComponentResult:
    return ComponentResult(state_changes=[
        StateChange(TRASH_CARD, ctx.source_player_id, card_id=ctx.source_card.id),
    ])


def _execute_self_target(component: CardComponent, ctx: ExecutionContext) -> ComponentResult:
    return ComponentResult()


def _execute_single_target(component: CardComponent, ctx: ExecutionContext) -> ComponentResult:
    if not ctx.targets:
        return ComponentResult(pause_reason=AWAITING_TARGET_SELECTION)
    return ComponentResult()


def _execute_multi_target(component: CardComponent, ctx: ExecutionContext) -> ComponentResult:
    if len(ctx.targets) < max(component.amount, 1):
        return ComponentResult(pause_reason=AWAITING_TARGET_SELECTION)
    return ComponentResult()


def _execute_deal_damage(component: CardComponent, ctx: ExecutionContext) -> ComponentResult:
    if not ctx.targets:
        return _fail("No target specified")
    return ComponentResult(state_changes=[
        StateChange(
            DAMAGE,
            ctx.targets[0],
            amount=component.amount,
            damage_type=component.damage_type,
        ),
    ])


def _execute_gain_credits(component: CardComponent, ctx: ExecutionContext) -> ComponentResult:
    return ComponentResult(state_changes=[
        StateChange(MODIFY_CREDITS, ctx.source_player_id, amount=component.amount),
    ])


def _execute_draw_cards(component: CardComponent, ctx: ExecutionContext) -> ComponentResult:
    return ComponentResult(state_changes=[
        StateChange(DRAW_CARD, ctx.source_player_id, amount=component.amount),
    ])


def _execute_install_card(component: CardComponent, ctx: ExecutionContext) -> ComponentResult:
    return ComponentResult(state_changes=[
        StateChange(INSTALL, ctx.source_player_id, card_id=ctx.source_card.id),
    ])


COMPONENT_EXECUTORS: dict[str, Callable[[CardComponent, ExecutionContext], ComponentResult]] = {
    CREDIT_COST: _execute_credit_cost,
    ACTION_COST: _execute_action_cost,
    TRASH_COST: _execute_trash_cost,
    SELF_TARGET: _execute_self_target,
    SINGLE_TARGET: _execute_single_target,
    MULTI_TARGET: _execute_multi_target,
    DEAL_DAMAGE: _execute_deal_damage,
    GAIN_CREDITS: _execute_gain_credits,
    DRAW_CARDS: _execute_draw_cards,
    INSTALL_CARD: _execute_install_card,
}


def execute_component(component: CardComponent, ctx: ExecutionContext) -> ComponentResult:
    """Run the behaviour registered for component.type."""
    executor = COMPONENT_EXECUTORS.get(component.type)
    if executor is None:
        return _fail(f"Unknown component: {component.type}")
    return executor(component, ctx)
