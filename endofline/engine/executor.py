"""
Card execution pipeline.
Runs a card's components in fixed priority order (cost -> target -> effect) and
accumulates the state changes they declare. Applying those changes is the
caller's job.
"""

from dataclasses import dataclass, field

from endofline.engine.components import (
    ExecutionContext,
    StateChange,
    execute_component,
    CREDIT_COST,
    ACTION_COST,
    TRASH_COST,
    SELF_TARGET,
    SINGLE_TARGET,
    MULTI_TARGET,
    DEAL_DAMAGE,
    GAIN_CREDITS,
    DRAW_CARDS,
    INSTALL_CARD,
)
from endofline.engine.state import CardComponent

# Lower runs first
COMPONENT_ORDER = {
    CREDIT_COST: 0,
    ACTION_COST: 1,
    TRASH_COST: 2,
    SELF_TARGET: 10,
    SINGLE_TARGET: 11,
    MULTI_TARGET: 12,
    DEAL_DAMAGE: 20,
    GAIN_CREDITS: 21,
    DRAW_CARDS: 22,
    INSTALL_CARD: 23,
}
UNKNOWN_ORDER = 999


@dataclass
class CardExecutionResult:
    success: bool
    reason: str | None = None
    state_changes: list[StateChange] = field(default_factory=list)
    pause_reason: str | None = None


def sort_components(components) -> list[CardComponent]:
    """Stable sort by priority band; ties keep their declaration order."""
    return sorted(components, key=lambda c: COMPONENT_ORDER.get(c.type, UNKNOWN_ORDER))


def execute_card(ctx: ExecutionContext) -> CardExecutionResult:
    """
    Execute ctx.source_card against ctx.game_state.

    - First failing component aborts the whole card: success=False, its reason,
      and no state changes at all (earlier changes are dropped).
    - A component that pauses stops the run: success=True with the changes
      accumulated so far and the pause_reason.
    - Otherwise success=True with every component's changes in execution order.
    """
    accumulated: list[StateChange] = []

    for component in sort_components(ctx.source_card.components):
        result = execute_component(component, ctx)

        if not result.success:
            return CardExecutionResult(success=False, reason=result.reason)

        accumulated.extend(result.state_changes)

        if result.pause_reason:
            return CardExecutionResult(
                success=True, state_changes=accumulated, pause_reason=result.pause_reason
            )

    return CardExecutionResult(success=True, state_changes=accumulated)
