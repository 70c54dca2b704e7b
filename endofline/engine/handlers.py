"""
Message router: the single entry point from the transport into the game.
Each inbound message is validated against its session, applied to the session
state and answered with broadcasts. Rejections raise GameError inside a handler
and go back to the acting connection only, before any state has changed.
"""

import logging
from dataclasses import dataclass
from typing import Callable

from pydantic import ValidationError

from endofline.engine import (
    ACTIONS_PER_TURN,
    RUN_SUCCESS_INFLUENCE,
    RUN_FAILURE_INFLUENCE,
    RUN_SUCCESS_CREDITS,
)
from endofline.engine.actions import (
    CLIENT_MESSAGE_MODELS,
    ClientMessageBase,
    JoinGame,
    PlayCard,
    EndTurn,
    PlaceInfluence,
    RunTerritory,
    TriggerScenario,
    LeaveGame,
    JOIN_GAME,
    PLAY_CARD,
    END_TURN,
    PLACE_INFLUENCE,
    RUN_TERRITORY,
    TRIGGER_SCENARIO,
    LEAVE_GAME,
    parse_client_message,
)
from endofline.engine.cards import get_card
from endofline.engine.components import (
    ExecutionContext,
    StateChange,
    ACTION_COST,
    MODIFY_CREDITS,
    MODIFY_ACTIONS,
    DAMAGE,
    DRAW_CARD,
    INSTALL,
    TRASH_CARD,
)
from endofline.engine.events import (
    ServerMessageBase,
    StateDeltaMessage,
    action_rejected,
    game_created,
    scenario_started,
    scenario_ended,
    serialize_message,
    state_delta,
    CORP_WIN,
    RUNNER_WIN,
)
from endofline.engine.executor import execute_card
from endofline.engine.hexgrid import is_corp_controlled, modify_territory
from endofline.engine.sessions import Connection, GameError, GameSession, SessionRegistry
from endofline.engine.state import GameState, Player, Territory, TurnState, CORP, RUNNER, PHASE_ACTION
from endofline.engine.utils import coin_flip as default_coin_flip, generate_scenario_id

logger = logging.getLogger(__name__)

INVALID_MESSAGE_FORMAT = "Invalid message format"


@dataclass
class HandlerContext:
    """Who sent the message and where targeted replies go."""
    player_id: str
    connection: Connection


def _send(connection: Connection, message: ServerMessageBase) -> None:
    """Targeted send to one connection; a dead connection is logged, not raised."""
    try:
        connection.send(serialize_message(message))
    except Exception:
        logger.warning("Targeted send of %s failed", message.type, exc_info=True)


def _full_state_delta(state: GameState) -> StateDeltaMessage:
    return state_delta(
        players=[p.to_dict() for p in state.players],
        factions=[f.to_dict() for f in state.factions],
        territories=[t.to_dict() for t in state.territories],
    )


def _players_delta(state: GameState) -> StateDeltaMessage:
    return state_delta(players=[p.to_dict() for p in state.players])


class MessageRouter:
    """
    Dispatches inbound messages to one handler per message type.

    registry: the SessionRegistry this router reads and mutates.
    coin_flip: zero-argument callable returning a fair bool, used for runs.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        coin_flip: Callable[[], bool] | None = None,
    ) -> None:
        self.registry = registry
        self.coin_flip = coin_flip or default_coin_flip
        self.handlers: dict[str, Callable[[HandlerContext, ClientMessageBase], None]] = {
            JOIN_GAME: self._handle_join_game,
            PLAY_CARD: self._handle_play_card,
            END_TURN: self._handle_end_turn,
            PLACE_INFLUENCE: self._handle_place_influence,
            RUN_TERRITORY: self._handle_run_territory,
            TRIGGER_SCENARIO: self._handle_trigger_scenario,
            LEAVE_GAME: self._handle_leave_game,
        }
        missing = set(CLIENT_MESSAGE_MODELS) - set(self.handlers)
        if missing:
            raise RuntimeError(f"No handler for message types: {sorted(missing)}")

    # ===== Entry points =====

    def handle_raw(self, ctx: HandlerContext, raw: str | bytes | dict) -> None:
        """Parse a raw frame and dispatch it. Unparseable frames are rejected, not raised."""
        try:
            message = parse_client_message(raw)
        except ValidationError as e:
            logger.debug("Invalid message from %s: %s", ctx.player_id, e)
            _send(ctx.connection, action_rejected(INVALID_MESSAGE_FORMAT))
            return
        self.handle_message(ctx, message)

    def handle_message(self, ctx: HandlerContext, message: ClientMessageBase) -> None:
        handler = self.handlers[message.type]
        try:
            handler(ctx, message)
        except GameError as e:
            logger.debug("Rejected %s from %s: %s", message.type, ctx.player_id, e.reason)
            _send(ctx.connection, action_rejected(e.reason))

    def handle_disconnect(self, player_id: str) -> None:
        self._remove_player(player_id)

    # ===== Shared checks =====

    def _require_session(self, player_id: str) -> GameSession:
        session = self.registry.get_session_by_player(player_id)
        if session is None:
            raise GameError("Not in a game")
        return session

    def _require_turn(self, session: GameSession, player_id: str) -> None:
        if not self.registry.is_player_turn(session, player_id):
            raise GameError("Not your turn")

    @staticmethod
    def _require_player(session: GameSession, player_id: str) -> Player:
        player = session.state.get_player(player_id)
        if player is None:
            raise GameError("Player not found")
        return player

    @staticmethod
    def _require_actions(player: Player) -> None:
        if player.actions <= 0:
            raise GameError("No actions remaining")

    @staticmethod
    def _require_territory(session: GameSession, territory_id: str) -> Territory:
        territory = session.state.get_territory(territory_id)
        if territory is None:
            raise GameError("Territory not found")
        return territory

    # ===== Handlers =====

    def _handle_join_game(self, ctx: HandlerContext, message: JoinGame) -> None:
        """
        Join by game_id (broadcast full state to the session) or create a new
        session (full state + GAME_CREATED to the creator only).
        Validates:
        - Player is not already in a session
        - Session exists and has a free seat (registry)
        """
        if self.registry.get_session_by_player(ctx.player_id) is not None:
            raise GameError("Already in a game")

        if message.game_id:
            session = self.registry.join_session(message.game_id, ctx.player_id, ctx.connection)
            self.registry.broadcast_to_session(session, _full_state_delta(session.state))
            return

        session = self.registry.create_session(ctx.player_id, ctx.connection)
        _send(ctx.connection, _full_state_delta(session.state))
        _send(ctx.connection, game_created(session.id))

    def _handle_place_influence(self, ctx: HandlerContext, message: PlaceInfluence) -> None:
        """
        Shift a territory's corporate influence: +amount for CORP, -amount for RUNNER.
        Validates:
        - Player is in a session and it is their turn
        - Territory exists
        - Player has an action left (costs 1)
        """
        session = self._require_session(ctx.player_id)
        self._require_turn(session, ctx.player_id)
        territory = self._require_territory(session, message.territory_id)
        player = self._require_player(session, ctx.player_id)
        self._require_actions(player)

        role = self.registry.get_player_role(session, ctx.player_id)
        delta = message.amount if role == CORP else -message.amount
        updated = modify_territory(
            territory,
            corporate_influence=territory.corporate_influence + delta,
        )
        session.state.replace_territory(updated)
        player.actions -= 1

        self.registry.broadcast_to_session(session, state_delta(
            territories=[updated.to_dict()],
            players=[p.to_dict() for p in session.state.players],
        ))

    def _handle_run_territory(self, ctx: HandlerContext, message: RunTerritory) -> None:
        """
        Runner contests a Corp-controlled territory on a coin flip.
        Success: influence -20, runner +2 credits. Failure: influence +10.
        Either way the runner spends 1 action; SCENARIO_ENDED is followed by a
        territories + players delta.
        Validates:
        - Player is in a session and it is their turn
        - Player is the RUNNER
        - Territory exists and is Corp-controlled (influence >= 60)
        - Player has an action left
        """
        session = self._require_session(ctx.player_id)
        self._require_turn(session, ctx.player_id)
        if self.registry.get_player_role(session, ctx.player_id) != RUNNER:
            raise GameError("Only Runner can run territories")
        territory = self._require_territory(session, message.territory_id)
        if not is_corp_controlled(territory):
            raise GameError("Can only run Corp-controlled territories")
        player = self._require_player(session, ctx.player_id)
        self._require_actions(player)

        scenario_id = generate_scenario_id("run")
        if self.coin_flip():
            updated = modify_territory(
                territory,
                corporate_influence=territory.corporate_influence + RUN_SUCCESS_INFLUENCE,
            )
            player.credits += RUN_SUCCESS_CREDITS
            result = scenario_ended(scenario_id, RUNNER_WIN, credits=RUN_SUCCESS_CREDITS)
        else:
            updated = modify_territory(
                territory,
                corporate_influence=territory.corporate_influence + RUN_FAILURE_INFLUENCE,
            )
            result = scenario_ended(scenario_id, CORP_WIN)
        player.actions -= 1
        session.state.replace_territory(updated)
        logger.info(
            "Run %s on %s by %s: %s", scenario_id, territory.id, ctx.player_id, result.outcome
        )

        self.registry.broadcast_to_session(session, result)
        self.registry.broadcast_to_session(session, state_delta(
            territories=[updated.to_dict()],
            players=[p.to_dict() for p in session.state.players],
        ))

    def _handle_end_turn(self, ctx: HandlerContext, message: EndTurn) -> None:
        """Pass the turn to the next player (round robin) with a fresh action budget."""
        session = self._require_session(ctx.player_id)
        self._require_turn(session, ctx.player_id)

        players = session.state.players
        current_idx = next(i for i, p in enumerate(players) if p.id == ctx.player_id)
        next_player = players[(current_idx + 1) % len(players)]
        self._start_turn(session.state, next_player)

        self.registry.broadcast_to_session(session, _players_delta(session.state))

    def _handle_play_card(self, ctx: HandlerContext, message: PlayCard) -> None:
        """
        Play a catalog card through the component pipeline and apply its changes.
        A card without an ACTION_COST component costs one action.
        Validates:
        - Player is in a session, it is their turn and they have an action left
        - Card exists and belongs to the player's faction
        - target_id, when given, is a player in this session
        - Every cost component can be paid and no target is missing
          (pipeline; nothing applied on failure or pause)
        """
        session = self._require_session(ctx.player_id)
        self._require_turn(session, ctx.player_id)
        player = self._require_player(session, ctx.player_id)
        self._require_actions(player)

        card = get_card(message.card_id)
        if card is None:
            raise GameError("Card not found")
        if card.faction != self.registry.get_player_role(session, ctx.player_id):
            raise GameError("Cannot play another faction's card")
        targets = []
        if message.target_id:
            if session.state.get_player(message.target_id) is None:
                raise GameError("Target not found")
            targets.append(message.target_id)

        result = execute_card(ExecutionContext(
            game_state=session.state,
            source_card=card,
            source_player_id=ctx.player_id,
            targets=targets,
        ))
        if not result.success:
            raise GameError(result.reason or "Card could not be played")
        if result.pause_reason:
            raise GameError("Target required")

        changes = list(result.state_changes)
        if not any(c.type == ACTION_COST for c in card.components):
            changes.append(StateChange(MODIFY_ACTIONS, ctx.player_id, amount=-1))
        cards_changed = _apply_state_changes(session.state, changes)

        self.registry.broadcast_to_session(session, state_delta(
            players=[p.to_dict() for p in session.state.players],
            cards=[c.to_dict() for c in session.state.cards] if cards_changed else None,
        ))

    def _handle_trigger_scenario(self, ctx: HandlerContext, message: TriggerScenario) -> None:
        """Announce a scenario on a territory. No state changes yet."""
        session = self._require_session(ctx.player_id)
        scenario_id = generate_scenario_id()
        self.registry.broadcast_to_session(
            session, scenario_started(scenario_id, message.territory_id)
        )

    def _handle_leave_game(self, ctx: HandlerContext, message: LeaveGame) -> None:
        self._require_session(ctx.player_id)
        self._remove_player(ctx.player_id)

    # ===== Helpers =====

    @staticmethod
    def _start_turn(state: GameState, player: Player) -> None:
        state.current_turn = TurnState(
            player_id=player.id,
            phase=PHASE_ACTION,
            actions_remaining=ACTIONS_PER_TURN,
        )
        player.actions = ACTIONS_PER_TURN

    def _remove_player(self, player_id: str) -> None:
        """
        Remove from the registry and tell whoever is left.
        If the leaver held the turn, it passes to the first remaining player.
        """
        session = self.registry.remove_player(player_id)
        if session is None or not session.players:
            return
        if session.state.current_turn.player_id == player_id and session.state.players:
            self._start_turn(session.state, session.state.players[0])
        self.registry.broadcast_to_session(session, _players_delta(session.state))


def _apply_state_changes(state: GameState, changes: list[StateChange]) -> bool:
    """
    Apply pipeline output to the session state.
    Returns True when an installed card was added or trashed.
    """
    cards_changed = False
    for change in changes:
        if change.type in (MODIFY_CREDITS, MODIFY_ACTIONS, DAMAGE):
            player = state.get_player(change.target_id)
            if player is None:
                logger.warning("State change %s targets unknown player %s", change.type, change.target_id)
                continue
            amount = change.amount or 0
            if change.type == MODIFY_CREDITS:
                player.credits = max(0, player.credits + amount)
            elif change.type == MODIFY_ACTIONS:
                player.actions = max(0, player.actions + amount)
            else:
                player.health = max(0, player.health - amount)

        elif change.type == INSTALL:
            card = get_card(change.card_id) if change.card_id else None
            if card is not None:
                state.install_card(card.id, change.target_id)
                cards_changed = True

        elif change.type == TRASH_CARD:
            if change.card_id and state.trash_card(change.card_id, change.target_id):
                cards_changed = True

        elif change.type == DRAW_CARD:
            # No hands in this game; drawing has nothing to apply to
            continue

    return cards_changed
