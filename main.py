"""
Main entry point for the End of Line session engine.
Plays a short scripted match between two in-memory connections.
"""

from endofline.engine.events import parse_server_message
from endofline.engine.handlers import HandlerContext, MessageRouter
from endofline.engine.hexgrid import is_corp_controlled, is_runner_controlled
from endofline.engine.sessions import SessionRegistry


class PrintingConnection:
    """Stands in for a socket: decodes and prints every frame it receives."""

    def __init__(self, label: str):
        self.label = label
        self.frames = []

    def send(self, data: str) -> None:
        message = parse_server_message(data)
        self.frames.append(message)
        detail = getattr(message, "reason", None) or getattr(message, "outcome", None) or ""
        print(f"  [{self.label}] <- {message.type} {detail}".rstrip())


def print_board(state) -> None:
    print(f"\n{'='*60}")
    print(f"Turn: {state.current_turn.player_id}")
    print(f"{'='*60}")
    for territory in state.territories:
        if is_corp_controlled(territory):
            owner = "CORP"
        elif is_runner_controlled(territory):
            owner = "RUNNER"
        else:
            owner = "contested"
        print(f"{territory.id:10} {territory.name:22} influence={territory.corporate_influence:3} ({owner})")
    for player in state.players:
        print(f"{player.name}: credits={player.credits} actions={player.actions} health={player.health}")


def main():
    print("End of Line - session engine demo")
    print("=" * 60)

    # Runs always succeed so the demo is repeatable
    registry = SessionRegistry()
    router = MessageRouter(registry, coin_flip=lambda: True)

    corp = HandlerContext("corp-player", PrintingConnection("corp"))
    runner = HandlerContext("runner-player", PrintingConnection("runner"))

    print("\n[Corp creates a game]")
    router.handle_raw(corp, '{"type": "JOIN_GAME"}')
    game_id = corp.connection.frames[-1].game_id
    print(f"Game id: {game_id}")

    print("\n[Runner joins]")
    router.handle_raw(runner, {"type": "JOIN_GAME", "gameId": game_id})
    session = registry.get_session(game_id)

    print("\n[Runner tries to act out of turn]")
    router.handle_raw(runner, {"type": "PLACE_INFLUENCE", "territoryId": "hex-1-1", "amount": 10})

    print("\n[Corp pushes influence into the center and plays a card]")
    router.handle_raw(corp, {"type": "PLACE_INFLUENCE", "territoryId": "hex-1-1", "amount": 15})
    router.handle_raw(corp, {"type": "PLAY_CARD", "cardId": "weyland-001"})
    router.handle_raw(corp, {"type": "END_TURN"})
    print_board(session.state)

    print("\n[Runner runs the center]")
    router.handle_raw(runner, {"type": "RUN_TERRITORY", "territoryId": "hex-1-1"})
    router.handle_raw(runner, {"type": "PLAY_CARD", "cardId": "anarch-010", "targetId": corp.player_id})
    print_board(session.state)

    print("\n[Malformed frame]")
    router.handle_raw(runner, "not json")

    print("\n[Runner disconnects]")
    router.handle_disconnect(runner.player_id)
    print(f"Sessions: {[s.summary() for s in registry.list_sessions()]}")


if __name__ == "__main__":
    main()
