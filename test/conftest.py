"""
Shared fixtures: in-memory connections, a fixed coin and a started two-player match.
"""

import pytest

from endofline.engine.events import parse_server_message
from endofline.engine.handlers import HandlerContext, MessageRouter
from endofline.engine.sessions import SessionRegistry


class FakeConnection:
    """Records every frame sent to it."""

    def __init__(self):
        self.sent = []

    def send(self, data: str) -> None:
        self.sent.append(data)

    @property
    def messages(self):
        return [parse_server_message(d) for d in self.sent]

    def of_type(self, message_type: str):
        return [m for m in self.messages if m.type == message_type]

    def clear(self):
        self.sent.clear()


class FailingConnection:
    """A connection whose socket has gone away."""

    def __init__(self):
        self.attempts = 0

    def send(self, data: str) -> None:
        self.attempts += 1
        raise ConnectionError("socket closed")


class FixedCoin:
    def __init__(self, result: bool = True):
        self.result = result
        self.calls = 0

    def __call__(self) -> bool:
        self.calls += 1
        return self.result


@pytest.fixture
def registry():
    return SessionRegistry()


@pytest.fixture
def coin():
    return FixedCoin()


@pytest.fixture
def router(registry, coin):
    return MessageRouter(registry, coin_flip=coin)


@pytest.fixture
def corp():
    return HandlerContext(player_id="corp-1", connection=FakeConnection())


@pytest.fixture
def runner():
    return HandlerContext(player_id="runner-1", connection=FakeConnection())


@pytest.fixture
def match(router, registry, corp, runner):
    """Corp creates, runner joins; frames from setup are discarded."""
    router.handle_raw(corp, {"type": "JOIN_GAME"})
    session = registry.get_session_by_player(corp.player_id)
    router.handle_raw(runner, {"type": "JOIN_GAME", "gameId": session.id})
    corp.connection.clear()
    runner.connection.clear()
    return session


@pytest.fixture
def fake_connection_factory():
    return FakeConnection


@pytest.fixture
def failing_connection_factory():
    return FailingConnection
