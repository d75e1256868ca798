"""Pytest fixtures for tests."""

from collections.abc import Callable
from typing import Any

import pytest

from midi_perform.coalescer import ModifierCoalescer
from midi_perform.keys import Key


class RecordingSimulator:
    """Key simulator that records (action, key) tuples."""

    def __init__(self, log: list | None = None):
        self.log = log if log is not None else []

    def press(self, key: Key) -> None:
        self.log.append(("press", key))

    def release(self, key: Key) -> None:
        self.log.append(("release", key))


class FakeSleep:
    """Records requested sleeps instead of waiting; optionally logs into a shared list."""

    def __init__(self, log: list | None = None):
        self.calls: list[float] = []
        self.log = log

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self.log is not None:
            self.log.append(("sleep", round(seconds * 1000)))

    @property
    def total(self) -> float:
        return sum(self.calls)


class FakeConnection:
    def __init__(self, name: str, callback: Callable[[Any], None]):
        self.name = name
        self.callback = callback
        self.closed = False

    def close(self) -> None:
        self.closed = True


class FakeTransport:
    """In-memory transport whose visible ports are set by the test."""

    def __init__(self, ports: list[str] | None = None):
        self.ports: list[str] = list(ports or [])
        self.unnamed: set[str] = set()
        self.refuse: set[str] = set()
        self.list_error: Exception | None = None
        self.opened: list[FakeConnection] = []

    def list_ports(self) -> list[str]:
        if self.list_error is not None:
            raise self.list_error
        return list(self.ports)

    def port_name(self, port: str) -> str:
        if port in self.unnamed:
            raise OSError(f"cannot resolve name of {port}")
        return port

    def connect(self, port: str, callback: Callable[[Any], None]) -> FakeConnection:
        if port in self.refuse:
            raise OSError("device busy")
        conn = FakeConnection(port, callback)
        self.opened.append(conn)
        return conn

    def connection(self, name: str) -> FakeConnection:
        """Most recently opened connection for a port."""
        return [c for c in self.opened if c.name == name][-1]


@pytest.fixture
def key_log():
    """Shared log of key presses and sleeps, in order."""
    return []


@pytest.fixture
def simulator(key_log):
    return RecordingSimulator(key_log)


@pytest.fixture
def fake_sleep(key_log):
    return FakeSleep(key_log)


@pytest.fixture
def coalescer(simulator):
    return ModifierCoalescer(simulator)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def mapping_file(tmp_path):
    """Write a mapping file and return its path."""
    def write(text: str, name: str = "perform.map"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return write
