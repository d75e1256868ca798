"""
MIDI device management with hot-plug support.

Polls the transport for input ports, keeps one connection per device name,
and routes every connection's messages to a single handler.
"""

import threading
import time
from collections.abc import Callable
from typing import Any, Protocol

import mido

from .errors import TransportError
from .messages import MidiMessage, UnknownMessage, parse_midi_message

MessageHandler = Callable[[str, MidiMessage | UnknownMessage], None]


class Connection(Protocol):
    """An open input port."""

    def close(self) -> None:
        ...


class Transport(Protocol):
    """Source of MIDI input ports."""

    def list_ports(self) -> list[Any]:
        """Return the currently visible input ports."""
        ...

    def port_name(self, port: Any) -> str:
        """Resolve a port's display name."""
        ...

    def connect(self, port: Any, callback: Callable[[Any], None]) -> Connection:
        """Open a port; callback receives each raw message on the transport's thread."""
        ...


class MidoTransport:
    """Transport backed by mido's default backend (python-rtmidi)."""

    def __init__(self, backend: str | None = None):
        try:
            self._backend = mido.Backend(backend, load=True)
        except Exception as e:
            raise TransportError(f"Couldn't initialize MIDI backend: {e}") from e

    def list_ports(self) -> list[str]:
        try:
            return self._backend.get_input_names()
        except Exception as e:
            raise TransportError(f"Couldn't list MIDI input ports: {e}") from e

    def port_name(self, port: str) -> str:
        if not port:
            raise ValueError("MIDI port has no name")
        return port

    def connect(self, port: str, callback: Callable[[Any], None]) -> mido.ports.BaseInput:
        return self._backend.open_input(port, callback=callback)


def list_midi_ports(transport: Transport | None = None) -> list[str]:
    """List the names of all available MIDI input ports."""
    transport = transport or MidoTransport()
    names = []
    for port in transport.list_ports():
        try:
            names.append(transport.port_name(port))
        except Exception:
            continue
    return names


class DeviceManager:
    """
    Keeps connections to every visible MIDI input device.

    Each poll connects newly visible ports and closes connections whose
    port disappeared. A device that comes back is connected afresh.
    """

    def __init__(
        self,
        transport: Transport,
        on_message: MessageHandler,
        device_filter: str | None = None,
        poll_interval: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.transport = transport
        self.on_message = on_message
        self.device_filter = device_filter
        self.poll_interval = poll_interval
        self._sleep = sleep
        self.connections: dict[str, Connection] = {}

    def poll(self) -> None:
        """
        Run one discovery cycle.

        Raises:
            TransportError: If the ports cannot be listed.
        """
        ports = self.transport.list_ports()
        seen: set[str] = set()

        for port in ports:
            try:
                name = self.transport.port_name(port)
            except Exception:
                continue
            seen.add(name)

            if name in self.connections:
                continue

            if self.device_filter is not None and self.device_filter != name:
                continue

            self._connect(port, name)

        for name in [name for name in self.connections if name not in seen]:
            self._disconnect(name)

    def run(self, stop_event: threading.Event | None = None) -> None:
        """Poll forever, or until stop_event is set."""
        while stop_event is None or not stop_event.is_set():
            self.poll()
            if stop_event is not None:
                if stop_event.wait(self.poll_interval):
                    return
            else:
                self._sleep(self.poll_interval)

    def close(self) -> None:
        """Close every open connection."""
        for name in list(self.connections):
            self._disconnect(name)

    def _connect(self, port: Any, name: str) -> None:
        try:
            conn = self.transport.connect(port, self._make_callback(name))
        except Exception as e:
            print(f"Unable to connect to device {name}: {e}")
            return
        self.connections[name] = conn
        print(f"Connection established to {name}")

    def _disconnect(self, name: str) -> None:
        conn = self.connections.pop(name)
        try:
            conn.close()
        except Exception as e:
            print(f"  -> Error closing {name}: {e}")
        print(f"Disconnected from {name}")

    def _make_callback(self, name: str) -> Callable[[Any], None]:
        def callback(raw_msg) -> None:
            try:
                msg = parse_midi_message(raw_msg)
            except Exception as e:
                print(f"[{name}] Unparseable message {raw_msg!r}: {e}")
                return
            self.on_message(name, msg)

        return callback
