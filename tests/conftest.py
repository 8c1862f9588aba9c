"""Pytest configuration for hotstats tests."""

import asyncio
import random

import pytest
import pytest_asyncio

from hotstats.client import StatsdClient
from hotstats.transport.base import Transport
from hotstats.transport.base import TransportError
from hotstats.transport.framing import serve


class Receiver:
    """TCP statsd server that queues every metric line it receives."""

    def __init__(self):
        self.lines = asyncio.Queue()
        self.server = None
        self.host = None
        self.port = None

    async def start(self):
        self.server = await serve('127.0.0.1', 0, self.lines.put_nowait)
        self.host, self.port = self.server.sockets[0].getsockname()[:2]

    async def next_line(self, timeout=5):
        return await asyncio.wait_for(self.lines.get(), timeout)

    async def close(self):
        self.server.close()
        await self.server.wait_closed()


class RecordingTransport(Transport):
    """In-memory transport with per-stat delays and failures."""

    def __init__(self, delays=None, failures=()):
        super().__init__('localhost', 8125)
        self.delays = delays or {}
        self.failures = set(failures)
        self.lines = []

    async def send(self, line):
        stat = line.split(':', 1)[0]
        await asyncio.sleep(self.delays.get(stat, 0))

        if stat in self.failures:
            raise TransportError('send failed: {}'.format(stat))

        self.lines.append(line)
        return len(line)


@pytest.fixture
def fixed_draw(monkeypatch):
    """Make every sampling draw return 0.42."""
    monkeypatch.setattr(random, 'random', lambda: 0.42)
    return 0.42


@pytest_asyncio.fixture
async def receiver():
    """Provide a running TCP receiver."""
    server = Receiver()
    await server.start()
    yield server
    await server.close()


@pytest_asyncio.fixture
async def tcp_client(receiver):
    """Provide a factory for TCP clients connected to the receiver; all are closed on teardown."""
    clients = []

    def make_client(**options):
        client = StatsdClient(host=receiver.host, port=receiver.port, protocol='tcp', **options)
        clients.append(client)
        return client

    yield make_client

    for client in clients:
        await client.close()


@pytest.fixture
def mock_client():
    """Provide a factory for clients in mock mode."""
    def make_client(**options):
        return StatsdClient(mock=True, **options)

    return make_client
