"""Shared fixtures: an in-memory transport and fast reader configs."""

import pytest
import pytest_asyncio

from mifare_reader.protocol import MifareReader, ReaderConfig

from tests.fakes import OPEN_OK, FakeTransport


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def factory(transport):
    def make(port, baudrate):
        transport.port = port
        transport.baudrate = baudrate
        return transport
    return make


@pytest.fixture
def fast_config():
    return ReaderConfig(timeout=0.05, open_timeout=0.05, retry_delay=0.0, max_retries=3)


@pytest.fixture
def reader(fast_config, factory):
    return MifareReader(fast_config, transport_factory=factory)


@pytest_asyncio.fixture
async def open_reader(reader, transport):
    transport.responses.append(OPEN_OK)
    assert await reader.initialize("COM5", 19200)
    transport.written.clear()
    return reader
