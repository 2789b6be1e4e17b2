"""Tests for quiet-period response collection."""

import asyncio

import pytest

from mifare_reader.protocol import (
    BusyError, CollectorState, ConnectionClosedError, NoResponseError,
    NotOpenError, ResponseCollector, WriteFailureError,
)

from tests.fakes import FakeTransport

COMMAND = b"\xaa\xbb\x05\x00\x00\x00\x02\x02\x00"


@pytest.fixture
def stream():
    transport = FakeTransport()
    transport.open()
    return transport


@pytest.mark.asyncio
async def test_chunks_are_accumulated_in_order(stream):
    stream.responses.append([b"\xaa\xbb", b"\x06\x00", b"\x00\x00"])
    collector = ResponseCollector(stream)

    response = await collector.send_and_await(COMMAND, timeout=0.05)

    assert response == b"\xaa\xbb\x06\x00\x00\x00"
    assert stream.written == [COMMAND]
    assert collector.state is CollectorState.IDLE
    assert stream.subscriber_count == 0


@pytest.mark.asyncio
async def test_bytes_arriving_during_wait_are_collected(stream):
    collector = ResponseCollector(stream)

    async def late_delivery():
        await asyncio.sleep(0.01)
        stream.deliver(b"\x01")
        await asyncio.sleep(0.01)
        stream.deliver(b"\x02")

    task = asyncio.ensure_future(late_delivery())
    response = await collector.send_and_await(COMMAND, timeout=0.1)
    await task

    assert response == b"\x01\x02"


@pytest.mark.asyncio
async def test_partial_response_is_returned(stream):
    stream.responses.append(b"\xaa")
    response = await ResponseCollector(stream).send_and_await(COMMAND, timeout=0.02)
    assert response == b"\xaa"


@pytest.mark.asyncio
async def test_no_response_raises(stream):
    collector = ResponseCollector(stream)

    with pytest.raises(NoResponseError) as exc_info:
        await collector.send_and_await(COMMAND, timeout=0.02)

    assert exc_info.value.timeout == 0.02
    assert collector.state is CollectorState.IDLE
    assert stream.subscriber_count == 0


@pytest.mark.asyncio
async def test_not_open_raises_before_writing():
    transport = FakeTransport()
    with pytest.raises(NotOpenError):
        await ResponseCollector(transport).send_and_await(COMMAND, timeout=0.02)
    with pytest.raises(NotOpenError):
        await ResponseCollector(None).send_and_await(COMMAND, timeout=0.02)
    assert transport.written == []


@pytest.mark.asyncio
async def test_write_failure_raises_immediately(stream):
    stream.responses.append(WriteFailureError("Write failed: gone"))
    collector = ResponseCollector(stream)

    loop = asyncio.get_running_loop()
    start = loop.time()
    with pytest.raises(WriteFailureError):
        await collector.send_and_await(COMMAND, timeout=1.0)

    assert loop.time() - start < 0.5
    assert collector.state is CollectorState.IDLE
    assert stream.subscriber_count == 0


@pytest.mark.asyncio
async def test_os_error_on_write_becomes_write_failure(stream):
    stream.responses.append(OSError("device removed"))
    with pytest.raises(WriteFailureError, match="device removed"):
        await ResponseCollector(stream).send_and_await(COMMAND, timeout=1.0)


@pytest.mark.asyncio
async def test_second_command_while_awaiting_is_busy(stream):
    collector = ResponseCollector(stream)
    stream.responses.append(b"\x01")

    first = asyncio.ensure_future(collector.send_and_await(COMMAND, timeout=0.05))
    await asyncio.sleep(0)
    assert collector.state is CollectorState.AWAITING_RESPONSE

    with pytest.raises(BusyError):
        await collector.send_and_await(COMMAND, timeout=0.05)

    assert await first == b"\x01"
    assert stream.written == [COMMAND]


@pytest.mark.asyncio
async def test_close_while_awaiting_raises_connection_closed(stream):
    collector = ResponseCollector(stream)
    stream.responses.append(b"\x01")

    pending = asyncio.ensure_future(collector.send_and_await(COMMAND, timeout=5.0))
    await asyncio.sleep(0.01)
    stream.close()

    with pytest.raises(ConnectionClosedError):
        await asyncio.wait_for(pending, timeout=1.0)
    assert collector.state is CollectorState.IDLE


@pytest.mark.asyncio
async def test_idle_gap_resolves_before_timeout(stream):
    stream.responses.append([b"\xaa", b"\xbb"])
    collector = ResponseCollector(stream)

    loop = asyncio.get_running_loop()
    start = loop.time()
    response = await collector.send_and_await(COMMAND, timeout=2.0, idle_gap=0.02)

    assert response == b"\xaa\xbb"
    assert loop.time() - start < 1.0


@pytest.mark.asyncio
async def test_idle_gap_still_bounded_by_timeout(stream):
    with pytest.raises(NoResponseError):
        await ResponseCollector(stream).send_and_await(COMMAND, timeout=0.03, idle_gap=0.01)


@pytest.mark.asyncio
async def test_late_bytes_are_not_carried_into_next_command(stream):
    collector = ResponseCollector(stream)
    stream.responses.extend([b"\x01", b"\x02"])

    assert await collector.send_and_await(COMMAND, timeout=0.02) == b"\x01"
    stream.deliver(b"\xff")
    assert await collector.send_and_await(COMMAND, timeout=0.02) == b"\x02"
