import logging

import fakeredis
import fakeredis.aioredis
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
import ulid

from app.routers import streams


app = FastAPI()
app.include_router(streams.router)


@pytest.fixture
def anyio_backend():
    return "asyncio"


def test_broadcast_reaches_multiple_clients() -> None:
    streams.redis_client = fakeredis.aioredis.FakeRedis(decode_responses=True)
    mid = str(ulid.new())
    with TestClient(app) as client1, TestClient(app) as client2:
        with client1.websocket_connect(f"/matches/{mid}/stream") as ws1, \
             client2.websocket_connect(f"/matches/{mid}/stream") as ws2:
            client1.portal.call(streams.broadcast, mid, {"summary": {"points": {"A": 14, "B": 3}}})
            assert ws1.receive_json() == {"summary": {"points": {"A": 14, "B": 3}}}
            assert ws2.receive_json() == {"summary": {"points": {"A": 14, "B": 3}}}


def test_stream_only_carries_its_own_match() -> None:
    streams.redis_client = fakeredis.aioredis.FakeRedis(decode_responses=True)
    watched, other = str(ulid.new()), str(ulid.new())
    with TestClient(app) as client:
        with client.websocket_connect(f"/matches/{watched}/stream") as ws:
            client.portal.call(streams.broadcast, other, {"status": "completed"})
            client.portal.call(streams.broadcast, watched, {"status": "cancelled"})
            assert ws.receive_json() == {"status": "cancelled"}


@pytest.mark.anyio
async def test_broadcast_logs_and_survives_redis_outage(caplog) -> None:
    server = fakeredis.FakeServer()
    server.connected = False
    streams.redis_client = fakeredis.aioredis.FakeRedis(server=server, decode_responses=True)
    with caplog.at_level(logging.WARNING, logger="app.routers.streams"):
        await streams.broadcast("m1", {"status": "completed"})
    assert "Could not broadcast update for match m1" in caplog.text
