import asyncio
from starlette.websockets import WebSocketState
from app.infrastructure.realtime import ConnectionRegistry

class FakeSocket:
    def __init__(self, fail=False, state=WebSocketState.CONNECTED):
        self.fail = fail
        self.client_state = state
        self.application_state = state
        self.received = []

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket closed")
        self.received.append(data)

def test_broadcast_reaches_every_open_connection():
    registry = ConnectionRegistry()
    first, second = FakeSocket(), FakeSocket()
    registry.add(first)
    registry.add(second)

    delivered = asyncio.run(registry.broadcast("packageUpdate", {"tracking_id": "ST-ABC123XYZ"}))

    assert delivered == 2
    assert first.received == [{"type": "packageUpdate", "data": {"tracking_id": "ST-ABC123XYZ"}}]
    assert second.received == first.received

def test_failed_send_drops_only_that_connection():
    registry = ConnectionRegistry()
    healthy, broken = FakeSocket(), FakeSocket(fail=True)
    registry.add(healthy)
    registry.add(broken)

    assert asyncio.run(registry.broadcast("chatMessage", {"body": "hi"})) == 1
    assert len(registry) == 1
    assert len(healthy.received) == 1

def test_closed_connections_are_skipped():
    registry = ConnectionRegistry()
    registry.add(FakeSocket(state=WebSocketState.DISCONNECTED))
    assert asyncio.run(registry.broadcast("packageUpdate", {})) == 0
    assert len(registry) == 0

def test_broadcast_without_connections_is_noop():
    assert asyncio.run(ConnectionRegistry().broadcast("packageUpdate", {})) == 0

def test_websocket_greets_and_acknowledges_subscribe(client):
    with client.websocket_connect("/ws") as ws:
        greeting = ws.receive_json()
        assert greeting["type"] == "connected"

        ws.send_json({"type": "subscribe"})
        assert ws.receive_json()["type"] == "subscribed"

        ws.send_text("{not json")
        assert ws.receive_json() == {"type": "error", "data": {"message": "Invalid JSON"}}

def test_status_update_is_pushed_to_connected_clients(client, admin_headers, created_package):
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        resp = client.patch(
            f"/api/packages/{created_package['id']}/status",
            json={"status": "in_transit", "location": "JFK"},
            headers=admin_headers,
        )
        assert resp.status_code == 200

        pushed = ws.receive_json()
        assert pushed["type"] == "packageUpdate"
        assert pushed["data"]["package"]["tracking_id"] == created_package["tracking_id"]
        assert pushed["data"]["package"]["current_status"] == "in_transit"
        assert pushed["data"]["event"]["status"] == "in_transit"
        assert pushed["data"]["event"]["location"] == "JFK"
