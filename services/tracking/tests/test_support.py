import pytest

@pytest.fixture
def ticket(client, customer_headers):
    resp = client.post(
        "/api/support-tickets",
        json={"subject": "Where is my laptop?", "message": "It has been in transit for a week.", "priority": "high"},
        headers=customer_headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()

def test_open_ticket_includes_first_message(client, ticket, customer_user, customer_headers):
    assert ticket["status"] == "open"
    assert ticket["priority"] == "high"
    assert ticket["user_id"] == customer_user.id

    messages = client.get(f"/api/support-tickets/{ticket['id']}/messages", headers=customer_headers).json()
    assert [m["body"] for m in messages] == ["It has been in transit for a week."]
    assert messages[0]["is_staff"] is False

def test_priority_defaults_to_normal(client, customer_headers):
    resp = client.post("/api/support-tickets", json={"subject": "Hi", "message": "Question"}, headers=customer_headers)
    assert resp.json()["priority"] == "normal"

def test_conversation_between_customer_and_staff(client, ticket, customer_headers, admin_headers):
    reply = client.post(
        f"/api/support-tickets/{ticket['id']}/messages",
        json={"body": "It clears customs tomorrow."},
        headers=admin_headers,
    )
    assert reply.status_code == 201
    assert reply.json()["is_staff"] is True

    messages = client.get(f"/api/support-tickets/{ticket['id']}/messages", headers=customer_headers).json()
    assert [m["is_staff"] for m in messages] == [False, True]

def test_chat_message_is_broadcast(client, ticket, customer_headers):
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        client.post(f"/api/support-tickets/{ticket['id']}/messages", json={"body": "Any news?"}, headers=customer_headers)
        pushed = ws.receive_json()
    assert pushed["type"] == "chatMessage"
    assert pushed["data"]["ticket_id"] == ticket["id"]
    assert pushed["data"]["body"] == "Any news?"

def test_other_customers_cannot_read_ticket(client, ticket, user_factory, headers_for):
    stranger = headers_for(user_factory("nosy@example.com"))
    assert client.get(f"/api/support-tickets/{ticket['id']}", headers=stranger).status_code == 403
    assert client.get(f"/api/support-tickets/{ticket['id']}/messages", headers=stranger).status_code == 403
    resp = client.post(f"/api/support-tickets/{ticket['id']}/messages", json={"body": "hi"}, headers=stranger)
    assert resp.status_code == 403

def test_closed_ticket_rejects_messages(client, ticket, customer_headers, admin_headers):
    client.patch(f"/api/admin/support-tickets/{ticket['id']}/status", json={"status": "closed"}, headers=admin_headers)
    resp = client.post(f"/api/support-tickets/{ticket['id']}/messages", json={"body": "hello?"}, headers=customer_headers)
    assert resp.status_code == 409

def test_assign_moves_open_ticket_in_progress(client, ticket, admin_user, admin_headers):
    resp = client.patch(f"/api/admin/support-tickets/{ticket['id']}/assign", json={}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["assigned_to"] == admin_user.id
    assert resp.json()["status"] == "in_progress"

def test_assign_only_to_staff(client, ticket, customer_user, admin_headers):
    resp = client.patch(
        f"/api/admin/support-tickets/{ticket['id']}/assign",
        json={"assignee_id": customer_user.id},
        headers=admin_headers,
    )
    assert resp.status_code == 400

def test_ticket_listings(client, ticket, customer_headers, admin_headers):
    mine = client.get("/api/user/support-tickets", headers=customer_headers).json()
    assert [t["id"] for t in mine] == [ticket["id"]]

    assert client.get("/api/admin/support-tickets", headers=customer_headers).status_code == 403
    open_tickets = client.get("/api/admin/support-tickets", params={"status": "open"}, headers=admin_headers).json()
    assert [t["id"] for t in open_tickets] == [ticket["id"]]
    resolved = client.get("/api/admin/support-tickets", params={"status": "resolved"}, headers=admin_headers).json()
    assert resolved == []

def test_missing_ticket_is_404(client, customer_headers):
    assert client.get("/api/support-tickets/404", headers=customer_headers).status_code == 404

def test_ticket_for_unknown_package_is_404(client, customer_headers):
    resp = client.post(
        "/api/support-tickets",
        json={"subject": "Lost parcel", "message": "Never arrived", "package_id": 999},
        headers=customer_headers,
    )
    assert resp.status_code == 404
    assert client.get("/api/user/support-tickets", headers=customer_headers).json() == []

def test_ticket_can_reference_a_package(client, created_package, customer_headers):
    resp = client.post(
        "/api/support-tickets",
        json={"subject": "Delivery window", "message": "Can it come later?", "package_id": created_package["id"]},
        headers=customer_headers,
    )
    assert resp.status_code == 201
    assert resp.json()["package_id"] == created_package["id"]
