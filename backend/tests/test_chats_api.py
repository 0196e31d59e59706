"""
Chat tests: one chat per client, unread counting, read receipts.
"""


class TestChats:

    def test_create_chat_uses_initials(self, client, acme):
        resp = client.post("/api/chats", json={"client_id": acme.id})
        assert resp.status_code == 201
        assert resp.json["avatar"] == "AT"
        assert resp.json["client_name"] == "Alice Tan"

    def test_second_chat_conflicts(self, client, acme):
        client.post("/api/chats", json={"client_id": acme.id})
        resp = client.post("/api/chats", json={"client_id": acme.id})
        assert resp.status_code == 409

    def test_unread_counts_only_client_messages(self, client, acme):
        chat = client.post("/api/chats", json={"client_id": acme.id}).json

        client.post(f"/api/chats/{chat['id']}/messages", json={"sender": "client", "content": "Hello?"})
        client.post(f"/api/chats/{chat['id']}/messages", json={"sender": "client", "content": "Anyone?"})
        client.post(f"/api/chats/{chat['id']}/messages", json={"sender": "admin", "content": "Here!"})

        assert client.get("/api/chats/unread-count").json == {"unread_count": 2}
        chats = client.get("/api/chats").json
        assert chats[0]["last_message"] == "Here!"
        assert "messages" not in chats[0]

        resp = client.post(f"/api/chats/{chat['id']}/read")
        assert resp.json["unread_count"] == 0
        assert client.get("/api/chats/unread-count").json == {"unread_count": 0}

    def test_messages_in_order(self, client, acme):
        chat = client.post("/api/chats", json={"client_id": acme.id}).json
        for text in ("one", "two", "three"):
            client.post(f"/api/chats/{chat['id']}/messages", json={"sender": "admin", "content": text})

        messages = client.get(f"/api/chats/{chat['id']}/messages").json
        assert [m["content"] for m in messages] == ["one", "two", "three"]

        assert client.delete(f"/api/chat-messages/{messages[0]['id']}").status_code == 200
        assert len(client.get(f"/api/chats/{chat['id']}/messages").json) == 2

    def test_invalid_sender(self, client, acme):
        chat = client.post("/api/chats", json={"client_id": acme.id}).json
        resp = client.post(f"/api/chats/{chat['id']}/messages", json={"sender": "bot", "content": "x"})
        assert resp.status_code == 400

    def test_online_flag(self, client, acme):
        chat = client.post("/api/chats", json={"client_id": acme.id}).json
        resp = client.put(f"/api/chats/{chat['id']}/online", json={"online": True})
        assert resp.json["online"] is True
        assert client.put(f"/api/chats/{chat['id']}/online", json={"online": "yes"}).status_code == 400
