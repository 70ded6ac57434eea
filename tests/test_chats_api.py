from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from firebase_admin.exceptions import UnavailableError
from google.auth.exceptions import RefreshError

from taskchat_api.errors import StoreError
from taskchat_api.main import create_app
from taskchat_api.settings import get_settings
from taskchat_api.stores import ChatStore, InMemoryChatStore, InMemoryTaskStore, RealtimeChatStore


class FailingChatStore(ChatStore):
    def push(self, record):
        raise StoreError(UnavailableError("database offline"))

    def list_ordered(self):
        raise StoreError(UnavailableError("database offline"))


@pytest.fixture
def chat_store():
    return InMemoryChatStore()


@pytest.fixture
def client(chat_store):
    return TestClient(create_app(get_settings(), task_store=InMemoryTaskStore(), chat_store=chat_store))


class TestPostMessage:
    def test_post_returns_generated_key(self, client, chat_store):
        res = client.post("/chat", json={"username": "alice", "message": "hi"})
        assert res.status_code == 201
        body = res.json()
        assert body["message"] == "Message sent successfully"
        assert isinstance(body["id"], str) and len(body["id"]) == 20

        stored = chat_store.list_ordered()
        assert len(stored) == 1
        assert stored[0]["id"] == body["id"]
        assert stored[0]["username"] == "alice"
        assert isinstance(stored[0]["timestamp"], int)

    def test_empty_username_is_rejected(self, client, chat_store):
        res = client.post("/chat", json={"username": "", "message": "hi"})
        assert res.status_code == 400
        assert res.json() == {"message": "Username and message are required"}
        assert chat_store.list_ordered() == []

    def test_missing_message_is_rejected(self, client):
        res = client.post("/chat", json={"username": "bob"})
        assert res.status_code == 400
        assert res.json()["message"] == "Username and message are required"

    def test_store_failure_returns_500(self):
        c = TestClient(create_app(get_settings(), task_store=InMemoryTaskStore(), chat_store=FailingChatStore()))
        res = c.post("/chat", json={"username": "alice", "message": "hi"})
        assert res.status_code == 500
        body = res.json()
        assert body["message"] == "Server error"
        assert body["error"]["type"] == "UnavailableError"


class TestListMessages:
    def test_empty_store_returns_404(self, client):
        res = client.get("/chats")
        assert res.status_code == 404
        assert res.json() == {"message": "No chat messages found"}

    def test_messages_are_ordered_with_distinct_ids(self, client):
        first = client.post("/chat", json={"username": "alice", "message": "one"}).json()["id"]
        second = client.post("/chat", json={"username": "bob", "message": "two"}).json()["id"]
        assert first != second

        res = client.get("/chats")
        assert res.status_code == 200
        messages = res.json()["messages"]
        assert [m["id"] for m in messages] == [first, second]
        assert [m["message"] for m in messages] == ["one", "two"]
        timestamps = [m["timestamp"] for m in messages]
        assert timestamps == sorted(timestamps)
        assert set(messages[0]) == {"id", "username", "message", "timestamp"}

    def test_messages_follow_timestamp_not_insertion(self, chat_store, client):
        chat_store.push({"username": "late", "message": "b", "timestamp": 2000})
        chat_store.push({"username": "early", "message": "a", "timestamp": 1000})
        messages = client.get("/chats").json()["messages"]
        assert [m["username"] for m in messages] == ["early", "late"]

    def test_store_failure_returns_500(self):
        c = TestClient(create_app(get_settings(), task_store=InMemoryTaskStore(), chat_store=FailingChatStore()))
        res = c.get("/chats")
        assert res.status_code == 500
        assert res.json()["error"]["detail"] == "database offline"

    def test_credential_failure_returns_json_500(self):
        ref = MagicMock()
        ref.order_by_child.return_value.get.side_effect = RefreshError("invalid_grant")
        c = TestClient(create_app(get_settings(), task_store=InMemoryTaskStore(), chat_store=RealtimeChatStore(ref)))
        res = c.get("/chats")
        assert res.status_code == 500
        assert res.json() == {
            "message": "Server error",
            "error": {"type": "RefreshError", "detail": "invalid_grant"},
        }

    def test_message_missing_username_is_listed(self, chat_store, client):
        chat_store.push({"message": "anonymous", "timestamp": 1})
        messages = client.get("/chats").json()["messages"]
        assert messages[0]["username"] is None
        assert messages[0]["message"] == "anonymous"

    def test_message_without_timestamp_is_a_store_error(self):
        ref = MagicMock()
        ref.order_by_child.return_value.get.return_value = {"k1": {"username": "u", "message": "m"}}
        c = TestClient(create_app(get_settings(), task_store=InMemoryTaskStore(), chat_store=RealtimeChatStore(ref)))
        res = c.get("/chats")
        assert res.status_code == 500
        assert res.json()["message"] == "Server error"
