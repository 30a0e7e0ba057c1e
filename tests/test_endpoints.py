"""Tests for API endpoints."""

from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from book_advisor import __version__
from book_advisor.api.endpoints import get_chat_service
from book_advisor.clients.anthropic import LLMProviderError
from book_advisor.main import app
from book_advisor.models.chat import ChatResponse, ChatValidationError

client = TestClient(app)


@pytest.fixture
def chat_service():
    """Replace the lifespan-built chat service with a mock."""
    service = Mock()
    service.process_messages = AsyncMock(
        return_value=ChatResponse(content="Try Foundation by Isaac Asimov.", tools_used=["searchBooks"])
    )
    app.dependency_overrides[get_chat_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_check_returns_200(self):
        """Test that health check returns 200 status."""
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_check_response_structure(self):
        """Test that health check returns expected JSON structure."""
        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["version"] == __version__
        assert "timestamp" in data

    def test_health_check_content_type(self):
        response = client.get("/health")
        assert response.headers["content-type"] == "application/json"


class TestChatEndpoint:
    """Tests for the chat endpoint."""

    def test_chat_returns_reply(self, chat_service):
        """Test that the reply uses camelCase keys."""
        response = client.post("/chat", json={"messages": [{"role": "user", "content": "Books by Asimov?"}]})

        assert response.status_code == 200
        assert response.json() == {"content": "Try Foundation by Isaac Asimov.", "toolsUsed": ["searchBooks"]}

    def test_chat_passes_full_history(self, chat_service):
        messages = [
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello! What do you like?"},
            {"role": "user", "content": "Science fiction"},
        ]

        client.post("/chat", json={"messages": messages})

        [sent] = chat_service.process_messages.await_args.args
        assert [(m.role, m.content) for m in sent] == [(m["role"], m["content"]) for m in messages]

    def test_chat_accepts_tool_messages(self, chat_service):
        messages = [
            {"role": "tool", "content": "{}", "toolCallId": "call_1"},
            {"role": "user", "content": "Hi"},
        ]

        response = client.post("/chat", json={"messages": messages})

        assert response.status_code == 200
        [sent] = chat_service.process_messages.await_args.args
        assert sent[0].tool_call_id == "call_1"

    def test_chat_validation_error_returns_400(self, chat_service):
        chat_service.process_messages.side_effect = ChatValidationError("Your message is too long.")

        response = client.post("/chat", json={"messages": [{"role": "user", "content": "x"}]})

        assert response.status_code == 400
        assert response.json() == {"error": "Your message is too long."}

    def test_chat_internal_value_error_returns_500(self, chat_service):
        """Only conversation problems are reported back to the client."""
        chat_service.process_messages.side_effect = ValueError("invalid literal for int() with base 10: 'x'")

        response = client.post("/chat", json={"messages": [{"role": "user", "content": "Hi"}]})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}

    def test_chat_internal_validation_error_returns_500(self, chat_service):
        with pytest.raises(ValidationError) as exc_info:
            ChatResponse.model_validate({"content": None})
        chat_service.process_messages.side_effect = exc_info.value

        response = client.post("/chat", json={"messages": [{"role": "user", "content": "Hi"}]})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}

    def test_chat_llm_failure_returns_500(self, chat_service):
        """Upstream failures are reported without internal details."""
        chat_service.process_messages.side_effect = LLMProviderError("LLM provider error: 529", status_code=529)

        response = client.post("/chat", json={"messages": [{"role": "user", "content": "Hi"}]})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}

    def test_chat_missing_messages(self, chat_service):
        response = client.post("/chat", json={})

        assert response.status_code == 422
        data = response.json()
        assert data["error"] == "Invalid request"
        assert data["details"]
        chat_service.process_messages.assert_not_awaited()

    def test_chat_empty_messages(self, chat_service):
        response = client.post("/chat", json={"messages": []})

        assert response.status_code == 422
        assert response.json()["error"] == "Invalid request"

    def test_chat_unknown_role(self, chat_service):
        response = client.post("/chat", json={"messages": [{"role": "narrator", "content": "Once upon a time"}]})

        assert response.status_code == 422

    def test_chat_not_json(self, chat_service):
        response = client.post("/chat", content="hello", headers={"Content-Type": "text/plain"})

        assert response.status_code == 422


class TestAPIDocumentation:
    """Tests for API documentation endpoints."""

    def test_openapi_json_available(self):
        response = client.get("/openapi.json")
        assert response.status_code == 200
        assert "/chat" in response.json()["paths"]

    def test_swagger_ui_available(self):
        response = client.get("/docs")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]

    def test_redoc_available(self):
        response = client.get("/redoc")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
