"""Test doubles: a fake Google Books API and a scripted LLM client."""

from typing import Any

import httpx

from book_advisor.clients.anthropic import AnthropicResponse, TokenUsage
from book_advisor.models.llm import TextBlock, ToolUseBlock

BASE_URL = "https://books.test/v1"

FOUNDATION = {
    "id": "zyTCAlFPjgYC",
    "volumeInfo": {
        "title": "Foundation",
        "authors": ["Isaac Asimov"],
        "description": "The first novel of the Foundation series. " * 10,
        "pageCount": 255,
        "categories": ["Fiction", "Science Fiction"],
        "imageLinks": {"thumbnail": "http://books.test/foundation.jpg"},
        "publishedDate": "1951",
        "averageRating": 4.5,
    },
}

I_ROBOT = {
    "id": "iRobot00001",
    "volumeInfo": {
        "title": "I, Robot",
        "authors": ["Isaac Asimov"],
        "pageCount": 224,
    },
}

DUNE = {
    "id": "duneFH00001",
    "volumeInfo": {
        "title": "Dune",
        "authors": ["Frank Herbert"],
        "pageCount": 412,
        "description": "A desert planet.",
    },
}

SEARCH_ITEMS = [
    {"id": "xyzAAAMAAJ", "volumeInfo": {"title": "Foundation (library scan)", "authors": ["Isaac Asimov"]}},
    FOUNDATION,
    {"id": "noTitle0001", "volumeInfo": {"authors": ["Nobody"]}},
    I_ROBOT,
    {"id": "abcAAAQBAJ", "volumeInfo": {"title": "The Robots of Dawn"}},
    DUNE,
]

VOLUMES = {volume["id"]: volume for volume in (FOUNDATION, I_ROBOT, DUNE)}


class FakeGoogleBooks:
    """Programmable stand-in for the Google Books volumes endpoint."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.search_items: list[dict[str, Any]] = list(SEARCH_ITEMS)
        self.volumes: dict[str, dict[str, Any]] = dict(VOLUMES)
        self.failing_ids: set[str] = {"brokenVolume"}
        self.fail_search = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/v1")

        if path == "/volumes":
            if self.fail_search:
                return httpx.Response(503, json={"error": {"message": "Service unavailable"}})
            items = self.search_items[: int(request.url.params.get("maxResults", "10"))]
            return httpx.Response(200, json={"totalItems": len(items), "items": items})

        volume_id = path.removeprefix("/volumes/")
        if volume_id in self.failing_ids:
            return httpx.Response(503, json={"error": {"message": "Service unavailable"}})
        if volume_id in self.volumes:
            return httpx.Response(200, json=self.volumes[volume_id])
        return httpx.Response(404, json={"error": {"message": "The volume ID could not be found."}})


def text_response(text: str) -> AnthropicResponse:
    return AnthropicResponse(
        content=[TextBlock(text=text)],
        stop_reason="end_turn",
        usage=TokenUsage(input_tokens=100, output_tokens=20, total_tokens=120),
        model="test-model",
    )


def tool_use_response(*calls: tuple[str, str, dict[str, Any]], text: str = "") -> AnthropicResponse:
    """Build a response requesting tools, given ``(id, name, input)`` triples."""
    content: list = [TextBlock(text=text)] if text else []
    content.extend(ToolUseBlock(id=call_id, name=name, input=arguments) for call_id, name, arguments in calls)
    return AnthropicResponse(
        content=content,
        stop_reason="tool_use",
        usage=TokenUsage(input_tokens=150, output_tokens=40, total_tokens=190),
        model="test-model",
    )


class ScriptedLLM:
    """Fake LLM client replaying canned responses and recording every call."""

    def __init__(self, *responses: AnthropicResponse | Exception):
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    async def create_message(self, messages, system_prompt, tools=None, tool_choice=None, **kwargs):
        self.calls.append(
            {"messages": list(messages), "system_prompt": system_prompt, "tools": tools, "tool_choice": tool_choice}
        )
        if not self.responses:
            raise AssertionError("Unexpected LLM call")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def truncate_conversation(self, messages, system_prompt, tools=None):
        return messages
