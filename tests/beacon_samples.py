"""Canned HelpScout payloads and a fake HelpScout API for tests."""

from __future__ import annotations

import json

import httpx

BEACON_ROWS = (
    "<tr><td>$$roles</td><td>$$authenticated user, developer</td></tr>"
    "<tr><td>$$site_name</td><td>$$University of Colorado Boulder</td></tr>"
    "<tr><td>$$site_url</td><td>$$</td></tr>"
)

BEACON_BODY = (
    "<p><strong>Page Information</strong></p>"
    "<table><tr><td>$$page$$/help</td></tr></table>"
    "<p><strong>Customer Information</strong></p>"
    f"<table>{BEACON_ROWS}</table>"
)

BEACON_FIELDS = {
    "roles": "authenticated user, developer",
    "site_name": "University of Colorado Boulder",
    "site_url": "",
}


def beacon_thread(body: str = BEACON_BODY, thread_id: int = 1) -> dict:
    """Note thread as the Beacon widget creates it."""
    return {
        "id": thread_id,
        "type": "note",
        "source": {"type": "embed-form", "via": "customer"},
        "body": body,
    }


def customer_thread(body: str = "<p>Help please</p>", thread_id: int = 2) -> dict:
    return {
        "id": thread_id,
        "type": "customer",
        "source": {"type": "web", "via": "customer"},
        "body": body,
    }


def request_json(request: httpx.Request) -> dict:
    return json.loads(request.content)


class FakeHelpScout:
    """Routes requests to canned HelpScout responses and records them."""

    def __init__(self) -> None:
        self.search_results: list[dict] = []
        self.conversations: dict[str, dict] = {}
        self.put_status = 200
        self.requests: list[httpx.Request] = []

    @property
    def puts(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "PUT"]

    @property
    def loads(self) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == "GET" and "/search/" not in r.url.path
        ]

    def add_conversation(self, conversation_id: int, threads: list[dict] | None) -> None:
        conversation: dict = {"id": conversation_id, "number": conversation_id + 1000}
        if threads is not None:
            conversation["threads"] = threads
        self.conversations[str(conversation_id)] = conversation
        self.search_results.append({"id": conversation_id, "number": conversation_id + 1000})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.endswith("/search/conversations.json"):
            return httpx.Response(200, json={"items": self.search_results})
        if request.method == "PUT":
            return httpx.Response(self.put_status)
        conversation_id = path.rsplit("/", 1)[-1].removesuffix(".json")
        if conversation_id in self.conversations:
            return httpx.Response(200, json={"item": self.conversations[conversation_id]})
        return httpx.Response(404, json={"error": "Not found"})
