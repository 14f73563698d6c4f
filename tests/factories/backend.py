"""Scriptable stand-in for the agent backend.

Served to PolicyBackendClient through httpx.MockTransport so tests run
the real client code without a network.
"""

import asyncio
import base64
import json
from typing import Any

import httpx

from policychat.audit import DiagnosticLog
from policychat.client import PolicyBackendClient
from policychat.config.models import WorkflowConfig
from policychat.workflow import Document, SessionController

BASE_URL = "https://backend.test/api_tools"
PDF_BYTES = b"%PDF-1.4\n1 0 obj<<>>endobj\ntrailer<<>>\n%%EOF"


def pdf_document(content: bytes = PDF_BYTES) -> Document:
    return Document(filename="policies.pdf", mime_type="application/pdf", content=content)


def decode_data_url(data_url: str) -> tuple[str, bytes]:
    """Split a base64 data URL into (mime_type, content)."""
    header, _, encoded = data_url.partition(",")
    assert header.startswith("data:") and header.endswith(";base64"), data_url[:40]
    return header[len("data:"):-len(";base64")], base64.b64decode(encoded)


class FakeBackend:
    """In-memory agent backend.

    Routes are keyed "store", "create-agent", "chat", "delete" and "raw".
    Put a key in `failures` to answer that route with HTTP 500, or set a
    gate with `hold()` to block the route until `release()` is called.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.objects: dict[str, Any] = {}
        self.failures: set[str] = set()
        self.agent_id = "agent-42"
        self.chat_replies: list[str] = []
        self.default_reply = "Meals are reimbursed up to $50 per day."
        self._gates: dict[str, asyncio.Event] = {}
        self._arrived: dict[str, asyncio.Event] = {}

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def hold(self, route: str) -> None:
        self._gates[route] = asyncio.Event()
        self._arrived[route] = asyncio.Event()

    def release(self, route: str) -> None:
        self._gates.pop(route).set()

    async def arrived(self, route: str) -> None:
        """Wait until a held route has received its request."""
        await self._arrived[route].wait()

    def bodies(self, route: str) -> list[dict[str, Any]]:
        return [
            json.loads(r.content) if r.content else {}
            for r in self.requests
            if self._route(r) == route
        ]

    def _route(self, request: httpx.Request) -> str:
        path = request.url.path.removeprefix("/api_tools")
        if path == "/input_data":
            return "store"
        if path == "/create-agent":
            return "create-agent"
        if path == "/chat":
            return "chat"
        if path.startswith("/objects/"):
            return "delete"
        if path.startswith("/return_data/"):
            return "raw"
        return "unknown"

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self._route(request)

        gate = self._gates.get(route)
        if gate is not None:
            self._arrived[route].set()
            await gate.wait()

        if route in self.failures:
            return httpx.Response(500, json={"error": f"{route} unavailable"})

        body = json.loads(request.content) if request.content else {}
        name = request.url.path.rsplit("/", 1)[-1]

        if route == "store":
            self.objects[body["created_object_name"]] = body["input_data"]
            return httpx.Response(200, json={"status": "success"})
        if route == "create-agent":
            return httpx.Response(200, json={"agent_id": self.agent_id})
        if route == "chat":
            reply = self.chat_replies.pop(0) if self.chat_replies else self.default_reply
            return httpx.Response(200, json={"response": reply})
        if route == "delete":
            if self.objects.pop(name, None) is None:
                return httpx.Response(404, json={"detail": "not found"})
            return httpx.Response(200, json={"deleted": name})
        if route == "raw":
            if name not in self.objects:
                return httpx.Response(404, json={"detail": "not found"})
            return httpx.Response(200, json={"object_name": name, "data": self.objects[name]})
        return httpx.Response(404, json={"detail": "unknown route"})


def make_client(
    backend: FakeBackend, log: DiagnosticLog, **kwargs: Any
) -> PolicyBackendClient:
    return PolicyBackendClient(
        BASE_URL,
        log=log,
        token="test-token",
        transport=backend.transport(),
        **kwargs,
    )


def make_controller(
    backend: FakeBackend, *, ready_delay_seconds: float = 0.0
) -> SessionController:
    log = DiagnosticLog()
    return SessionController(
        make_client(backend, log),
        log,
        WorkflowConfig(ready_delay_seconds=ready_delay_seconds),
    )
