"""Shared fixtures: an in-process fake of the DiscordHub API.

The fake speaks the same wire protocol as the live service (paths under
``/api``, ``X-API-KEY`` header, JSON bodies) and records every request it
receives so tests can assert on call order and query strings.
"""

import json

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from discordhub.providers.discordhub.client import DHClient

API_KEY = "test-api-key"


class FakeDiscordHub:
    """In-memory points and ranking service."""

    def __init__(self):
        self.points: dict[tuple[int, int], int] = {}
        self.exp: dict[tuple[int, int], int] = {}
        self.item_message = "Successfully gave the item to the user"
        self.calls: list[tuple[str, str, dict[str, str]]] = []
        self.base_url = ""
        self._overrides: dict[str, tuple[int, bytes, str]] = {}

    @property
    def paths(self) -> list[str]:
        return [path for _, path, _ in self.calls]

    def respond(
        self,
        path: str,
        status: int,
        body,
        content_type: str = "application/json",
    ) -> None:
        """Answer every request to ``path`` with a canned response."""
        if isinstance(body, str):
            body = body.encode("utf-8")
        elif not isinstance(body, bytes):
            body = json.dumps(body).encode("utf-8")
        self._overrides[path] = (status, body, content_type)

    def app(self) -> web.Application:
        app = web.Application(middlewares=[self._middleware])
        app.router.add_post("/api/points/add", self._points_add)
        app.router.add_post("/api/points/remove", self._points_remove)
        app.router.add_get("/api/points/balance", self._points_balance)
        app.router.add_post("/api/item/give", self._item_give)
        app.router.add_post("/api/ranking/exp/add", self._exp_add)
        app.router.add_post("/api/ranking/exp/remove", self._exp_remove)
        app.router.add_get("/api/ranking/user/info", self._user_info)
        app.router.add_post("/api/ranking/user/all/ids", self._all_ids)
        return app

    # -------------------------
    # Plumbing
    # -------------------------

    @web.middleware
    async def _middleware(self, request, handler):
        path = request.path[len("/api"):]
        self.calls.append((request.method, path, dict(request.query)))
        if request.headers.get("X-API-KEY") != API_KEY:
            return web.json_response({"message": "Invalid API key"}, status=401)
        if path in self._overrides:
            status, body, content_type = self._overrides[path]
            return web.Response(
                status=status, body=body, content_type=content_type
            )
        return await handler(request)

    @staticmethod
    def _key(request) -> tuple[int, int]:
        return int(request.query["user_id"]), int(request.query["server_id"])

    @staticmethod
    def _amount(request) -> int:
        return int(request.query["amount"])

    @staticmethod
    def _error(message: str, status: int = 400):
        return web.json_response({"message": message}, status=status)

    # -------------------------
    # Handlers
    # -------------------------

    async def _points_add(self, request):
        key, amount = self._key(request), self._amount(request)
        if amount <= 0:
            return self._error("Amount must be positive")
        self.points[key] = self.points.get(key, 0) + amount
        return web.json_response({"points": self.points[key]})

    async def _points_remove(self, request):
        key, amount = self._key(request), self._amount(request)
        if amount <= 0:
            return self._error("Amount must be positive")
        if self.points.get(key, 0) < amount:
            return self._error("insufficient funds")
        self.points[key] -= amount
        return web.json_response({"points": self.points[key]})

    async def _points_balance(self, request):
        return web.json_response({"points": self.points.get(self._key(request), 0)})

    async def _item_give(self, request):
        return web.json_response({"message": self.item_message})

    async def _exp_add(self, request):
        key, amount = self._key(request), self._amount(request)
        self.exp[key] = self.exp.get(key, 0) + amount
        return web.json_response({"exp": self.exp[key]})

    async def _exp_remove(self, request):
        key, amount = self._key(request), self._amount(request)
        self.exp[key] = max(0, self.exp.get(key, 0) - amount)
        return web.json_response({"exp": self.exp[key]})

    async def _user_info(self, request):
        total = self.exp.get(self._key(request), 0)
        return web.json_response(
            {"lvl": total // 100, "total_exp": total, "exp_percent": total % 100}
        )

    async def _all_ids(self, request):
        return self._error("Something went wrong", status=500)


@pytest_asyncio.fixture
async def hub():
    fake = FakeDiscordHub()
    server = TestServer(fake.app())
    await server.start_server()
    fake.base_url = str(server.make_url("/api"))
    yield fake
    await server.close()


@pytest_asyncio.fixture
async def client(hub):
    dh = DHClient(API_KEY, base_url=hub.base_url)
    yield dh
    await dh.close()


@pytest.fixture()
def messages():
    """A list collecting every message broadcast on a client's error channel."""
    return []
