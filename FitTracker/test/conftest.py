"""
Test configuration and fixtures for the FitTracker client core.

Provides:
- In-memory credential store with failure injection
- File credential store in a temporary directory
- Session manager and error recorder fixtures
- Fake FitTracker backend served by aiohttp's test server
"""

import asyncio
from typing import Any, Dict, List, Optional, Set, Tuple

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from FitTracker.api import FitTrackerAPIClient, RequestPipeline
from FitTracker.core.logging import configure_logging, create_testing_config
from FitTracker.core.session import (
    CredentialStore,
    FileCredentialStore,
    SessionError,
    SessionManager,
    StorageFailure,
    UserProfile,
)

configure_logging(create_testing_config())

ANA = {"id": 1, "name": "Ana", "email": "ana@example.com", "weight": 58, "height": 165}
ANA_PASSWORD = "secret1"
ANA_TOKEN = "abc123"


class MemoryCredentialStore(CredentialStore):
    """
    Credential store kept in a dict.

    ``fail`` holds ``(operation, key)`` pairs that raise StorageFailure;
    a key of ``"*"`` matches every key. Every call awaits ``delay``
    seconds first so concurrent operations interleave like real I/O.
    """

    def __init__(self, data: Optional[Dict[str, str]] = None, delay: float = 0.0):
        self.data: Dict[str, str] = dict(data or {})
        self.fail: Set[Tuple[str, str]] = set()
        self.delay = delay
        self.calls: List[Tuple[str, str]] = []

    def _check(self, operation: str, key: str) -> None:
        self.calls.append((operation, key))
        if (operation, key) in self.fail or (operation, "*") in self.fail:
            raise StorageFailure(f"simulated {operation} failure", key=key)

    async def get(self, key: str) -> Optional[str]:
        await asyncio.sleep(self.delay)
        self._check("get", key)
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.sleep(self.delay)
        self._check("set", key)
        self.data[key] = value

    async def remove(self, key: str) -> None:
        await asyncio.sleep(self.delay)
        self._check("remove", key)
        self.data.pop(key, None)


class ErrorRecorder:
    """Error reporter that keeps what it was given."""

    def __init__(self):
        self.errors: List[SessionError] = []

    def __call__(self, error: SessionError) -> None:
        self.errors.append(error)

    def kinds(self) -> List[type]:
        return [type(e) for e in self.errors]


@pytest.fixture
def ana() -> UserProfile:
    return UserProfile.from_dict(ANA)


@pytest.fixture
def memory_store() -> MemoryCredentialStore:
    return MemoryCredentialStore()


@pytest.fixture
def file_store(tmp_path) -> FileCredentialStore:
    return FileCredentialStore(str(tmp_path / "credentials"))


@pytest.fixture
def errors() -> ErrorRecorder:
    return ErrorRecorder()


@pytest.fixture
def manager(memory_store, errors) -> SessionManager:
    return SessionManager(memory_store, error_reporter=errors)


# Fake backend

BACKEND_STATE = web.AppKey("backend_state", dict)


def _authorized(request: web.Request) -> Optional[Dict[str, Any]]:
    state = request.app[BACKEND_STATE]
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    return state["sessions"].get(header[len("Bearer "):])


def _requires_auth(handler):
    async def wrapper(request: web.Request) -> web.StreamResponse:
        user = _authorized(request)
        if user is None:
            return web.json_response({"message": "Not authorized, token failed"}, status=401)
        return await handler(request, user)
    return wrapper


async def _login(request: web.Request) -> web.Response:
    state = request.app[BACKEND_STATE]
    body = await request.json()
    account = state["accounts"].get(body.get("email"))
    if account is None or account["password"] != body.get("password"):
        return web.json_response({"message": "Invalid email or password"}, status=401)
    return web.json_response({"token": account["token"], "user": state["sessions"][account["token"]]})


async def _register(request: web.Request) -> web.Response:
    state = request.app[BACKEND_STATE]
    body = await request.json()
    if body["email"] in state["accounts"]:
        return web.json_response({"message": "User already exists"}, status=400)
    token = f"token-{len(state['accounts']) + 1}"
    user = {"id": len(state["accounts"]) + 1, "name": body["name"], "email": body["email"]}
    user.update({k: body[k] for k in ("age", "weight", "height", "goal") if body.get(k) is not None})
    state["accounts"][body["email"]] = {"password": body["password"], "token": token}
    state["sessions"][token] = user
    return web.json_response({"token": token, "user": user}, status=201)


@_requires_auth
async def _get_profile(request: web.Request, user: Dict[str, Any]) -> web.Response:
    return web.json_response(user)


@_requires_auth
async def _update_profile(request: web.Request, user: Dict[str, Any]) -> web.Response:
    body = await request.json()
    user.update({k: v for k, v in body.items() if v is not None})
    return web.json_response({"user": user})


@_requires_auth
async def _list_workouts(request: web.Request, user: Dict[str, Any]) -> web.Response:
    return web.json_response(request.app[BACKEND_STATE]["workouts"])


@_requires_auth
async def _create_workout(request: web.Request, user: Dict[str, Any]) -> web.Response:
    body = await request.json()
    workout = dict(body, _id=f"w{len(request.app[BACKEND_STATE]['workouts']) + 1}")
    request.app[BACKEND_STATE]["workouts"].append(workout)
    return web.json_response(workout, status=201)


@_requires_auth
async def _stats(request: web.Request, user: Dict[str, Any]) -> web.Response:
    workouts = request.app[BACKEND_STATE]["workouts"]
    return web.json_response({
        "totalWorkouts": len(workouts),
        "totalDuration": sum(w.get("duration", 0) for w in workouts),
    })


@_requires_auth
async def _list_goals(request: web.Request, user: Dict[str, Any]) -> web.Response:
    return web.json_response([{"_id": "g1", "type": "weight_loss", "target": 55, "current": 58}])


@_requires_auth
async def _delete_goal(request: web.Request, user: Dict[str, Any]) -> web.Response:
    return web.Response(status=204)


async def _echo(request: web.Request) -> web.Response:
    return web.json_response({"authorization": request.headers.get("Authorization")})


async def _boom(request: web.Request) -> web.Response:
    return web.json_response({"message": "Database unavailable"}, status=500)


async def _garbled(request: web.Request) -> web.Response:
    return web.Response(status=500, body=b"\xff\xfe oops", content_type="text/plain", charset="utf-8")


async def _slow(request: web.Request) -> web.Response:
    await asyncio.sleep(1)
    return web.json_response({"ok": True})


def build_fake_backend() -> web.Application:
    app = web.Application()
    app[BACKEND_STATE] = {
        "accounts": {ANA["email"]: {"password": ANA_PASSWORD, "token": ANA_TOKEN}},
        "sessions": {ANA_TOKEN: dict(ANA)},
        "workouts": [],
    }
    app.router.add_post("/api/auth/login", _login)
    app.router.add_post("/api/auth/register", _register)
    app.router.add_get("/api/auth/profile", _get_profile)
    app.router.add_put("/api/auth/profile", _update_profile)
    app.router.add_get("/api/workouts", _list_workouts)
    app.router.add_post("/api/workouts", _create_workout)
    app.router.add_get("/api/workouts/stats/summary", _stats)
    app.router.add_get("/api/goals", _list_goals)
    app.router.add_delete("/api/goals/{goal_id}", _delete_goal)
    app.router.add_get("/api/echo", _echo)
    app.router.add_get("/api/boom", _boom)
    app.router.add_get("/api/slow", _slow)
    app.router.add_get("/api/garbled", _garbled)
    return app


@pytest_asyncio.fixture
async def backend():
    """Running fake backend; ``backend.app[BACKEND_STATE]`` is its data."""
    server = TestServer(build_fake_backend())
    await server.start_server()
    yield server
    await server.close()


@pytest.fixture
def api_url(backend) -> str:
    return str(backend.make_url("/api"))


@pytest_asyncio.fixture
async def pipeline(api_url, manager):
    async with RequestPipeline(api_url, token_source=manager.get_token) as p:
        yield p


@pytest.fixture
def api(pipeline) -> FitTrackerAPIClient:
    return FitTrackerAPIClient(pipeline)
