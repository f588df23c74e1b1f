"""
Command-line client for FitTracker.
Each command restores the stored session, runs one action and exits.
"""

import asyncio
import getpass
import json
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, Optional

from FitTracker.api import FitTrackerAPIClient, RequestPipeline
from FitTracker.config import config
from FitTracker.core.client import AuthFlow, AuthResult
from FitTracker.core.session import (
    AuthenticationRejected,
    FileCredentialStore,
    NetworkUnavailable,
    ServerError,
    SessionManager,
)

__all__ = ['client', 'ClientContext', 'open_client']

logger = logging.getLogger(__name__)


@dataclass
class ClientContext:
    """Everything a command needs, wired around one session manager."""
    session: SessionManager
    pipeline: RequestPipeline
    api: FitTrackerAPIClient
    auth: AuthFlow


@asynccontextmanager
async def open_client(api_url: Optional[str] = None,
                      credential_dir: Optional[str] = None) -> AsyncIterator[ClientContext]:
    """Restore the session and yield a ready client; closes HTTP on exit."""
    session = SessionManager(FileCredentialStore(credential_dir or config.CREDENTIAL_DIR))
    await session.initialize()

    pipeline = RequestPipeline(api_url, token_source=session.get_token)
    api = FitTrackerAPIClient(pipeline)
    try:
        yield ClientContext(session, pipeline, api, AuthFlow(api, session))
    finally:
        await pipeline.close()


def client(command: str, options: Dict[str, Any], api_url: Optional[str] = None) -> int:
    """
    Run one client command.

    Args:
        command: Command name (login, register, logout, whoami, profile,
            workouts, log-workout, goals, stats)
        options: Parsed command-line options
        api_url: Backend API root, defaults to the configured one

    Returns:
        int: Process exit code
    """
    try:
        return asyncio.run(_run(command, options, api_url))
    except KeyboardInterrupt:
        print("Cancelled.")
        return 130


async def _run(command: str, options: Dict[str, Any], api_url: Optional[str]) -> int:
    async with open_client(api_url) as ctx:
        match command:
            case "login":
                email = options.get("email") or input("Email: ").strip()
                password = options.get("password") or getpass.getpass("Password: ")
                return _report_auth(ctx, await ctx.auth.login(email, password), "Logged in")

            case "register":
                password = options.get("password") or getpass.getpass("Password: ")
                result = await ctx.auth.register(
                    options.get("name"), options.get("email"), password,
                    **_profile_options(options),
                )
                return _report_auth(ctx, result, "Account created")

            case "logout":
                await ctx.auth.logout()
                print("Logged out.")
                return 0

            case "whoami":
                if not ctx.session.session.is_authenticated:
                    print("Not logged in.")
                    return 1
                _print_json(ctx.session.user.to_dict())
                return 0

            case "profile":
                changes = _profile_options(options)
                if options.get("name"):
                    changes["name"] = options["name"]
                return _report_auth(ctx, await ctx.auth.save_profile(**changes), "Profile updated")

            case _:
                return await _run_data_command(ctx, command, options)


async def _run_data_command(ctx: ClientContext, command: str, options: Dict[str, Any]) -> int:
    if not ctx.session.session.is_authenticated:
        print("Not logged in. Run 'login' first.")
        return 1

    try:
        match command:
            case "workouts":
                _print_json(await ctx.api.list_workouts())
            case "log-workout":
                _print_json(await ctx.api.create_workout({
                    "title": options.get("title"),
                    "type": (options.get("type") or "other").lower(),
                    "duration": options.get("duration"),
                    "calories": options.get("calories") or 0,
                    "distance": options.get("distance") or 0,
                    "notes": options.get("notes") or "",
                }))
            case "goals":
                _print_json(await ctx.api.list_goals())
            case "stats":
                _print_json(await ctx.api.get_workout_stats())
            case _:
                print(f"Unknown command: {command}")
                return 2
    except AuthenticationRejected:
        print("Your session was rejected by the server. Run 'login' to sign in again.")
        return 1
    except NetworkUnavailable as e:
        print(f"Network error: {e.message}")
        return 1
    except ServerError as e:
        print(f"Server error ({e.status}): {e.message}")
        return 1
    return 0


def _report_auth(ctx: ClientContext, result: AuthResult, success_message: str) -> int:
    if result is AuthResult.SUCCESS:
        user = ctx.session.user
        print(f"{success_message}: {user.name or user.email or user.id}")
        return 0
    print(f"Error: {ctx.auth.last_error or result.name}")
    return 1


def _profile_options(options: Dict[str, Any]) -> Dict[str, Any]:
    return {k: options[k] for k in ("age", "weight", "height", "goal") if options.get(k) is not None}


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))
