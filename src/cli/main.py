from __future__ import annotations

import argparse
import asyncio
import sys
from getpass import getpass
from typing import Optional
from urllib.parse import urlsplit

from common.api import NotesApiClient
from common.config import ClientConfig
from common.log import setup_logging
from common.models import NoteDraft, View
from session.storage import FileSessionStorage, SessionKeyError
from session.store import SessionStore
from views.controller import PROFILE_LOAD_FAILED_MESSAGE, ViewController


def _err(msg: str) -> None:
    print(msg, file=sys.stderr)


def _build_store(config: ClientConfig) -> SessionStore:
    key = config.session_key
    if key is None:
        return SessionStore()
    return SessionStore(FileSessionStorage(config.session_file, fernet_key=key))


def _controller(api: NotesApiClient, store: SessionStore, config: ClientConfig, **kwargs) -> ViewController:
    return ViewController(api, store, origin=config.origin, alert=_err, **kwargs)


async def _cmd_register(args: argparse.Namespace, api: NotesApiClient, config: ClientConfig) -> int:
    ctl = _controller(api, _build_store(config), config)
    ctl.show_register()
    ok = await ctl.register(args.name, args.email, getpass("Password: "))
    (print if ok else _err)(ctl.message or "Registration failed")
    if ok and not config.persists_session:
        _err("Session not saved: set SECURENOTE_SESSION_KEY to stay logged in")
    return 0 if ok else 1


async def _cmd_login(args: argparse.Namespace, api: NotesApiClient, config: ClientConfig) -> int:
    ctl = _controller(api, _build_store(config), config)
    ctl.show_login()
    ok = await ctl.login(args.email, getpass("Password: "))
    (print if ok else _err)(ctl.message or "Login failed")
    if ok and not config.persists_session:
        _err("Session not saved: set SECURENOTE_SESSION_KEY to stay logged in")
    return 0 if ok else 1


async def _cmd_logout(args: argparse.Namespace, api: NotesApiClient, config: ClientConfig) -> int:
    _build_store(config).clear()
    print("Logged out")
    return 0


async def _dashboard(api: NotesApiClient, config: ClientConfig) -> Optional[ViewController]:
    store = _build_store(config)
    if not store.is_authenticated:
        _err("Not logged in")
        return None
    ctl = _controller(api, store, config, logout_delay=0.0)
    await ctl.start()
    if ctl.view is not View.DASHBOARD:
        _err(PROFILE_LOAD_FAILED_MESSAGE)
        return None
    return ctl


async def _cmd_whoami(args: argparse.Namespace, api: NotesApiClient, config: ClientConfig) -> int:
    ctl = await _dashboard(api, config)
    if ctl is None or ctl.user is None:
        return 1
    print(f"{ctl.user.name} <{ctl.user.email}>")
    return 0


async def _cmd_create(args: argparse.Namespace, api: NotesApiClient, config: ClientConfig) -> int:
    ctl = await _dashboard(api, config)
    if ctl is None or ctl.composer is None:
        return 1
    content = args.content
    if content is None:
        content = sys.stdin.read()
    ctl.composer.draft = NoteDraft(title=args.title, content=content, password=getpass("Note password: "))
    note = await ctl.create_note()
    if note is None:
        return 1
    print(ctl.composer.share_link)
    return 0


async def _cmd_open(args: argparse.Namespace, api: NotesApiClient, config: ClientConfig) -> int:
    path = urlsplit(args.link.strip()).path
    # Opening a share link never uses the saved session
    ctl = _controller(api, SessionStore(), config, initial_path=path)
    verifier = ctl.verifier
    if ctl.view is not View.UNLOCK or verifier is None:
        _err(f"Not a note link: {args.link}")
        return 1

    for _ in range(args.attempts):
        await ctl.unlock(getpass("Note password: "))
        content = verifier.content
        if content is not None:
            print(content.title)
            print()
            print(content.content)
            ctl.on_back()
            return 0
        _err(verifier.error or "Verification failed")
    ctl.on_back()
    return 1


_COMMANDS = {
    "register": _cmd_register,
    "login": _cmd_login,
    "logout": _cmd_logout,
    "whoami": _cmd_whoami,
    "create": _cmd_create,
    "open": _cmd_open,
}


async def _run(args: argparse.Namespace, config: ClientConfig) -> int:
    async with NotesApiClient(base_url=config.api_base_url) as api:
        try:
            return await _COMMANDS[args.command](args, api, config)
        except SessionKeyError as ex:
            _err(f"{ex} (check SECURENOTE_SESSION_KEY)")
            return 1


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="securenote",
        description="Create password-protected notes and open shared note links.",
    )
    ap.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("register", help="Create an account and log in")
    p.add_argument("--name", required=True)
    p.add_argument("--email", required=True)

    p = sub.add_parser("login", help="Log in with email and password")
    p.add_argument("--email", required=True)

    sub.add_parser("logout", help="Forget the saved session")
    sub.add_parser("whoami", help="Show the logged-in user")

    p = sub.add_parser("create", help="Create a secure note and print its share link")
    p.add_argument("--title", required=True)
    p.add_argument("--content", default=None, help="Note content (default: read from stdin)")

    p = sub.add_parser("open", help="Unlock a shared note link")
    p.add_argument("link", help="Share link or /note/<id> path")
    p.add_argument("--attempts", type=int, default=3, help="Password attempts before giving up (default: 3)")
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = ClientConfig.from_env()
    setup_logging(config, debug=args.debug)
    return asyncio.run(_run(args, config))


if __name__ == "__main__":
    sys.exit(main())
