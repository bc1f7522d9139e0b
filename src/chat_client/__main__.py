"""Entrypoint: python -m chat_client

Restores the session from the cookie jar (CHAT_SESSION_COOKIE, as
``name=value``) or logs in with CHAT_EMAIL / CHAT_PASSWORD, then logs
presence changes until interrupted.
"""
from __future__ import annotations

import asyncio
import logging
import os

from chat_client.app import create_chat_client
from chat_client.application.dto.snapshots import SessionSnapshot
from chat_client.application.exceptions import AppError
from chat_client.config import settings

logger = logging.getLogger("chat_client")


async def run() -> None:
    async with create_chat_client(settings) as client:
        cookie = os.environ.get("CHAT_SESSION_COOKIE")
        if cookie and "=" in cookie:
            name, _, value = cookie.partition("=")
            client.http.cookies.set(name.strip(), value.strip())

        identity = await client.session.verify_session()
        if identity is None:
            email = os.environ.get("CHAT_EMAIL")
            password = os.environ.get("CHAT_PASSWORD")
            if not (email and password):
                logger.error("No session and no CHAT_EMAIL/CHAT_PASSWORD set")
                return
            try:
                identity = await client.session.login(email, password)
            except AppError:
                return

        last_seen: list[frozenset[str]] = [frozenset()]

        def _log_presence(snap: SessionSnapshot) -> None:
            if snap.online_user_ids == last_seen[0]:
                return
            last_seen[0] = snap.online_user_ids
            logger.info("Online: %s", ", ".join(sorted(snap.online_user_ids)) or "-")

        client.session.subscribe(_log_presence)
        contacts = await client.conversations.load_contacts()
        logger.info("Logged in as %s, %d contacts", identity.display_name, len(contacts))

        try:
            await asyncio.Event().wait()
        finally:
            await client.session.end_session()


def main() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
