"""
familyvault/main.py

Purpose: Client entry point

- Composition root: builds every component and injects the one logger
- Headless CLI: sign in, run one dashboard action, print the regions
- No business logic should be written here
"""

import argparse
import asyncio
import getpass
import logging
import mimetypes
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import httpx

from familyvault.core.config import Settings, settings, validate_settings
from familyvault.core.logging import LogContext, setup_logging
from familyvault.flow.coordinator import SessionCoordinator
from familyvault.flow.states import Screen, Section
from familyvault.flow.view import MemorySurface, Surface
from familyvault.schemas.documents import SelectedFile
from familyvault.services.auth_service import AuthTokenHolder
from familyvault.services.document_service import DocumentService
from familyvault.services.family_service import FamilyService
from familyvault.services.http_client import HttpClient
from familyvault.services.identity import FirebaseIdentityProvider, IdentityProvider
from familyvault.services.profile_service import ProfileService
from familyvault.services.token_store import TokenStore
from familyvault.services.user_service import UserService
from familyvault.utils.constants import DOCUMENT_CATEGORIES


@dataclass
class VaultClient:
    coordinator: SessionCoordinator
    auth: AuthTokenHolder
    http: HttpClient
    surface: Surface
    logger: logging.Logger

    async def aclose(self):
        self.coordinator.stop()
        await self.http.close()


def build_client(
    config: Optional[Settings] = None,
    logger: Optional[logging.Logger] = None,
    surface: Optional[Surface] = None,
    identity: Optional[IdentityProvider] = None,
    store: Optional[TokenStore] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> VaultClient:
    """
    Wires the client together.

    Args:
        config: Settings (defaults to the environment)
        logger: Logger injected everywhere (defaults to setup_logging())
        surface: Rendering surface (defaults to a MemorySurface)
        identity: Identity provider (defaults to Firebase REST)
        store: Persisted key/value store
        transport: httpx transport for the backend API (tests use ASGITransport)
    """
    config = config or settings
    logger = logger or setup_logging(config)
    surface = surface or MemorySurface(logger, alert_dismiss_seconds=config.ALERT_DISMISS_SECONDS)
    identity = identity or FirebaseIdentityProvider(config, logger)
    store = store or TokenStore(config.TOKEN_STORE_PATH, logger)

    auth = AuthTokenHolder(identity, store, config.TOKEN_STORE_KEY, logger)
    http = HttpClient(
        config.API_BASE_URL,
        auth.get_token,
        logger,
        timeout=config.HTTP_TIMEOUT_SECONDS,
        transport=transport,
    )
    documents = DocumentService(http, config.MAX_UPLOAD_BYTES, config.ALLOWED_UPLOAD_TYPES)

    coordinator = SessionCoordinator(
        auth=auth,
        identity=identity,
        users=UserService(http),
        documents=documents,
        family=FamilyService(http),
        profile=ProfileService(http),
        surface=surface,
        logger=logger,
        document_list_limit=config.DOCUMENT_LIST_LIMIT,
        default_family_name=config.DEFAULT_FAMILY_NAME,
    )
    return VaultClient(coordinator=coordinator, auth=auth, http=http, surface=surface, logger=logger)


# ============================================================
# CLI
# ============================================================

COMMAND_REGIONS = {
    "overview": ["overview"],
    "documents": ["documents", "shared-documents"],
    "family": ["family-members", "family-sent-invitations", "family-invitations"],
    "upload": ["upload", "documents"],
}


def _print_regions(surface: MemorySurface, regions: List[str]):
    for name in regions:
        content = surface.region(name)
        print(f"== {name} ==")
        print(content.to_html() if content is not None else "(empty)")
        print()


async def _run(args: argparse.Namespace) -> int:
    validate_settings()
    client = build_client()
    surface = client.surface
    coordinator = client.coordinator
    coordinator.start()

    try:
        await surface.dispatch("auth:login", email=args.email, password=args.password)
        if coordinator.session.screen != Screen.DASHBOARD:
            alert = surface.last_alert()
            print(alert.message if alert else "Login failed", file=sys.stderr)
            return 1

        with LogContext(uid=coordinator.session.uid, screen="cli"):
            await _dispatch_command(args, client)

        for alert in surface.alert_log:
            print(f"[{alert.kind}] {alert.message}")
        _print_regions(surface, COMMAND_REGIONS[args.command])
        return 0
    finally:
        await client.aclose()


async def _dispatch_command(args: argparse.Namespace, client: VaultClient):
    surface = client.surface
    coordinator = client.coordinator
    if args.command == "upload":
        path = Path(args.file)
        mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        await coordinator.show_section(Section.UPLOAD)
        await surface.dispatch(
            "upload:select",
            file=SelectedFile(name=path.name, content=path.read_bytes(), mime_type=mime_type),
        )
        await surface.dispatch(
            "upload:submit",
            title=args.title or path.stem,
            category=args.category,
            description=args.description,
        )
    else:
        await coordinator.show_section(Section(args.command))


def main() -> None:
    parser = argparse.ArgumentParser(description="Family document vault client")
    parser.add_argument(
        "--email",
        default=os.environ.get("FAMILYVAULT_EMAIL"),
        help="Account e-mail (or FAMILYVAULT_EMAIL)",
    )
    parser.add_argument(
        "--password",
        default=os.environ.get("FAMILYVAULT_PASSWORD"),
        help="Account password (or FAMILYVAULT_PASSWORD; prompted when absent)",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("overview", help="Show dashboard counters")
    sub.add_parser("documents", help="List own and shared documents")
    sub.add_parser("family", help="Show family members and invitations")
    upload = sub.add_parser("upload", help="Upload a document")
    upload.add_argument("file", help="PDF, JPG or PNG file (max 10MB)")
    upload.add_argument("--title", help="Document title (defaults to the file name)")
    upload.add_argument("--category", choices=DOCUMENT_CATEGORIES, default="other")
    upload.add_argument("--description")

    args = parser.parse_args()
    if not args.email:
        parser.error("--email is required")
    if not args.password:
        args.password = getpass.getpass("Password: ")

    sys.exit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
