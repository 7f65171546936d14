"""HTTP tracker server.

Serves the announce endpoint plus the torrent-name and manifest lookups
on an aiohttp application.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import TYPE_CHECKING, Any, Protocol
from urllib.parse import unquote_plus, unquote_to_bytes

from aiohttp import web

from cctracker.announce.encoder import CHARSET, CONTENT_TYPE
from cctracker.announce.orchestrator import AnnounceOrchestrator
from cctracker.exceptions import AnnounceFailed
from cctracker.logging_config import set_correlation_id
from cctracker.models import Config, Manifest, TorrentInfo
from cctracker.policy import HandoutPolicy, get_policy
from cctracker.storage.base import ManifestStore, SwarmRepository, TorrentStore

if TYPE_CHECKING:
    from aiohttp.web_request import Request
    from aiohttp.web_response import Response

    from cctracker.observability import AnnounceObserver

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
MANIFEST_PREFIX = "/manifest/"

_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class TrackerStore(SwarmRepository, TorrentStore, ManifestStore, Protocol):
    """A backend providing every storage interface."""


def parse_query(raw_query: str) -> dict[str, bytes]:
    """Percent-decode a query string to raw bytes, first value per key."""
    query: dict[str, bytes] = {}
    for pair in raw_query.split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        query.setdefault(unquote_plus(key), unquote_to_bytes(value.replace("+", " ")))
    return query


def query_unescape(value: str) -> str:
    """Unescape a query-encoded string, rejecting malformed escapes."""
    match = _BAD_ESCAPE_RE.search(value)
    if match:
        msg = f'invalid URL escape "{value[match.start() : match.start() + 3]}"'
        raise ValueError(msg)
    return unquote_plus(value, errors="strict")


def format_request(request: Request) -> str:
    """Render a request line and its headers for diagnostics."""
    lines = [
        f"{request.method} {request.rel_url} HTTP/{request.version.major}.{request.version.minor}",
        f"Host: {request.host}",
    ]
    lines.extend(f"{name.lower()}: {value}" for name, value in request.headers.items())
    return "\n".join(lines)


def _text(body: str, status: int = 200) -> Response:
    return web.Response(text=body, status=status, content_type=CONTENT_TYPE, charset=CHARSET)


class TrackerServer:
    """Tracker HTTP server."""

    def __init__(
        self,
        config: Config,
        store: TrackerStore,
        policy: HandoutPolicy | None = None,
        observer: AnnounceObserver | None = None,
    ):
        """Initialize tracker server.

        Args:
            config: Tracker configuration
            store: Backend for swarms, torrents and manifests
            policy: Peer handout policy; looked up from ``config`` when omitted
            observer: Announce event sink

        Raises:
            PolicyNotFoundError: if the configured policy names are unknown.

        """
        self.config = config
        self.store = store
        if policy is None:
            policy = get_policy(
                config.peer_handout_policy.priority,
                config.peer_handout_policy.sampling,
            )
        self.orchestrator = AnnounceOrchestrator(
            store,
            policy,
            config.announcer.announce_interval,
            observer,
        )
        self.host = config.server.host
        self.port = config.server.port

        self.app = web.Application()
        self.runner: web.AppRunner | None = None
        self.site: web.TCPSite | None = None

        self._setup_middleware()
        self._setup_routes()

    def _setup_middleware(self) -> None:
        """Set up correlation ID and error handling middleware."""

        @web.middleware
        async def correlation_middleware(request: Request, handler: Any) -> Response:
            corr_id = set_correlation_id(request.headers.get(CORRELATION_HEADER))
            try:
                response = await handler(request)
            except web.HTTPException as e:
                e.headers[CORRELATION_HEADER] = corr_id
                raise
            response.headers[CORRELATION_HEADER] = corr_id
            return response

        @web.middleware
        async def error_middleware(request: Request, handler: Any) -> Response:
            try:
                return await handler(request)
            except web.HTTPException:
                raise
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.exception(
                    "Error handling request %s %s from %s",
                    request.method,
                    request.path,
                    request.remote,
                )
                return web.Response(text=str(e), status=500, content_type="text/plain")

        self.app.middlewares.append(correlation_middleware)
        self.app.middlewares.append(error_middleware)

    def _setup_routes(self) -> None:
        """Set up HTTP routes."""
        self.app.router.add_get("/health", self._handle_health)
        self.app.router.add_get("/announce", self._handle_announce)
        self.app.router.add_get("/infohash", self._handle_get_infohash)
        self.app.router.add_post("/infohash", self._handle_post_infohash)
        self.app.router.add_get(MANIFEST_PREFIX + "{name:.*}", self._handle_get_manifest)
        self.app.router.add_post(MANIFEST_PREFIX + "{name:.*}", self._handle_post_manifest)

    async def _handle_health(self, request: Request) -> Response:
        return web.Response(text="OK ;-)\n", content_type="text/plain")

    async def _handle_announce(self, request: Request) -> Response:
        """Handle GET /announce."""
        logger.debug("Received announce request from: %s", request.remote)
        query = parse_query(request.rel_url.raw_query_string)
        try:
            body = await self.orchestrator.announce(query)
        except AnnounceFailed as e:
            logger.info(
                "Announce failed at %s: %s, request: %s",
                e.stage,
                e.cause.message,
                format_request(request),
            )
            status = 400 if e.is_client_error else 500
            return web.Response(text=e.cause.message, status=status, content_type="text/plain")

        return web.Response(body=body, content_type=CONTENT_TYPE, charset=CHARSET)

    async def _handle_get_infohash(self, request: Request) -> Response:
        """Handle GET /infohash?name=..."""
        name = request.query.get("name", "")
        if not name:
            logger.error(
                "Failed to get torrent info hash, no name specified: %s",
                format_request(request),
            )
            return _text("Failed to get torrent info hash: no torrent name specified", 400)

        try:
            info = await self.store.read_torrent(name)
        except Exception as e:
            logger.exception("Failed to get torrent info hash for %s", name)
            return _text(f"Failed to get torrent info hash: {e}", 500)

        if info is None:
            logger.info("Torrent info hash is not found: %s", name)
            return _text(f"Failed to get torrent info hash: name {name} not found", 404)

        logger.info("Successfully got infohash for %s: %s", name, info.info_hash)
        return _text(info.info_hash)

    async def _handle_post_infohash(self, request: Request) -> Response:
        """Handle POST /infohash?name=...&info_hash=..."""
        name = request.query.get("name", "")
        info_hash = request.query.get("info_hash", "")
        if not name or not info_hash:
            return _text("Failed to create torrent: incomplete query", 400)

        try:
            await self.store.create_torrent(
                TorrentInfo(torrent_name=name, info_hash=info_hash)
            )
        except Exception as e:
            logger.exception("Failed to create torrent %s", name)
            return _text(f"Failed to create torrent: {e}", 500)

        return _text("Created")

    def _manifest_name(self, request: Request) -> str:
        raw = request.match_info.get("name", "")
        if not raw:
            raise web.HTTPBadRequest(
                text="Failed to parse an empty tag name",
                content_type=CONTENT_TYPE,
            )
        try:
            return query_unescape(raw)
        except ValueError as e:
            logger.error("Cannot unescape manifest name %s: %s", raw, e)
            raise web.HTTPBadRequest(
                text=f"cannot unescape manifest name: {raw}, error: {e}",
                content_type=CONTENT_TYPE,
            ) from e

    async def _handle_get_manifest(self, request: Request) -> Response:
        """Handle GET /manifest/{name}."""
        name = self._manifest_name(request)
        try:
            manifest = await self.store.read_manifest(name)
        except Exception as e:
            logger.exception("Cannot read manifest %s", name)
            return _text(f"cannot read manifest: {name}, error: {e}", 400)

        if manifest is None:
            return _text("", 404)

        logger.info("Got manifest for %s", name)
        return _text(manifest.manifest)

    async def _handle_post_manifest(self, request: Request) -> Response:
        """Handle POST /manifest/{name}."""
        name = self._manifest_name(request)
        body = await request.read()
        try:
            payload = body.decode("utf-8")
            document = json.loads(payload)
        except ValueError as e:
            logger.error("Cannot unmarshal manifest for %s: %s", name, e)
            return _text(f"Manifest is an invalid json for {name}, error: {e}", 400)
        if not isinstance(document, dict):
            return _text(f"Manifest is an invalid json for {name}, error: not an object", 400)

        try:
            await self.store.update_manifest(
                Manifest(tag_name=name, manifest=payload, flags=0)
            )
        except Exception as e:
            logger.exception("Failed to update manifest for %s", name)
            return _text(f"Failed to update manifest for {name} and error: {e}", 500)

        logger.info("Updated manifest successfully for %s", name)
        return _text("")

    async def start(self) -> None:
        """Start serving."""
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        self.site = web.TCPSite(self.runner, self.host, self.port)
        await self.site.start()
        logger.info("Tracker listening on %s:%d", self.host, self.port)

    async def stop(self) -> None:
        """Stop serving."""
        if self.runner is not None:
            await self.runner.cleanup()
            self.runner = None
            self.site = None
        logger.info("Tracker stopped")
