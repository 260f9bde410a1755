# === NAVMAP v1 ===
# {
#   "module": "RegistryDocs.Stardoc.net",
#   "purpose": "Provide a shared HTTPX client and archive download helper",
#   "sections": [
#     {"id": "constants", "name": "Constants & globals", "anchor": "CONST", "kind": "constants"},
#     {"id": "helpers", "name": "Client construction helpers", "anchor": "HELP", "kind": "helpers"},
#     {"id": "api", "name": "Public API", "anchor": "API", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Shared HTTPX client used to download documentation archives.

There is no HTTP cache and no retry layer: each build fetches every archive
once, and a failed fetch means the module version simply has no
documentation.
"""

from __future__ import annotations

import contextlib
import logging
import ssl
import threading
import time
from typing import Optional

import certifi
import httpx

from .errors import FetchError
from .settings import HttpCfg

__all__ = [
    "configure_http_client",
    "reset_http_client",
    "get_http_client",
    "download_archive",
]

LOGGER = logging.getLogger("RegistryDocs.Stardoc.net")

# --- Constants & globals -------------------------------------------------------

_CLIENT_LOCK = threading.RLock()
_HTTP_CLIENT: Optional[httpx.Client] = None

# --- Client construction helpers ----------------------------------------------


def _build_ssl_context() -> ssl.SSLContext:
    context = ssl.create_default_context()
    context.load_verify_locations(certifi.where())
    return context


def _request_hook(request: httpx.Request) -> None:
    request.extensions["stardoc_start"] = time.perf_counter()


def _response_hook(response: httpx.Response) -> None:
    start = response.request.extensions.get("stardoc_start")
    elapsed = time.perf_counter() - start if isinstance(start, float) else None
    LOGGER.debug(
        "stardoc-http-response",
        extra={
            "stage": "fetch",
            "extra_fields": {
                "url": str(response.request.url),
                "status": response.status_code,
                "elapsed_sec": elapsed,
            },
        },
    )


def _build_http_client(config: HttpCfg) -> httpx.Client:
    return httpx.Client(
        transport=httpx.HTTPTransport(retries=0, verify=_build_ssl_context(), http2=config.http2),
        timeout=httpx.Timeout(
            connect=config.connect_timeout_s,
            read=config.read_timeout_s,
            write=config.read_timeout_s,
            pool=config.connect_timeout_s,
        ),
        headers={"User-Agent": config.user_agent},
        follow_redirects=config.follow_redirects,
        trust_env=True,
        event_hooks={"request": [_request_hook], "response": [_response_hook]},
    )


def _close_client_unlocked() -> None:
    global _HTTP_CLIENT
    if _HTTP_CLIENT is not None:
        with contextlib.suppress(Exception):
            _HTTP_CLIENT.close()
    _HTTP_CLIENT = None


# --- Public API ----------------------------------------------------------------


def configure_http_client(client: Optional[httpx.Client]) -> None:
    """Install ``client`` as the shared client (``None`` resets to lazy default)."""

    global _HTTP_CLIENT
    with _CLIENT_LOCK:
        if client is not _HTTP_CLIENT:
            _close_client_unlocked()
        _HTTP_CLIENT = client


def reset_http_client() -> None:
    """Close and forget the shared client (test helper)."""

    with _CLIENT_LOCK:
        _close_client_unlocked()


def get_http_client(config: Optional[HttpCfg] = None) -> httpx.Client:
    """Return the shared HTTPX client, creating it if necessary."""

    global _HTTP_CLIENT
    with _CLIENT_LOCK:
        if _HTTP_CLIENT is None:
            _HTTP_CLIENT = _build_http_client(config or HttpCfg())
        return _HTTP_CLIENT


def download_archive(
    url: str, *, client: Optional[httpx.Client] = None, config: Optional[HttpCfg] = None
) -> bytes:
    """Download an archive into memory.

    Args:
        url: Archive location supplied by the registry metadata.
        client: Optional client; the shared client is used otherwise.
        config: Transport settings (size limit, timeouts for the shared client).

    Returns:
        The raw (still compressed) archive bytes.

    Raises:
        FetchError: On transport errors, non-success status codes, or payloads
            exceeding ``config.max_archive_bytes``.
    """

    cfg = config or HttpCfg()
    http = client or get_http_client(cfg)
    chunks: list[bytes] = []
    received = 0
    try:
        with http.stream("GET", url) as response:
            if not response.is_success:
                raise FetchError(
                    f"Archive request returned HTTP {response.status_code}",
                    url=url,
                    status_code=response.status_code,
                )
            for chunk in response.iter_bytes():
                received += len(chunk)
                if received > cfg.max_archive_bytes:
                    raise FetchError(
                        f"Archive exceeds {cfg.max_archive_bytes} bytes",
                        url=url,
                        status_code=response.status_code,
                    )
                chunks.append(chunk)
    except httpx.HTTPError as exc:
        raise FetchError(f"Archive request failed: {exc}", url=url) from exc
    return b"".join(chunks)
