"""HTTP(S) archive download with an explicit redirect hop limit."""

from __future__ import annotations

import contextlib
import http.client
import shutil
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urljoin

import certifi

from tunny_core.config import __version__
from tunny_core.logging_setup import get_logger

from .errors import DownloadFailed, HttpStatus, ProvisionError, RedirectLoop, ReleaseNotFound


CHUNK_SIZE = 1024 * 1024
USER_AGENT = f"tunny-installer/{__version__}"

log = get_logger("fetcher")


@dataclass(frozen=True)
class DownloadArtifact:
    local_path: Path
    byte_size: int
    url: str


class _NoRedirect(urllib.request.HTTPRedirectHandler):
    """Surface 3xx responses as HTTPError so hops are counted by ``fetch``."""

    def redirect_request(self, req, fp, code, msg, headers, newurl):
        return None


def build_ssl_context(ca_bundle: str | None = None, allow_insecure: bool = False) -> ssl.SSLContext:
    """Create TLS context for release downloads with explicit CA handling."""
    if allow_insecure:
        return ssl._create_unverified_context()

    if ca_bundle:
        return ssl.create_default_context(cafile=ca_bundle)

    return ssl.create_default_context(cafile=certifi.where())


def _open(url: str, timeout: float, context: ssl.SSLContext | None):
    request = urllib.request.Request(
        url,
        headers={
            "User-Agent": USER_AGENT,
            "Accept": "application/octet-stream, */*",
        },
    )
    opener = urllib.request.build_opener(_NoRedirect(), urllib.request.HTTPSHandler(context=context))
    return opener.open(request, timeout=timeout)


def _open_following(url: str, timeout: float, max_redirects: int, context: ssl.SSLContext | None):
    current = url
    hops = 0
    while True:
        try:
            return current, _open(current, timeout, context)
        except urllib.error.HTTPError as exc:
            code = exc.code
            location = exc.headers.get("Location") if exc.headers is not None else None
            exc.close()
            if 300 <= code < 400 and location:
                if hops >= max_redirects:
                    raise RedirectLoop(url, hops + 1) from None
                hops += 1
                current = urljoin(current, location)
                log.debug("following redirect %d to %s", hops, current, extra={"event": "redirect"})
                continue
            if code == 404:
                raise ReleaseNotFound(current) from None
            raise HttpStatus(code, current) from None
        except urllib.error.URLError as exc:
            raise DownloadFailed(current, exc.reason if exc.reason is not None else exc) from exc
        except (OSError, ValueError, http.client.HTTPException) as exc:
            raise DownloadFailed(current, exc) from exc


def _declared_length(response) -> int | None:
    headers = getattr(response, "headers", None)
    if headers is None:
        return None
    try:
        return int(headers.get("Content-Length"))
    except (TypeError, ValueError):
        return None


def fetch(
    url: str,
    dest: Path,
    timeout: float = 60,
    max_redirects: int = 1,
    context: ssl.SSLContext | None = None,
) -> DownloadArtifact:
    """Stream ``url`` into ``dest``; ``dest`` is removed on any failure.

    A body shorter than the declared Content-Length is a failed download.
    """
    try:
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DownloadFailed(url, exc) from exc

        final_url, response = _open_following(url, timeout, max_redirects, context)
        try:
            with response, dest.open("wb") as fh:
                shutil.copyfileobj(response, fh, CHUNK_SIZE)
                written = fh.tell()
            expected = _declared_length(response)
            if expected is not None and written != expected:
                raise http.client.IncompleteRead(b"", expected - written)
        except (OSError, http.client.HTTPException) as exc:
            raise DownloadFailed(final_url, exc) from exc
    except ProvisionError:
        with contextlib.suppress(OSError):
            dest.unlink(missing_ok=True)
        raise

    return DownloadArtifact(local_path=dest, byte_size=written, url=final_url)
