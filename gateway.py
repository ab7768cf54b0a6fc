"""HTTP access to the upstream data sources.

Each call is a single GET returning decoded JSON or failing atomically with
an ``UpstreamFetchError``. No retry or caching happens here.
"""

from __future__ import annotations

import concurrent.futures
import logging
from collections.abc import Callable, Mapping
from typing import Any

import requests

from config import REQUEST_TIMEOUT_SECONDS

LOGGER = logging.getLogger(__name__)


class UpstreamFetchError(RuntimeError):
    """An upstream request failed; aborts the whole pipeline invocation."""

    def __init__(self, source: str, path: str, status: int | None, detail: str = "") -> None:
        self.source = source
        self.path = path
        self.status = status
        status_text = str(status) if status is not None else "network error"
        message = f"{source} request failed ({status_text}) for {path}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


def fetch_json(
    source: str,
    base_url: str,
    path: str,
    *,
    headers: Mapping[str, str] | None = None,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
) -> Any:
    """GET ``base_url + path`` and return the decoded JSON body."""
    request_headers = {"accept": "application/json"}
    if headers:
        request_headers.update(headers)

    try:
        response = requests.get(f"{base_url}{path}", headers=request_headers, timeout=timeout)
    except requests.RequestException as exc:
        raise UpstreamFetchError(source, path, None, str(exc)) from exc

    if not response.ok:
        raise UpstreamFetchError(source, path, response.status_code)

    try:
        body = response.json()
    except ValueError as exc:
        raise UpstreamFetchError(source, path, response.status_code, "invalid JSON body") from exc

    LOGGER.debug("%s fetch ok: path=%s status=%s", source, path, response.status_code)
    return body


def fetch_concurrently(calls: Mapping[str, Callable[[], Any]]) -> dict[str, Any]:
    """Run independent fetches in parallel and join on all of them.

    Returns results keyed like ``calls``. If any call raised, the first failure
    in declaration order is re-raised and no results are returned.
    """
    if not calls:
        return {}

    with concurrent.futures.ThreadPoolExecutor(max_workers=len(calls)) as executor:
        futures = {name: executor.submit(call) for name, call in calls.items()}
        concurrent.futures.wait(futures.values())

    results: dict[str, Any] = {}
    for name, future in futures.items():
        exc = future.exception()
        if exc is not None:
            LOGGER.warning("Upstream fetch failed: call=%s error=%s", name, exc)
            raise exc
        results[name] = future.result()
    return results
