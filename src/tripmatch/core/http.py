"""
HTTP helpers for the REST similarity provider.

Every request carries a TripMatch User-Agent and a timeout, and non-2xx responses raise,
so the provider can decide whether to fall back to its last good snapshot. Tests (or a
long-lived service) can pass their own `httpx.Client`; otherwise a short-lived one is
opened per call.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "tripmatch/0.1.0 (+https://local)"


def get_json(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 15,
    client: httpx.Client | None = None,
) -> Any:
    """GET `url` and return the decoded JSON body.

    Raises:
        httpx.HTTPError: transport failure or a non-2xx status.
        ValueError: the body is not JSON.
    """
    request_headers = {"User-Agent": DEFAULT_USER_AGENT, "Accept": "application/json", **(headers or {})}

    if client is None:
        with httpx.Client(timeout=timeout_seconds) as own_client:
            return get_json(url, params=params, headers=request_headers, client=own_client)

    resp = client.get(url, params=params, headers=request_headers, timeout=timeout_seconds)
    logger.debug("GET %s -> %s", resp.request.url, resp.status_code)
    resp.raise_for_status()
    return resp.json()
