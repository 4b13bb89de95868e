from __future__ import annotations

"""Lightweight HTTP client util for the rate feed.

Uses stdlib urllib; the only outbound call is a single unauthenticated GET
returning JSON, so a full client library is not needed. Non-2xx responses,
transport errors and undecodable bodies all surface as ``HttpError``.
"""
import http.client
import json
import logging
import time
import urllib.error
import urllib.request
from typing import Any, Dict, Optional

logger = logging.getLogger("app.http")

USER_AGENT = "imei-tax-calculator/0.1"


class HttpError(Exception):
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


def _fetch_once(url: str, timeout: float) -> Dict[str, Any]:
    request = urllib.request.Request(
        url, headers={"Accept": "application/json", "User-Agent": USER_AGENT}
    )
    try:
        with urllib.request.urlopen(request, timeout=timeout) as resp:  # nosec B310
            if resp.status >= 300:
                raise HttpError(f"HTTP {resp.status} for {url}", status=resp.status)
            payload = json.loads(resp.read().decode("utf-8"))
    except urllib.error.HTTPError as e:
        raise HttpError(f"HTTP {e.code} for {url}", status=e.code) from e
    except (urllib.error.URLError, http.client.HTTPException, TimeoutError, OSError) as e:
        raise HttpError(f"transport error for {url}: {e}") from e
    except ValueError as e:  # JSON / UTF-8 decode
        raise HttpError(f"invalid JSON from {url}: {e}") from e
    if not isinstance(payload, dict):
        raise HttpError(f"expected a JSON object from {url}")
    return payload


def get_json(
    url: str, *, timeout: float = 5.0, retries: int = 1, backoff: float = 0.5
) -> Dict[str, Any]:
    last_err: Optional[HttpError] = None
    for attempt in range(retries + 1):
        try:
            return _fetch_once(url, timeout)
        except HttpError as e:
            last_err = e
            # client errors will not improve on retry
            if e.status is not None and 400 <= e.status < 500:
                break
            if attempt == retries:
                break
            logger.debug("retrying %s after error: %s", url, e)
            time.sleep(backoff * (2**attempt))
    raise HttpError(
        f"Failed to fetch JSON from {url}: {last_err}",
        status=last_err.status if last_err else None,
    )
