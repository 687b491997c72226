from __future__ import annotations

from typing import Collection, Dict, Optional
import random
import socket
import time

import requests
from requests.adapters import HTTPAdapter

from playdeck.backend.common.errors import NetworkError
from playdeck.backend.common.logging import get_logger

log = get_logger(__name__)


# ---------------- Exceptions ----------------

class NetError(NetworkError): ...
class TimeoutError(NetError): ...
class DNSFailure(NetError): ...
class ConnectionFailed(NetError): ...
class BadRequest(NetError): ...
class Unauthorized(NetError): ...
class Forbidden(NetError): ...
class NotFound(NetError): ...
class RateLimited(NetError): ...
class Upstream5xx(NetError): ...
class Client4xx(NetError): ...


def _map_http_error(status: int) -> NetError:
    if status == 400: return BadRequest("400 Bad Request")
    if status == 401: return Unauthorized("401 Unauthorized")
    if status == 403: return Forbidden("403 Forbidden")
    if status == 404: return NotFound("404 Not Found")
    if status == 429: return RateLimited("429 Too Many Requests")
    if 500 <= status < 600: return Upstream5xx(f"{status} Upstream error")

    return Client4xx(f"{status} HTTP error")

def _sleep_with_jitter(base_ms: int, attempt: int, max_ms: int, jitter_ms: int):
    backoff = min(max_ms, int((2 ** (attempt - 1)) * base_ms))
    jitter = random.randint(0, max(0, jitter_ms))
    time.sleep((backoff + jitter) / 1000.0)


# ---------------- Main Session ----------------

class HttpSession:
    """
    HTTP client for subtitle downloads:
      - pooled connections
      - exponential backoff + jitter on timeouts, connection errors, 408 and 5xx
      - 429 Retry-After support
      - typed error mapping
    """

    def __init__(
        self,
        timeout: float = 20,
        *,
        max_attempts: int = 3,
        base_backoff_ms: int = 300,
        max_backoff_ms: int = 6000,
        jitter_ms: int = 250,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout
        self.retry_max_attempts = max(1, max_attempts)
        self.base_backoff_ms = base_backoff_ms
        self.max_backoff_ms = max_backoff_ms
        self.jitter_ms = jitter_ms
        self.headers = dict(headers or {})

        self._session = session or requests.Session()
        self._session.mount("http://", HTTPAdapter(pool_connections=4, pool_maxsize=8))
        self._session.mount("https://", HTTPAdapter(pool_connections=4, pool_maxsize=8))

    # -------- public API --------

    def get(
        self,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        allowed_statuses: Optional[Collection[int]] = None,
    ) -> requests.Response:
        hdrs = dict(self.headers)
        if headers:
            hdrs.update(headers)

        return self._request("GET", url, headers=hdrs, allowed_statuses=allowed_statuses)

    def get_text(self, url: str, *, encoding: str = "utf-8") -> str:
        resp = self.get(url)
        resp.encoding = encoding

        return resp.text

    def close(self) -> None:
        self._session.close()

    # -------- internals --------

    def _request(
        self,
        method: str,
        url: str,
        *,
        headers: Dict[str, str],
        allowed_statuses: Optional[Collection[int]] = None,
    ) -> requests.Response:

        allowed = set(allowed_statuses or ())
        attempt = 1
        last_exc: Optional[Exception] = None

        while attempt <= self.retry_max_attempts:
            try:
                resp = self._session.request(
                    method=method,
                    url=url,
                    headers=headers,
                    timeout=self.timeout,
                )

                status = resp.status_code

                if status < 400 or status in allowed:
                    return resp

                if status == 429:
                    last_exc = _map_http_error(status)
                    ra = resp.headers.get("Retry-After")
                    if ra:
                        try:
                            time.sleep(min(int(float(ra)), 30))
                        except (ValueError, TypeError):
                            pass  # ignore malformed header / HTTP-date
                    if attempt == self.retry_max_attempts:
                        raise last_exc
                    attempt += 1
                    _sleep_with_jitter(self.base_backoff_ms, attempt, self.max_backoff_ms, self.jitter_ms)
                    continue

                if status == 408 or 500 <= status < 600:
                    last_exc = _map_http_error(status)
                    if attempt == self.retry_max_attempts:
                        raise last_exc
                    attempt += 1
                    _sleep_with_jitter(self.base_backoff_ms, attempt, self.max_backoff_ms, self.jitter_ms)
                    continue

                # Non-retryable 4xx
                raise _map_http_error(status)

            except requests.exceptions.Timeout as e:
                last_exc = e
                if attempt == self.retry_max_attempts:
                    raise TimeoutError(str(e)) from e

                attempt += 1
                _sleep_with_jitter(self.base_backoff_ms, attempt, self.max_backoff_ms, self.jitter_ms)
                continue

            except requests.exceptions.ConnectionError as e:
                last_exc = e
                if isinstance(getattr(e, "__cause__", None), socket.gaierror):
                    if attempt == self.retry_max_attempts:
                        raise DNSFailure(str(e)) from e
                if attempt == self.retry_max_attempts:
                    raise ConnectionFailed(str(e)) from e

                log.debug("http_retry", extra={"url": url, "attempt": attempt, "error": str(e)})
                attempt += 1
                _sleep_with_jitter(self.base_backoff_ms, attempt, self.max_backoff_ms, self.jitter_ms)
                continue

            except requests.exceptions.RequestException as e:
                # Malformed URLs, redirect loops and the like are not retried.
                raise NetError(str(e)) from e

        raise NetError(f"Request failed after retries: {last_exc}")
