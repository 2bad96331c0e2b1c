"""
HTTP transport for the FHIR server.

High level
----------
A thin wrapper around a pooled `requests.Session`:
- Retries are configured on the session (urllib3 `Retry` mounted through an
  `HTTPAdapter`) with a fixed retry count and a fixed delay between attempts,
  so callers never loop themselves; only exhaustion surfaces.
- Every failure (network error, non-2xx status, non-JSON body) raises
  `TransportError`. When the server answered with an OperationOutcome, the
  payload rides along on the exception so callers can surface diagnostics.

Environment
-----------
VISACUITY_HTTP_RETRIES     : Retry count per request (default 3)
VISACUITY_HTTP_RETRY_DELAY : Seconds between attempts (default 0.5)
VISACUITY_HTTP_TIMEOUT     : Per-request timeout in seconds (default 10)
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Mapping, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

LOGGER = logging.getLogger(__name__)

FHIR_JSON = "application/fhir+json"


class TransportError(RuntimeError):
    """
    Raised when a FHIR request fails after all retries.

    Attributes:
        status_code: HTTP status, or None if no response was received.
        outcome: The OperationOutcome body, if the server sent one.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        outcome: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.outcome = outcome

    @property
    def diagnostics(self) -> List[str]:
        """Non-empty `issue[*].diagnostics` strings of the OperationOutcome."""
        return operation_outcome_diagnostics(self.outcome)


# ------------------------------------------------------------------------------
# Module configuration
# ------------------------------------------------------------------------------

DEFAULT_RETRIES = int(os.getenv("VISACUITY_HTTP_RETRIES", "3"))
DEFAULT_RETRY_DELAY = float(os.getenv("VISACUITY_HTTP_RETRY_DELAY", "0.5"))
DEFAULT_TIMEOUT = float(os.getenv("VISACUITY_HTTP_TIMEOUT", "10"))

_RETRY_STATUSES = (408, 429, 500, 502, 503, 504)
# POST is never retried on a status code; urllib3 still retries every
# method on connection errors.
_RETRY_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "PUT", "DELETE"})


# ------------------------------------------------------------------------------
# Small utilities
# ------------------------------------------------------------------------------


class FixedDelayRetry(Retry):
    """urllib3 Retry that waits `backoff_factor` seconds before every retry."""

    def get_backoff_time(self) -> float:
        if not self.history:
            return 0.0
        return float(self.backoff_factor)


def operation_outcome_diagnostics(payload: Any) -> List[str]:
    """Collect the diagnostics strings of an OperationOutcome payload."""
    if not isinstance(payload, dict) or payload.get("resourceType") != "OperationOutcome":
        return []
    issues = payload.get("issue")
    if not isinstance(issues, list):
        return []
    return [
        str(issue["diagnostics"])
        for issue in issues
        if isinstance(issue, dict) and issue.get("diagnostics")
    ]


def _decode(resp: requests.Response) -> Any:
    if not resp.content:
        return {}
    try:
        return resp.json()
    except ValueError:
        return None


# ------------------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------------------


class FhirTransport:
    """
    Issues FHIR REST requests over a retrying `requests.Session`.

    Parameters
    ----------
    retries : int, optional
        Retries per request after the first attempt.
    retry_delay : float, optional
        Fixed delay in seconds between attempts.
    timeout : float, optional
        Per-request timeout in seconds.
    session : requests.Session, optional
        Pre-built session (mainly for tests); no retry adapter is mounted on it.
    """

    def __init__(
        self,
        retries: int = DEFAULT_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.retries = retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.session = session if session is not None else self._build_session()

    def _build_session(self) -> requests.Session:
        session = requests.Session()
        retry_strategy = FixedDelayRetry(
            total=self.retries,
            backoff_factor=self.retry_delay,
            status_forcelist=_RETRY_STATUSES,
            allowed_methods=_RETRY_METHODS,
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers.update({"Accept": FHIR_JSON})
        return session

    def request(
        self,
        path: str,
        *,
        method: str = "GET",
        base_address: str,
        headers: Optional[Mapping[str, str]] = None,
        query: Optional[Mapping[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Send one request and return the decoded JSON object.

        Raises
        ------
        TransportError
            On connection failure, retry exhaustion, a non-2xx status or a
            body that is not a JSON object.
        """
        url = f"{base_address.rstrip('/')}/{path.lstrip('/')}"
        send_headers = dict(headers or {})
        data = None
        if body is not None:
            send_headers.setdefault("Content-Type", FHIR_JSON)
            data = json.dumps(body)

        LOGGER.debug("%s %s params=%s", method, url, dict(query or {}))
        try:
            resp = self.session.request(
                method,
                url,
                headers=send_headers,
                params=query,
                data=data,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        payload = _decode(resp)
        if not resp.ok:
            is_outcome = isinstance(payload, dict) and payload.get("resourceType") == "OperationOutcome"
            raise TransportError(
                f"{method} {url} returned HTTP {resp.status_code}",
                status_code=resp.status_code,
                outcome=payload if is_outcome else None,
            )
        if not isinstance(payload, dict):
            raise TransportError(
                f"{method} {url} returned a non-JSON-object body",
                status_code=resp.status_code,
            )
        return payload

    def close(self) -> None:
        self.session.close()
