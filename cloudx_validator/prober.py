"""HTTP reachability prober.

Issues exactly one GET per probe and never retries: a single failure is a
legitimate signal that the application is not reachable right now.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from cloudx_validator.errors import UnreachableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeOutcome:
    """Outcome of a single GET, with the reason when it was not a 200."""

    url: str
    reachable: bool
    status_code: Optional[int] = None
    reason: str = ""


class ReachabilityProber:
    """Checks whether a URL answers HTTP 200.

    Args:
        http_client: httpx client used for the GET requests
    """

    def __init__(self, http_client: httpx.Client):
        self.http_client = http_client

    def attempt(self, url: str) -> ProbeOutcome:
        """GET the URL once and describe what happened."""
        logger.debug("GET %s", url)
        try:
            response = self.http_client.get(url, follow_redirects=True)
        except httpx.HTTPError as e:
            return ProbeOutcome(
                url=url,
                reachable=False,
                reason=f"{type(e).__name__}: {e}",
            )

        if response.status_code == 200:
            return ProbeOutcome(url=url, reachable=True, status_code=200, reason="HTTP 200")

        return ProbeOutcome(
            url=url,
            reachable=False,
            status_code=response.status_code,
            reason=f"HTTP {response.status_code}",
        )

    def probe(self, url: str) -> bool:
        """Return True iff a GET of url answers exactly HTTP 200."""
        return self.attempt(url).reachable

    def require(self, url: str) -> ProbeOutcome:
        """Like attempt(), but raise UnreachableError when not reachable."""
        outcome = self.attempt(url)
        if not outcome.reachable:
            raise UnreachableError(url, outcome.reason)
        return outcome
