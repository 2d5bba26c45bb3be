"""Tests for the HTTP reachability prober."""

import httpx
import pytest

from cloudx_validator.errors import UnreachableError
from cloudx_validator.prober import ProbeOutcome, ReachabilityProber


def prober_with(handler) -> ReachabilityProber:
    """Build a prober whose client answers through handler."""
    return ReachabilityProber(httpx.Client(transport=httpx.MockTransport(handler)))


class TestProbe:
    """Tests for probe()."""

    def test_200_is_reachable(self):
        prober = prober_with(lambda request: httpx.Response(200, text="ok"))

        assert prober.probe("http://203.0.113.5") is True

    @pytest.mark.parametrize("status", [201, 204, 301, 404, 500, 503])
    def test_anything_but_200_is_unreachable(self, status):
        """Only exactly HTTP 200 counts, not any 2xx."""
        prober = prober_with(lambda request: httpx.Response(status))

        assert prober.probe("http://203.0.113.5") is False

    def test_transport_error_is_unreachable(self):
        def refuse(request):
            raise httpx.ConnectError("Connection refused", request=request)

        assert prober_with(refuse).probe("http://203.0.113.5") is False

    def test_single_request(self):
        """A failed probe is never retried."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503)

        prober_with(handler).probe("http://203.0.113.5")

        assert len(calls) == 1
        assert calls[0].method == "GET"

    def test_redirect_followed(self):
        """The status of the final response after redirects is judged."""
        def handler(request):
            if request.url.path == "/":
                return httpx.Response(302, headers={"Location": "http://203.0.113.5/app"})
            return httpx.Response(200)

        assert prober_with(handler).probe("http://203.0.113.5") is True


class TestAttempt:
    """Tests for attempt() diagnostics."""

    def test_success_outcome(self):
        outcome = prober_with(lambda request: httpx.Response(200)).attempt("http://203.0.113.5")

        assert outcome == ProbeOutcome(
            url="http://203.0.113.5", reachable=True, status_code=200, reason="HTTP 200"
        )

    def test_status_reason(self):
        outcome = prober_with(lambda request: httpx.Response(502)).attempt("http://203.0.113.5")

        assert outcome.reachable is False
        assert outcome.status_code == 502
        assert outcome.reason == "HTTP 502"

    def test_transport_reason(self):
        def timeout(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        outcome = prober_with(timeout).attempt("http://203.0.113.5")

        assert outcome.reachable is False
        assert outcome.status_code is None
        assert outcome.reason.startswith("ConnectTimeout")


class TestRequire:
    """Tests for require()."""

    def test_raises_with_url(self):
        prober = prober_with(lambda request: httpx.Response(404))

        with pytest.raises(UnreachableError, match="http://203.0.113.5") as exc_info:
            prober.require("http://203.0.113.5")

        assert exc_info.value.reason == "HTTP 404"

    def test_returns_outcome_when_reachable(self):
        prober = prober_with(lambda request: httpx.Response(200))

        assert prober.require("http://203.0.113.5").reachable is True
