"""Tests for token verification against the enterprise service."""

from __future__ import annotations

import httpx
import pytest

from entauth.auth.verifier import Verifier
from entauth.exceptions import VerificationError
from entauth.models import AuthSettings

DOMAIN = "https://app.example.com"


def _verifier(handler, settings: AuthSettings | None = None) -> Verifier:
    return Verifier(
        settings or AuthSettings(),
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture(autouse=True)
def _quiet(quiet_output: object) -> None:
    pass


class TestClassification:
    def test_200_is_valid(self) -> None:
        verifier = _verifier(lambda request: httpx.Response(200, json={"ok": True}))
        assert verifier.check("tok", DOMAIN) is True

    def test_204_is_valid(self) -> None:
        verifier = _verifier(lambda request: httpx.Response(204))
        assert verifier.check("tok", DOMAIN) is True

    def test_401_is_invalid(self) -> None:
        verifier = _verifier(lambda request: httpx.Response(401))
        assert verifier.check("tok", DOMAIN) is False

    @pytest.mark.parametrize("status", [403, 404, 500, 502, 503])
    def test_other_errors_raise(self, status: int) -> None:
        verifier = _verifier(lambda request: httpx.Response(status))
        with pytest.raises(VerificationError, match=str(status)):
            verifier.check("tok", DOMAIN)

    def test_redirect_is_not_followed(self) -> None:
        verifier = _verifier(
            lambda request: httpx.Response(302, headers={"Location": f"{DOMAIN}/login"})
        )
        with pytest.raises(VerificationError):
            verifier.check("tok", DOMAIN)

    def test_network_failure_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(VerificationError, match="connection refused"):
            _verifier(handler).check("tok", DOMAIN)

    def test_timeout_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(VerificationError):
            _verifier(handler).check("tok", DOMAIN)

    def test_verification_error_exit_code(self) -> None:
        verifier = _verifier(lambda request: httpx.Response(500))
        with pytest.raises(VerificationError) as exc_info:
            verifier.check("tok", DOMAIN)
        assert exc_info.value.exit_code == 6


class TestRequest:
    def test_calls_verify_path_with_get(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        _verifier(handler).check("tok", DOMAIN)

        assert len(seen) == 1
        assert seen[0].method == "GET"
        assert str(seen[0].url) == f"{DOMAIN}/token/verify"

    def test_default_header(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        _verifier(handler).check("tok-123", DOMAIN)

        assert seen[0].headers["x-access-auth-token"] == "tok-123"
        assert "x-ci-token" not in seen[0].headers

    def test_ci_header_with_override_token(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        settings = AuthSettings(auth_token="ci-tok")
        _verifier(handler, settings).check("ci-tok", DOMAIN)

        assert seen[0].headers["x-ci-token"] == "ci-tok"
        assert "x-access-auth-token" not in seen[0].headers
