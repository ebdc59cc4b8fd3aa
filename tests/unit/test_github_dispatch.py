"""Unit tests for repository dispatch delivery."""

from __future__ import annotations

import datetime as dt

import httpx
import msgspec
import pytest

from porter.github import (
    DispatchClient,
    Dispatched,
    DispatchPayload,
    DispatchRejected,
    DispatchUnavailable,
    InstallationToken,
    RepositoryNotCovered,
    TargetNotFound,
    TokenRejected,
    build_dispatch_payload,
)
from porter.webhook import decode_push_event
from tests.helpers.github_stub import API_URL, GitHubStub
from tests.helpers.push_events import HEAD_SHA, commit, encode, push_payload

TARGET = "The1Studio/UPMAutoPublisher"
TOKEN = InstallationToken(
    token="ghs_dispatch",  # noqa: S106 - fake
    expires_at=dt.datetime(2099, 1, 1, tzinfo=dt.UTC),
    installation_id=4242,
)


def _payload() -> DispatchPayload:
    push = decode_push_event(
        encode(push_payload(commits=[commit(message="feat: ship 1.2.0")]))
    )
    return build_dispatch_payload(push, event_type="package_publish")


def _client(stub: GitHubStub) -> DispatchClient:
    return DispatchClient(http_client=stub.client(), api_url=API_URL)


class TestBuildDispatchPayload:
    """Tests for build_dispatch_payload."""

    def test_describes_the_push(self) -> None:
        """The client payload carries the push details verbatim."""
        payload = _payload()

        assert payload.event_type == "package_publish"
        client_payload = payload.client_payload
        assert client_payload.repository == "The1Studio/UnityBuildScript"
        assert client_payload.commit_sha == HEAD_SHA
        assert client_payload.commit_message == "feat: ship 1.2.0"
        assert client_payload.commit_author == "tuha"
        assert client_payload.branch == "main"
        assert client_payload.package_path == ""

    def test_json_round_trip_keeps_full_sha(self) -> None:
        """Serialising and parsing preserves the 40-character SHA."""
        decoded = msgspec.json.decode(
            msgspec.json.encode(_payload()), type=DispatchPayload
        )
        assert decoded.client_payload.commit_sha == HEAD_SHA
        assert len(decoded.client_payload.commit_sha) == 40

    def test_wire_keys_are_snake_case(self) -> None:
        """The downstream workflow reads snake_case keys."""
        wire = msgspec.json.decode(msgspec.json.encode(_payload()))
        assert set(wire) == {"event_type", "client_payload"}
        assert set(wire["client_payload"]) == {
            "repository",
            "commit_sha",
            "commit_message",
            "commit_author",
            "branch",
            "package_path",
        }


class TestDispatch:
    """Tests for DispatchClient.dispatch status mapping."""

    @pytest.mark.asyncio
    async def test_posts_payload_to_target(self, github_stub: GitHubStub) -> None:
        """The dispatch is a single POST with the installation token."""
        payload = _payload()

        result = await _client(github_stub).dispatch(TOKEN, TARGET, payload)

        assert result == Dispatched(204)
        (request,) = github_stub.api_calls
        assert request.method == "POST"
        assert request.url.path == f"/repos/{TARGET}/dispatches"
        assert request.headers["Authorization"] == "Bearer ghs_dispatch"
        assert request.headers["Content-Type"] == "application/json"
        sent = msgspec.json.decode(request.content, type=DispatchPayload)
        assert sent == payload

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            (401, TokenRejected()),
            (403, RepositoryNotCovered(TARGET)),
            (404, TargetNotFound(TARGET)),
            (422, DispatchRejected(422)),
        ],
    )
    async def test_client_errors_are_distinguished(
        self, status: int, expected: object
    ) -> None:
        """Each client error maps to its own outcome."""
        stub = GitHubStub(dispatch_status=[status])

        result = await _client(stub).dispatch(TOKEN, TARGET, _payload())

        assert result == expected

    @pytest.mark.asyncio
    async def test_server_error_is_unavailable(self) -> None:
        """A 5xx is reported as unavailability with its status."""
        stub = GitHubStub(dispatch_status=[502])

        result = await _client(stub).dispatch(TOKEN, TARGET, _payload())

        assert isinstance(result, DispatchUnavailable)
        assert result.status_code == 502

    @pytest.mark.asyncio
    async def test_timeout_is_unavailable(self) -> None:
        """A timeout is reported as unavailability without a status."""
        stub = GitHubStub(api_exception=httpx.ReadTimeout("slow"))

        result = await _client(stub).dispatch(TOKEN, TARGET, _payload())

        assert isinstance(result, DispatchUnavailable)
        assert result.status_code is None
        assert "timed out" in result.detail

    @pytest.mark.asyncio
    async def test_dispatch_is_not_retried(self) -> None:
        """A failed dispatch is attempted exactly once."""
        stub = GitHubStub(dispatch_status=[502, 204])

        await _client(stub).dispatch(TOKEN, TARGET, _payload())

        assert len(stub.calls("/dispatches")) == 1

    @pytest.mark.asyncio
    async def test_invalid_target_slug_raises(self, github_stub: GitHubStub) -> None:
        """A target that is not owner/name is a programming error."""
        with pytest.raises(ValueError, match="Invalid repository slug"):
            await _client(github_stub).dispatch(TOKEN, "not-a-slug", _payload())
