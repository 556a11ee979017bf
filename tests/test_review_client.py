"""Tests for the review service client (httpx MockTransport, no network)."""

import json

import httpx
import pytest

from revision_commit.config import Config
from revision_commit.errors import TransportError
from revision_commit.review_client import (
    HttpReviewClient,
    RevisionRef,
    get_review_client,
    parse_revision_id,
)


def make_client(handler):
    return HttpReviewClient(
        base_url="https://review.example.com/",
        api_token="tok",
        transport=httpx.MockTransport(handler),
    )


def reply(result=None, error_code=None, error_info=None, status_code=200):
    return httpx.Response(
        status_code,
        json={"result": result, "error_code": error_code, "error_info": error_info},
    )


class TestCalls:

    def test_find_committable_revisions(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return reply([
                {"id": 12, "name": "Fix parser", "source_path": "/wc"},
                {"id": "13", "name": "Add docs"},
            ])

        revisions = make_client(handler).find_committable_revisions("user-1")

        assert seen["url"] == "https://review.example.com/api/revision.find"
        assert seen["body"]["token"] == "tok"
        assert seen["body"]["params"] == {"query": "committable", "owners": ["user-1"]}
        assert revisions == [
            RevisionRef(id=12, name="Fix parser", source_path="/wc"),
            RevisionRef(id=13, name="Add docs"),
        ]

    def test_get_commit_paths(self):
        client = make_client(lambda request: reply(["a.txt", "dir/"]))
        assert client.get_commit_paths(12) == ["a.txt", "dir/"]

    def test_get_commit_message_keeps_unicode(self):
        client = make_client(lambda request: reply("Café ☕\n\nTest Plan: ran it"))
        assert client.get_commit_message(12) == "Café ☕\n\nTest Plan: ran it"

    def test_mark_committed(self):
        calls = []

        def handler(request):
            calls.append(request.url.path)
            return reply(True)

        make_client(handler).mark_committed(12)

        assert calls == ["/api/revision.markcommitted"]


class TestErrors:

    def test_service_error_surfaced_verbatim(self):
        client = make_client(lambda request: reply(error_code="ERR-NOT-FOUND", error_info="No such revision."))

        with pytest.raises(TransportError) as exc_info:
            client.get_commit_message(99)

        assert "ERR-NOT-FOUND" in str(exc_info.value)
        assert "No such revision." in str(exc_info.value)

    def test_http_status_error(self):
        client = make_client(lambda request: reply(error_info="Invalid token", status_code=403))

        with pytest.raises(TransportError, match="Invalid token"):
            client.get_commit_paths(1)

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError, match="network error"):
            make_client(handler).get_commit_paths(1)

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(TransportError, match="timed out"):
            make_client(handler).get_commit_paths(1)

    def test_unexpected_paths_shape(self):
        client = make_client(lambda request: reply({"a.txt": True}))

        with pytest.raises(TransportError):
            client.get_commit_paths(1)

    def test_no_retry(self):
        calls = []

        def handler(request):
            calls.append(1)
            return httpx.Response(500, text="boom")

        with pytest.raises(TransportError):
            make_client(handler).mark_committed(1)

        assert len(calls) == 1


class TestHelpers:

    @pytest.mark.parametrize("value,expected", [(12, 12), ("12", 12), ("D12", 12), ("d7", 7)])
    def test_parse_revision_id(self, value, expected):
        assert parse_revision_id(value) == expected

    def test_parse_revision_id_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_revision_id("Dabc")

    def test_factory_uses_config(self):
        config = Config(review_url="https://r.example.com", api_token="t", owner_id="u", timeout=5.0)
        client = get_review_client(config)
        assert client.base_url == "https://r.example.com"
        assert client.timeout == 5.0
