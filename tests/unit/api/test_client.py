"""Gateway tests against an in-process ``httpx.MockTransport``."""

from __future__ import annotations

import json
import unittest

import httpx

from lazymolt.api.client import MoltbookClient
from lazymolt.api.errors import (
    ApiError,
    AuthError,
    NetworkError,
    NotFoundError,
    ProtocolError,
    RateLimitedError,
)

BASE_URL = "https://moltbook.test/api/v1"


class _Recorder:
    """Answers every request with the next scripted response and keeps the requests."""

    def __init__(self, *responses) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


def _client(recorder: _Recorder, *, api_key: str = "", retries: int = 2) -> tuple[MoltbookClient, list[float]]:
    sleeps: list[float] = []
    client = MoltbookClient(
        BASE_URL,
        api_key,
        retries=retries,
        transport=httpx.MockTransport(recorder),
        sleep=sleeps.append,
    )
    return client, sleeps


class FeedDecodingTests(unittest.TestCase):
    def test_posts_at_envelope_root(self) -> None:
        recorder = _Recorder(
            httpx.Response(
                200,
                json={
                    "success": True,
                    "posts": [
                        {
                            "id": "p1",
                            "title": "Hello",
                            "upvotes": 4,
                            "author": {"name": "molty"},
                            "submolt": {"name": "general", "display_name": "General"},
                        }
                    ],
                },
            )
        )
        client, _ = _client(recorder)

        posts = client.list_feed("hot", 20, 40)

        self.assertEqual(len(posts), 1)
        self.assertEqual(posts[0].author_name, "molty")
        self.assertEqual(posts[0].community_label, "General")
        request = recorder.requests[0]
        self.assertEqual(request.url.path, "/api/v1/posts")
        self.assertEqual(request.url.params["sort"], "hot")
        self.assertEqual(request.url.params["offset"], "40")

    def test_posts_nested_under_data(self) -> None:
        recorder = _Recorder(httpx.Response(200, json={"success": True, "data": {"posts": [{"id": "p2"}]}}))
        client, _ = _client(recorder)

        posts = client.list_personalized_feed("new", 10, 0)

        self.assertEqual([post.id for post in posts], ["p2"])
        self.assertEqual(recorder.requests[0].url.path, "/api/v1/feed")

    def test_search_reads_results(self) -> None:
        recorder = _Recorder(httpx.Response(200, json={"results": [{"id": "s1", "similarity": 0.8}]}))
        client, _ = _client(recorder)

        posts = client.search("crabs")

        self.assertEqual(posts[0].similarity, 0.8)
        self.assertEqual(recorder.requests[0].url.params["q"], "crabs")

    def test_comments_accept_bare_data_list(self) -> None:
        recorder = _Recorder(httpx.Response(200, json={"data": [{"id": "c1", "content": "hi"}]}))
        client, _ = _client(recorder)

        comments = client.get_comments("p1", limit=20, offset=0)

        self.assertEqual([comment.content for comment in comments], ["hi"])
        self.assertEqual(recorder.requests[0].url.path, "/api/v1/posts/p1/comments")

    def test_profile_reads_agent_and_recent_posts(self) -> None:
        recorder = _Recorder(
            httpx.Response(
                200,
                json={
                    "agent": {"name": "molty", "karma": 12, "is_claimed": True},
                    "recentPosts": [{"id": "r1"}, {"id": "r2"}],
                },
            )
        )
        client, _ = _client(recorder)

        agent, posts = client.get_profile("molty")

        self.assertEqual(agent.karma, 12)
        self.assertTrue(agent.is_claimed)
        self.assertEqual([post.id for post in posts], ["r1", "r2"])

    def test_register_returns_agent_with_key(self) -> None:
        recorder = _Recorder(
            httpx.Response(
                200,
                json={"agent": {"name": "molty", "api_key": "moltbook_sk_x", "claim_url": "https://claim"}},
            )
        )
        client, _ = _client(recorder)

        agent = client.register("molty", "helps")

        self.assertEqual(agent.api_key, "moltbook_sk_x")
        self.assertEqual(json.loads(recorder.requests[0].content), {"name": "molty", "description": "helps"})


class AuthHeaderTests(unittest.TestCase):
    def test_bound_key_is_sent_in_both_headers(self) -> None:
        recorder = _Recorder(httpx.Response(200, json={"posts": []}))
        client, _ = _client(recorder)
        client.list_feed("hot", 20, 0)
        self.assertNotIn("authorization", recorder.requests[0].headers)

        client.bind_api_key("secret")
        client.list_feed("hot", 20, 0)
        headers = recorder.requests[1].headers
        self.assertEqual(headers["authorization"], "Bearer secret")
        self.assertEqual(headers["x-api-key"], "secret")


class ErrorMappingTests(unittest.TestCase):
    def test_rate_limit_carries_hint_and_retry_after(self) -> None:
        recorder = _Recorder(
            httpx.Response(429, json={"error": "slow down", "hint": "one post per 30 minutes", "retry_after_minutes": 2})
        )
        client, _ = _client(recorder)

        with self.assertRaises(RateLimitedError) as ctx:
            client.create_post("general", "t", "c")
        self.assertEqual(ctx.exception.retry_after_seconds, 120)
        self.assertEqual(
            ctx.exception.message,
            "Rate limit exceeded: one post per 30 minutes (Retry after 120 seconds)",
        )

    def test_unauthorized_includes_hint(self) -> None:
        recorder = _Recorder(httpx.Response(401, json={"success": False, "error": "bad key", "hint": "re-register"}))
        client, _ = _client(recorder)

        with self.assertRaises(AuthError) as ctx:
            client.get_self()
        self.assertEqual(ctx.exception.message, "bad key (Hint: re-register)")
        self.assertEqual(ctx.exception.status_code, 401)

    def test_not_found(self) -> None:
        client, _ = _client(_Recorder(httpx.Response(404, json={"error": "no such post"})))
        with self.assertRaises(NotFoundError):
            client.delete_post("missing")

    def test_success_false_with_error_is_rejected(self) -> None:
        client, _ = _client(_Recorder(httpx.Response(200, json={"success": False, "error": "duplicate"})))
        with self.assertRaises(ApiError) as ctx:
            client.upvote("p1")
        self.assertEqual(ctx.exception.message, "duplicate")

    def test_invalid_json_is_protocol_error(self) -> None:
        client, _ = _client(_Recorder(httpx.Response(200, text="<html>")))
        with self.assertRaises(ProtocolError):
            client.list_feed("hot", 20, 0)

    def test_missing_profile_agent_is_protocol_error(self) -> None:
        client, _ = _client(_Recorder(httpx.Response(200, json={"success": True})))
        with self.assertRaises(ProtocolError):
            client.get_profile("ghost")


class RetryTests(unittest.TestCase):
    def test_server_errors_are_retried_with_backoff(self) -> None:
        recorder = _Recorder(
            httpx.Response(502, text="bad gateway"),
            httpx.Response(503, text="unavailable"),
            httpx.Response(200, json={"posts": [{"id": "p1"}]}),
        )
        client, sleeps = _client(recorder)

        posts = client.list_feed("hot", 20, 0)

        self.assertEqual([post.id for post in posts], ["p1"])
        self.assertEqual(sleeps, [1.0, 2.0])
        self.assertEqual(len(recorder.requests), 3)

    def test_persistent_server_error_surfaces_after_retries(self) -> None:
        client, sleeps = _client(_Recorder(httpx.Response(500, text="oops")))

        with self.assertRaises(ApiError) as ctx:
            client.list_feed("hot", 20, 0)
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(sleeps, [1.0, 2.0])

    def test_transport_failure_becomes_network_error(self) -> None:
        recorder = _Recorder(httpx.ConnectError("connection refused"))
        client, sleeps = _client(recorder)

        with self.assertRaises(NetworkError) as ctx:
            client.list_feed("hot", 20, 0)
        self.assertIn("connection refused", ctx.exception.message)
        self.assertEqual(len(recorder.requests), 3)
        self.assertEqual(sleeps, [1.0, 2.0])


if __name__ == "__main__":
    unittest.main()
