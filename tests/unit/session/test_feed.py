"""Feed pagination tests: reset, infinite scroll, merge, and retry policy."""

from __future__ import annotations

import unittest

from lazymolt.api.errors import NetworkError
from lazymolt.api.models import Post
from lazymolt.session.commands import Delayed, FetchFeedPage
from lazymolt.session.events import FeedPageLoaded
from lazymolt.session.feed import (
    MAX_PAGINATION_RETRIES,
    PAGINATION_RETRY_DELAY_SECONDS,
    apply_page,
    load_more,
    move_selection,
    reset_and_load,
)
from lazymolt.session.state import FeedKind, FeedSource, Mode, RequestStatus, Session


def _posts(count: int, start: int = 0) -> tuple[Post, ...]:
    return tuple(Post(id=f"p{idx}", title=f"Post {idx}") for idx in range(start, start + count))


def _loaded_feed(count: int, source: FeedSource | None = None) -> Session:
    session, _ = reset_and_load(Session(), source)
    token = session.feed.generation
    session, _ = apply_page(session, FeedPageLoaded(token=token, append=False, limit=20, posts=_posts(count)))
    return session


def _move_to(session: Session, index: int) -> tuple[Session, list]:
    issued = []
    while session.feed.selected < index:
        session, commands = move_selection(session, 1)
        issued.extend(commands)
    return session, issued


class FeedResetTests(unittest.TestCase):
    def test_reset_requests_first_page_and_marks_loading(self) -> None:
        session, commands = reset_and_load(Session())

        self.assertEqual(
            commands,
            [FetchFeedPage(token=1, source=FeedSource(), limit=20, offset=0, append=False)],
        )
        self.assertIs(session.feed.load_status, RequestStatus.IN_FLIGHT)
        self.assertEqual(session.feed.items, ())

    def test_short_first_page_marks_all_loaded_and_suppresses_more(self) -> None:
        session = _loaded_feed(7)

        self.assertTrue(session.feed.cursor.all_loaded)
        _, commands = load_more(session)
        self.assertEqual(commands, [])
        _, commands = _move_to(session, 6)
        self.assertEqual(commands, [])

    def test_reset_failure_blocks_with_session_error(self) -> None:
        session, _ = reset_and_load(Session(mode=Mode.FEED))
        token = session.feed.generation
        session, _ = apply_page(
            session,
            FeedPageLoaded(token=token, append=False, limit=20, error=NetworkError("network error: down")),
        )

        self.assertEqual(session.error, "network error: down")
        self.assertIs(session.feed.load_status, RequestStatus.ERROR)

    def test_reset_failure_behind_another_view_does_not_block(self) -> None:
        session, _ = reset_and_load(Session(mode=Mode.PROFILE))
        session, _ = apply_page(
            session,
            FeedPageLoaded(token=session.feed.generation, append=False, limit=20, error=NetworkError("down")),
        )

        self.assertIsNone(session.error)
        self.assertIs(session.feed.load_status, RequestStatus.ERROR)

    def test_page_from_previous_reset_is_dropped(self) -> None:
        session, _ = reset_and_load(Session())
        stale_token = session.feed.generation
        session, _ = reset_and_load(session, FeedSource(kind=FeedKind.PERSONALIZED))

        after, commands = apply_page(
            session,
            FeedPageLoaded(token=stale_token, append=False, limit=20, posts=_posts(20)),
        )
        self.assertIs(after, session)
        self.assertEqual(commands, [])

    def test_search_results_are_a_single_page(self) -> None:
        session = _loaded_feed(20, FeedSource(kind=FeedKind.SEARCH, query="lobster"))

        self.assertTrue(session.feed.cursor.all_loaded)
        _, commands = _move_to(session, 19)
        self.assertEqual(commands, [])


class FeedInfiniteScrollTests(unittest.TestCase):
    def test_near_end_issues_one_append_then_short_page_ends_list(self) -> None:
        session = _loaded_feed(20)

        session, commands = _move_to(session, 17)
        self.assertEqual(commands, [])
        session, commands = move_selection(session, 1)
        self.assertEqual(
            commands,
            [FetchFeedPage(token=session.feed.generation, source=FeedSource(), limit=20, offset=20, append=True)],
        )
        session, commands = move_selection(session, 1)
        self.assertEqual(commands, [])
        self.assertTrue(session.feed.cursor.is_paginating)

        session, _ = apply_page(
            session,
            FeedPageLoaded(token=session.feed.generation, append=True, limit=20, posts=_posts(5, start=20)),
        )
        self.assertEqual(len(session.feed.items), 25)
        self.assertEqual(session.feed.selected, 19)
        self.assertTrue(session.feed.cursor.all_loaded)

        session, commands = _move_to(session, 24)
        self.assertEqual(session.feed.selected, 24)
        self.assertEqual(commands, [])

    def test_append_skips_duplicates_and_empty_gain_ends_list(self) -> None:
        session = _loaded_feed(20)
        session, _ = _move_to(session, 18)

        session, _ = apply_page(
            session,
            FeedPageLoaded(token=session.feed.generation, append=True, limit=20, posts=_posts(20, start=10)),
        )
        self.assertEqual([post.id for post in session.feed.items], [f"p{idx}" for idx in range(30)])
        self.assertFalse(session.feed.cursor.all_loaded)

        session, _ = _move_to(session, 28)
        session, _ = apply_page(
            session,
            FeedPageLoaded(token=session.feed.generation, append=True, limit=20, posts=_posts(20)),
        )
        self.assertEqual(len(session.feed.items), 30)
        self.assertTrue(session.feed.cursor.all_loaded)

    def test_failed_append_retries_after_delay_then_gives_up(self) -> None:
        session = _loaded_feed(20)
        session, _ = _move_to(session, 18)
        failure = FeedPageLoaded(
            token=session.feed.generation,
            append=True,
            limit=20,
            error=NetworkError("network error: timeout"),
        )

        for attempt in range(MAX_PAGINATION_RETRIES):
            session, commands = apply_page(session, failure)
            self.assertEqual(len(commands), 1)
            self.assertIsInstance(commands[0], Delayed)
            self.assertEqual(commands[0].seconds, PAGINATION_RETRY_DELAY_SECONDS)
            self.assertEqual(commands[0].command.offset, 20)
            self.assertTrue(session.feed.cursor.is_paginating)
            self.assertIsNone(session.error)

        session, commands = apply_page(session, failure)
        self.assertEqual(commands, [])
        self.assertIs(session.feed.cursor.status, RequestStatus.ERROR)
        self.assertEqual(session.feed.cursor.last_error, "network error: timeout")
        self.assertIn("Could not load more posts", session.message)
        self.assertIsNone(session.error)

        session, _ = move_selection(session, -1)
        self.assertIsNone(session.feed.cursor.last_error)
        session, commands = move_selection(session, 1)
        self.assertEqual(len(commands), 1)
        self.assertEqual(commands[0].offset, 20)

    def test_down_on_last_card_rearms_abandoned_pagination(self) -> None:
        session = _loaded_feed(20)
        session, _ = _move_to(session, 19)
        self.assertTrue(session.feed.cursor.is_paginating)
        failure = FeedPageLoaded(token=session.feed.generation, append=True, limit=20, error=NetworkError("down"))
        for _ in range(MAX_PAGINATION_RETRIES + 1):
            session, _ = apply_page(session, failure)
        self.assertIs(session.feed.cursor.status, RequestStatus.ERROR)

        session, commands = move_selection(session, 1)

        self.assertEqual(session.feed.selected, 19)
        self.assertEqual(len(commands), 1)
        self.assertEqual(commands[0].offset, 20)
        self.assertTrue(session.feed.cursor.is_paginating)
        self.assertIsNone(session.feed.cursor.last_error)


if __name__ == "__main__":
    unittest.main()
