"""Post detail tests: comment paging and stale-result filtering."""

from __future__ import annotations

import unittest

from lazymolt.api.errors import ApiError
from lazymolt.api.models import Comment, Post
from lazymolt.session.commands import FetchComments
from lazymolt.session.detail import apply_comments, load_more, move_selection, open_post
from lazymolt.session.events import CommentsLoaded
from lazymolt.session.state import Mode, RequestStatus, Session


def _comments(count: int, start: int = 0) -> tuple[Comment, ...]:
    return tuple(Comment(id=f"c{idx}", content=f"comment {idx}") for idx in range(start, start + count))


POST = Post(id="post-1", title="Hello")


def _opened(count: int) -> Session:
    session, _ = open_post(Session(mode=Mode.FEED), POST, Mode.FEED)
    event = CommentsLoaded(
        token=session.detail.generation,
        post_id=POST.id,
        append=False,
        limit=20,
        comments=_comments(count),
    )
    session, _ = apply_comments(session, event)
    return session


class DetailCommentTests(unittest.TestCase):
    def test_open_post_requests_first_comment_page(self) -> None:
        session, commands = open_post(Session(mode=Mode.FEED), POST, Mode.FEED)

        self.assertIs(session.mode, Mode.POST_DETAIL)
        self.assertEqual(
            commands,
            [FetchComments(token=session.detail.generation, post_id="post-1", limit=20, offset=0, append=False)],
        )
        self.assertTrue(session.detail.loading_comments)

    def test_comments_for_another_post_are_dropped(self) -> None:
        session, _ = open_post(Session(mode=Mode.FEED), POST, Mode.FEED)
        event = CommentsLoaded(
            token=session.detail.generation,
            post_id="other-post",
            append=False,
            limit=20,
            comments=_comments(3),
        )

        after, commands = apply_comments(session, event)
        self.assertIs(after, session)
        self.assertEqual(commands, [])
        self.assertEqual(after.detail.comments, ())
        self.assertIs(after.detail.load_status, RequestStatus.IN_FLIGHT)

    def test_comments_from_an_earlier_open_are_dropped(self) -> None:
        session, _ = open_post(Session(mode=Mode.FEED), POST, Mode.FEED)
        first_token = session.detail.generation
        session, _ = open_post(session, POST, Mode.FEED)

        after, _ = apply_comments(
            session,
            CommentsLoaded(token=first_token, post_id=POST.id, append=False, limit=20, comments=_comments(2)),
        )
        self.assertIs(after, session)

    def test_selection_near_end_loads_next_page_once(self) -> None:
        session = _opened(20)
        issued = []
        for _ in range(19):
            session, commands = move_selection(session, 1)
            issued.extend(commands)

        self.assertEqual(
            issued,
            [FetchComments(token=session.detail.generation, post_id=POST.id, limit=20, offset=20, append=True)],
        )

    def test_failed_append_degrades_to_message(self) -> None:
        session = _opened(20)
        session, _ = load_more(session)
        session, commands = apply_comments(
            session,
            CommentsLoaded(
                token=session.detail.generation,
                post_id=POST.id,
                append=True,
                limit=20,
                error=ApiError("boom"),
            ),
        )

        self.assertEqual(commands, [])
        self.assertIsNone(session.error)
        self.assertEqual(session.message, "Failed to load comments: boom")
        self.assertIs(session.detail.cursor.status, RequestStatus.IDLE)
        self.assertEqual(len(session.detail.comments), 20)

    def test_short_first_page_marks_thread_complete(self) -> None:
        session = _opened(4)

        self.assertTrue(session.detail.cursor.all_loaded)
        _, commands = load_more(session)
        self.assertEqual(commands, [])


if __name__ == "__main__":
    unittest.main()
