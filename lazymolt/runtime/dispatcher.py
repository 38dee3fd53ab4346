"""Background execution of session commands.

Every command runs on its own daemon thread against the gateway and answers
with exactly one completion event, which the event loop collects with
``drain_results``. Gateway errors become failure completions here and
nowhere else; unexpected exceptions are logged and reported as a generic
gateway failure so the loop never dies.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from queue import Empty, Queue

from ..api.client import MoltbookClient
from ..api.errors import GatewayError
from ..session.commands import (
    Command,
    CreateComment,
    CreatePost,
    Delayed,
    DeletePost,
    FetchComments,
    FetchFeedPage,
    FetchProfile,
    Follow,
    LoadCredential,
    Quit,
    Register,
    StoreCredential,
    Upvote,
)
from ..session.events import (
    CommentCreated,
    CommentsLoaded,
    CredentialLoaded,
    CredentialMissing,
    CredentialStored,
    Event,
    FeedPageLoaded,
    FollowCompleted,
    PostCreated,
    PostDeleted,
    ProfileLoaded,
    Registered,
    VoteCompleted,
)
from ..session.state import FeedKind
from .config import CredentialStore, CredentialStoreError

log = logging.getLogger(__name__)


def _spawn_thread(work: Callable[[], None]) -> None:
    worker = threading.Thread(target=work, name="lazymolt-command", daemon=True)
    worker.start()


class CommandDispatcher:
    """Run commands off the event loop and queue their completion events.

    ``spawn`` and ``schedule`` are injectable so tests can run work inline.
    """

    def __init__(
        self,
        gateway: MoltbookClient,
        store: CredentialStore,
        *,
        spawn: Callable[[Callable[[], None]], None] | None = None,
        schedule: Callable[[float, Callable[[], None]], None] | None = None,
    ) -> None:
        self._gateway = gateway
        self._store = store
        self._spawn = spawn or _spawn_thread
        self._schedule = schedule or self._schedule_timer
        self._results: Queue[Event] = Queue()
        self._lock = threading.Lock()
        self._timers: list[threading.Timer] = []
        self._closed = False

    def _schedule_timer(self, seconds: float, work: Callable[[], None]) -> None:
        timer = threading.Timer(max(0.0, seconds), work)
        timer.daemon = True
        with self._lock:
            if self._closed:
                return
            self._timers = [t for t in self._timers if t.is_alive()]
            self._timers.append(timer)
        timer.start()

    def dispatch(self, command: Command) -> None:
        """Start ``command``; its completion shows up in ``drain_results``."""
        if isinstance(command, Quit):
            return
        if isinstance(command, Delayed):
            inner = command.command
            self._schedule(command.seconds, lambda: self.dispatch(inner))
            return
        self._spawn(lambda: self._execute(command))

    def dispatch_all(self, commands: list[Command]) -> None:
        for command in commands:
            self.dispatch(command)

    def drain_results(self) -> list[Event]:
        """Drain all completed command events."""
        out: list[Event] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except Empty:
                break
        return out

    def shutdown(self) -> None:
        """Cancel pending delayed commands and release the HTTP client."""
        with self._lock:
            self._closed = True
            timers, self._timers = self._timers, []
        for timer in timers:
            timer.cancel()
        self._gateway.close()

    def _execute(self, command: Command) -> None:
        name = type(command).__name__
        try:
            event = self._run(command)
        except GatewayError as exc:
            log.info("%s failed: %s: %s", name, type(exc).__name__, exc.message)
            event = _failure(command, exc)
        except Exception:
            log.exception("%s raised unexpectedly", name)
            event = _failure(command, GatewayError("Unexpected error; see the log for details"))
        self._results.put(event)

    def _run(self, command: Command) -> Event:
        gateway = self._gateway
        if isinstance(command, LoadCredential):
            credential = self._store.load()
            if credential is None:
                return CredentialMissing()
            gateway.bind_api_key(credential.api_key)
            return CredentialLoaded(credential=credential)
        if isinstance(command, StoreCredential):
            gateway.bind_api_key(command.credential.api_key)
            try:
                self._store.save(command.credential)
            except CredentialStoreError as exc:
                return CredentialStored(error=exc)
            return CredentialStored()
        if isinstance(command, FetchFeedPage):
            source = command.source
            if source.kind is FeedKind.SEARCH:
                posts = gateway.search(source.query)
            elif source.kind is FeedKind.PERSONALIZED:
                posts = gateway.list_personalized_feed(source.sort, command.limit, command.offset)
            else:
                posts = gateway.list_feed(source.sort, command.limit, command.offset)
            return FeedPageLoaded(
                token=command.token,
                append=command.append,
                limit=command.limit,
                posts=tuple(posts),
            )
        if isinstance(command, FetchComments):
            comments = gateway.get_comments(command.post_id, limit=command.limit, offset=command.offset)
            return CommentsLoaded(
                token=command.token,
                post_id=command.post_id,
                append=command.append,
                limit=command.limit,
                comments=tuple(comments),
            )
        if isinstance(command, Upvote):
            gateway.upvote(command.post_id)
            return VoteCompleted(post_id=command.post_id)
        if isinstance(command, CreatePost):
            gateway.create_post(command.submolt, command.title, command.content)
            return PostCreated(token=command.token)
        if isinstance(command, CreateComment):
            gateway.create_comment(command.post_id, command.content)
            return CommentCreated(token=command.token, post_id=command.post_id)
        if isinstance(command, Register):
            agent = gateway.register(command.name, command.description)
            gateway.bind_api_key(agent.api_key)
            return Registered(token=command.token, agent=agent)
        if isinstance(command, FetchProfile):
            name = command.agent_name or gateway.get_self().name
            agent, posts = gateway.get_profile(name)
            return ProfileLoaded(token=command.token, agent=agent, posts=tuple(posts))
        if isinstance(command, DeletePost):
            gateway.delete_post(command.post_id)
            return PostDeleted(token=command.token, post_id=command.post_id)
        if isinstance(command, Follow):
            if command.follow:
                gateway.follow(command.name)
            else:
                gateway.unfollow(command.name)
            return FollowCompleted(name=command.name, follow=command.follow)
        raise TypeError(f"unsupported command: {type(command).__name__}")


def _failure(command: Command, error: GatewayError) -> Event:
    """Build the failure completion that answers ``command``."""
    if isinstance(command, LoadCredential):
        return CredentialMissing()
    if isinstance(command, StoreCredential):
        return CredentialStored(error=error)
    if isinstance(command, FetchFeedPage):
        return FeedPageLoaded(token=command.token, append=command.append, limit=command.limit, error=error)
    if isinstance(command, FetchComments):
        return CommentsLoaded(
            token=command.token,
            post_id=command.post_id,
            append=command.append,
            limit=command.limit,
            error=error,
        )
    if isinstance(command, Upvote):
        return VoteCompleted(post_id=command.post_id, error=error)
    if isinstance(command, CreatePost):
        return PostCreated(token=command.token, error=error)
    if isinstance(command, CreateComment):
        return CommentCreated(token=command.token, post_id=command.post_id, error=error)
    if isinstance(command, Register):
        return Registered(token=command.token, error=error)
    if isinstance(command, FetchProfile):
        return ProfileLoaded(token=command.token, error=error)
    if isinstance(command, DeletePost):
        return PostDeleted(token=command.token, post_id=command.post_id, error=error)
    if isinstance(command, Follow):
        return FollowCompleted(name=command.name, follow=command.follow, error=error)
    raise TypeError(f"unsupported command: {type(command).__name__}")


__all__ = ["CommandDispatcher"]
