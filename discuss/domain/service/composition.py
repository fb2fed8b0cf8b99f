"""Abuse challenge mediator.

Runs one composition attempt through post, an optional challenge, and the
retry. The text the user typed survives every failure; only success or an
explicit cancel clears it.
"""

from dataclasses import dataclass
from enum import Enum
from uuid import uuid4

import logfire

from discuss.domain.error import (
    AuthRequiredError,
    ChallengeFailedError,
    ChallengeRequiredError,
    CommentError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from discuss.domain.model import Challenge, CommentDraft, RawComment
from discuss.domain.repository import CommentRepository, IdentityProvider
from discuss.domain.service.aggregator import FetchFailure
from discuss.domain.service.events import CommentPosted, EventBus
from discuss.domain.service.synchronizer import SyncReport
from discuss.domain.value import CommentId, Scope

from .base import Service


class AttemptState(str, Enum):
    """Lifecycle of a composition attempt."""

    IDLE = "idle"
    COMPOSING = "composing"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    CHALLENGE_REQUIRED = "challenge_required"
    CHALLENGE_FAILED = "challenge_failed"
    FAILED = "failed"


@dataclass(frozen=True)
class CompositionView:
    """View-model of a composition attempt."""

    state: AttemptState
    content: str
    challenge: Challenge | None
    error: CommentError | None
    parent_id: CommentId | None = None
    attempt_id: str | None = None

    @property
    def needs_answer(self) -> bool:
        return self.challenge is not None


class CompositionAttempt:
    """One comment or reply being written, from first keystroke to success.

    The held challenge is single use: every gated response replaces it, and
    only the latest token is ever submitted.
    """

    def __init__(
        self,
        scope: Scope,
        repository: CommentRepository,
        identity: IdentityProvider,
        bus: EventBus,
        parent_id: CommentId | None = None,
        max_content_length: int = 2000,
    ) -> None:
        self.id = uuid4().hex
        self.scope = scope
        self.parent_id = parent_id
        self.repository = repository
        self.identity = identity
        self.bus = bus
        self.max_content_length = max_content_length

        self.state = AttemptState.IDLE
        self.content = ""
        self.challenge: Challenge | None = None
        self.error: CommentError | None = None
        self.comment: RawComment | None = None
        self.sync_report: SyncReport | None = None
        self._generation = 0

    def edit(self, content: str) -> CompositionView:
        """Replace the text being composed.

        Raises:
            InvalidTransitionError: While submitting or after success
        """
        self._guard("edit")
        self.content = content
        if self.state == AttemptState.IDLE:
            self.state = AttemptState.COMPOSING
        return self.snapshot()

    async def submit(
        self, content: str | None = None, answer: str | None = None
    ) -> CompositionView:
        """Send the composed text, with the answer to a held challenge if any.

        Failures are recorded on the attempt rather than raised; use
        ``raise_for_state`` to turn them into exceptions.

        Args:
            content: Replaces the composed text when given
            answer: Answer to the held challenge

        Returns:
            Snapshot after the submission settles

        Raises:
            InvalidTransitionError: While already submitting or after success
        """
        self._guard("submit")
        if content is not None:
            self.content = content

        try:
            draft = self._draft(answer)
            token = await self.identity.get_token()
            if not token:
                raise AuthRequiredError()
        except CommentError as exc:
            return self._fail(exc)

        self.state = AttemptState.SUBMITTING
        self.error = None
        generation = self._generation
        with logfire.span(
            "composition.submit",
            scope=str(self.scope),
            parent_id=self.parent_id,
            answers_challenge=draft.answers_challenge,
        ):
            try:
                created = await self.repository.create(self.scope, draft, token)
            except ChallengeRequiredError as exc:
                if generation == self._generation:
                    self._challenged(exc.challenge, answered=draft.answers_challenge)
                return self.snapshot()
            except CommentError as exc:
                if generation != self._generation:
                    return self.snapshot()
                return self._fail(exc)

            report = await self._publish(created)
            if generation != self._generation:
                logfire.info("Cancelled attempt completed", comment_id=created.id)
                return self.snapshot()

            self.state = AttemptState.SUCCEEDED
            self.content = ""
            self.challenge = None
            self.comment = created
            self.sync_report = report
            logfire.info(
                "Comment posted",
                scope=str(self.scope),
                comment_id=created.id,
                synced=report.ok,
            )
        return self.snapshot()

    def cancel(self) -> CompositionView:
        """Abandon the attempt, discarding text and challenge.

        A request already in flight still completes on the store, but its
        outcome no longer changes this attempt.
        """
        self._generation += 1
        self.state = AttemptState.IDLE
        self.content = ""
        self.challenge = None
        self.error = None
        self.comment = None
        self.sync_report = None
        return self.snapshot()

    def raise_for_state(self) -> None:
        """Raise the error recorded by the last submission, if any."""
        if self.state == AttemptState.CHALLENGE_REQUIRED and self.challenge:
            raise ChallengeRequiredError(self.challenge)
        if self.error is not None:
            raise self.error

    def snapshot(self) -> CompositionView:
        return CompositionView(
            state=self.state,
            content=self.content,
            challenge=self.challenge,
            error=self.error,
            parent_id=self.parent_id,
            attempt_id=self.id,
        )

    def _guard(self, action: str) -> None:
        if self.state in (AttemptState.SUBMITTING, AttemptState.SUCCEEDED):
            raise InvalidTransitionError(self.state.value, action)

    def _draft(self, answer: str | None) -> CommentDraft:
        if not self.scope.writable:
            raise ValidationError(f"Cannot write to read-only scope {self.scope}")
        if not self.content.strip():
            raise ValidationError("Comment content cannot be empty")
        if len(self.content) > self.max_content_length:
            raise ValidationError(
                f"Comment content exceeds {self.max_content_length} characters"
            )
        if self.challenge is None:
            return CommentDraft(content=self.content, parent_id=self.parent_id)
        if answer is None or not answer.strip():
            raise ValidationError("An answer to the challenge is required")
        return CommentDraft(
            content=self.content,
            parent_id=self.parent_id,
            captcha_token=self.challenge.token,
            captcha_answer=answer.strip(),
        )

    def _challenged(self, challenge: Challenge, answered: bool) -> None:
        self.challenge = challenge
        if answered:
            self.state = AttemptState.CHALLENGE_FAILED
            self.error = ChallengeFailedError(challenge)
        else:
            self.state = AttemptState.CHALLENGE_REQUIRED
            self.error = None
        logfire.info(
            "Comment write challenged",
            scope=str(self.scope),
            answered=answered,
        )

    def _fail(self, error: CommentError) -> CompositionView:
        self.state = AttemptState.FAILED
        self.error = error
        logfire.warn(
            "Comment write failed",
            scope=str(self.scope),
            error=str(error),
            error_type=type(error).__name__,
        )
        return self.snapshot()

    async def _publish(self, created: RawComment) -> SyncReport:
        results = await self.bus.publish(
            CommentPosted(scope=self.scope, comment_id=created.id, comment=created)
        )
        for result in results:
            if isinstance(result, SyncReport):
                return result
        failed = [r for r in results if isinstance(r, Exception)]
        if failed:
            return SyncReport(
                failed={self.scope: FetchFailure.from_error(failed[0])}
            )
        return SyncReport()


class AbuseChallengeMediator(Service):
    """Starts composition attempts and keeps the unfinished ones by id.

    An attempt outlives a single call: it is looked up again to answer its
    challenge, and forgotten once it succeeds or is discarded.
    """

    def __init__(
        self,
        repository: CommentRepository,
        identity: IdentityProvider,
        bus: EventBus,
        max_content_length: int = 2000,
    ) -> None:
        self.repository = repository
        self.identity = identity
        self.bus = bus
        self.max_content_length = max_content_length
        self._attempts: dict[str, CompositionAttempt] = {}

    def begin(
        self, scope: Scope, parent_id: CommentId | None = None
    ) -> CompositionAttempt:
        """Start a new attempt.

        Args:
            scope: Installment or series scope to write to
            parent_id: Comment being replied to, if any

        Raises:
            ValidationError: If the scope is the read-only aggregate
        """
        if not scope.writable:
            raise ValidationError(f"Cannot write to read-only scope {scope}")
        attempt = CompositionAttempt(
            scope=scope,
            repository=self.repository,
            identity=self.identity,
            bus=self.bus,
            parent_id=parent_id,
            max_content_length=self.max_content_length,
        )
        self._attempts[attempt.id] = attempt
        return attempt

    def attempt(self, attempt_id: str) -> CompositionAttempt:
        """Look up an unfinished attempt.

        Raises:
            NotFoundError: If the attempt finished or never existed
        """
        attempt = self._attempts.get(attempt_id)
        if attempt is None:
            raise NotFoundError("Composition attempt", attempt_id)
        return attempt

    def finish(self, attempt_id: str) -> None:
        """Forget a succeeded attempt."""
        self._attempts.pop(attempt_id, None)

    def discard(self, attempt_id: str) -> CompositionView:
        """Cancel an attempt and forget it."""
        view = self.attempt(attempt_id).cancel()
        del self._attempts[attempt_id]
        return view

    def pending(self) -> list[CompositionAttempt]:
        return list(self._attempts.values())
