"""
Outage check orchestrator.

Coordinates one category's transaction: fetch → extract → canonicalize →
compare with stored state → notify + persist. ``CheckRunner`` applies it to
every configured category in order, containing each category's failures.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable
from uuid import uuid4

from outagewatch.core.backends.base import Backend, BackendError, FetchError, RequestSpec
from outagewatch.core.config.models import AppConfig, CategoryConfig, OutcomeStatus
from outagewatch.core.extract import DocumentParseError, Extractor, build_extractor
from outagewatch.core.logging import ContextualLogger, get_contextual_logger
from outagewatch.core.normalize import canonicalize, compose_message, compute_diff, compute_fingerprint
from outagewatch.core.notify.base import Notifier, NotifyError
from outagewatch.persistence.store import StateStore, StoreReadError, StoreWriteError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Outcome:
    """Result of checking one category."""

    key: str
    status: OutcomeStatus
    reason: str | None = None
    error_type: str | None = None

    notified: bool = False
    persisted: bool = False
    notify_error: str | None = None

    report: str = ""
    fingerprint: str = ""
    record_count: int = 0
    change_summary: str | None = None

    @property
    def failed(self) -> bool:
        return self.status == OutcomeStatus.FAILED

    @property
    def updated(self) -> bool:
        """A change was detected and acted on.

        Also true for a failed store write after the notification went out.
        """
        return self.status == OutcomeStatus.UPDATED or (self.failed and self.notified)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "reason": self.reason,
            "error_type": self.error_type,
            "notified": self.notified,
            "persisted": self.persisted,
            "notify_error": self.notify_error,
            "fingerprint": self.fingerprint,
            "record_count": self.record_count,
            "change_summary": self.change_summary,
        }

    @classmethod
    def failure(cls, key: str, error: Exception, **kwargs: Any) -> "Outcome":
        return cls(
            key=key,
            status=OutcomeStatus.FAILED,
            reason=str(error),
            error_type=type(error).__name__,
            **kwargs,
        )


@dataclass
class RunSummary:
    """Outcomes of one run over all categories, in run order."""

    run_id: str
    outcomes: dict[str, Outcome] = field(default_factory=dict)
    started_at: datetime = field(default_factory=_utcnow)
    finished_at: datetime | None = None

    @property
    def duration_seconds(self) -> float | None:
        if self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None

    def count(self, status: OutcomeStatus) -> int:
        return sum(1 for o in self.outcomes.values() if o.status == status)

    @property
    def summary(self) -> str:
        """Short one-line description, e.g. ``EMERG: UPDATED; PLANNED: NO_DATA``."""
        if not self.outcomes:
            return "No categories checked"
        return "; ".join(f"{key}: {o.status.value}" for key, o in self.outcomes.items())

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "outcomes": {key: o.to_dict() for key, o in self.outcomes.items()},
            "updated": self.count(OutcomeStatus.UPDATED),
            "unchanged": self.count(OutcomeStatus.UNCHANGED),
            "no_data": self.count(OutcomeStatus.NO_DATA),
            "failed": self.count(OutcomeStatus.FAILED),
            "duration_seconds": self.duration_seconds,
        }


class CategoryCheck:
    """Runs the read-compare-write transaction for one category.

    Collaborators are injected so any of them can be replaced by a test double.
    """

    def __init__(
        self,
        backend: Backend,
        notifier: Notifier,
        store: StateStore,
        *,
        district: str,
        dry_run: bool = False,
        clock: Callable[[], datetime] = _utcnow,
        run_id: str | None = None,
    ) -> None:
        self.backend = backend
        self.notifier = notifier
        self.store = store
        self.district = district
        self.dry_run = dry_run
        self.clock = clock
        self.run_id = run_id

    def extractor_for(self, category: CategoryConfig) -> Extractor:
        return build_extractor(category.kind, self.district)

    async def run(self, category: CategoryConfig) -> Outcome:
        """Check one category. Never raises."""
        log = get_contextual_logger("orchestrator", category=category.key, run_id=self.run_id)
        try:
            return await self._run(category, log)
        except Exception as e:
            log.exception("Unexpected error while checking category")
            return Outcome.failure(category.key, e)

    async def _run(self, category: CategoryConfig, log: ContextualLogger) -> Outcome:
        key = category.key

        # 1. Fetch
        log.info("Fetching %s", category.url)
        try:
            fetched = await self.backend.fetch(RequestSpec(
                url=category.url,
                headers=dict(category.headers),
                category=key,
            ))
            if not fetched.ok:
                raise FetchError(
                    f"Unexpected status {fetched.status_code}",
                    url=category.url,
                    status_code=fetched.status_code,
                )
        except BackendError as e:
            log.error("Error fetching HTML: %s", e)
            return Outcome.failure(key, e)

        # 2. Extract
        log.info("Parsing HTML and extracting outage information")
        try:
            extraction = self.extractor_for(category).extract(fetched.html, fetched.final_url)
        except DocumentParseError as e:
            log.error("Could not parse document: %s", e)
            return Outcome.failure(key, e)

        for warning in extraction.warnings:
            log.debug(warning)
        if extraction.rows_skipped:
            log.debug("Skipped %d row(s) below the minimum cell count", extraction.rows_skipped)

        # 3. Canonicalize
        current = canonicalize(extraction.records)
        if not current:
            log.info("No outages found for %s", self.district)
            return Outcome(key=key, status=OutcomeStatus.NO_DATA, reason="No outages found")

        record_count = extraction.record_count

        # 4. Read previous state
        try:
            previous = self.store.get(key)
        except StoreReadError as e:
            log.error("Error reading previous outages: %s", e)
            return Outcome.failure(
                key, e, report=current, fingerprint=compute_fingerprint(current), record_count=record_count
            )

        # 5. Compare
        diff = compute_diff(previous, current)
        fingerprint = diff.new_fingerprint
        if not diff.has_changes:
            log.info("No changes detected")
            return Outcome(
                key=key,
                status=OutcomeStatus.UNCHANGED,
                report=current,
                fingerprint=fingerprint,
                record_count=record_count,
                change_summary=diff.summary,
            )

        log.info(
            "New outage data detected: %s (%s -> %s)",
            diff.summary,
            diff.old_fingerprint or "none",
            fingerprint,
            extra={"fingerprint": fingerprint},
        )

        outcome = Outcome(
            key=key,
            status=OutcomeStatus.UPDATED,
            report=current,
            fingerprint=fingerprint,
            record_count=record_count,
            change_summary=diff.summary,
        )

        if self.dry_run:
            log.info("Dry run, not notifying or saving")
            outcome.reason = "Dry run"
            return outcome

        # 6. Notify (best effort)
        try:
            await self.notifier.send(compose_message(category.header, current))
            outcome.notified = self.notifier.enabled
        except NotifyError as e:
            log.error("Error sending notification: %s", e)
            outcome.notify_error = str(e)

        # 7. Persist
        try:
            self.store.put(key, current, self.clock())
        except StoreWriteError as e:
            log.error("Error saving new outages: %s", e)
            outcome.status = OutcomeStatus.FAILED
            outcome.reason = str(e)
            outcome.error_type = type(e).__name__
            return outcome

        outcome.persisted = True
        log.info("Saved new outage data")
        return outcome


class CheckRunner:
    """Checks every category in order; one category's failure never stops the rest."""

    def __init__(
        self,
        backend: Backend,
        notifier: Notifier,
        store: StateStore,
        *,
        district: str,
        dry_run: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.backend = backend
        self.notifier = notifier
        self.store = store
        self.district = district
        self.dry_run = dry_run
        self.clock = clock

    async def run_all(self, categories: list[CategoryConfig], skip_disabled: bool = True) -> RunSummary:
        """Run each category sequentially, in the given order.

        With ``skip_disabled=False`` disabled categories are checked too.
        """
        summary = RunSummary(run_id=uuid4().hex[:12])
        log = get_contextual_logger("orchestrator", run_id=summary.run_id)

        check = CategoryCheck(
            self.backend,
            self.notifier,
            self.store,
            district=self.district,
            dry_run=self.dry_run,
            clock=self.clock,
            run_id=summary.run_id,
        )

        for category in categories:
            if skip_disabled and not category.enabled:
                log.debug("Skipping disabled category %s", category.key)
                continue
            summary.outcomes[category.key] = await check.run(category)

        summary.finished_at = _utcnow()
        log.info("Run complete: %s", summary.summary)
        return summary


async def run_outage_check(
    config: AppConfig,
    *,
    category_keys: list[str] | None = None,
    dry_run: bool = False,
    backend: Backend | None = None,
    notifier: Notifier | None = None,
    store: StateStore | None = None,
) -> RunSummary:
    """Build collaborators from configuration and check the categories.

    Args:
        config: Application configuration
        category_keys: Run only these keys (config order is kept), including
            categories that are disabled in the configuration
        dry_run: Compare only, never notify or persist
        backend: Override the HTTP backend
        notifier: Override the notifier built from ``config.telegram``
        store: Override the SQL state store built from ``config.database``

    Raises:
        ValueError: If an unknown category key is requested
    """
    from outagewatch.core.backends.http_backend import HttpBackend
    from outagewatch.core.notify.telegram import build_notifier
    from outagewatch.persistence.store import SqlStateStore

    categories = config.enabled_categories
    if category_keys:
        unknown = [k for k in category_keys if config.get_category(k) is None]
        if unknown:
            raise ValueError(f"Unknown category: {', '.join(unknown)}")
        categories = [c for c in config.categories if c.key in category_keys]

    if store is None:
        store = SqlStateStore.from_url(config.database.url, echo=config.database.echo)

    owns_backend = backend is None
    owns_notifier = notifier is None
    backend = backend or HttpBackend.from_config(config.http)
    notifier = notifier or build_notifier(config.telegram)

    runner = CheckRunner(
        backend,
        notifier,
        store,
        district=config.district,
        dry_run=dry_run,
    )

    try:
        return await runner.run_all(categories, skip_disabled=not category_keys)
    finally:
        if owns_backend:
            await backend.close()
        if owns_notifier:
            await notifier.close()
