"""
Application Filter Engine

PURPOSE:
Answer "which of this user's applications satisfy ALL active filters?"
and shape the answer for display.

HOW IT WORKS:
1. Collect active criteria (known field + non-empty value)
2. Fan out one lookup per criterion, concurrently, and wait for all
3. Intersect the result sets by application_id (first filter seeds)
4. Sort by application date, newest first
5. Enrich with resume / cover letter names (best effort)

Filter lookups are fail-fast: any failure aborts the whole call.
Enrichment lookups are best-effort: failures become NONE_MARKER.
"""

import asyncio
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from app.core.errors import (
    EnrichmentFailure,
    LookupFailure,
    NotFoundError,
)
from app.core.logging_config import get_logger
from app.schemas.schemas import (
    NONE_MARKER,
    Application,
    ApplicationListing,
    EnrichedApplication,
    FilterCriterion,
    FilterField,
)
from app.services.lookup_service import LookupService

logger = get_logger(__name__)


RETRY_MESSAGE = "Failed to load applications. Please try again."
SUPPORT_MESSAGE = "Failed to load applications. Please contact support."
NO_MATCH_MESSAGE = "No applications matched your filter criteria."
NO_APPLICATIONS_MESSAGE = "You haven't added any applications yet. Add one now!"


# ============================================================
# PURE HELPERS
# ============================================================

def parse_criteria(criteria: Optional[Mapping[str, Any]]) -> List[FilterCriterion]:
    """
    Keep only recognised filter fields with a non-empty value.
    Order follows the caller's mapping; unknown keys are ignored.
    """
    parsed = []
    for key, value in (criteria or {}).items():
        try:
            field = FilterField(key)
        except ValueError:
            continue
        if value is None:
            continue
        value = value if isinstance(value, str) else str(value)
        if not value.strip():
            continue
        parsed.append(FilterCriterion(field=field, value=value.strip()))
    return parsed


def compute_intersection(filter_results: Sequence[Iterable[Application]]) -> List[Application]:
    """
    Applications present in every result set.

    The first result set seeds the id -> record map, so on duplicate ids
    the first filter's copy of the record is the one kept.
    """
    if not filter_results:
        return []

    survivors: Dict[int, Application] = {}
    for app in filter_results[0]:
        survivors.setdefault(app.application_id, app)

    for results in filter_results[1:]:
        current_ids = {app.application_id for app in results}
        for app_id in list(survivors):
            if app_id not in current_ids:
                del survivors[app_id]

    return list(survivors.values())


def sort_by_application_date(apps: Iterable[Application]) -> List[Application]:
    """Newest first. Stable, so equal dates keep their incoming order."""
    return sorted(apps, key=lambda app: app.application_date, reverse=True)


# ============================================================
# ENGINE
# ============================================================

class ApplicationFilterEngine:
    """
    Stateless, read-only. One instance can serve concurrent requests.
    """

    def __init__(self, lookup: LookupService):
        self.lookup = lookup

    async def get_filtered_applications(
        self,
        user_id: int,
        criteria: Optional[Mapping[str, Any]] = None
    ) -> List[EnrichedApplication]:
        """
        Applications of `user_id` matching every active criterion,
        newest first, enriched for display.

        Raises NotFoundError if the user does not exist and LookupFailure
        if any filter lookup fails for another reason.
        """
        if isinstance(user_id, bool) or not isinstance(user_id, int) or user_id <= 0:
            raise ValueError(f"user_id must be a positive integer, got {user_id!r}")

        active = parse_criteria(criteria)

        if not active:
            apps = await self.lookup.find_all_by_user(user_id)
        else:
            filter_results = await self._fan_out(user_id, active)
            apps = compute_intersection(filter_results)

        return await self._enrich_all(sort_by_application_date(apps))

    async def load_listing(
        self,
        user_id: int,
        criteria: Optional[Mapping[str, Any]] = None
    ) -> ApplicationListing:
        """
        Listing with the fallback policy used by the HTTP layer.

        A failed filtered query falls back once to the unfiltered listing.
        If that also fails the listing is empty and carries an error.
        NotFoundError is never masked.
        """
        filters = {c.field.value: c.value for c in parse_criteria(criteria)}

        try:
            applications = await self.get_filtered_applications(user_id, criteria)
        except NotFoundError:
            raise
        except Exception as e:
            logger.error(f"Error loading applications for user {user_id}: {e}")
            try:
                applications = await self.get_filtered_applications(user_id)
            except NotFoundError:
                raise
            except Exception as fallback_error:
                logger.error(
                    f"Error during fallback loading of applications for user {user_id}: {fallback_error}"
                )
                return ApplicationListing(applications=[], filters=filters, error=SUPPORT_MESSAGE)
            return ApplicationListing(applications=applications, filters=filters, error=RETRY_MESSAGE)

        success = None
        if not applications:
            success = NO_MATCH_MESSAGE if filters else NO_APPLICATIONS_MESSAGE
        return ApplicationListing(applications=applications, filters=filters, success=success)

    # --------------------------------------------------------
    # Fan-out / fan-in
    # --------------------------------------------------------

    async def _fan_out(self, user_id: int, active: List[FilterCriterion]) -> List[List[Application]]:
        """
        One concurrent lookup per criterion. Waits for all of them, then
        fails if any failed (NotFoundError wins over other failures).
        """
        outcomes = await asyncio.gather(
            *(self.lookup.find_by_user_and_field(user_id, c.field, c.value) for c in active),
            return_exceptions=True
        )

        failures = []
        for criterion, outcome in zip(active, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(
                    f"Filter lookup {criterion.field.value}={criterion.value!r} "
                    f"failed for user {user_id}: {type(outcome).__name__}: {outcome}"
                )
                failures.append((criterion, outcome))

        if failures:
            not_found = next((e for _, e in failures if isinstance(e, NotFoundError)), None)
            if not_found is not None:
                raise not_found
            criterion, error = failures[0]
            if isinstance(error, LookupFailure) or not isinstance(error, Exception):
                raise error
            raise LookupFailure(
                f"Unable to filter applications by {criterion.field.value}. Please try again later.",
                field=criterion.field.value
            ) from error

        return list(outcomes)

    # --------------------------------------------------------
    # Enrichment
    # --------------------------------------------------------

    async def _enrich_all(self, apps: List[Application]) -> List[EnrichedApplication]:
        return list(await asyncio.gather(*(self._enrich(app) for app in apps)))

    async def _enrich(self, app: Application) -> EnrichedApplication:
        resume_name, cover_letter_name = await asyncio.gather(
            self._resolve_name("resume", app.resume_id, app.user_id),
            self._resolve_name("cover letter", app.cover_letter_id, app.user_id),
        )
        return EnrichedApplication(
            id=app.application_id,
            company_name=app.company_name,
            position_title=app.position_title,
            application_date=app.application_date,
            status=app.status,
            deadline=app.deadline,
            source=app.application_source,
            notes=app.notes,
            resume_id=app.resume_id,
            cover_letter_id=app.cover_letter_id,
            resume_name=resume_name,
            cover_letter_name=cover_letter_name,
        )

    async def _resolve_name(self, kind: str, entity_id: Optional[int], owner_id: int) -> str:
        """Document name, or NONE_MARKER if missing, unreadable or owned by someone else."""
        if not entity_id:
            return NONE_MARKER
        try:
            if kind == "resume":
                document = await self.lookup.find_resume_by_id(entity_id)
                name = document.resume_file_name if document else None
            else:
                document = await self.lookup.find_cover_letter_by_id(entity_id)
                name = document.cover_file_name if document else None
            if document is not None and document.user_id not in (None, owner_id):
                logger.warning(f"{kind.capitalize()} {entity_id} does not belong to user {owner_id}")
                return NONE_MARKER
            return name or NONE_MARKER
        except Exception as e:
            failure = EnrichmentFailure(kind, entity_id, e)
            logger.warning(str(failure))
            return NONE_MARKER
