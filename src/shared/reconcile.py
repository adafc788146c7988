"""Delete media from a year record and from the media store, in that order of authority.

The record is what the site renders, so it must never keep pointing at an
image we meant to remove. The media store is cleaned up best-effort: a failed
or no-op remote delete is logged and the local removal goes ahead anyway.
Nothing here is transactional across the two stores.

Matching an entry against a caller-supplied identifier is loose
and happens through an ordered list of strategies (see ``MATCH_STRATEGIES``);
the strategy that fired is logged and returned so callers and tests can tell
an exact key hit from a URL substring hit.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Union

from shared.db import ContentRepository
from shared.errors import MediaStoreError, NotFoundError, ValidationError
from shared.identity import resolve_canonical_key
from shared.models import AWARD_ROLES, AwardCategory, MediaRef, YearRecord
from shared.s3 import RemoteDeleteOutcome

logger = logging.getLogger(__name__)


class MediaStore(Protocol):
    def delete_by_key(self, key: str, resource_type: str = "image") -> RemoteDeleteOutcome: ...


class Collection(str, enum.Enum):
    PHOTOS = "photos"
    PARTNERS = "partners"


@dataclass(frozen=True)
class AwardSlotSelector:
    category: str
    role: str


Selector = Union[Collection, AwardSlotSelector]


class MatchStrategy(str, enum.Enum):
    CANONICAL_KEY = "canonical_key"    # entry.canonicalKey == identifier
    URL_SUBSTRING = "url_substring"    # identifier in entry.url
    SLOT_ADDRESS = "slot_address"      # award slot addressed by (category, role)


MATCH_STRATEGIES = (MatchStrategy.CANONICAL_KEY, MatchStrategy.URL_SUBSTRING)


class DeletionOutcome(str, enum.Enum):
    OK = "ok"
    NOT_FOUND = "not_found"


@dataclass
class DeletionResult:
    record: YearRecord
    outcome: DeletionOutcome
    strategy: Optional[MatchStrategy] = None
    removed: int = 0


def matches(ref: MediaRef, identifier: str, strategy: MatchStrategy) -> bool:
    if strategy is MatchStrategy.CANONICAL_KEY:
        return bool(ref.canonicalKey) and ref.canonicalKey == identifier
    if strategy is MatchStrategy.URL_SUBSTRING:
        return bool(ref.url) and identifier in ref.url
    return False


def locate(entries: list[MediaRef], identifier: str) -> tuple[Optional[int], Optional[MatchStrategy]]:
    """Index of the first entry matched by the first strategy that matches anything."""
    for strategy in MATCH_STRATEGIES:
        for index, ref in enumerate(entries):
            if matches(ref, identifier, strategy):
                return index, strategy
    return None, None


def deletion_key(ref: MediaRef, identifier: Optional[str] = None) -> Optional[str]:
    """Explicit key, else the key derived from the URL, else the raw identifier."""
    return ref.canonicalKey or resolve_canonical_key(ref.url) or identifier or None


def key_candidates(ref: MediaRef) -> list[str]:
    """Every plausible media-store key for ``ref``, deduplicated, explicit key first."""
    candidates: list[str] = []
    for candidate in (ref.canonicalKey, resolve_canonical_key(ref.url)):
        if candidate and candidate not in candidates:
            candidates.append(candidate)
    return candidates


class MediaReconciler:
    def __init__(self, repository: ContentRepository, media_store: MediaStore) -> None:
        self.repository = repository
        self.media_store = media_store

    # ── Remote side ────────────────────────────────────────────────────────────

    def _remote_delete(self, key: str, resource_type: str = "image") -> Optional[RemoteDeleteOutcome]:
        """Ask the media store to drop ``key``. Failures are logged, never raised."""
        logger.info("Requesting remote delete of %s", key)
        try:
            outcome = self.media_store.delete_by_key(key, resource_type=resource_type)
        except MediaStoreError as exc:
            logger.warning("Remote delete failed for %s: %s", key, exc.reason)
            return None
        if outcome is RemoteDeleteOutcome.NOT_FOUND:
            logger.warning("Remote store has nothing under %s; removing local reference anyway", key)
        return outcome

    # ── Single item ────────────────────────────────────────────────────────────

    def delete_media_item(
        self,
        record: YearRecord,
        selector: Selector,
        identifier: Optional[str] = None,
    ) -> DeletionResult:
        record = record.model_copy(deep=True)
        if isinstance(selector, AwardSlotSelector):
            return self._delete_award_slot_photo(record, selector, identifier)
        if not identifier:
            raise ValidationError("identifier required")
        return self._delete_from_collection(record, Collection(selector), identifier)

    def _delete_from_collection(
        self, record: YearRecord, collection: Collection, identifier: str
    ) -> DeletionResult:
        entries: list[MediaRef] = getattr(record, collection.value)
        index, strategy = locate(entries, identifier)

        if index is None:
            kept = [
                e for e in entries
                if not any(matches(e, identifier, s) for s in MATCH_STRATEGIES)
            ]
            removed = len(entries) - len(kept)
            logger.info(
                "No %s entry matches %r in %s; cleanup pass removed %d",
                collection.value, identifier, record.year, removed,
            )
            if removed:
                setattr(record, collection.value, kept)
                record = self.repository.save(record)
            return DeletionResult(record, DeletionOutcome.NOT_FOUND, None, removed)

        located = entries[index]
        logger.info(
            "Matched %s entry %s in %s by %s", collection.value, located.url, record.year, strategy.value
        )
        key = deletion_key(located, identifier)
        if key:
            self._remote_delete(key)

        kept = [
            e for i, e in enumerate(entries)
            if i != index and not (located.canonicalKey and e.canonicalKey == located.canonicalKey)
        ]
        removed = len(entries) - len(kept)
        setattr(record, collection.value, kept)
        record = self.repository.save(record)
        return DeletionResult(record, DeletionOutcome.OK, strategy, removed)

    def _delete_award_slot_photo(
        self, record: YearRecord, selector: AwardSlotSelector, identifier: Optional[str]
    ) -> DeletionResult:
        if selector.role not in AWARD_ROLES:
            raise ValidationError("Invalid role", {"role": selector.role})

        award = record.find_category(selector.category)
        slot = getattr(award, selector.role) if award else None
        if slot is None or slot.photo is None:
            logger.info(
                "No photo set for %s/%s in %s", selector.category, selector.role, record.year
            )
            return DeletionResult(record, DeletionOutcome.NOT_FOUND)

        photo = slot.photo
        key = deletion_key(photo, identifier)
        if key:
            self._remote_delete(key)
        else:
            logger.info("Award photo %s has no resolvable key; skipping remote delete", photo.url)

        slot.photo = None
        removed = 1 + self._sweep_photos(record, [photo])
        record = self.repository.save(record)
        return DeletionResult(record, DeletionOutcome.OK, MatchStrategy.SLOT_ADDRESS, removed)

    def _sweep_photos(self, record: YearRecord, refs: list[MediaRef]) -> int:
        """
        Drop gallery entries that duplicate an award photo (same key or same URL).

        Best-effort: an unrelated gallery entry that happens to share the URL goes too.
        """
        def duplicate(entry: MediaRef) -> bool:
            return any(
                (ref.canonicalKey and entry.canonicalKey == ref.canonicalKey)
                or (ref.url and entry.url == ref.url)
                for ref in refs
            )

        before = len(record.photos)
        record.photos = [p for p in record.photos if not duplicate(p)]
        swept = before - len(record.photos)
        if swept:
            logger.info("Swept %d duplicate gallery photo(s) from %s", swept, record.year)
        return swept

    # ── Whole category ─────────────────────────────────────────────────────────

    def delete_award_category(self, record: YearRecord, category: str) -> YearRecord:
        record = record.model_copy(deep=True)
        award: Optional[AwardCategory] = record.find_category(category)
        if award is None:
            raise NotFoundError("Award category not found", {"category": category})

        photos = [slot.photo for slot in award.slots() if slot.photo is not None]
        exact: set[str] = set()
        contained: set[str] = set()
        for photo in photos:
            # Every candidate key is tried on its own.
            for candidate in key_candidates(photo):
                self._remote_delete(candidate)
                exact.add(candidate)
            # Only the explicit key and the URL are matched as substrings.
            contained.update(m for m in (photo.canonicalKey, photo.url) if m)
        exact |= contained

        record.awards = [a for a in record.awards if a.category != category]

        if exact:
            before = len(record.photos)
            record.photos = [
                p for p in record.photos
                if not (
                    p.canonicalKey in exact
                    or p.url in exact
                    or any(p.url and m in p.url for m in contained)
                )
            ]
            logger.info(
                "Removed category %r from %s; swept %d gallery photo(s)",
                category, record.year, before - len(record.photos),
            )
        return self.repository.save(record)
