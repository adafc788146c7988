"""Year record service: everything the API does to a year record except media deletion."""

import logging
from typing import Optional

from shared.db import ContentRepository
from shared.errors import ConflictError, DuplicateKeyError, NotFoundError, ValidationError
from shared.models import AWARD_ROLES, AwardCategory, AwardSlot, MediaRef, YearRecord, YearSummary
from shared.video import normalize_video_link

logger = logging.getLogger(__name__)


def validate_slot_address(category: Optional[str], role: Optional[str]) -> None:
    if not category:
        raise ValidationError("category required")
    if role not in AWARD_ROLES:
        raise ValidationError(
            "role must be one of winner, firstRunnerUp, secondRunnerUp", {"role": role}
        )


class ContentService:
    def __init__(self, repository: ContentRepository) -> None:
        self.repository = repository

    # ── Reads ──────────────────────────────────────────────────────────────────

    def list_years(self) -> list[YearSummary]:
        return self.repository.list_summaries()

    def get(self, year: int) -> YearRecord:
        record = self.repository.find_by_year(year)
        if record is None:
            raise NotFoundError(f"Content for {year} not found", {"year": year})
        return record

    def get_award_category(self, year: int, category: str) -> AwardCategory:
        award = self.get(year).find_category(category)
        if award is None:
            raise NotFoundError("Category not found", {"year": year, "category": category})
        return award

    # ── Creation ───────────────────────────────────────────────────────────────

    def create(self, year: int) -> YearRecord:
        if self.repository.find_by_year(year) is not None:
            raise ConflictError(f"Content for {year} already exists", {"year": year})
        try:
            record = self.repository.insert(YearRecord(year=year))
        except DuplicateKeyError as exc:
            raise ConflictError("Content for this year already exists", {"year": year}) from exc
        logger.info("Created content record for %s", year)
        return record

    def get_or_create(self, year: int) -> YearRecord:
        record = self.repository.find_by_year(year)
        if record is not None:
            return record
        try:
            return self.repository.insert(YearRecord(year=year))
        except DuplicateKeyError:
            # Another writer created it between our read and insert.
            return self.get(year)

    # ── Writes ─────────────────────────────────────────────────────────────────

    def set_video(self, year: int, raw_link: str) -> YearRecord:
        if not raw_link or not raw_link.strip():
            raise ValidationError("videoLink is required")
        record = self.get_or_create(year)
        record.videoLink = normalize_video_link(raw_link)
        return self.repository.save(record)

    def set_video_file(self, year: int, url: str) -> YearRecord:
        record = self.get_or_create(year)
        record.videoLink = url
        return self.repository.save(record)

    def add_photos(self, year: int, refs: list[MediaRef], caption: str = "") -> YearRecord:
        if not refs:
            raise ValidationError("No photos uploaded")
        record = self.get_or_create(year)
        for ref in refs:
            record.photos.append(ref.model_copy(update={"caption": caption}))
        return self.repository.save(record)

    def add_partners(self, year: int, refs: list[MediaRef]) -> YearRecord:
        if not refs:
            raise ValidationError("No logos uploaded")
        record = self.get_or_create(year)
        record.partners.extend(refs)
        return self.repository.save(record)

    def upsert_award_slot(
        self,
        year: int,
        category: str,
        role: str,
        name: str,
        photo: Optional[MediaRef] = None,
    ) -> YearRecord:
        """Create the category if needed and overwrite the addressed slot (no merge)."""
        validate_slot_address(category, role)
        record = self.get_or_create(year)
        award = record.find_category(category)
        if award is None:
            award = AwardCategory(category=category)
            record.awards.append(award)
        setattr(award, role, AwardSlot(name=name, position=role, photo=photo))
        return self.repository.save(record)

    def replace_awards(self, year: int, awards: list[AwardCategory]) -> YearRecord:
        """Replace the whole awards list. Existing categories are not merged."""
        record = self.get_or_create(year)
        record.awards = list(awards)
        return self.repository.save(record)

    def reset(self) -> int:
        deleted = self.repository.delete_all()
        logger.warning("Reset removed %d content record(s)", deleted)
        return deleted
