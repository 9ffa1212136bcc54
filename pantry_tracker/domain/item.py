"""Item record domain models and normalization rules."""

from collections.abc import Mapping
from datetime import date, datetime, time
from enum import StrEnum
from typing import Any, NamedTuple
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from pantry_tracker.core.config import Constants
from pantry_tracker.core.errors import ValidationError


class SourceKind(StrEnum):
    """How an item entered the pantry."""

    SCANNED = "scanned"
    MANUAL = "manual"


class ItemIdentifier(NamedTuple):
    """Composite identity of an item: scan code plus creation instant."""

    scan_code: str
    creation_instant: int

    def __str__(self) -> str:
        return f"{self.scan_code}@{self.creation_instant}"


class ItemRecord(BaseModel):
    """One pantry entry, as persisted in the collection blob."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    title: str = Field(..., min_length=1, description="Display title (e.g., 'Milk')")
    weight_label: str | None = Field(
        default=None,
        description="Weight/size label; None means unspecified, '' means looked up and empty",
    )
    image_reference: str | None = Field(default=None, description="Remote image URI")
    scan_code: str = Field(..., min_length=1, description="Barcode, or the manual-entry sentinel")
    creation_instant: int = Field(..., ge=0, description="Creation time in epoch milliseconds")
    expiration_instant: int | None = Field(default=None, ge=0, description="Expiration time in epoch milliseconds")
    source_kind: SourceKind = Field(default=SourceKind.SCANNED, description="Scanned or manually entered")
    inline_image: str | None = Field(default=None, description="Inline encoded image payload (data URI)")

    @property
    def identifier(self) -> ItemIdentifier:
        return ItemIdentifier(self.scan_code, self.creation_instant)

    @property
    def has_expiration(self) -> bool:
        return self.expiration_instant is not None

    @property
    def image(self) -> str | None:
        """The image to display; an inline payload wins over a remote URI."""
        return self.inline_image or self.image_reference

    @property
    def weight_display(self) -> str:
        if self.weight_label is None:
            return Constants.WEIGHT_UNSPECIFIED_LABEL
        return self.weight_label

    def with_expiration(self, expiration_instant: int | None) -> "ItemRecord":
        """Return a copy with a new expiration, identity unchanged."""
        if expiration_instant is not None and expiration_instant < 0:
            raise ValidationError("Expiration instant must not be negative")
        return self.model_copy(update={"expiration_instant": expiration_instant})

    def to_blob(self) -> dict[str, Any]:
        """Serialize to the persisted camelCase shape, omitting absent fields."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class ItemCandidate(BaseModel):
    """Raw, unvalidated input for a new item record."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = ""
    weight_label: str | None = None
    image_reference: str | None = None
    inline_image: str | None = None
    scan_code: str | None = None
    source_kind: SourceKind = SourceKind.SCANNED
    creation_instant: int
    expiration_instant: int | None = None


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def normalize(candidate: ItemCandidate | Mapping[str, Any]) -> ItemRecord:
    """Validate and normalize a raw candidate into an item record.

    Args:
        candidate: Candidate model, or a mapping with candidate fields

    Returns:
        Normalized ItemRecord

    Raises:
        ValidationError: If the title is empty, a scanned item has no scan code,
            or the candidate fields are malformed
    """
    if not isinstance(candidate, ItemCandidate):
        try:
            candidate = ItemCandidate.model_validate(candidate)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid item candidate: {e.error_count()} field error(s)") from e

    title = candidate.title.strip()
    if not title:
        raise ValidationError("Item title must not be empty")

    if candidate.creation_instant < 0:
        raise ValidationError("Creation instant must not be negative")
    if candidate.expiration_instant is not None and candidate.expiration_instant < 0:
        raise ValidationError("Expiration instant must not be negative")

    is_manual = candidate.source_kind == SourceKind.MANUAL

    scan_code = _clean(candidate.scan_code)
    if scan_code is None:
        if not is_manual:
            raise ValidationError("Scanned items require a scan code")
        scan_code = Constants.MANUAL_SCAN_CODE

    weight_label = candidate.weight_label
    if weight_label is not None:
        weight_label = weight_label.strip()
        # A skipped optional field on the manual form is "unspecified"
        if is_manual and not weight_label:
            weight_label = None

    return ItemRecord(
        title=title,
        weight_label=weight_label,
        image_reference=_clean(candidate.image_reference),
        scan_code=scan_code,
        creation_instant=candidate.creation_instant,
        expiration_instant=candidate.expiration_instant,
        source_kind=candidate.source_kind,
        inline_image=_clean(candidate.inline_image),
    )


def to_epoch_ms(moment: datetime) -> int:
    """Convert a datetime to epoch milliseconds (naive values are local time)."""
    return int(moment.timestamp() * 1000)


def expiration_instant_for(day: date, *, hour: int = 9, tz: str | None = None) -> int:
    """Epoch milliseconds of ``hour``:00 on ``day`` in ``tz`` (local zone when None)."""
    zone = ZoneInfo(tz) if tz else None
    return to_epoch_ms(datetime.combine(day, time(hour=hour), tzinfo=zone))
