"""Pydantic schemas for per-field fingerprints.

A fingerprint is a statistical summary computed by the sync pass. It is a
discriminated union on ``kind``, one variant per logical data class. A null
aggregate means "unknown", never zero.
"""
from datetime import datetime
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class _BaseFingerprint(BaseModel):
    model_config = ConfigDict(frozen=True)

    distinct_count: Optional[int] = None
    nil_percent: Optional[float] = None


class NumberFingerprint(_BaseFingerprint):
    kind: Literal["type/Number"] = "type/Number"
    min: Optional[float] = None
    max: Optional[float] = None
    avg: Optional[float] = None
    sd: Optional[float] = None

    @property
    def has_bounds(self) -> bool:
        return self.min is not None and self.max is not None


class TextFingerprint(_BaseFingerprint):
    kind: Literal["type/Text"] = "type/Text"
    average_length: Optional[float] = None
    percent_json: Optional[float] = None
    percent_url: Optional[float] = None
    percent_email: Optional[float] = None


class DateTimeFingerprint(_BaseFingerprint):
    kind: Literal["type/DateTime"] = "type/DateTime"
    earliest: Optional[datetime] = None
    latest: Optional[datetime] = None


class BooleanFingerprint(_BaseFingerprint):
    kind: Literal["type/Boolean"] = "type/Boolean"
    percent_true: Optional[float] = None


class GeneralFingerprint(_BaseFingerprint):
    kind: Literal["general"] = "general"


Fingerprint = Annotated[
    Union[NumberFingerprint, TextFingerprint, DateTimeFingerprint, BooleanFingerprint, GeneralFingerprint],
    Field(discriminator="kind"),
]
