"""Pydantic models shared across API routes."""
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

from clockboard.config.timezones import FIXED_REFERENCE_TIMEZONE, UTC_TIMEZONE
from clockboard.engine.offsets import OffsetSnapshot
from clockboard.engine.snippets import GeneratedSnippetSet
from clockboard.tasks.ticker import ClockFace


def validate_timezone_id(value: str) -> str:
    value = value.strip()
    if value in {UTC_TIMEZONE, FIXED_REFERENCE_TIMEZONE}:
        return value
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone '{value}'") from exc
    return value


class OffsetSnapshotResponse(BaseModel):
    offset_minutes: int
    offset_label: str
    is_dst: Union[bool, Literal["not-applicable"]]
    season: str

    @classmethod
    def from_snapshot(cls, snapshot: OffsetSnapshot) -> "OffsetSnapshotResponse":
        return cls(
            offset_minutes=snapshot.offset_minutes,
            offset_label=snapshot.offset_label,
            is_dst=snapshot.is_dst,
            season=snapshot.season,
        )


class ClockFaceResponse(BaseModel):
    index: int
    timezone: str
    is_local: bool
    is_fixed_reference: bool
    removable: bool
    display_name: str
    local_time: datetime
    date_label: str
    is_daytime: bool
    snapshot: OffsetSnapshotResponse

    @classmethod
    def from_face(cls, face: ClockFace) -> "ClockFaceResponse":
        return cls(
            index=face.index,
            timezone=face.timezone_id,
            is_local=face.is_local,
            is_fixed_reference=face.is_fixed_reference,
            removable=face.removable,
            display_name=face.display_name,
            local_time=face.local_time,
            date_label=face.date_label,
            is_daytime=face.is_daytime,
            snapshot=OffsetSnapshotResponse.from_snapshot(face.snapshot),
        )


class ClockCreate(BaseModel):
    timezone: str = Field(..., min_length=1, max_length=64)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        return validate_timezone_id(value)


class ClockMutationResponse(BaseModel):
    result: str
    clocks: List[ClockFaceResponse]


class SimulationInput(BaseModel):
    input: str = Field(..., max_length=128, description="Free-text wall-clock reading in UTC-06:00")


class SimulationState(BaseModel):
    active: bool
    instant: Optional[datetime] = None
    reference_time: Optional[datetime] = None


class SnippetResponse(BaseModel):
    timezone: str
    kind: str
    alias: str
    winter_delta_hours: float
    summer_delta_hours: float
    dst_start: str
    dst_end: str
    query_expression: str
    script_variant_a: str
    script_variant_b: str

    @classmethod
    def from_snippets(cls, snippets: GeneratedSnippetSet) -> "SnippetResponse":
        context = snippets.context
        return cls(
            timezone=context.timezone_id,
            kind=context.kind.value,
            alias=context.alias,
            winter_delta_hours=context.winter_delta_hours,
            summer_delta_hours=context.summer_delta_hours,
            dst_start=context.dst_start,
            dst_end=context.dst_end,
            query_expression=snippets.query_expression,
            script_variant_a=snippets.script_variant_a,
            script_variant_b=snippets.script_variant_b,
        )


class PreferencesResponse(BaseModel):
    theme: Literal["light", "dark"]
    displayMode: Literal["analog", "digital"]


class PreferencesUpdate(BaseModel):
    theme: Optional[Literal["light", "dark"]] = None
    displayMode: Optional[Literal["analog", "digital"]] = None
