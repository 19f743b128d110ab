"""Pydantic models for JSON request bodies.

Field names follow the camelCase wire format; snake_case names are also
accepted so scripts can use either.
"""

from __future__ import annotations

from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

from vtrim.trim.planner import coerce_seconds


class ProcessFileModel(BaseModel):
    """One entry of the ``files`` list echoed back from the upload response."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    original_name: str = Field(
        validation_alias=AliasChoices("originalName", "original_name", "originalname"),
        min_length=1,
    )
    upload_path: str = Field(
        validation_alias=AliasChoices("uploadPath", "upload_path", "path"),
        min_length=1,
    )


class ProcessRequestModel(BaseModel):
    """Body of POST /api/process."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    session_id: str = Field(
        validation_alias=AliasChoices("sessionId", "session_id"), min_length=1
    )
    files: list[ProcessFileModel] = Field(min_length=1)
    trim_start: float = Field(
        default=0.0, validation_alias=AliasChoices("trimStart", "trim_start")
    )
    trim_end: float = Field(
        default=0.0, validation_alias=AliasChoices("trimEnd", "trim_end")
    )
    output_base_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("outputBaseName", "output_base_name"),
    )

    @field_validator("trim_start", "trim_end", mode="before")
    @classmethod
    def coerce_cut(cls, v: Any) -> float:
        """Lenient number parsing: junk reads as 0, negatives are rejected."""
        seconds = coerce_seconds(v)
        if seconds < 0:
            raise ValueError("cut amounts must be >= 0")
        return seconds

    @field_validator("output_base_name", mode="before")
    @classmethod
    def stringify_base_name(cls, v: Any) -> str | None:
        if v is None:
            return None
        return str(v)


class ArchiveRequestModel(BaseModel):
    """Body of POST /api/create-zip."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    session_id: str = Field(
        validation_alias=AliasChoices("sessionId", "session_id"), min_length=1
    )
