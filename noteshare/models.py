"""User-supplied share settings, validated at the CLI/dialog boundary."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_EXPIRATION_DAYS = 7

ShareType = Literal["public", "encrypted"]


class ShareSettings(BaseModel):
    """
    Share type and validity period picked by the user.

    ``expiration_days`` mirrors the dialog field: anything that does not parse
    as an integer (or parses to 0) becomes the default of 7 days. Parsed values
    outside [1, 365] are rejected.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    share_type: ShareType = "public"
    expiration_days: int = Field(default=DEFAULT_EXPIRATION_DAYS, ge=1, le=365)

    @field_validator("share_type", mode="before")
    @classmethod
    def _normalize_share_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("expiration_days", mode="before")
    @classmethod
    def _parse_expiration(cls, value: Any) -> int:
        if isinstance(value, bool):
            return DEFAULT_EXPIRATION_DAYS
        if isinstance(value, int):
            return value or DEFAULT_EXPIRATION_DAYS
        try:
            parsed = int(str(value).strip())
        except (TypeError, ValueError):
            return DEFAULT_EXPIRATION_DAYS
        return parsed or DEFAULT_EXPIRATION_DAYS

    @property
    def encrypted(self) -> bool:
        return self.share_type == "encrypted"
