"""
Module: turn.py
Description: Turn event model for the Turn Relay.

Defines the inbound "turn resolved" record relayed to Notion. The record
has no identity beyond its display name and is never deduplicated.

Dependencies: pydantic, typing
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TurnEvent(BaseModel):
    """
    Inbound "turn resolved" event.

    Attributes:
        name: Display name, used as the Notion page title
        status: Optional status label, mapped to a select property
        description: Optional free text, mapped to a rich text property
    """

    model_config = ConfigDict(
        coerce_numbers_to_str=True,
        extra="ignore"
    )

    name: Optional[str] = Field(
        default=None,
        description="Turn display name"
    )
    status: Optional[str] = Field(
        default=None,
        description="Turn status label"
    )
    description: Optional[str] = Field(
        default=None,
        description="Free-text turn description"
    )

    @field_validator('name', 'status', 'description', mode='before')
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Blank strings count as missing; booleans are relayed as text."""
        if isinstance(v, str) and not v.strip():
            return None
        if isinstance(v, bool):
            return str(v).lower()
        return v
