"""Pydantic schemas for events.

Learn: On the wire an event is {type, from, to}. `from` is a Python
keyword, so the fields are named from_value/to_value and aliased.
EventCreate has no owner field at all: any owner_id sent by a client is
ignored as an unknown key, and the service sets the owner from the
authenticated principal.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field

from eventkeeper.db.models import EventType


class EventCreate(BaseModel):
    type: EventType
    from_value: str = Field(
        ...,
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("from", "from_value"),
    )
    to_value: str = Field(
        ...,
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("to", "to_value"),
    )


class EventUpdate(BaseModel):
    """Partial update — only non-None fields are applied."""
    type: Optional[EventType] = None
    from_value: Optional[str] = Field(
        None,
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("from", "from_value"),
    )
    to_value: Optional[str] = Field(
        None,
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("to", "to_value"),
    )


class EventRead(BaseModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    type: EventType
    from_value: str = Field(
        validation_alias=AliasChoices("from", "from_value"), serialization_alias="from"
    )
    to_value: str = Field(
        validation_alias=AliasChoices("to", "to_value"), serialization_alias="to"
    )
    created_at: datetime
    created_by: Optional[uuid.UUID]
    updated_at: datetime
    updated_by: Optional[uuid.UUID]

    model_config = {"from_attributes": True}


class EventPage(BaseModel):
    items: list[EventRead]
    total: int
    page: int
    size: int
    pages: int
