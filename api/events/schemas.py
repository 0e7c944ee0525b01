"""
Pydantic schemas for event and registration endpoints.

Field aliases follow the front-end's camelCase payloads.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# Upper bound of the int4 columns cars are stored in.
INT4_MAX = 2**31 - 1


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CarIn(_CamelModel):
    make: str | None = None
    model: str | None = None
    year: int | None = Field(default=None, ge=0, le=INT4_MAX)
    color: str | None = None
    mileage: int | None = Field(default=None, ge=0, le=INT4_MAX)
    modified: str | None = None

    def is_complete(self) -> bool:
        return bool(self.make and self.model and self.year)


class CheckRegistrationRequest(_CamelModel):
    event_id: int = Field(..., alias="eventId")
    email: str = Field(..., min_length=1, max_length=320)


class RegisterEventRequest(_CamelModel):
    event_id: int = Field(..., alias="eventId")
    user_id: int | None = Field(default=None, alias="userId")
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    email: str = Field(..., min_length=1, max_length=320)
    phone: str | None = None
    cars: list[CarIn] = Field(default_factory=list)


class UpdateRegistrationRequest(_CamelModel):
    first_name: str = Field(..., min_length=1, alias="firstName")
    last_name: str = Field(..., min_length=1, alias="lastName")
    email: str = Field(..., min_length=1, max_length=320)
    phone: str = Field(..., min_length=1)
    cars: list[CarIn]
