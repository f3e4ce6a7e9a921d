from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

MAX_STRING_LENGTH = 200


class LocationPayload(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore")

    name: str = Field(min_length=1, max_length=MAX_STRING_LENGTH)
    latitude: float = Field(ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(ge=-180, le=180, allow_inf_nan=False)
    address: str | None = Field(default=None, max_length=MAX_STRING_LENGTH)
    number: str | None = Field(default=None, max_length=MAX_STRING_LENGTH)
    neighborhood: str | None = Field(default=None, max_length=MAX_STRING_LENGTH)
    city: str | None = Field(default=None, max_length=MAX_STRING_LENGTH)
    state: str | None = Field(default=None, max_length=MAX_STRING_LENGTH)
    services: str | None = Field(default=None, max_length=MAX_STRING_LENGTH)


class RouteItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    distance_km: float = Field(alias="distanceKm")
    duration_minutes: float = Field(alias="durationMinutes")
    latitude: float
    longitude: float
    formatted_distance: str = Field(alias="formattedDistance")
    formatted_duration: str = Field(alias="formattedDuration")
    address: str | None = None
    number: str | None = None
    neighborhood: str | None = None
    city: str | None = None
    state: str | None = None
    services: str | None = None
