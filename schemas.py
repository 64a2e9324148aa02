"""
Database Schemas

MongoDB collection schemas for every resource, defined as Pydantic models.
This file is the single source of truth for the data structure.

Stored documents use snake_case keys (``user_id``, ``created_at``); the API
speaks camelCase (``userId``, ``createdAt``). Every model accepts both.

Each favorite resource has three models:
- ``<Resource>Create``: body of POST, all required fields checked
- ``<Resource>Update``: body of PUT, every field optional
- ``<Resource>``: the stored record returned to clients
"""

from datetime import datetime, timezone
from typing import Annotated, Any, List, Literal, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    field_validator,
)
from pydantic.alias_generators import to_camel


def _assume_utc(value: datetime) -> datetime:
    # the driver hands back naive datetimes that are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
UtcDatetime = Annotated[datetime, AfterValidator(_assume_utc)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --------------------------------------------------
# Response envelope
# --------------------------------------------------

class Envelope(BaseModel):
    """Uniform wrapper returned by every endpoint."""

    success: bool
    message: str
    data: Optional[Any] = None
    errors: Optional[List[str]] = None


# --------------------------------------------------
# Shared bases
# --------------------------------------------------

class OwnedCreate(CamelModel):
    user_id: NonBlankStr


class OwnedUpdate(CamelModel):
    """Partial update. Blank strings count as absent."""

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class OwnedRecord(CamelModel):
    id: str
    user_id: str
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None


# --------------------------------------------------
# Favorite music
# --------------------------------------------------

class FavMusicCreate(OwnedCreate):
    music_name: NonBlankStr
    singer: NonBlankStr
    reason: Optional[str] = None


class FavMusicUpdate(OwnedUpdate):
    music_name: Optional[str] = None
    singer: Optional[str] = None
    reason: Optional[str] = None


class FavMusic(OwnedRecord):
    music_name: str
    singer: str
    reason: Optional[str] = None


# --------------------------------------------------
# Favorite vehicle
# --------------------------------------------------

VehicleName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
VehicleReason = Annotated[str, StringConstraints(max_length=500)]
LaunchYear = Annotated[int, Field(ge=1886, le=2030)]


class FavVehicleCreate(OwnedCreate):
    vehicle_name: VehicleName
    type_of_vehicle: NonBlankStr
    launch_year: LaunchYear
    reason: Optional[VehicleReason] = None


class FavVehicleUpdate(OwnedUpdate):
    vehicle_name: Optional[VehicleName] = None
    type_of_vehicle: Optional[str] = None
    launch_year: Optional[LaunchYear] = None
    reason: Optional[VehicleReason] = None


class FavVehicle(OwnedRecord):
    vehicle_name: str
    type_of_vehicle: str
    launch_year: int
    reason: Optional[str] = None


# --------------------------------------------------
# Game
# --------------------------------------------------

GamePlatform = Literal["indoor", "outdoor"]


class GameCreate(OwnedCreate):
    game_name: NonBlankStr
    platform: GamePlatform
    reason: NonBlankStr
    is_digital: bool


class GameUpdate(OwnedUpdate):
    game_name: Optional[str] = None
    platform: Optional[GamePlatform] = None
    reason: Optional[str] = None
    is_digital: Optional[bool] = None


class Game(OwnedRecord):
    game_name: str
    platform: str
    reason: str
    is_digital: bool


# --------------------------------------------------
# Mobile app
# --------------------------------------------------

MOBILE_PLATFORMS = {"android": "Android", "ios": "iOS"}


def canonical_mobile_platform(value: Any) -> Any:
    if value is None:
        return value
    if not isinstance(value, str) or value.strip().lower() not in MOBILE_PLATFORMS:
        raise ValueError("Platform must be either 'Android' or 'iOS'")
    return MOBILE_PLATFORMS[value.strip().lower()]


MobilePlatform = Annotated[str, BeforeValidator(canonical_mobile_platform)]


class MobileAppCreate(OwnedCreate):
    app_name: NonBlankStr
    platform: MobilePlatform
    category: NonBlankStr
    reason: NonBlankStr


class MobileAppUpdate(OwnedUpdate):
    app_name: Optional[str] = None
    platform: Optional[MobilePlatform] = None
    category: Optional[str] = None
    reason: Optional[str] = None


class MobileApp(OwnedRecord):
    app_name: str
    platform: str
    category: str
    reason: str


# --------------------------------------------------
# YouTube channel
# --------------------------------------------------

class YouTubeChannelCreate(OwnedCreate):
    channel_name: NonBlankStr
    creator_name: NonBlankStr
    genre: NonBlankStr
    reason: Optional[str] = None


class YouTubeChannelUpdate(OwnedUpdate):
    channel_name: Optional[str] = None
    creator_name: Optional[str] = None
    genre: Optional[str] = None
    reason: Optional[str] = None


class YouTubeChannel(OwnedRecord):
    channel_name: str
    creator_name: str
    genre: str
    reason: Optional[str] = None


# --------------------------------------------------
# Favorite programming language
# --------------------------------------------------

class FavProgrammingLanguageCreate(OwnedCreate):
    programming_language_name: NonBlankStr
    use_case: NonBlankStr
    reason: NonBlankStr


class FavProgrammingLanguageUpdate(OwnedUpdate):
    programming_language_name: Optional[str] = None
    use_case: Optional[str] = None
    reason: Optional[str] = None


class FavProgrammingLanguage(OwnedRecord):
    programming_language_name: str
    use_case: str
    reason: str


# --------------------------------------------------
# Users
# --------------------------------------------------

class UserCreate(CamelModel):
    name: NonBlankStr
    email: EmailStr
    password: NonBlankStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class UserRead(CamelModel):
    """User as returned by the API. Never carries the password hash."""

    id: str
    name: str
    email: str
    created_at: Optional[UtcDatetime] = None
