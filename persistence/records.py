from __future__ import annotations

import json
from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import InvalidRecordError, UnknownCollectionError

# Order matches the top-level keys of data/db.json.
COLLECTIONS: tuple[str, ...] = ("users", "games", "bookings", "reviews", "messages")

# Managed by the store; never validated against a record model.
RESERVED_FIELDS: frozenset[str] = frozenset({"_id", "id", "createdAt", "updatedAt"})

UserRole = Literal["player", "gm_applicant", "approved_gm", "admin"]
GameSystem = Literal[
    "dnd_5e",
    "pathfinder_2e",
    "call_of_cthulhu",
    "vampire_masquerade",
    "cyberpunk_red",
    "other",
]
Platform = Literal["online", "in_person", "hybrid"]
SessionType = Literal["one_shot", "campaign", "mini_series"]
ExperienceLevel = Literal["beginner", "intermediate", "advanced", "all_levels"]
BookingStatus = Literal["pending", "confirmed", "cancelled", "completed"]
BookingType = Literal["instant", "request"]
MessageType = Literal["text", "image", "file", "game_invitation"]


class _Record(BaseModel):
    """
    Known fields are typed; anything else is kept as-is.

    Strict so that what passes validation is exactly what gets stored
    (no silent "5" -> 5 coercion). Timestamps stay ISO-8601 strings.
    """

    model_config = ConfigDict(extra="allow", strict=True)


class UserPreferences(_Record):
    systems: list[GameSystem] | None = None
    experienceLevel: ExperienceLevel | None = None
    platforms: list[Platform] | None = None


class UserStats(_Record):
    gamesPlayed: int | None = Field(default=None, ge=0)
    gamesHosted: int | None = Field(default=None, ge=0)
    averageRating: float | None = Field(default=None, ge=0, le=5)
    totalReviews: int | None = Field(default=None, ge=0)


class Pricing(_Record):
    sessionPrice: float | None = Field(default=None, ge=0)
    currency: str | None = None


class UserRecord(_Record):
    email: str | None = None
    username: str | None = None
    firstName: str | None = None
    lastName: str | None = None
    role: UserRole | None = None
    avatar: str | None = None
    bio: str | None = None
    timezone: str | None = None
    pronouns: list[str] | None = None
    identityTags: list[str] | None = None
    gameStyles: list[str] | None = None
    themes: list[str] | None = None
    preferences: UserPreferences | None = None
    stats: UserStats | None = None
    pricing: Pricing | None = None
    referralCode: str | None = None
    referralCredits: int | None = Field(default=None, ge=0)


class Recurrence(_Record):
    frequency: Literal["weekly", "biweekly", "monthly"] | None = None
    endDate: str | None = None


class Schedule(_Record):
    startTime: str | None = None
    endTime: str | None = None
    timezone: str | None = None
    recurring: Recurrence | None = None


class Location(_Record):
    address: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None


class GameRecord(_Record):
    title: str | None = None
    description: str | None = None
    partyNotes: str | None = None
    system: GameSystem | None = None
    customSystem: str | None = None
    platform: Platform | None = None
    sessionType: SessionType | None = None
    experienceLevel: ExperienceLevel | None = None
    gm: str | None = None
    price: float | None = Field(default=None, ge=0)
    currency: str | None = None
    capacity: int | None = Field(default=None, ge=1)
    bookedSeats: int | None = Field(default=None, ge=0)
    availableSeats: int | None = Field(default=None, ge=0)
    schedule: Schedule | None = None
    location: Location | None = None


class Companion(_Record):
    name: str
    email: str | None = None


class BookingRecord(_Record):
    game: str | None = None
    player: str | None = None
    numberOfSeats: int | None = Field(default=None, ge=1)
    companions: list[Companion] | None = None
    status: BookingStatus | None = None
    bookingType: BookingType | None = None
    totalAmount: float | None = Field(default=None, ge=0)
    currency: str | None = None
    paymentIntentId: str | None = None
    specialRequests: str | None = None


class ReviewRecord(_Record):
    game: str | None = None
    reviewer: str | None = None
    gm: str | None = None
    rating: int | None = Field(default=None, ge=1, le=5)
    title: str | None = None
    comment: str | None = None
    privateFeedback: str | None = None
    isPublic: bool | None = None
    isVerified: bool | None = None


class MessageMetadata(_Record):
    fileName: str | None = None
    fileSize: int | None = Field(default=None, ge=0)
    fileType: str | None = None
    imageUrl: str | None = None


class MessageRecord(_Record):
    sender: str | None = None
    recipient: str | None = None
    content: str | None = None
    messageType: MessageType | None = None
    isRead: bool | None = None
    readAt: str | None = None
    conversation: str | None = None
    relatedGame: str | None = None
    metadata: MessageMetadata | None = None


RECORD_MODELS: dict[str, type[_Record]] = {
    "users": UserRecord,
    "games": GameRecord,
    "bookings": BookingRecord,
    "reviews": ReviewRecord,
    "messages": MessageRecord,
}


def empty_store() -> dict[str, list[dict[str, Any]]]:
    return {name: [] for name in COLLECTIONS}


def ensure_collection(collection: str) -> str:
    if collection not in RECORD_MODELS:
        raise UnknownCollectionError(collection)
    return collection


def validate_fields(collection: str, fields: Mapping[str, Any]) -> None:
    """
    Check the caller-owned fields of a record against its collection model.

    Validation runs on the JSON form, which is what ends up on disk, so values
    that cannot be written (sets, NaN, arbitrary objects) are rejected too.
    Reserved fields are skipped and the record itself is stored as given.
    """
    model = RECORD_MODELS[ensure_collection(collection)]
    payload = {k: v for k, v in fields.items() if k not in RESERVED_FIELDS}
    try:
        raw = json.dumps(payload, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise InvalidRecordError(collection, f"fields are not JSON serializable: {e}") from e
    try:
        model.model_validate_json(raw)
    except ValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        raise InvalidRecordError(collection, f"{e.error_count()} invalid field(s)", errors) from e
