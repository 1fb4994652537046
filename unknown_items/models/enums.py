"""Enumerations shared by models and schemas."""
import enum


class UserRole(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class Category(str, enum.Enum):
    UNKNOWN_FACTS = "UNKNOWN_FACTS"
    INTERNET_MYSTERIES = "INTERNET_MYSTERIES"
    UNIDENTIFIED_OBJECTS = "UNIDENTIFIED_OBJECTS"
    UNEXPLAINED_EVENTS = "UNEXPLAINED_EVENTS"
    HISTORICAL_MYSTERIES = "HISTORICAL_MYSTERIES"
    SCIENTIFIC_ANOMALIES = "SCIENTIFIC_ANOMALIES"
    CRYPTIDS = "CRYPTIDS"
    CONSPIRACIES = "CONSPIRACIES"
    OTHER = "OTHER"


class ContentType(str, enum.Enum):
    TEXT = "TEXT"
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"
    LINK = "LINK"
    MIXED = "MIXED"


class MysteryStatus(str, enum.Enum):
    UNSOLVED = "UNSOLVED"
    PARTIALLY_SOLVED = "PARTIALLY_SOLVED"
    SOLVED = "SOLVED"
    DEBUNKED = "DEBUNKED"


class MediaType(str, enum.Enum):
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"


# Sort priority for the "unsolved" feed; lower sorts first.
# Kept separate from declaration order so reordering the enum cannot change the feed.
MYSTERY_STATUS_PRIORITY: dict[MysteryStatus, int] = {
    MysteryStatus.UNSOLVED: 0,
    MysteryStatus.PARTIALLY_SOLVED: 1,
    MysteryStatus.SOLVED: 2,
    MysteryStatus.DEBUNKED: 3,
}
