"""Map weather conditions to the collection shown for them."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from .errors import InvalidCondition, MissingCondition


class Condition(str, Enum):
    SUN = "sun"
    CLOUD = "cloud"
    RAIN = "rain"
    SNOW = "snow"


CONDITION_COLLECTIONS: Dict[Condition, str] = {
    Condition.SUN: "Sunny Day",
    Condition.CLOUD: "Cloudy Day",
    Condition.RAIN: "Rainy Day",
    Condition.SNOW: "Snow Day",
}


def resolve_condition(condition: Optional[str] = None) -> str:
    """Return the collection name for a condition such as ``"sun"``.

    Raises:
        MissingCondition: If no condition was given.
        InvalidCondition: If the condition is not one of the known values.
    """
    if not condition:
        raise MissingCondition("Query parameter condition required.")
    try:
        key = Condition(condition)
    except ValueError:
        raise InvalidCondition(f"Query condition '{condition}' does not exist")
    return CONDITION_COLLECTIONS[key]
