# catalyst_core/domain/models.py
from enum import Enum, IntEnum
from typing import Optional, Type, TypeVar

from catalyst_core.errors import ConstraintViolation

# --- Enums ---

class EntityType(str, Enum):
    """Closed set of units of analysis."""
    COUNTRY = "country"
    ORGANIZATION = "organization"
    PROJECT = "project"
    PERSONA = "persona"
    EXPERIMENT = "experiment"
    DATASET = "dataset"
    OTHER = "other"


class MetricDirection(IntEnum):
    """Which way a metric improves."""
    LOWER_IS_BETTER = -1
    NEUTRAL = 0
    HIGHER_IS_BETTER = 1


class TagKind(str, Enum):
    CAUSE = "cause"
    TOPIC = "topic"
    ESG = "esg"
    SDG = "sdg"
    KEYWORD = "keyword"


class PeriodKind(str, Enum):
    """Discriminator of the period sum type."""
    DATE = "date"
    YEAR = "year"
    TIME = "time"


# --- Field coercion ---

E = TypeVar("E", bound=Enum)


def coerce_enum(enum_cls: Type[E], value, field: str) -> E:
    """
    Convert a raw value into a member of ``enum_cls``.

    Raises ConstraintViolation for anything outside the closed set; booleans
    are rejected even though they compare equal to 0/1.
    """
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, bool):
        raise ConstraintViolation(
            f"Invalid {field}: {value!r}.",
            details={"field": field, "value": value},
        )
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        allowed = [m.value for m in enum_cls]
        raise ConstraintViolation(
            f"Invalid {field}: {value!r}. Allowed values: {allowed}.",
            details={"field": field, "value": value, "allowed": allowed},
        ) from None


def require_name(value: Optional[str], field: str = "name") -> str:
    """Strip a required name; blank or missing names are rejected."""
    if value is None or not isinstance(value, str) or not value.strip():
        raise ConstraintViolation(
            f"{field} must be a non-empty string.",
            details={"field": field},
        )
    return value.strip()


def check_iso_code(value: Optional[str], length: int, field: str) -> Optional[str]:
    """
    ISO-3166 codes are optional but must have exactly ``length`` characters.
    They are stored upper-case.
    """
    if value is None:
        return None
    if not isinstance(value, str) or len(value) != length:
        raise ConstraintViolation(
            f"{field} must be exactly {length} characters, got {value!r}.",
            details={"field": field, "value": value, "length": length},
        )
    return value.upper()
