import uuid

from app.core.errors import ValidationError


def parse_id(value: str | None, label: str) -> str:
    """Canonical form of a path/query id; malformed ids are a 400, not a 404."""
    try:
        return str(uuid.UUID(str(value)))
    except (ValueError, TypeError):
        raise ValidationError(f"Invalid {label}") from None
