"""
Document view of ORM rows for the aggregation pipeline.
Each model names its fields the way they appear on the wire (camelCase) and maps
the filterable/sortable ones to columns via FIELD_COLUMNS.
"""


class DocumentMixin:
    FIELD_COLUMNS: dict[str, str] = {}

    @classmethod
    def column_for(cls, field: str):
        """Column behind a document field (used by match, sort and lookup foreign_field)."""
        try:
            return getattr(cls, cls.FIELD_COLUMNS[field])
        except KeyError:
            raise KeyError(f"{cls.__name__} has no document field {field!r}") from None

    @classmethod
    def has_field(cls, field: str) -> bool:
        return field in cls.FIELD_COLUMNS

    def to_document(self) -> dict:
        raise NotImplementedError


def media_document(url: str | None, public_id: str | None) -> dict | None:
    if not url:
        return None
    return {"url": url, "publicId": public_id}
