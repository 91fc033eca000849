"""
Aggregation pipeline over SQLAlchemy models.

A Pipeline assembles a denormalized view from one base model with named stages:

- match / search / sort compile to SQL on the base model and always run first
  (search before any other filter);
- lookup, add_fields, unwind and project run on documents (model.to_document())
  in the order they were added.

lookup is a left outer join into an array (0..n matches). It is executed as one
batched IN query per stage, including nested lookups, so a page of documents costs
one query per lookup rather than one per document. paginate() counts and slices in
SQL and only assembles documents for the requested page.

    views = (
        Pipeline(Video)
        .match(isPublished=True)
        .sort(createdAt=-1)
        .lookup(User, "owner", "id", "owner", Pipeline(User).project("username", "avatar.url"))
        .add_fields(owner=first("owner"))
        .paginate(db, page=1, limit=10)
    )
"""
import math
from datetime import datetime
from typing import Any, Callable

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

_MISSING = object()

# Grouping key carried through a lookup's sub-pipeline; project/unwind preserve it.
_KEY = "__lookup_key__"


# ---------- Document paths ----------


def _resolve(value: Any, parts: list[str]) -> Any:
    if not parts:
        return value
    if isinstance(value, list):
        out = []
        for item in value:
            v = _resolve(item, parts)
            if v is not _MISSING:
                out.append(v)
        return out
    if isinstance(value, dict) and parts[0] in value:
        return _resolve(value[parts[0]], parts[1:])
    return _MISSING


def get_path(doc: dict, path: str, default: Any = None) -> Any:
    """Dotted path lookup. Walking through an array maps over its elements ("likes.likedBy")."""
    value = _resolve(doc, path.split("."))
    return default if value is _MISSING else value


def _path_tree(paths: tuple[str, ...]) -> dict:
    tree: dict = {}
    for path in paths:
        node = tree
        parts = path.split(".")
        for i, part in enumerate(parts):
            if node.get(part) is True:
                break
            if i == len(parts) - 1:
                node[part] = True
            else:
                node = node.setdefault(part, {})
    return tree


def _pick(value: Any, tree: dict | bool) -> Any:
    if tree is True or value is None:
        return value
    if isinstance(value, list):
        return [_pick(v, tree) for v in value if isinstance(v, dict)]
    if not isinstance(value, dict):
        return _MISSING
    out = {}
    for key, sub in tree.items():
        if key in value:
            picked = _pick(value[key], sub)
            if picked is not _MISSING:
                out[key] = picked
    return out


# ---------- Expressions (derive stage) ----------


class Expr:
    def __init__(self, fn: Callable[[dict], Any], label: str):
        self._fn = fn
        self._label = label

    def __call__(self, doc: dict) -> Any:
        return self._fn(doc)

    def __repr__(self) -> str:
        return self._label


def _as_list(value: Any) -> list:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def field(path: str) -> Expr:
    return Expr(lambda doc: get_path(doc, path), f"field({path})")


def size(path: str) -> Expr:
    """Number of elements of an array field; 0 when absent."""
    return Expr(lambda doc: len(_as_list(get_path(doc, path))), f"size({path})")


def first(path: str) -> Expr:
    """First element of an array, None when the array is empty (a missing 1:1 join)."""
    def _first(doc):
        items = _as_list(get_path(doc, path))
        return items[0] if items else None
    return Expr(_first, f"first({path})")


def last(path: str) -> Expr:
    def _last(doc):
        items = _as_list(get_path(doc, path))
        return items[-1] if items else None
    return Expr(_last, f"last({path})")


def contains(path: str, value: Any) -> Expr:
    """True when value is one of the elements of the array at path (e.g. "likes.likedBy")."""
    return Expr(
        lambda doc: value is not None and value in _as_list(get_path(doc, path)),
        f"contains({path}, {value!r})",
    )


def total(path: str) -> Expr:
    def _total(doc):
        return sum(v for v in _as_list(get_path(doc, path)) if isinstance(v, (int, float)))
    return Expr(_total, f"total({path})")


def date_parts(path: str) -> Expr:
    def _parts(doc):
        value = get_path(doc, path)
        if not isinstance(value, datetime):
            return None
        return {
            "year": value.year,
            "month": value.month,
            "day": value.day,
            "hour": value.hour,
            "minute": value.minute,
            "second": value.second,
            "millisecond": value.microsecond // 1000,
        }
    return Expr(_parts, f"date_parts({path})")


# ---------- Stages ----------


class Search:
    """Full-text filter over text fields. PostgreSQL uses tsvector; other dialects match any term with LIKE."""

    def __init__(self, text: str, fields: tuple[str, ...]):
        self.text = text
        self.fields = fields

    def clause(self, model, dialect: str):
        columns = [model.column_for(f) for f in self.fields]
        if dialect == "postgresql":
            document = func.to_tsvector("english", func.concat_ws(" ", *columns))
            return document.op("@@")(func.plainto_tsquery("english", self.text))
        terms = [t for t in self.text.split() if t]
        return or_(*(
            column.ilike(f"%{_escape_like(term)}%", escape="\\")
            for term in terms
            for column in columns
        ))


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class Lookup:
    def __init__(self, from_, local_field: str, foreign_field: str, as_: str, pipeline: "Pipeline | None"):
        if pipeline is not None and pipeline.model is not from_:
            raise ValueError(f"lookup pipeline is built on {pipeline.model.__name__}, expected {from_.__name__}")
        self.from_ = from_
        self.local_field = local_field
        self.foreign_field = foreign_field
        self.as_ = as_
        self.pipeline = pipeline or Pipeline(from_)

    def apply(self, db: Session, docs: list[dict]) -> list[dict]:
        keys: set = set()
        for doc in docs:
            keys.update(v for v in _as_list(get_path(doc, self.local_field)) if v is not None)
        grouped: dict[Any, list[dict]] = {}
        if keys:
            column = self.from_.column_for(self.foreign_field)
            related = self.pipeline._execute(db, extra=[column.in_(sorted(keys))], key_field=self.foreign_field)
            for item in related:
                grouped.setdefault(item.pop(_KEY), []).append(item)
        out = []
        for doc in docs:
            matches = []
            for key in _as_list(get_path(doc, self.local_field)):
                matches.extend(grouped.get(key, []))
            out.append({**doc, self.as_: matches})
        return out


class AddFields:
    def __init__(self, exprs: dict[str, Callable[[dict], Any]]):
        self.exprs = exprs

    def apply(self, db: Session, docs: list[dict]) -> list[dict]:
        out = []
        for doc in docs:
            new = dict(doc)
            # expressions see the document as it was before this stage
            for name, expr in self.exprs.items():
                new[name] = expr(doc)
            out.append(new)
        return out


class Unwind:
    """One document per array element; documents with an empty array are dropped unless preserve_empty."""

    def __init__(self, path: str, preserve_empty: bool = False):
        self.path = path
        self.preserve_empty = preserve_empty

    def apply(self, db: Session, docs: list[dict]) -> list[dict]:
        out = []
        for doc in docs:
            items = _as_list(doc.get(self.path))
            if not items:
                if self.preserve_empty:
                    out.append({**doc, self.path: None})
                continue
            for item in items:
                out.append({**doc, self.path: item})
        return out


class Project:
    def __init__(self, paths: tuple[str, ...]):
        self.tree = _path_tree(paths)

    def apply(self, db: Session, docs: list[dict]) -> list[dict]:
        out = []
        for doc in docs:
            picked = _pick(doc, self.tree)
            if _KEY in doc:
                picked[_KEY] = doc[_KEY]
            out.append(picked)
        return out


# ---------- Pipeline ----------


class Pipeline:
    def __init__(self, model):
        self.model = model
        self._criteria: list = []
        self._search: Search | None = None
        self._order: list[tuple[str, int]] = []
        self._stages: list = []

    # SQL stages

    def match(self, *criteria, **fields) -> "Pipeline":
        """Filter on SQL criteria and/or document fields by equality (match(owner=user_id))."""
        self._criteria.extend(criteria)
        for name, value in fields.items():
            self._criteria.append(self.model.column_for(name) == value)
        return self

    def search(self, text: str | None, *fields: str) -> "Pipeline":
        if text and text.strip():
            self._search = Search(text.strip(), fields)
        return self

    def sort(self, **fields: int) -> "Pipeline":
        """sort(createdAt=-1): 1 ascending, -1 descending, in keyword order."""
        for name, direction in fields.items():
            self.model.column_for(name)
            self._order.append((name, direction))
        return self

    # document stages

    def lookup(self, from_, local_field: str, foreign_field: str, as_: str, pipeline: "Pipeline | None" = None) -> "Pipeline":
        self._stages.append(Lookup(from_, local_field, foreign_field, as_, pipeline))
        return self

    def add_fields(self, **exprs: Callable[[dict], Any]) -> "Pipeline":
        self._stages.append(AddFields(exprs))
        return self

    def unwind(self, path: str, preserve_empty: bool = False) -> "Pipeline":
        self._stages.append(Unwind(path, preserve_empty))
        return self

    def project(self, *paths: str) -> "Pipeline":
        self._stages.append(Project(paths))
        return self

    # execution

    def _statement(self, db: Session, extra: list | None = None):
        stmt = select(self.model)
        if self._search is not None:
            stmt = stmt.where(self._search.clause(self.model, db.get_bind().dialect.name))
        for criterion in self._criteria + (extra or []):
            stmt = stmt.where(criterion)
        return stmt

    def _ordered(self, stmt):
        for name, direction in self._order:
            column = self.model.column_for(name)
            stmt = stmt.order_by(column.desc() if direction < 0 else column.asc())
        if self.model.has_field("id"):
            # stable order between equal sort keys, so pages do not overlap
            stmt = stmt.order_by(self.model.column_for("id").asc())
        return stmt

    def _documents(self, db: Session, stmt, key_field: str | None = None) -> list[dict]:
        docs = []
        for row in db.scalars(stmt).all():
            doc = row.to_document()
            if key_field is not None:
                doc[_KEY] = getattr(row, self.model.FIELD_COLUMNS[key_field])
            docs.append(doc)
        for stage in self._stages:
            docs = stage.apply(db, docs)
        return docs

    def _execute(self, db: Session, extra: list | None = None, key_field: str | None = None) -> list[dict]:
        stmt = self._ordered(self._statement(db, extra))
        return self._documents(db, stmt, key_field)

    def run(self, db: Session) -> list[dict]:
        return self._execute(db)

    def first(self, db: Session) -> dict | None:
        stmt = self._ordered(self._statement(db)).limit(1)
        docs = self._documents(db, stmt)
        return docs[0] if docs else None

    def count(self, db: Session) -> int:
        stmt = select(func.count()).select_from(self._statement(db).subquery())
        return db.scalar(stmt) or 0

    def paginate(self, db: Session, page: int = 1, limit: int = 10) -> dict:
        page = max(int(page), 1)
        limit = max(int(limit), 1)
        total_docs = self.count(db)
        total_pages = max(math.ceil(total_docs / limit), 1)
        stmt = self._ordered(self._statement(db)).offset((page - 1) * limit).limit(limit)
        docs = self._documents(db, stmt) if total_docs else []
        has_prev = page > 1
        has_next = page < total_pages
        return {
            "docs": docs,
            "totalDocs": total_docs,
            "limit": limit,
            "page": page,
            "totalPages": total_pages,
            "pagingCounter": (page - 1) * limit + 1,
            "hasPrevPage": has_prev,
            "hasNextPage": has_next,
            "prevPage": page - 1 if has_prev else None,
            "nextPage": page + 1 if has_next else None,
        }
