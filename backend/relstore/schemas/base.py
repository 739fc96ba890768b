"""Entity Base — pydantic model implementing the FieldAccessor capability once for every entity.

Invariants:
    - Entities are frozen: a change always produces a new instance via with_fields()
    - Records are exchanged with camelCase keys; attributes stay snake_case
    - Unknown keys are kept (extra="allow") so stored records round-trip losslessly
    - from_record() raises core ValidationError, never pydantic's, listing each failing field
    - to_record() omits unset optional fields; a null that was given explicitly (e.g. read
      from storage) is written back as null, so load -> save keeps every key

Design Decisions:
    - One base class instead of per-entity accessors: query, aggregate and integrity
      code stay generic (ADR: capability protocol, not reflection at call sites)
    - with_fields() re-validates the merged record instead of model_copy(update=...),
      so every stored entity has passed its constraints
"""

from typing import ClassVar, Iterator

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from relstore.core.errors import ValidationError


def describe_errors(exc: PydanticValidationError) -> list[dict[str, str]]:
    """Flatten pydantic errors to one {"field", "message"} per top-level record key.

    Union members and nested positions report under their top-level key.
    """
    described: dict[str, str] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "record"
        described.setdefault(field, err["msg"])
    return [{"field": f, "message": m} for f, m in described.items()]


class Record(BaseModel):
    """camelCase-aliased, immutable pydantic model."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="allow",
    )


class Entity(Record):
    """A stored record with a unique string id."""
    __collection__: ClassVar[str] = ""

    id: str = Field(min_length=1)

    # --- Construction ---------------------------------------------------------

    @classmethod
    def from_record(cls, data: dict) -> "Entity":
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(cls.__collection__ or cls.__name__, describe_errors(e)) from e

    @classmethod
    def record_key(cls, name: str) -> str:
        """Map an attribute name to its record key; other names pass through."""
        info = cls.model_fields.get(name)
        if info is None:
            return name
        return info.alias or to_camel(name)

    @classmethod
    def _attribute(cls, name: str) -> str | None:
        if name in cls.model_fields:
            return name
        for attr, info in cls.model_fields.items():
            if (info.alias or to_camel(attr)) == name:
                return attr
        return None

    @classmethod
    def template_record(cls, exclude: list[str] | tuple[str, ...] = ()) -> dict:
        """One example record: declared examples, else a "[Field Name]" placeholder."""
        skipped = {"id", *(cls.record_key(name) for name in exclude)}
        template = {}
        for attr, info in cls.model_fields.items():
            key = cls.record_key(attr)
            if key in skipped:
                continue
            if info.examples:
                template[key] = info.examples[0]
            else:
                template[key] = f"[{attr.replace('_', ' ').title()}]"
        return template

    # --- FieldAccessor --------------------------------------------------------

    def has_field(self, name: str) -> bool:
        if self._attribute(name) is not None:
            return True
        return name in (self.model_extra or {})

    def field_value(self, name: str) -> object:
        attr = self._attribute(name)
        if attr is not None:
            return getattr(self, attr)
        return (self.model_extra or {}).get(name)

    def scalar_items(self) -> Iterator[tuple[str, object]]:
        """(record key, value) for every non-empty scalar field, extras included."""
        values = {self.record_key(attr): getattr(self, attr) for attr in type(self).model_fields}
        values.update(self.model_extra or {})
        for key, value in values.items():
            if value is None or isinstance(value, (list, tuple, dict, BaseModel)):
                continue
            yield key, value

    def with_fields(self, **values: object) -> "Entity":
        data = self.to_record()
        data.update({self.record_key(name): value for name, value in values.items()})
        return type(self).from_record(data)

    def to_record(self) -> dict:
        full = self.model_dump(mode="json", by_alias=True)
        trimmed = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        explicit = {self.record_key(name) for name in self.model_fields_set}
        explicit.update(self.model_extra or {})
        return {
            key: trimmed.get(key) for key in full
            if key in trimmed or key in explicit
        }
