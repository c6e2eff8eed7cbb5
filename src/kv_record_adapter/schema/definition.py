from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.type_adapter import TypeAdapter

from kv_record_adapter.errors import SchemaDefinitionError

DEFAULT_PRIMARY_KEY: Final[str] = "id"

ATTRIBUTE_TYPES: Final[dict[str, Any]] = {
    "string": str,
    "text": str,
    "integer": int,
    "float": float,
    "number": float,
    "boolean": bool,
    "date": date,
    "datetime": datetime,
    "json": Any,
    "array": list[Any],
}

_LAX_CONFIG = ConfigDict(coerce_numbers_to_str=True)


class AttributeDefinition(BaseModel):
    """The definition of a single attribute of a collection.

    Accepts the ORM's camelCase flags (`primaryKey`, `autoIncrement`) and keeps any other flag as an extra field.
    A bare string is shorthand for `{"type": <string>}`.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str | None = None
    primary_key: bool = Field(default=False, alias="primaryKey")
    auto_increment: bool = Field(default=False, alias="autoIncrement")

    @model_validator(mode="before")
    @classmethod
    def _expand_shorthand(cls, data: Any) -> Any:  # pyright: ignore[reportAny]
        if isinstance(data, str):
            return {"type": data}
        return data  # pyright: ignore[reportAny]

    def type_adapter(self) -> TypeAdapter[Any] | None:
        """Return the adapter used to coerce stored values of this attribute, or None for untyped attributes."""
        if self.type is None or (python_type := ATTRIBUTE_TYPES.get(self.type.lower())) is None:
            return None

        if python_type is str:
            return TypeAdapter(str, config=_LAX_CONFIG)

        return TypeAdapter(python_type)


class CollectionDefinition(BaseModel):
    """A validated collection definition with its resolved primary key."""

    attributes: dict[str, AttributeDefinition]
    primary_key: str

    @classmethod
    def from_definition(cls, collection: str, definition: Mapping[str, Any]) -> "CollectionDefinition":
        try:
            attributes = TypeAdapter(dict[str, AttributeDefinition]).validate_python(dict(definition))
        except ValidationError as e:
            msg = f"Invalid definition for collection {collection!r}: {e}"
            raise SchemaDefinitionError(message=msg) from e

        primary_keys: list[str] = [name for name, attribute in attributes.items() if attribute.primary_key]

        if len(primary_keys) > 1:
            raise SchemaDefinitionError(
                message="A collection can only have one primary key attribute.",
                extra_info={"collection": collection, "primary_keys": ",".join(primary_keys)},
            )

        return cls(attributes=attributes, primary_key=primary_keys[0] if primary_keys else DEFAULT_PRIMARY_KEY)

    @property
    def auto_increment(self) -> bool:
        attribute: AttributeDefinition | None = self.attributes.get(self.primary_key)
        return attribute is not None and attribute.auto_increment
