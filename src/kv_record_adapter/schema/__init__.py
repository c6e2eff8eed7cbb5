from kv_record_adapter.schema.definition import AttributeDefinition, CollectionDefinition
from kv_record_adapter.schema.registry import DEFAULT_KEY_PREFIX, SchemaRegistry

__all__ = ["DEFAULT_KEY_PREFIX", "AttributeDefinition", "CollectionDefinition", "SchemaRegistry"]
