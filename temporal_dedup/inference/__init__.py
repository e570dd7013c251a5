"""Schema inference: logical attributes, key and record type from a header row."""

from temporal_dedup.inference.schema import (
    LogicalAttributeLayout,
    Schema,
    apply_schema,
    build_record,
    infer_key,
    infer_logical_attributes,
    infer_record_type_index,
    infer_schema,
)

__all__ = [
    "LogicalAttributeLayout",
    "Schema",
    "apply_schema",
    "build_record",
    "infer_key",
    "infer_logical_attributes",
    "infer_record_type_index",
    "infer_schema",
]
