"""Constantes canônicas de recursos e do registry."""

API_VERSION_V1 = "v1"

RESOURCE_TYPE_DATA_STRUCTURE = "data-structure"
RESOURCE_TYPE_DATA_PRODUCT = "data-product"
RESOURCE_TYPE_SOURCE_APPLICATION = "source-application"

SCHEMA_TYPES = ("event", "entity")
SCHEMA_FORMATS = ("jsonschema",)

IGLU_PREFIX = "iglu:"

BUILTIN_SCHEMAS = (
    "iglu:com.snowplowanalytics.snowplow/page_ping/jsonschema/1-0-0",
    "iglu:com.snowplowanalytics.snowplow/page_view/jsonschema/1-0-0",
)
