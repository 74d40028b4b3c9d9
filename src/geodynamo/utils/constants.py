from enum import Enum

EARTH_RADIUS_METERS = 6367000.0
BATCH_WRITE_LIMIT = 25
MAX_PARTITION_FAILURES = 3
GEO_JSON_POINT_TYPE = "POINT"


class ScanErrorPolicy(Enum):
    BEST_EFFORT = "best_effort"
    STRICT = "strict"


class CovererParams(Enum):
    MIN_LEVEL = 10
    MAX_LEVEL = 10
    MAX_CELLS = 10
    LEVEL_MOD = 1


class AttributeDefaults(Enum):
    HASH_KEY = "hashKey"
    RANGE_KEY = "rangeKey"
    GEO_HASH = "geohash"
    GEO_JSON = "geoJson"
    GEO_HASH_INDEX = "geohash-index"


class EnvConstants(Enum):
    TABLE_NAME = "GEODYNAMO_TABLE_NAME"
    AWS_REGION = "AWS_REGION"
    DYNAMODB_ENDPOINT_URL = "DYNAMODB_ENDPOINT_URL"
    HASH_KEY_LENGTH = "GEODYNAMO_HASH_KEY_LENGTH"
    CONSISTENT_READ = "GEODYNAMO_CONSISTENT_READ"
    LONGITUDE_FIRST = "GEODYNAMO_LONGITUDE_FIRST"
    LOG_LEVEL = "LOG_LEVEL"
