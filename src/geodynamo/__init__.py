from geodynamo.clients.dynamodb_client import create_table_request
from geodynamo.config.config import GeoConfig
from geodynamo.exceptions import (
    ConfigurationError,
    GeoDynamoError,
    InvalidItemError,
    InvalidLimitError,
    MarshalingError,
    QueryCancelledError,
    ScanError,
)
from geodynamo.geo_index import GeoIndex
from geodynamo.models.models import (
    DeletePointInput,
    GeoPoint,
    GetPointInput,
    PartitionCursor,
    PutPointInput,
    QueryRadiusInput,
    QueryRadiusPaginatedInput,
    QueryRectangleInput,
    UpdatePointInput,
)
from geodynamo.utils.constants import ScanErrorPolicy

__all__ = [
    "ConfigurationError",
    "DeletePointInput",
    "GeoConfig",
    "GeoDynamoError",
    "GeoIndex",
    "GeoPoint",
    "GetPointInput",
    "InvalidItemError",
    "InvalidLimitError",
    "MarshalingError",
    "PartitionCursor",
    "PutPointInput",
    "QueryCancelledError",
    "QueryRadiusInput",
    "QueryRadiusPaginatedInput",
    "QueryRectangleInput",
    "ScanError",
    "ScanErrorPolicy",
    "UpdatePointInput",
    "create_table_request",
]
