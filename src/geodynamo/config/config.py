import os
from dataclasses import dataclass, field
from typing import Any, Optional

from geodynamo.exceptions import ConfigurationError
from geodynamo.utils.constants import (
    MAX_PARTITION_FAILURES,
    AttributeDefaults,
    CovererParams,
    EnvConstants,
    ScanErrorPolicy,
)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    table_name: str
    aws_region: str
    dynamodb_endpoint_url: str
    hash_key_length: int
    consistent_read: bool
    longitude_first: bool
    log_level: str

    def __init__(self):
        object.__setattr__(
            self, "table_name", os.getenv(EnvConstants.TABLE_NAME.value, "").strip()
        )
        object.__setattr__(
            self,
            "aws_region",
            os.getenv(EnvConstants.AWS_REGION.value, "eu-central-1").strip(),
        )
        object.__setattr__(
            self,
            "dynamodb_endpoint_url",
            os.getenv(EnvConstants.DYNAMODB_ENDPOINT_URL.value, "").strip(),
        )
        object.__setattr__(
            self,
            "hash_key_length",
            int(os.getenv(EnvConstants.HASH_KEY_LENGTH.value, "2").strip()),
        )
        object.__setattr__(
            self,
            "consistent_read",
            _env_bool(EnvConstants.CONSISTENT_READ.value, "false"),
        )
        object.__setattr__(
            self,
            "longitude_first",
            _env_bool(EnvConstants.LONGITUDE_FIRST.value, "true"),
        )
        object.__setattr__(
            self, "log_level", os.getenv(EnvConstants.LOG_LEVEL.value, "INFO").strip()
        )


@dataclass(frozen=True)
class GeoConfig:
    """Immutable settings shared by every operation of a :class:`GeoIndex`.

    ``table_name`` and ``dynamodb_client`` are required; everything else has a
    default. ``hash_key_length`` must not change once points have been written,
    because stored hash keys are derived from it.
    """

    table_name: str
    dynamodb_client: Any
    hash_key_attribute_name: str = AttributeDefaults.HASH_KEY.value
    range_key_attribute_name: str = AttributeDefaults.RANGE_KEY.value
    geo_hash_attribute_name: str = AttributeDefaults.GEO_HASH.value
    geo_json_attribute_name: str = AttributeDefaults.GEO_JSON.value
    geo_hash_index_name: str = AttributeDefaults.GEO_HASH_INDEX.value
    hash_key_length: int = 2
    longitude_first: bool = True
    consistent_read: bool = False
    scan_error_policy: ScanErrorPolicy = ScanErrorPolicy.BEST_EFFORT
    max_workers: Optional[int] = None
    max_partition_failures: int = MAX_PARTITION_FAILURES
    min_level: int = field(default=CovererParams.MIN_LEVEL.value, init=False)
    max_level: int = field(default=CovererParams.MAX_LEVEL.value, init=False)
    max_cells: int = field(default=CovererParams.MAX_CELLS.value, init=False)
    level_mod: int = field(default=CovererParams.LEVEL_MOD.value, init=False)

    def __post_init__(self):
        if self.dynamodb_client is None:
            raise ConfigurationError("dynamodb_client is required")
        if not self.table_name:
            raise ConfigurationError("table_name is required")
        if self.hash_key_length < 1:
            raise ConfigurationError("hash_key_length must be a positive integer")
        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigurationError("max_workers must be a positive integer")
        if self.max_partition_failures < 1:
            raise ConfigurationError("max_partition_failures must be a positive integer")
        if not isinstance(self.scan_error_policy, ScanErrorPolicy):
            try:
                policy = ScanErrorPolicy(self.scan_error_policy)
            except ValueError as e:
                raise ConfigurationError(
                    f"unknown scan_error_policy {self.scan_error_policy!r}"
                ) from e
            object.__setattr__(self, "scan_error_policy", policy)

    @classmethod
    def from_settings(cls, settings: Settings, dynamodb_client: Any) -> "GeoConfig":
        return cls(
            table_name=settings.table_name,
            dynamodb_client=dynamodb_client,
            hash_key_length=settings.hash_key_length,
            longitude_first=settings.longitude_first,
            consistent_read=settings.consistent_read,
        )


SETTINGS = Settings()
