import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Type, TypedDict, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

AttributeMap = Dict[str, Dict[str, Any]]
ItemDecoder = Callable[[AttributeMap], Any]
M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class PartitionCursor:
    """Resume point inside one partition.

    ``failures`` counts consecutive failed attempts to read from this point.
    """

    range_min: int
    exclusive_start_key: Optional[AttributeMap] = None
    failures: int = 0


ResumeMap = Dict[int, Optional[PartitionCursor]]


class GeoPoint(BaseModel):
    model_config = ConfigDict(frozen=True)
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)


class GeoJSONAttribute(TypedDict):
    type: str
    coordinates: List[float]


class PointInput(BaseModel):
    range_key_value: str
    geo_point: GeoPoint

    @field_validator("range_key_value", mode="before")
    @classmethod
    def _stringify_range_key(cls, value: Any) -> Any:
        if isinstance(value, uuid.UUID):
            return str(value)
        return value


class PutPointInput(PointInput):
    item: Dict[str, Any] = Field(default_factory=dict)
    put_item_input: Dict[str, Any] = Field(default_factory=dict)


class GetPointInput(PointInput):
    get_item_input: Dict[str, Any] = Field(default_factory=dict)


class UpdatePointInput(PointInput):
    updates: Dict[str, Any] = Field(default_factory=dict)
    update_item_input: Dict[str, Any] = Field(default_factory=dict)


class DeletePointInput(PointInput):
    delete_item_input: Dict[str, Any] = Field(default_factory=dict)


class GeoQueryInput(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)
    query_input: Dict[str, Any] = Field(default_factory=dict)
    cancel_event: Optional[threading.Event] = None
    decoder: Optional[ItemDecoder] = None


class QueryRadiusInput(GeoQueryInput):
    center_point: GeoPoint
    radius_in_meter: float = Field(ge=0)


class QueryRectangleInput(GeoQueryInput):
    min_point: GeoPoint
    max_point: GeoPoint


class QueryRadiusPaginatedInput(QueryRadiusInput):
    resume_map: ResumeMap = Field(default_factory=dict)
    page_budget: int = Field(ge=0)


@dataclass(frozen=True)
class GeoHashRange:
    range_min: int
    range_max: int


@dataclass(frozen=True)
class ScanTask:
    hash_key: int
    geo_hash_range: GeoHashRange


@dataclass
class ScanPage:
    items: List[AttributeMap] = field(default_factory=list)
    last_evaluated_key: Optional[AttributeMap] = None


def coerce_input(model: Type[M], payload: Dict[str, Any] | BaseModel) -> M:
    """Build ``model`` from a dict or another pydantic model; pass instances through."""
    if isinstance(payload, model):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump()
    if not isinstance(payload, dict):
        raise ValueError("Input must be a dict")
    return model(**payload)
