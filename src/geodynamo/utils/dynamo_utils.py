import json
from decimal import Decimal
from typing import Any, Dict, Iterable, Iterator, List, TypeVar

import s2sphere
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer

from geodynamo.config.config import GeoConfig
from geodynamo.exceptions import InvalidItemError, MarshalingError
from geodynamo.models.models import AttributeMap, GeoJSONAttribute, GeoPoint
from geodynamo.utils.constants import BATCH_WRITE_LIMIT, GEO_JSON_POINT_TYPE

T = TypeVar("T")

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()

MERGEABLE_REQUEST_KEYS = ("ExpressionAttributeNames", "ExpressionAttributeValues")


def number_attribute(value: int) -> Dict[str, str]:
    return {"N": str(value)}


def string_attribute(value: str) -> Dict[str, str]:
    return {"S": value}


def _floats_to_decimal(value: Any) -> Any:
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: _floats_to_decimal(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_floats_to_decimal(v) for v in value]
    if isinstance(value, set):
        return {_floats_to_decimal(v) for v in value}
    return value


def serialize_value(name: str, value: Any) -> Dict[str, Any]:
    try:
        return _serializer.serialize(_floats_to_decimal(value))
    except (TypeError, ValueError) as e:
        raise MarshalingError(f"Cannot serialize attribute '{name}': {e}", field=name) from e


def serialize_item(item: Dict[str, Any]) -> AttributeMap:
    return {name: serialize_value(name, value) for name, value in item.items()}


def _decimals_to_native(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: _decimals_to_native(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_decimals_to_native(v) for v in value]
    if isinstance(value, set):
        return {_decimals_to_native(v) for v in value}
    return value


def deserialize_item(item: AttributeMap) -> Dict[str, Any]:
    """Decode an attribute map into plain Python values, numbers as int or float."""
    return {
        name: _decimals_to_native(_deserializer.deserialize(value))
        for name, value in item.items()
    }


def merge_request(user_input: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay library-owned request fields on top of caller supplied ones.

    Expression attribute names/values are unioned so callers can keep their own
    filter or projection placeholders next to the key condition ones.
    """
    merged = dict(user_input)
    for key, value in defaults.items():
        if key in MERGEABLE_REQUEST_KEYS:
            merged[key] = {**merged.get(key, {}), **value}
        else:
            merged[key] = value
    return merged


def new_geo_json_attribute(point: GeoPoint, longitude_first: bool) -> GeoJSONAttribute:
    if longitude_first:
        coordinates = [point.longitude, point.latitude]
    else:
        coordinates = [point.latitude, point.longitude]
    return GeoJSONAttribute(type=GEO_JSON_POINT_TYPE, coordinates=coordinates)


def encode_geo_json(point: GeoPoint, longitude_first: bool) -> str:
    return json.dumps(new_geo_json_attribute(point, longitude_first))


def lat_lng_from_item(item: AttributeMap, config: GeoConfig) -> s2sphere.LatLng:
    attribute_name = config.geo_json_attribute_name
    attribute = item.get(attribute_name)
    if not attribute:
        raise InvalidItemError(f"invalid item at {attribute_name}", field=attribute_name)

    if "S" in attribute:
        raw = attribute["S"]
    elif "B" in attribute:
        raw = attribute["B"]
    else:
        raise InvalidItemError(f"invalid item at {attribute_name}", field=attribute_name)

    try:
        coordinates = [float(c) for c in json.loads(raw)["coordinates"]]
    except (ValueError, TypeError, KeyError) as e:
        raise InvalidItemError(
            f"Cannot decode {attribute_name}: {e}", field=attribute_name
        ) from e
    if len(coordinates) != 2:
        raise InvalidItemError(
            f"{attribute_name} must hold exactly two coordinates", field=attribute_name
        )

    if config.longitude_first:
        lng, lat = coordinates
    else:
        lat, lng = coordinates
    return s2sphere.LatLng.from_degrees(lat, lng)


def chunked(items: Iterable[T], size: int = BATCH_WRITE_LIMIT) -> Iterator[List[T]]:
    batch: List[T] = []
    for item in items:
        batch.append(item)
        if len(batch) == size:
            yield batch
            batch = []
    if batch:
        yield batch
