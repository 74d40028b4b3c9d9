import json

import pytest

from geodynamo.config.config import GeoConfig
from geodynamo.exceptions import InvalidItemError, MarshalingError
from geodynamo.models.models import GeoPoint
from geodynamo.utils.dynamo_utils import (
    chunked,
    deserialize_item,
    encode_geo_json,
    lat_lng_from_item,
    merge_request,
    serialize_item,
)


@pytest.fixture
def config():
    return GeoConfig(table_name="points", dynamodb_client=object())


def test_encode_geo_json_longitude_first():
    doc = json.loads(encode_geo_json(GeoPoint(latitude=5.0, longitude=6.0), True))
    assert doc == {"type": "POINT", "coordinates": [6.0, 5.0]}


def test_encode_geo_json_latitude_first():
    doc = json.loads(encode_geo_json(GeoPoint(latitude=5.0, longitude=6.0), False))
    assert doc["coordinates"] == [5.0, 6.0]


def test_lat_lng_from_item_honours_coordinate_order(config):
    item = {"geoJson": {"S": '{"type":"POINT","coordinates":[6.0,5.0]}'}}
    lat_lng = lat_lng_from_item(item, config)
    assert lat_lng.lat().degrees == pytest.approx(5.0)
    assert lat_lng.lng().degrees == pytest.approx(6.0)


def test_lat_lng_from_binary_attribute(config):
    item = {"geoJson": {"B": b'{"type":"POINT","coordinates":[6.0,5.0]}'}}
    assert lat_lng_from_item(item, config).lat().degrees == pytest.approx(5.0)


def test_lat_lng_from_item_missing_attribute(config):
    with pytest.raises(InvalidItemError) as exc_info:
        lat_lng_from_item({"name": {"S": "x"}}, config)
    assert exc_info.value.field == "geoJson"


@pytest.mark.parametrize(
    "raw",
    ["not json", "{}", '{"coordinates":[1.0]}', '{"coordinates":["a","b"]}'],
)
def test_lat_lng_from_item_bad_document(config, raw):
    with pytest.raises(InvalidItemError):
        lat_lng_from_item({"geoJson": {"S": raw}}, config)


def test_serialize_item_converts_floats():
    item = serialize_item({"name": "cafe", "rating": 4.5, "tags": ["a", "b"]})
    assert item["name"] == {"S": "cafe"}
    assert item["rating"] == {"N": "4.5"}
    assert deserialize_item(item)["rating"] == 4.5


def test_deserialize_item_returns_native_numbers():
    item = serialize_item(
        {"score": 0.1, "count": 3, "nested": {"weights": [0.25, 2]}, "ids": {1, 2}}
    )
    record = deserialize_item(item)
    assert record["score"] == 0.1
    assert isinstance(record["score"], float)
    assert record["count"] == 3
    assert isinstance(record["count"], int)
    assert record["nested"] == {"weights": [0.25, 2]}
    assert isinstance(record["nested"]["weights"][1], int)
    assert record["ids"] == {1, 2}


def test_serialize_item_reports_offending_field():
    with pytest.raises(MarshalingError) as exc_info:
        serialize_item({"ok": 1, "bad": object()})
    assert exc_info.value.field == "bad"


def test_merge_request_library_fields_win_and_expressions_union():
    user = {
        "TableName": "other",
        "Limit": 5,
        "FilterExpression": "#kind = :kind",
        "ExpressionAttributeNames": {"#kind": "kind"},
        "ExpressionAttributeValues": {":kind": {"S": "cafe"}},
    }
    defaults = {
        "TableName": "points",
        "ExpressionAttributeNames": {"#hashKey": "hashKey"},
        "ExpressionAttributeValues": {":hashKey": {"N": "12"}},
    }
    merged = merge_request(user, defaults)
    assert merged["TableName"] == "points"
    assert merged["Limit"] == 5
    assert merged["ExpressionAttributeNames"] == {"#kind": "kind", "#hashKey": "hashKey"}
    assert set(merged["ExpressionAttributeValues"]) == {":kind", ":hashKey"}
    assert user["TableName"] == "other"


def test_chunked_batches():
    assert list(chunked(range(7), 3)) == [[0, 1, 2], [3, 4, 5], [6]]
    assert len(list(chunked(range(50)))) == 2
