"""
Shared pytest fixtures: an in-memory stand-in for the DynamoDB low-level client.
"""

import threading
from typing import Any, Dict, List, Optional, Set

import pytest
from botocore.exceptions import ClientError

from geodynamo.config.config import GeoConfig
from geodynamo.geo_index import GeoIndex


class FakeDynamoDBClient:
    """Implements the subset of the boto3 DynamoDB client the index uses.

    Queries honour the key condition placeholders the scanner emits, page size
    (``Limit`` or ``page_size``) and ``ExclusiveStartKey``.
    """

    def __init__(self, page_size: int = 100):
        self.page_size = page_size
        self.items: Dict[tuple, Dict[str, Any]] = {}
        self.query_calls: List[Dict[str, Any]] = []
        self.fail_hash_keys: Set[int] = set()
        self.created_tables: List[Dict[str, Any]] = []
        self.hash_key = "hashKey"
        self.range_key = "rangeKey"
        self.geo_hash = "geohash"
        self._lock = threading.Lock()

    def _key(self, item: Dict[str, Any]) -> tuple:
        return (int(item[self.hash_key]["N"]), item[self.range_key]["S"])

    def create_table(self, **kwargs):
        self.created_tables.append(kwargs)
        return {"TableDescription": {"TableName": kwargs["TableName"]}}

    def put_item(self, TableName: str, Item: Dict[str, Any], **kwargs):
        with self._lock:
            self.items[self._key(Item)] = dict(Item)
        return {}

    def batch_write_item(self, RequestItems: Dict[str, List[Dict[str, Any]]]):
        for table_name, requests in RequestItems.items():
            for request in requests:
                self.put_item(table_name, request["PutRequest"]["Item"])
        return {"UnprocessedItems": {}}

    def get_item(self, TableName: str, Key: Dict[str, Any], **kwargs):
        item = self.items.get(self._key(Key))
        return {"Item": dict(item)} if item else {}

    def update_item(self, TableName: str, Key: Dict[str, Any], AttributeUpdates=None, **kwargs):
        item = self.items[self._key(Key)]
        for name, update in (AttributeUpdates or {}).items():
            if update["Action"] == "DELETE":
                item.pop(name, None)
            else:
                item[name] = update["Value"]
        return {}

    def delete_item(self, TableName: str, Key: Dict[str, Any], **kwargs):
        self.items.pop(self._key(Key), None)
        return {}

    def query(self, **kwargs):
        with self._lock:
            self.query_calls.append(kwargs)
        values = kwargs["ExpressionAttributeValues"]
        hash_key = int(values[":hashKey"]["N"])
        if hash_key in self.fail_hash_keys:
            raise ClientError(
                {"Error": {"Code": "InternalServerError", "Message": "boom"}}, "Query"
            )
        low = int(values[":geohashMin"]["N"])
        high = int(values[":geohashMax"]["N"])

        def sort_key(item):
            return (int(item[self.geo_hash]["N"]), item[self.range_key]["S"])

        matches = sorted(
            (
                item
                for (hk, _), item in list(self.items.items())
                if hk == hash_key and low <= int(item[self.geo_hash]["N"]) <= high
            ),
            key=sort_key,
        )
        start_key: Optional[Dict[str, Any]] = kwargs.get("ExclusiveStartKey")
        if start_key is not None:
            matches = [m for m in matches if sort_key(m) > sort_key(start_key)]

        limit = kwargs.get("Limit", self.page_size)
        page = matches[:limit]
        output: Dict[str, Any] = {"Items": [dict(m) for m in page], "Count": len(page)}
        if len(page) == limit and page:
            last = page[-1]
            output["LastEvaluatedKey"] = {
                self.hash_key: last[self.hash_key],
                self.range_key: last[self.range_key],
                self.geo_hash: last[self.geo_hash],
            }
        return output

    def queried_hash_keys(self) -> Set[int]:
        return {int(c["ExpressionAttributeValues"][":hashKey"]["N"]) for c in self.query_calls}


@pytest.fixture
def fake_client():
    return FakeDynamoDBClient()


@pytest.fixture
def make_index(fake_client):
    """Factory for a GeoIndex bound to the fake client; kwargs go to GeoConfig."""

    def _make(**kwargs) -> GeoIndex:
        config = GeoConfig(table_name="points", dynamodb_client=fake_client, **kwargs)
        return GeoIndex(config)

    return _make
