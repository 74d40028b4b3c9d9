import logging
import threading
from typing import Any, Dict, List, Optional

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from geodynamo.config.config import GeoConfig, Settings
from geodynamo.exceptions import ConfigurationError, QueryCancelledError, ScanError
from geodynamo.models.models import (
    AttributeMap,
    DeletePointInput,
    GeoHashRange,
    GetPointInput,
    PutPointInput,
    ScanPage,
    UpdatePointInput,
)
from geodynamo.utils.constants import BATCH_WRITE_LIMIT, ScanErrorPolicy
from geodynamo.utils.dynamo_utils import (
    encode_geo_json,
    merge_request,
    number_attribute,
    serialize_item,
    serialize_value,
    string_attribute,
)
from geodynamo.utils.s2_utils import generate_hashes

logger = logging.getLogger(__name__)

STORE_ERRORS = (ClientError, BotoCoreError)


def create_boto3_client(settings: Settings):
    kwargs: Dict[str, Any] = {
        "region_name": settings.aws_region,
        "config": Config(retries={"max_attempts": 5, "mode": "standard"}),
    }
    if settings.dynamodb_endpoint_url:
        kwargs["endpoint_url"] = settings.dynamodb_endpoint_url
    return boto3.client("dynamodb", **kwargs)


class DynamoDBClient:
    def __init__(self, config: GeoConfig):
        self.config = config
        self.client = config.dynamodb_client

    def _key_condition_request(
        self, hash_key: int, geo_hash_range: GeoHashRange
    ) -> Dict[str, Any]:
        return {
            "TableName": self.config.table_name,
            "IndexName": self.config.geo_hash_index_name,
            "KeyConditionExpression": "#hashKey = :hashKey AND #geohash BETWEEN :geohashMin AND :geohashMax",
            "ExpressionAttributeNames": {
                "#hashKey": self.config.hash_key_attribute_name,
                "#geohash": self.config.geo_hash_attribute_name,
            },
            "ExpressionAttributeValues": {
                ":hashKey": number_attribute(hash_key),
                ":geohashMin": number_attribute(geo_hash_range.range_min),
                ":geohashMax": number_attribute(geo_hash_range.range_max),
            },
            "ConsistentRead": self.config.consistent_read,
            "ReturnConsumedCapacity": "TOTAL",
        }

    def query_pages(
        self,
        query_input: Dict[str, Any],
        hash_key: int,
        geo_hash_range: GeoHashRange,
        pages: List[ScanPage],
        limit: Optional[int] = None,
        exclusive_start_key: Optional[AttributeMap] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        """
        Query one partition between two geohashes, appending each page to ``pages``.

        Stops when the store reports no further page or after ``limit`` pages.
        Store errors propagate; pages read before the failure stay in ``pages``.
        """
        request = merge_request(
            query_input, self._key_condition_request(hash_key, geo_hash_range)
        )
        if exclusive_start_key is not None:
            request["ExclusiveStartKey"] = exclusive_start_key

        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise QueryCancelledError(
                    f"query of partition {hash_key} cancelled after {len(pages)} page(s)"
                )
            output = self.client.query(**request)
            page = ScanPage(
                items=output.get("Items", []),
                last_evaluated_key=output.get("LastEvaluatedKey"),
            )
            pages.append(page)
            if page.last_evaluated_key is None:
                return
            if limit is not None and len(pages) >= limit:
                return
            request["ExclusiveStartKey"] = page.last_evaluated_key

    def handle_scan_error(
        self, error: Exception, hash_key: int, geo_hash_range: GeoHashRange
    ) -> None:
        logger.error(
            "Query of partition %s [%s, %s] failed: %s",
            hash_key,
            geo_hash_range.range_min,
            geo_hash_range.range_max,
            error,
        )
        if self.config.scan_error_policy is ScanErrorPolicy.STRICT:
            raise ScanError(
                f"query of partition {hash_key} failed: {error}",
                hash_key=hash_key,
                range_min=geo_hash_range.range_min,
                range_max=geo_hash_range.range_max,
            ) from error

    def query_geo_hash(
        self,
        query_input: Dict[str, Any],
        hash_key: int,
        geo_hash_range: GeoHashRange,
        limit: Optional[int] = None,
        exclusive_start_key: Optional[AttributeMap] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[ScanPage]:
        pages: List[ScanPage] = []
        try:
            self.query_pages(
                query_input,
                hash_key,
                geo_hash_range,
                pages,
                limit=limit,
                exclusive_start_key=exclusive_start_key,
                cancel_event=cancel_event,
            )
        except STORE_ERRORS as e:
            self.handle_scan_error(e, hash_key, geo_hash_range)
        return pages

    def _primary_key(self, hash_key: int, range_key_value: str) -> AttributeMap:
        return {
            self.config.hash_key_attribute_name: number_attribute(hash_key),
            self.config.range_key_attribute_name: string_attribute(range_key_value),
        }

    def _build_item(self, input: PutPointInput) -> AttributeMap:
        geo_hash, hash_key = generate_hashes(
            input.geo_point, self.config.hash_key_length
        )
        item = serialize_item(input.item)
        item.update(self._primary_key(hash_key, input.range_key_value))
        item[self.config.geo_hash_attribute_name] = number_attribute(geo_hash)
        item[self.config.geo_json_attribute_name] = string_attribute(
            encode_geo_json(input.geo_point, self.config.longitude_first)
        )
        return item

    def put_point(self, input: PutPointInput) -> Dict[str, Any]:
        request = merge_request(
            input.put_item_input,
            {"TableName": self.config.table_name, "Item": self._build_item(input)},
        )
        return self.client.put_item(**request)

    def batch_write_points(self, inputs: List[PutPointInput]) -> Dict[str, Any]:
        if len(inputs) > BATCH_WRITE_LIMIT:
            raise ConfigurationError(
                f"batch_write_points accepts at most {BATCH_WRITE_LIMIT} points, got {len(inputs)}"
            )
        write_requests = [
            {"PutRequest": {"Item": self._build_item(input)}} for input in inputs
        ]
        output = self.client.batch_write_item(
            RequestItems={self.config.table_name: write_requests}
        )
        unprocessed = output.get("UnprocessedItems", {}).get(self.config.table_name)
        if unprocessed:
            logger.warning(
                "%s of %s points were not processed by the store",
                len(unprocessed),
                len(write_requests),
            )
        return output

    def get_point(self, input: GetPointInput) -> Optional[AttributeMap]:
        _, hash_key = generate_hashes(input.geo_point, self.config.hash_key_length)
        request = merge_request(
            input.get_item_input,
            {
                "TableName": self.config.table_name,
                "Key": self._primary_key(hash_key, input.range_key_value),
            },
        )
        output = self.client.get_item(**request)
        return output.get("Item")

    def update_point(self, input: UpdatePointInput) -> Dict[str, Any]:
        _, hash_key = generate_hashes(input.geo_point, self.config.hash_key_length)
        # location and keys are write-once
        immutable = {
            self.config.geo_hash_attribute_name,
            self.config.geo_json_attribute_name,
            self.config.hash_key_attribute_name,
            self.config.range_key_attribute_name,
        }
        attribute_updates: Dict[str, Any] = {}
        for name, value in input.updates.items():
            if name in immutable:
                logger.debug("Dropping update of immutable attribute %s", name)
                continue
            if value is None:
                attribute_updates[name] = {"Action": "DELETE"}
            else:
                attribute_updates[name] = {
                    "Action": "PUT",
                    "Value": serialize_value(name, value),
                }

        request = merge_request(
            input.update_item_input,
            {
                "TableName": self.config.table_name,
                "Key": self._primary_key(hash_key, input.range_key_value),
            },
        )
        caller_updates = {
            name: update
            for name, update in request.pop("AttributeUpdates", {}).items()
            if name not in immutable
        }
        caller_updates.update(attribute_updates)
        if caller_updates:
            request["AttributeUpdates"] = caller_updates
        return self.client.update_item(**request)

    def delete_point(self, input: DeletePointInput) -> Dict[str, Any]:
        _, hash_key = generate_hashes(input.geo_point, self.config.hash_key_length)
        request = merge_request(
            input.delete_item_input,
            {
                "TableName": self.config.table_name,
                "Key": self._primary_key(hash_key, input.range_key_value),
            },
        )
        return self.client.delete_item(**request)

    def create_table(
        self, read_capacity: int = 10, write_capacity: int = 5
    ) -> Dict[str, Any]:
        return self.client.create_table(
            **create_table_request(self.config, read_capacity, write_capacity)
        )


def create_table_request(
    config: GeoConfig, read_capacity: int = 10, write_capacity: int = 5
) -> Dict[str, Any]:
    hash_key_schema = {
        "AttributeName": config.hash_key_attribute_name,
        "KeyType": "HASH",
    }
    return {
        "TableName": config.table_name,
        "ProvisionedThroughput": {
            "ReadCapacityUnits": read_capacity,
            "WriteCapacityUnits": write_capacity,
        },
        "KeySchema": [
            hash_key_schema,
            {"AttributeName": config.range_key_attribute_name, "KeyType": "RANGE"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": config.hash_key_attribute_name, "AttributeType": "N"},
            {"AttributeName": config.range_key_attribute_name, "AttributeType": "S"},
            {"AttributeName": config.geo_hash_attribute_name, "AttributeType": "N"},
        ],
        "LocalSecondaryIndexes": [
            {
                "IndexName": config.geo_hash_index_name,
                "KeySchema": [
                    hash_key_schema,
                    {"AttributeName": config.geo_hash_attribute_name, "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            }
        ],
    }
