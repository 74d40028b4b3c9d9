from typing import Any, Dict, List, Optional, Tuple

from geodynamo.clients.dynamodb_client import DynamoDBClient
from geodynamo.config.config import GeoConfig
from geodynamo.models.models import (
    DeletePointInput,
    GetPointInput,
    ItemDecoder,
    PutPointInput,
    QueryRadiusInput,
    QueryRadiusPaginatedInput,
    QueryRectangleInput,
    ResumeMap,
    UpdatePointInput,
    coerce_input,
)
from geodynamo.utils.dynamo_utils import deserialize_item
from geodynamo.utils.s2_utils import build_region_coverer
from geodynamo.workflows.paginated_radius_query_workflow import (
    PaginatedRadiusQueryWorkflow,
)
from geodynamo.workflows.query_dispatcher import QueryDispatcher
from geodynamo.workflows.radius_query_workflow import RadiusQueryWorkflow
from geodynamo.workflows.rectangle_query_workflow import RectangleQueryWorkflow


class GeoIndex:
    """Stores points with attributes in DynamoDB and queries them by region."""

    def __init__(self, config: GeoConfig):
        self.config = config
        self.dynamodb_client = DynamoDBClient(config)
        coverer = build_region_coverer(config)
        dispatcher = QueryDispatcher(self.dynamodb_client)
        self.radius_query_workflow = RadiusQueryWorkflow(dispatcher, coverer)
        self.rectangle_query_workflow = RectangleQueryWorkflow(dispatcher, coverer)
        self.paginated_radius_query_workflow = PaginatedRadiusQueryWorkflow(
            dispatcher, coverer
        )

    def create_table(self, read_capacity: int = 10, write_capacity: int = 5) -> Dict:
        return self.dynamodb_client.create_table(read_capacity, write_capacity)

    def put_point(self, input: Dict[str, Any] | PutPointInput) -> Dict:
        return self.dynamodb_client.put_point(coerce_input(PutPointInput, input))

    def batch_write_points(self, inputs: List[Dict[str, Any] | PutPointInput]) -> Dict:
        return self.dynamodb_client.batch_write_points(
            [coerce_input(PutPointInput, input) for input in inputs]
        )

    def get_point(
        self,
        input: Dict[str, Any] | GetPointInput,
        decoder: Optional[ItemDecoder] = None,
    ) -> Optional[Any]:
        item = self.dynamodb_client.get_point(coerce_input(GetPointInput, input))
        if item is None:
            return None
        return (decoder or deserialize_item)(item)

    def update_point(self, input: Dict[str, Any] | UpdatePointInput) -> Dict:
        return self.dynamodb_client.update_point(coerce_input(UpdatePointInput, input))

    def delete_point(self, input: Dict[str, Any] | DeletePointInput) -> Dict:
        return self.dynamodb_client.delete_point(coerce_input(DeletePointInput, input))

    def query_radius(self, input: Dict[str, Any] | QueryRadiusInput) -> List[Any]:
        return self.radius_query_workflow.run(input)

    def query_rectangle(self, input: Dict[str, Any] | QueryRectangleInput) -> List[Any]:
        return self.rectangle_query_workflow.run(input)

    def query_radius_paginated(
        self, input: Dict[str, Any] | QueryRadiusPaginatedInput
    ) -> Tuple[List[Any], ResumeMap]:
        return self.paginated_radius_query_workflow.run(input)
