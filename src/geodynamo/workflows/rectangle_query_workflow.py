from typing import List

import s2sphere

from geodynamo.models.models import AttributeMap, QueryRectangleInput
from geodynamo.utils.filter_utils import filter_by_rect
from geodynamo.utils.geo_utils import rect_from_points
from geodynamo.workflows.geo_query_workflow import GeoQueryWorkflow


class RectangleQueryWorkflow(GeoQueryWorkflow):
    input_model = QueryRectangleInput

    def _region(self, query: QueryRectangleInput) -> s2sphere.LatLngRect:
        return rect_from_points(query.min_point, query.max_point)

    def _filter(
        self, items: List[AttributeMap], query: QueryRectangleInput
    ) -> List[AttributeMap]:
        return filter_by_rect(items, self._region(query), self.config)
