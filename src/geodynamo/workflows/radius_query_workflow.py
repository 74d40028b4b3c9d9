from typing import List

import s2sphere

from geodynamo.models.models import AttributeMap, QueryRadiusInput
from geodynamo.utils.filter_utils import filter_by_radius
from geodynamo.utils.geo_utils import bounding_rect_for_radius, to_lat_lng
from geodynamo.workflows.geo_query_workflow import GeoQueryWorkflow


class RadiusQueryWorkflow(GeoQueryWorkflow):
    input_model = QueryRadiusInput

    def _region(self, query: QueryRadiusInput) -> s2sphere.LatLngRect:
        return bounding_rect_for_radius(query.center_point, query.radius_in_meter)

    def _filter(
        self, items: List[AttributeMap], query: QueryRadiusInput
    ) -> List[AttributeMap]:
        return filter_by_radius(
            items, to_lat_lng(query.center_point), query.radius_in_meter, self.config
        )
