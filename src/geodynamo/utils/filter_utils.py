from typing import List

import s2sphere

from geodynamo.config.config import GeoConfig
from geodynamo.models.models import AttributeMap
from geodynamo.utils.dynamo_utils import lat_lng_from_item
from geodynamo.utils.geo_utils import earth_distance, rect_contains


def filter_by_rect(
    items: List[AttributeMap], rect: s2sphere.LatLngRect, config: GeoConfig
) -> List[AttributeMap]:
    return [item for item in items if rect_contains(rect, lat_lng_from_item(item, config))]


def filter_by_radius(
    items: List[AttributeMap],
    center: s2sphere.LatLng,
    radius_in_meter: float,
    config: GeoConfig,
) -> List[AttributeMap]:
    return [
        item
        for item in items
        if earth_distance(center, lat_lng_from_item(item, config)) <= radius_in_meter
    ]
