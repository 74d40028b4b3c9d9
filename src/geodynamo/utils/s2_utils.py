from typing import List, Tuple

import s2sphere

from geodynamo.config.config import GeoConfig
from geodynamo.models.models import GeoPoint
from geodynamo.utils.geo_utils import to_lat_lng


def generate_geo_hash(geo_point: GeoPoint) -> int:
    """Identifier of the leaf cell containing the point."""
    return s2sphere.CellId.from_lat_lng(to_lat_lng(geo_point)).id()


def generate_hash_key(geo_hash: int, hash_key_length: int) -> int:
    """Keep the ``hash_key_length`` most significant decimal digits of ``geo_hash``."""
    digits = len(str(abs(geo_hash)))
    if digits <= hash_key_length:
        return geo_hash
    denominator = 10 ** (digits - hash_key_length)
    if geo_hash < 0:
        return -(-geo_hash // denominator)
    return geo_hash // denominator


def generate_hashes(geo_point: GeoPoint, hash_key_length: int) -> Tuple[int, int]:
    geo_hash = generate_geo_hash(geo_point)
    return geo_hash, generate_hash_key(geo_hash, hash_key_length)


def build_region_coverer(config: GeoConfig) -> s2sphere.RegionCoverer:
    coverer = s2sphere.RegionCoverer()
    coverer.min_level = config.min_level
    coverer.max_level = config.max_level
    coverer.max_cells = config.max_cells
    coverer.level_mod = config.level_mod
    return coverer


def get_covering(
    coverer: s2sphere.RegionCoverer, rect: s2sphere.LatLngRect
) -> List[s2sphere.CellId]:
    return list(coverer.get_covering(rect))
