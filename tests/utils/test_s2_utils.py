import s2sphere

from geodynamo.config.config import GeoConfig
from geodynamo.models.models import GeoPoint
from geodynamo.utils.geo_utils import bounding_rect_for_radius
from geodynamo.utils.s2_utils import (
    build_region_coverer,
    generate_geo_hash,
    generate_hash_key,
    generate_hashes,
    get_covering,
)


def test_generate_hash_key_keeps_leading_digits():
    assert generate_hash_key(9876543210123456789, 2) == 98
    assert generate_hash_key(9876543210123456789, 5) == 98765
    assert generate_hash_key(123, 1) == 1


def test_generate_hash_key_short_geo_hash_is_unchanged():
    assert generate_hash_key(42, 2) == 42
    assert generate_hash_key(7, 4) == 7


def test_generate_geo_hash_is_leaf_cell():
    point = GeoPoint(latitude=40.7769, longitude=-73.9823)
    cell_id = s2sphere.CellId(generate_geo_hash(point))
    assert cell_id.is_leaf()
    assert cell_id == s2sphere.CellId.from_lat_lng(
        s2sphere.LatLng.from_degrees(40.7769, -73.9823)
    )


def test_hash_key_is_prefix_of_geo_hash():
    for k in (1, 2, 3, 4, 6):
        geo_hash, hash_key = generate_hashes(GeoPoint(latitude=1.0, longitude=2.0), k)
        assert str(geo_hash).startswith(str(hash_key))
        assert len(str(hash_key)) == k


def test_covering_is_level_10_and_contains_point_cell():
    coverer = build_region_coverer(GeoConfig(table_name="t", dynamodb_client=object()))
    center = GeoPoint(latitude=40.7769, longitude=-73.9823)
    cells = get_covering(coverer, bounding_rect_for_radius(center, 5000))
    assert cells
    assert all(cell.level() == 10 for cell in cells)
    geo_hash = generate_geo_hash(center)
    assert any(
        cell.range_min().id() <= geo_hash <= cell.range_max().id() for cell in cells
    )
