import s2sphere

from geodynamo.models.models import GeoHashRange, ScanTask
from geodynamo.utils.hash_range_utils import (
    get_geo_hash_ranges,
    group_by_hash_key,
    try_split,
)
from geodynamo.utils.s2_utils import generate_hash_key


def test_range_within_one_partition_is_unchanged():
    r = GeoHashRange(1234000, 1234999)
    assert try_split(r, 2) == [ScanTask(hash_key=12, geo_hash_range=r)]


def test_range_straddling_partitions_is_split():
    tasks = try_split(GeoHashRange(1250, 1420), 2)
    assert tasks == [
        ScanTask(12, GeoHashRange(1250, 1299)),
        ScanTask(13, GeoHashRange(1300, 1399)),
        ScanTask(14, GeoHashRange(1400, 1420)),
    ]


def test_split_ranges_are_contiguous_and_tagged():
    r = GeoHashRange(3_987_654_321_000_000_000, 4_012_345_678_000_000_000)
    tasks = try_split(r, 3)
    assert tasks[0].geo_hash_range.range_min == r.range_min
    assert tasks[-1].geo_hash_range.range_max == r.range_max
    for prev, nxt in zip(tasks, tasks[1:]):
        assert nxt.geo_hash_range.range_min == prev.geo_hash_range.range_max + 1
    for task in tasks:
        assert generate_hash_key(task.geo_hash_range.range_min, 3) == task.hash_key
        assert generate_hash_key(task.geo_hash_range.range_max, 3) == task.hash_key


def test_range_across_digit_count_boundary():
    tasks = try_split(GeoHashRange(95, 1050), 1)
    assert tasks[0] == ScanTask(9, GeoHashRange(95, 99))
    assert tasks[-1] == ScanTask(1, GeoHashRange(1000, 1050))
    middle = tasks[1:-1]
    assert [t.hash_key for t in middle] == list(range(1, 10))
    assert middle[0].geo_hash_range == GeoHashRange(100, 199)
    assert middle[-1].geo_hash_range == GeoHashRange(900, 999)


def test_cell_ranges_cover_cell_descendants():
    cell = s2sphere.CellId.from_lat_lng(s2sphere.LatLng.from_degrees(0.0, 0.0)).parent(10)
    tasks = get_geo_hash_ranges([cell], 4)
    assert tasks[0].geo_hash_range.range_min == cell.range_min().id()
    assert tasks[-1].geo_hash_range.range_max == cell.range_max().id()


def test_group_by_hash_key_sorts_ranges():
    tasks = [
        ScanTask(13, GeoHashRange(1350, 1360)),
        ScanTask(12, GeoHashRange(1200, 1210)),
        ScanTask(13, GeoHashRange(1300, 1310)),
    ]
    grouped = group_by_hash_key(tasks)
    assert set(grouped) == {12, 13}
    assert [t.geo_hash_range.range_min for t in grouped[13]] == [1300, 1350]
