from typing import Dict, Iterable, List

import s2sphere

from geodynamo.models.models import GeoHashRange, ScanTask
from geodynamo.utils.s2_utils import generate_hash_key


def _digits(value: int) -> int:
    return len(str(abs(value)))


def _split_on_digit_boundary(geo_hash_range: GeoHashRange) -> List[GeoHashRange]:
    # Truncation is relative to each value's own digit count, so both ends of
    # a range must have the same number of digits before it can be split.
    result: List[GeoHashRange] = []
    low = geo_hash_range.range_min
    while low >= 0 and _digits(low) < _digits(geo_hash_range.range_max):
        boundary = 10 ** _digits(low)
        result.append(GeoHashRange(low, boundary - 1))
        low = boundary
    result.append(GeoHashRange(low, geo_hash_range.range_max))
    return result


def try_split(geo_hash_range: GeoHashRange, hash_key_length: int) -> List[ScanTask]:
    """
    Cut a geohash range into one scan task per partition it touches.

    A cell's range can straddle several hash keys because partitions are
    decimal-digit prefixes of the identifier, not cell boundaries.
    """
    result: List[ScanTask] = []
    for part in _split_on_digit_boundary(geo_hash_range):
        min_hash_key = generate_hash_key(part.range_min, hash_key_length)
        max_hash_key = generate_hash_key(part.range_max, hash_key_length)
        denominator = 10 ** (_digits(part.range_min) - _digits(min_hash_key))

        if min_hash_key == max_hash_key:
            result.append(ScanTask(hash_key=min_hash_key, geo_hash_range=part))
            continue

        for m in range(min_hash_key, max_hash_key + 1):
            if m > 0:
                low = part.range_min if m == min_hash_key else m * denominator
                high = part.range_max if m == max_hash_key else (m + 1) * denominator - 1
            else:
                # signed identifiers only; s2 cell ids are never negative
                low = part.range_min if m == min_hash_key else (m - 1) * denominator + 1
                high = part.range_max if m == max_hash_key else m * denominator
            result.append(ScanTask(hash_key=m, geo_hash_range=GeoHashRange(low, high)))
    return result


def get_geo_hash_ranges(
    cell_ids: Iterable[s2sphere.CellId], hash_key_length: int
) -> List[ScanTask]:
    tasks: List[ScanTask] = []
    for cell_id in cell_ids:
        geo_hash_range = GeoHashRange(
            range_min=cell_id.range_min().id(), range_max=cell_id.range_max().id()
        )
        tasks.extend(try_split(geo_hash_range, hash_key_length))
    return tasks


def group_by_hash_key(tasks: Iterable[ScanTask]) -> Dict[int, List[ScanTask]]:
    """Scan tasks per partition, each list ordered by ascending range start."""
    grouped: Dict[int, List[ScanTask]] = {}
    for task in tasks:
        grouped.setdefault(task.hash_key, []).append(task)
    for hash_key in grouped:
        grouped[hash_key].sort(key=lambda t: t.geo_hash_range.range_min)
    return grouped
