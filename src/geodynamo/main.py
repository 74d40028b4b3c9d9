import argparse
import json
import logging
import sys
import time
import uuid
from typing import Any, Dict, List, Optional

from geodynamo.config.config import SETTINGS
from geodynamo.di.container import Container
from geodynamo.geo_index import GeoIndex
from geodynamo.models.models import GeoPoint, PutPointInput
from geodynamo.utils.dynamo_utils import chunked
from geodynamo.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def _load_points(path: str) -> List[PutPointInput]:
    with open(path, encoding="utf-8") as f:
        records = json.load(f)
    inputs = []
    for record in records:
        attrs = dict(record)
        lat = attrs.pop("lat")
        lng = attrs.pop("lng")
        range_key = attrs.pop("id", None) or uuid.uuid4()
        inputs.append(
            PutPointInput(
                range_key_value=range_key,
                geo_point=GeoPoint(latitude=lat, longitude=lng),
                item=attrs,
            )
        )
    return inputs


def create_table(index: GeoIndex, args: argparse.Namespace) -> None:
    index.create_table(args.read_capacity, args.write_capacity)
    logger.info("Table %s created", index.config.table_name)


def load(index: GeoIndex, args: argparse.Namespace) -> None:
    inputs = _load_points(args.file)
    for count, batch in enumerate(chunked(inputs)):
        index.batch_write_points(batch)
        logger.info("Batch %s written (%s points)", count, len(batch))


def _print_results(results: List[Dict[str, Any]], started: float) -> None:
    for record in results:
        print(json.dumps(record, default=str))
    logger.info("%s results in %.3fs", len(results), time.perf_counter() - started)


def query_radius(index: GeoIndex, args: argparse.Namespace) -> None:
    started = time.perf_counter()
    results = index.query_radius(
        {
            "center_point": {"latitude": args.lat, "longitude": args.lng},
            "radius_in_meter": args.radius,
        }
    )
    _print_results(results, started)


def query_rectangle(index: GeoIndex, args: argparse.Namespace) -> None:
    started = time.perf_counter()
    results = index.query_rectangle(
        {
            "min_point": {"latitude": args.min_lat, "longitude": args.min_lng},
            "max_point": {"latitude": args.max_lat, "longitude": args.max_lng},
        }
    )
    _print_results(results, started)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="geodynamo", description="Geospatial points in DynamoDB"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    p = subparsers.add_parser("create-table", help="Create the points table")
    p.add_argument("--read-capacity", type=int, default=10)
    p.add_argument("--write-capacity", type=int, default=5)
    p.set_defaults(handler=create_table)

    p = subparsers.add_parser("load", help="Write points from a JSON array file")
    p.add_argument("file", help="JSON array of objects with lat, lng and attributes")
    p.set_defaults(handler=load)

    p = subparsers.add_parser("query-radius", help="Points within a radius")
    p.add_argument("--lat", type=float, required=True)
    p.add_argument("--lng", type=float, required=True)
    p.add_argument("--radius", type=float, required=True, help="meters")
    p.set_defaults(handler=query_radius)

    p = subparsers.add_parser("query-rectangle", help="Points within a lat/lng box")
    p.add_argument("--min-lat", type=float, required=True)
    p.add_argument("--min-lng", type=float, required=True)
    p.add_argument("--max-lat", type=float, required=True)
    p.add_argument("--max-lng", type=float, required=True)
    p.set_defaults(handler=query_rectangle)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging(SETTINGS.log_level)
    args = build_parser().parse_args(argv)
    container = Container()
    args.handler(container.geo_index(), args)
    return 0


if __name__ == "__main__":
    sys.exit(main())
