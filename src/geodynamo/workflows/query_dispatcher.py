import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

import s2sphere

from geodynamo.clients.dynamodb_client import STORE_ERRORS, DynamoDBClient
from geodynamo.exceptions import QueryCancelledError
from geodynamo.models.models import (
    AttributeMap,
    PartitionCursor,
    ResumeMap,
    ScanPage,
    ScanTask,
)
from geodynamo.utils.hash_range_utils import get_geo_hash_ranges, group_by_hash_key

logger = logging.getLogger(__name__)

W = TypeVar("W")


class QueryDispatcher:
    """Fans a covering out into concurrent partition scans and merges their pages."""

    def __init__(self, dynamodb_client: DynamoDBClient):
        self.dynamodb_client = dynamodb_client
        self.config = dynamodb_client.config

    def _run_all(self, work: Sequence[W], fn: Callable[[W], None]) -> None:
        if not work:
            return
        max_workers = min(self.config.max_workers or len(work), len(work))
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(fn, w) for w in work]
        errors = [f.exception() for f in futures if f.exception() is not None]
        for error in errors:
            if isinstance(error, QueryCancelledError):
                raise error
        if errors:
            raise errors[0]

    def dispatch_queries(
        self,
        cell_ids: Iterable[s2sphere.CellId],
        query_input: Dict[str, Any],
        cancel_event: Optional[threading.Event] = None,
    ) -> List[AttributeMap]:
        tasks = get_geo_hash_ranges(cell_ids, self.config.hash_key_length)
        logger.debug("Dispatching %s geohash range queries", len(tasks))
        results: List[List[ScanPage]] = []
        lock = threading.Lock()

        def _scan(task: ScanTask) -> None:
            pages = self.dynamodb_client.query_geo_hash(
                query_input,
                task.hash_key,
                task.geo_hash_range,
                cancel_event=cancel_event,
            )
            with lock:
                results.append(pages)

        self._run_all(tasks, _scan)
        return [item for pages in results for page in pages for item in page.items]

    def _scan_partition(
        self,
        query_input: Dict[str, Any],
        hash_key: int,
        tasks: List[ScanTask],
        cursor: Optional[PartitionCursor],
        limit: int,
        cancel_event: Optional[threading.Event],
    ) -> Tuple[List[AttributeMap], Optional[PartitionCursor]]:
        """
        Scan the ranges of one partition in ascending order, at most ``limit`` pages.

        Returns the items read and where the next call should pick up, or
        ``None`` once every range of the partition has been drained. A
        partition that fails ``max_partition_failures`` times in a row at the
        same point is abandoned and also reported as ``None``.
        """
        start = 0
        start_key = None
        if cursor is not None:
            start = next(
                (
                    i
                    for i, task in enumerate(tasks)
                    if task.geo_hash_range.range_min >= cursor.range_min
                ),
                len(tasks),
            )
            if (
                start < len(tasks)
                and tasks[start].geo_hash_range.range_min == cursor.range_min
            ):
                start_key = cursor.exclusive_start_key

        items: List[AttributeMap] = []
        remaining = limit
        for index in range(start, len(tasks)):
            geo_hash_range = tasks[index].geo_hash_range
            exclusive_start_key = start_key if index == start else None
            if remaining == 0:
                return items, PartitionCursor(range_min=geo_hash_range.range_min)

            pages: List[ScanPage] = []
            try:
                self.dynamodb_client.query_pages(
                    query_input,
                    hash_key,
                    geo_hash_range,
                    pages,
                    limit=remaining,
                    exclusive_start_key=exclusive_start_key,
                    cancel_event=cancel_event,
                )
            except STORE_ERRORS as e:
                self.dynamodb_client.handle_scan_error(e, hash_key, geo_hash_range)
                items.extend(item for page in pages for item in page.items)
                resume_key = (
                    pages[-1].last_evaluated_key if pages else exclusive_start_key
                )
                failures = 1
                if cursor is not None and index == start and not pages:
                    failures += cursor.failures
                if failures >= self.config.max_partition_failures:
                    logger.error(
                        "Giving up on partition %s after %s consecutive failures",
                        hash_key,
                        failures,
                    )
                    return items, None
                return items, PartitionCursor(
                    geo_hash_range.range_min, resume_key, failures
                )

            items.extend(item for page in pages for item in page.items)
            remaining -= len(pages)
            if pages[-1].last_evaluated_key is not None:
                return items, PartitionCursor(
                    geo_hash_range.range_min, pages[-1].last_evaluated_key
                )
        return items, None

    def dispatch_queries_with_pagination(
        self,
        cell_ids: Iterable[s2sphere.CellId],
        query_input: Dict[str, Any],
        resume_map: ResumeMap,
        limit: int,
        cancel_event: Optional[threading.Event] = None,
    ) -> Tuple[List[AttributeMap], ResumeMap]:
        grouped = group_by_hash_key(
            get_geo_hash_ranges(cell_ids, self.config.hash_key_length)
        )
        items: List[AttributeMap] = []
        next_resume_map: ResumeMap = {}
        lock = threading.Lock()

        work: List[Tuple[int, List[ScanTask], Optional[PartitionCursor]]] = []
        for hash_key, tasks in grouped.items():
            if hash_key in resume_map and resume_map[hash_key] is None:
                # drained in an earlier call
                next_resume_map[hash_key] = None
                continue
            work.append((hash_key, tasks, resume_map.get(hash_key)))
        logger.debug(
            "Dispatching paginated queries over %s of %s partitions",
            len(work),
            len(grouped),
        )

        def _scan(entry: Tuple[int, List[ScanTask], Optional[PartitionCursor]]) -> None:
            hash_key, tasks, cursor = entry
            partition_items, next_cursor = self._scan_partition(
                query_input, hash_key, tasks, cursor, limit, cancel_event
            )
            with lock:
                items.extend(partition_items)
                next_resume_map[hash_key] = next_cursor

        self._run_all(work, _scan)
        return items, next_resume_map
