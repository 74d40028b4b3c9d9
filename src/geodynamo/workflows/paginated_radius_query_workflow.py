from typing import Any, Dict, List, Tuple

from pydantic import BaseModel

from geodynamo.exceptions import InvalidLimitError
from geodynamo.models.models import QueryRadiusPaginatedInput, ResumeMap
from geodynamo.workflows.radius_query_workflow import RadiusQueryWorkflow


class PaginatedRadiusQueryWorkflow(RadiusQueryWorkflow):
    """
    Radius query that reads at most ``page_budget`` pages per partition per call.

    Feed the returned resume map into the next call; the query is complete
    once every value in it is ``None``. Items are filtered after paging, so a
    call can return fewer items than the pages it read.

    A partition whose scans keep failing is given up after
    ``max_partition_failures`` attempts and reported as drained.
    """

    input_model = QueryRadiusPaginatedInput

    def run(self, input: Dict[str, Any] | BaseModel) -> Tuple[List[Any], ResumeMap]:
        query = self._coerce_input(input)
        if query.page_budget == 0:
            raise InvalidLimitError("invalid limit provided")
        items, next_resume_map = self.dispatcher.dispatch_queries_with_pagination(
            self._cover(query),
            query.query_input,
            query.resume_map,
            query.page_budget,
            query.cancel_event,
        )
        return self._decode(self._filter(items, query), query.decoder), next_resume_map
