from abc import abstractmethod
from typing import Any, Dict, List, Optional, Type

import s2sphere
from pydantic import BaseModel

from geodynamo.models.models import (
    AttributeMap,
    GeoQueryInput,
    ItemDecoder,
    coerce_input,
)
from geodynamo.utils.dynamo_utils import deserialize_item
from geodynamo.utils.s2_utils import get_covering
from geodynamo.workflows.query_dispatcher import QueryDispatcher
from geodynamo.workflows.workflow import Workflow


class GeoQueryWorkflow(Workflow):
    """Shared steps of every region query: cover, dispatch, filter, decode."""

    input_model: Type[GeoQueryInput] = GeoQueryInput

    def __init__(self, dispatcher: QueryDispatcher, coverer: s2sphere.RegionCoverer):
        self.dispatcher = dispatcher
        self.config = dispatcher.config
        self.coverer = coverer

    def _coerce_input(self, payload: Dict[str, Any] | BaseModel) -> Any:
        return coerce_input(self.input_model, payload)

    @abstractmethod
    def _region(self, query: Any) -> s2sphere.LatLngRect:
        pass

    @abstractmethod
    def _filter(self, items: List[AttributeMap], query: Any) -> List[AttributeMap]:
        pass

    def _cover(self, query: Any) -> List[s2sphere.CellId]:
        return get_covering(self.coverer, self._region(query))

    def _decode(self, items: List[AttributeMap], decoder: Optional[ItemDecoder]) -> List[Any]:
        decode = decoder or deserialize_item
        return [decode(item) for item in items]

    def run(self, input: Dict[str, Any] | BaseModel) -> List[Any]:
        query = self._coerce_input(input)
        items = self.dispatcher.dispatch_queries(
            self._cover(query), query.query_input, query.cancel_event
        )
        return self._decode(self._filter(items, query), query.decoder)
