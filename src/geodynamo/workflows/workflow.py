from abc import ABC, abstractmethod
from typing import Any, Dict

from pydantic import BaseModel


class Workflow(ABC):
    @abstractmethod
    def run(self, input: Dict[str, Any] | BaseModel) -> Any:
        pass
