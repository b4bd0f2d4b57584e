from abc import ABC, abstractmethod
from typing import List, Optional

from dawak.domain.models import Order

class IOrderStore(ABC):
    @abstractmethod
    def load(self) -> List[Order]:
        pass

    @abstractmethod
    def save(self, orders: List[Order]) -> bool:
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> bool:
        pass

    @abstractmethod
    def delete(self, key: str):
        pass
