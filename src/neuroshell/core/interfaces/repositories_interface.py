from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from neuroshell.core.domain.chat_session import ChatSession

T = TypeVar("T")


class IRepository(Generic[T], ABC):
    @abstractmethod
    async def get_by_id(self, id: str) -> T | None:
        pass

    @abstractmethod
    async def get_all(self) -> list[T]:
        pass

    @abstractmethod
    async def add(self, entity: T) -> T:
        pass

    @abstractmethod
    async def update(self, entity: T) -> T:
        pass

    @abstractmethod
    async def delete(self, id: str) -> bool:
        pass


class ISessionRepository(IRepository["ChatSession"], ABC):
    @abstractmethod
    async def get_by_name(self, name: str) -> ChatSession | None:
        pass
