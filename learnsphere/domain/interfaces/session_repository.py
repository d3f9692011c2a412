from abc import ABC, abstractmethod
from typing import List, Optional

from learnsphere.domain.sessions import LearningSession


class ISessionRepository(ABC):
    @abstractmethod
    async def save(self, session: LearningSession) -> None:
        pass
    @abstractmethod
    async def get(self, session_id: str) -> Optional[LearningSession]:
        pass
    @abstractmethod
    async def list(self) -> List[LearningSession]:
        pass
    @abstractmethod
    async def delete(self, session_id: str) -> bool:
        pass
    @abstractmethod
    async def clear(self) -> None:
        pass
