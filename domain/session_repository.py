from abc import ABC, abstractmethod
from typing import Optional


class SessionRepository(ABC):
    """Storage boundary for one session's state document.

    Implementations raise PersistenceError on I/O failure; the engine decides
    what to do with it.
    """

    @abstractmethod
    def load(self) -> Optional[dict]:
        pass

    @abstractmethod
    def save(self, document: dict):
        pass

    @abstractmethod
    def clear(self):
        pass

    def on_end(self):
        pass
