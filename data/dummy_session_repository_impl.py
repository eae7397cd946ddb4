import copy
from typing import Optional

from domain.session_repository import SessionRepository


class DummySessionRepositoryImpl(SessionRepository):
    def __init__(self, document: Optional[dict] = None):
        super().__init__()
        self.document = copy.deepcopy(document)
        self.saves = 0

    def load(self) -> Optional[dict]:
        return copy.deepcopy(self.document)

    def save(self, document: dict):
        self.document = copy.deepcopy(document)
        self.saves += 1

    def clear(self):
        self.document = None
