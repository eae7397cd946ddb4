"""
Lexical embedder -- fixed-size bag-of-words vectors for similarity search.

    tokenize(text)       -> list of tokens (lower-case, alphanumeric, len > 2)
    embed(text)          -> L2-normalized np.ndarray of EMBEDDING_DIM floats
    similarity(a, b)     -> cosine in [-1, 1], 0 against a zero vector

Slots come from a stable md5 digest of the token (hashing trick), so the
same text maps to the same vector in every process and persisted vectors
stay comparable after a restart.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

import numpy as np

from scoring.constants import EMBEDDING_DIM, MIN_TOKEN_LENGTH

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def tokenize(text: Optional[str]) -> list[str]:
    if not text:
        return []
    cleaned = _NON_ALNUM.sub(" ", text.lower())
    return [tok for tok in cleaned.split() if len(tok) >= MIN_TOKEN_LENGTH]


def token_slot(token: str, dim: int = EMBEDDING_DIM) -> int:
    digest = hashlib.md5(token.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big") % dim


def embed(text: Optional[str], dim: int = EMBEDDING_DIM) -> np.ndarray:
    vec = np.zeros(dim, dtype=np.float64)
    for tok in tokenize(text):
        vec[token_slot(tok, dim)] += 1.0
    norm = np.linalg.norm(vec)
    if norm == 0:
        return vec
    return vec / norm


def similarity(a: Sequence[float] | np.ndarray, b: Sequence[float] | np.ndarray) -> float:
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        return 0.0
    na = np.linalg.norm(va)
    nb = np.linalg.norm(vb)
    if na == 0 or nb == 0:
        return 0.0
    cos = float(np.dot(va, vb) / (na * nb))
    return max(-1.0, min(1.0, cos))


def to_list(vec: np.ndarray) -> list[float]:
    return [float(x) for x in vec]


def from_list(values: Iterable[float]) -> np.ndarray:
    return np.asarray(list(values), dtype=np.float64)


@dataclass
class LikedEmbedding:
    """Vector of one liked or saved entity, plus what the user said about it."""

    entity_id: str
    name: str
    vector: np.ndarray
    reasons: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "entity_id": self.entity_id,
            "name": self.name,
            "vector": to_list(self.vector),
            "reasons": list(self.reasons),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LikedEmbedding":
        return cls(
            entity_id=str(data.get("entity_id", "")),
            name=str(data.get("name") or ""),
            vector=from_list(data.get("vector") or []),
            reasons=list(data.get("reasons") or []),
        )
