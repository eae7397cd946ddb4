import numpy as np

from scoring.constants import EMBEDDING_DIM
from scoring.embeddings import LikedEmbedding, embed, similarity, token_slot, tokenize


class TestTokenize:
    def test_drops_short_tokens_and_punctuation(self):
        assert tokenize("Hi, AI-driven ML co!") == ["driven"]

    def test_lowercases(self):
        assert tokenize("Stealth STARTUP") == ["stealth", "startup"]

    def test_empty(self):
        assert tokenize("") == []
        assert tokenize(None) == []


class TestEmbed:
    def test_shape_and_norm(self):
        v = embed("Jane Doe founder stealth startup")
        assert v.shape == (EMBEDDING_DIM,)
        assert np.isclose(np.linalg.norm(v), 1.0)

    def test_deterministic(self):
        a = embed("machine learning platform for analysts")
        b = embed("machine learning platform for analysts")
        assert np.array_equal(a, b)
        assert token_slot("founder") == token_slot("founder")
        assert 0 <= token_slot("founder") < EMBEDDING_DIM

    def test_zero_vector_for_empty_text(self):
        v = embed("a b c")
        assert not v.any()

    def test_self_similarity(self):
        v = embed("serial founder in fintech")
        assert abs(similarity(v, v) - 1.0) < 1e-9

    def test_similarity_against_zero_is_zero(self):
        v = embed("serial founder in fintech")
        assert similarity(v, np.zeros(EMBEDDING_DIM)) == 0.0
        assert similarity(np.zeros(EMBEDDING_DIM), np.zeros(EMBEDDING_DIM)) == 0.0

    def test_similarity_bounds(self):
        a = embed("payments infrastructure")
        b = embed("quantum chemistry laboratory")
        assert -1.0 <= similarity(a, b) <= 1.0


def test_liked_embedding_round_trip():
    item = LikedEmbedding("p-1", "Jane", embed("Jane Doe founder"), ["great team"])
    restored = LikedEmbedding.from_dict(item.to_dict())
    assert restored.entity_id == "p-1"
    assert restored.reasons == ["great team"]
    assert np.allclose(restored.vector, item.vector)
