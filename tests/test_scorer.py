from scoring.embeddings import LikedEmbedding, embed
from scoring.features import FeatureTuple
from scoring.preferences import PreferenceStore
from scoring.scorer import rank, score


def _liked(entity_id, name, text):
    return {entity_id: LikedEmbedding(entity_id, name, embed(text))}


class TestScenarios:
    def test_empty_model_only_heuristics(self):
        result = score(FeatureTuple(role="Founder", industry="AI"), PreferenceStore())
        assert result.score == 55
        assert result.reasons == ("High seniority: Founder",)
        assert result.warnings == ()

    def test_reinforced_industry_beats_empty_model(self):
        baseline = score(FeatureTuple(role="Founder", industry="AI"), PreferenceStore()).score
        store = PreferenceStore()
        for _ in range(3):
            store.update(FeatureTuple(industry="AI"), True)
        result = score(FeatureTuple(industry="AI"), store)
        assert result.score > baseline
        assert result.score == 59
        assert any("industry: AI" in r for r in result.reasons)

    def test_similar_text_gets_similarity_bonus(self):
        liked = _liked("a", "Jane Doe", "Jane Doe AI founder stealth startup")
        store = PreferenceStore()
        near = score(FeatureTuple(id="b", name="Jane D", text="Jane Doe AI founder of a stealth startup"), store, liked)
        far = score(FeatureTuple(id="c", name="Kim", text="Quantum chemistry lab manager"), store, liked)
        assert near.reasons == ("🔗 Similar to liked Jane Doe (100%)",)
        assert near.score == 65
        assert near.score > far.score

    def test_flipped_preference_drops_stale_warning(self):
        store = PreferenceStore()
        crypto = FeatureTuple(industry="Crypto")
        store.update(crypto, False)
        disliked = score(crypto, store)
        assert disliked.score == 47
        assert disliked.warnings == ("⚠ industry: Crypto (-0.15)",)

        store.update(crypto, True)
        store.update(crypto, True)
        liked = score(crypto, store)
        assert liked.score == 53
        assert liked.warnings == ()
        assert liked.reasons == ("✓ industry: Crypto (+0.15)",)


class TestProperties:
    def test_idempotent(self):
        store = PreferenceStore()
        store.update(FeatureTuple(industry="AI", region="Europe"), True)
        ft = FeatureTuple(industry="AI", region="Europe", text="machine learning founder")
        liked = _liked("x", "X", "machine learning founder")
        assert score(ft, store, liked) == score(ft, store, liked)

    def test_monotonic_reinforcement(self):
        store = PreferenceStore()
        ft = FeatureTuple(industry="AI", region="Europe")
        previous = score(ft, store).score
        for _ in range(5):
            store.update(ft, True)
            current = score(ft, store).score
            assert current >= previous
            previous = current

    def test_bounds(self):
        store = PreferenceStore()
        bad = FeatureTuple(industry="Crypto")
        good = FeatureTuple(industry="AI", role="Founder", signal="Spinout")
        for _ in range(40):
            store.update(bad, False)
            store.update(good, True)
        assert score(bad, store).score == 0
        assert score(good, store).score == 100

    def test_net_at_threshold_is_ignored(self):
        store = PreferenceStore()
        ft = FeatureTuple(region="Europe")
        store.update(ft, True)
        store.update(ft, False)
        result = score(ft, store)
        assert result.score == 50
        assert result.reasons == ()

    def test_signal_bonus_normalizes(self):
        result = score(FeatureTuple(signal="new_company"), PreferenceStore())
        assert result.score == 60
        assert result.reasons == ("Founder signal: new_company",)

    def test_seniority_field_checked_before_role(self):
        result = score(FeatureTuple(role="Engineer", seniority="C-Level"), PreferenceStore())
        assert result.reasons == ("High seniority: C-Level",)

    def test_reasons_follow_store_order(self):
        store = PreferenceStore()
        store.update(FeatureTuple(region="Europe"), True)
        store.update(FeatureTuple(industry="AI"), True)
        result = score(FeatureTuple(industry="AI", region="Europe"), store)
        assert result.reasons == ("✓ region: Europe (+0.15)", "✓ industry: AI (+0.15)")


def test_rank_is_stable_on_ties():
    store = PreferenceStore()
    store.update(FeatureTuple(industry="AI"), True)
    a = FeatureTuple(id="a")
    b = FeatureTuple(id="b", industry="AI")
    c = FeatureTuple(id="c")
    ranked = rank([a, b, c], store)
    assert [f.id for f, _ in ranked] == ["b", "a", "c"]
