import pytest

from scoring.constants import MAX_REASONS_PER_RECORD
from scoring.features import FeatureTuple, extract
from scoring.preferences import PreferenceStore, preference_pairs


class TestPreferencePairs:
    def test_covers_scalars_highlights_and_first_affiliations(self, person):
        pairs = preference_pairs(extract(person))
        assert ("role", "Founder") in pairs
        assert ("industry", "AI") in pairs
        assert ("company", "Stealth AI") in pairs
        assert ("highlight", "serial_founder") in pairs
        assert ("affiliation", "Meta") in pairs
        assert ("affiliation", "IBM") not in pairs

    def test_empty_tuple_has_no_pairs(self):
        assert preference_pairs(FeatureTuple()) == []


class TestPreferenceStore:
    def test_update_accumulates_per_polarity(self):
        store = PreferenceStore()
        ft = FeatureTuple(industry="AI")
        store.update(ft, True)
        store.update(ft, True)
        store.update(ft, False)
        record = store.lookup("industry", "AI")
        assert record.positive == pytest.approx(0.30)
        assert record.negative == pytest.approx(0.15)
        assert record.net == pytest.approx(0.15)

    def test_keys_are_case_insensitive_first_spelling_kept(self):
        store = PreferenceStore()
        store.update(FeatureTuple(industry="AI"), True)
        store.update(FeatureTuple(industry="ai"), True)
        assert len(store) == 1
        record = store.lookup("industry", "Ai")
        assert record.value == "AI"
        assert record.positive == pytest.approx(0.30)

    def test_reasons_are_bounded_and_unique(self):
        store = PreferenceStore()
        ft = FeatureTuple(region="Europe")
        for i in range(8):
            store.update(ft, True, f"reason {i}")
        store.update(ft, True, "reason 7")
        record = store.lookup("region", "Europe")
        assert len(record.positive_reasons) == MAX_REASONS_PER_RECORD
        assert record.positive_reasons[-1] == "reason 7"
        assert record.positive_reasons[0] == "reason 3"
        assert record.negative_reasons == []

    def test_lookup_unknown(self):
        store = PreferenceStore()
        assert store.lookup("industry", "AI") is None
        assert store.lookup("nonsense", "AI") is None

    def test_records_keep_insertion_order(self):
        store = PreferenceStore()
        store.update(FeatureTuple(industry="AI", region="Europe"), True)
        store.update(FeatureTuple(industry="Crypto"), False)
        assert [(r.category, r.value) for r in store.records()] == [
            ("industry", "AI"), ("region", "Europe"), ("industry", "Crypto"),
        ]

    def test_top_sorts_by_absolute_net(self):
        store = PreferenceStore()
        store.update(FeatureTuple(industry="AI"), True)
        for _ in range(3):
            store.update(FeatureTuple(industry="Crypto"), False)
        assert store.top(1)[0].value == "Crypto"

    def test_serialization_round_trip(self):
        store = PreferenceStore()
        store.update(FeatureTuple(industry="AI", highlights=("exited",)), True, "strong team")
        restored = PreferenceStore.from_dict(store.to_dict())
        record = restored.lookup("highlight", "EXITED")
        assert record.positive == pytest.approx(0.15)
        assert record.positive_reasons == ["strong team"]


class TestMatching:
    def test_highlight_matches_by_substring(self):
        store = PreferenceStore()
        store.update(FeatureTuple(highlights=("founder",)), True)
        record = store.lookup("highlight", "founder")
        assert record.matches(FeatureTuple(highlights=("serial_founder",)))
        assert not record.matches(FeatureTuple(highlights=("sales_leader",)))

    def test_scalar_matches_exactly(self):
        store = PreferenceStore()
        store.update(FeatureTuple(role="CTO"), True)
        record = store.lookup("role", "cto")
        assert record.matches(FeatureTuple(role="cto"))
        assert not record.matches(FeatureTuple(role="CTO and Co-Founder"))
