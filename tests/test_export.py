import json

from ai_learning.export import EXPORT_FORMAT, build_dpo_examples


class TestExportDocument:
    def test_shape(self, engine, person, other_person):
        engine.like(person, "strong")
        engine.dislike(other_person, "weak")
        engine.prefer(person, other_person, "better background")
        doc = engine.export()
        assert set(doc) == {"format", "timestamp", "stats", "pairs", "events", "preferences"}
        assert doc["format"] == EXPORT_FORMAT == "preference-pairs"
        assert doc["stats"] == {"likes": 1, "dislikes": 1, "pairs": 1, "cumulative_reward": 0.0}
        assert doc["pairs"][0]["chosen"]["id"] == "p-1"
        assert doc["pairs"][0]["rationale"] == "better background"
        assert [e["action"] for e in doc["events"]] == ["LIKE", "DISLIKE", "PAIR_PREFERENCE"]
        assert doc["preferences"]

    def test_export_to_file(self, engine, person, tmp_path):
        engine.like(person, "strong")
        target = engine.export_to(tmp_path / "out" / "export.json")
        data = json.loads(target.read_text(encoding="utf-8"))
        assert data["stats"]["likes"] == 1


class TestDpoExport:
    def test_examples_from_pairs_and_feedback(self, engine, person, other_person):
        engine.like(person, "strong")
        engine.skip(other_person)
        engine.prefer(person, other_person, "better background")
        examples = build_dpo_examples(engine.state)
        assert [e["source"] for e in examples] == ["PAIR_PREFERENCE", "LIKE"]
        pair = examples[0]
        assert pair["chosen"] == "A is the better fit. better background"
        assert "Jane Doe" in pair["prompt"]
        assert examples[1]["chosen"].startswith("This candidate is a good fit.")

    def test_jsonl_file(self, engine, person, other_person, tmp_path):
        engine.like(person, "strong")
        engine.dislike(other_person, "weak")
        path = tmp_path / "dpo.jsonl"
        assert engine.export_dpo(path) == 2
        lines = path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        second = json.loads(lines[1])
        assert second["chosen"] == "This candidate is not a good fit. weak"
        assert set(second) >= {"prompt", "chosen", "rejected"}
