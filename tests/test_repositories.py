import pytest

from ai_learning.engine import PreferenceEngine
from data.json_session_repository_impl import JsonSessionRepositoryImpl
from data.sqlite_session_repository_impl import SQLiteSessionRepositoryImpl
from domain.errors import PersistenceError


class TestJsonRepository:
    def test_missing_file_loads_nothing(self, tmp_path):
        assert JsonSessionRepositoryImpl(tmp_path / "state.json").load() is None

    def test_save_load_clear(self, tmp_path):
        repo = JsonSessionRepositoryImpl(tmp_path / "nested" / "state.json")
        repo.save({"version": 1, "cumulative_reward": 2.0})
        assert repo.load() == {"version": 1, "cumulative_reward": 2.0}
        assert [p.name for p in (tmp_path / "nested").iterdir()] == ["state.json"]
        repo.clear()
        assert repo.load() is None

    def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(PersistenceError):
            JsonSessionRepositoryImpl(path).load()

    def test_engine_round_trip(self, tmp_path, person):
        path = tmp_path / "state.json"
        PreferenceEngine(repository=JsonSessionRepositoryImpl(path)).like(person, "strong")
        restarted = PreferenceEngine(repository=JsonSessionRepositoryImpl(path))
        assert restarted.stats()["likes"] == 1
        assert restarted.score_by_id("p-1").score > 50

    def test_engine_reports_corrupt_state(self, tmp_path, person):
        path = tmp_path / "state.json"
        path.write_text("[]", encoding="utf-8")
        engine = PreferenceEngine(repository=JsonSessionRepositoryImpl(path))
        result = engine.like(person, "strong")
        assert result.warnings[0].startswith("State not loaded")


class TestSQLiteRepository:
    def test_save_load_clear(self, tmp_path):
        repo = SQLiteSessionRepositoryImpl(str(tmp_path / "state.db"))
        assert repo.load() is None
        repo.save({"a": 1})
        repo.save({"a": 2})
        assert repo.load() == {"a": 2}
        repo.clear()
        assert repo.load() is None
        repo.on_end()

    def test_sessions_are_isolated(self, tmp_path):
        db = str(tmp_path / "state.db")
        alice = SQLiteSessionRepositoryImpl(db, "alice")
        bob = SQLiteSessionRepositoryImpl(db, "bob")
        alice.save({"owner": "alice"})
        assert bob.load() is None
        assert alice.load() == {"owner": "alice"}
        alice.on_end()
        bob.on_end()

    def test_engine_round_trip(self, tmp_path, person):
        db = str(tmp_path / "state.db")
        first = PreferenceEngine(repository=SQLiteSessionRepositoryImpl(db))
        first.like(person, "strong")
        first.close()
        second = PreferenceEngine(repository=SQLiteSessionRepositoryImpl(db))
        assert second.lookup("role", "Founder")["positive_reasons"] == ["strong"]
        second.close()

    def test_unopenable_db_fails_on_use(self, tmp_path):
        repo = SQLiteSessionRepositoryImpl(str(tmp_path / "missing" / "dir" / "state.db"))
        with pytest.raises(PersistenceError):
            repo.load()
        repo.on_end()

    def test_from_config_survives_unopenable_db(self, tmp_path, monkeypatch, person):
        import config_env

        monkeypatch.setattr(config_env, "PREFS_STORE_BACKEND", "sqlite")
        monkeypatch.setattr(config_env, "PREFS_SQLITE_PATH", str(tmp_path / "missing" / "dir" / "s.db"))
        engine = PreferenceEngine.from_config()
        result = engine.like(person, "strong")
        assert result.cumulative_reward == 1.0
        assert [w.split(":")[0] for w in result.warnings] == ["State not loaded", "State not saved"]
        assert engine.lookup("role", "Founder")["positive_reasons"] == ["strong"]
        engine.close()
