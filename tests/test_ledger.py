import pytest

from ai_learning.ledger import Action, InteractionEvent, InteractionLedger
from ai_learning.rewards import RewardTracker, reward_for


def _event(i, action=Action.LIKE):
    return InteractionEvent(action=action, entity_id=f"e{i}")


class TestInteractionLedger:
    def test_evicts_oldest_first(self):
        ledger = InteractionLedger(max_events=3)
        evicted = [ledger.append(_event(i)) for i in range(5)]
        assert evicted == [0, 0, 0, 1, 1]
        assert [e.entity_id for e in ledger.events()] == ["e2", "e3", "e4"]

    def test_view_is_reiterable_and_filtered(self):
        ledger = InteractionLedger()
        ledger.append(_event(1))
        ledger.append(_event(2, Action.DISLIKE))
        ledger.append(_event(3))
        likes = ledger.events(Action.LIKE)
        assert [e.entity_id for e in likes] == ["e1", "e3"]
        assert [e.entity_id for e in likes] == ["e1", "e3"]
        assert len(likes) == 2
        assert ledger.events("dislike", entity_id="e2").count() == 1

    def test_since_filter(self):
        ledger = InteractionLedger()
        ledger.append(InteractionEvent(action=Action.LIKE, entity_id="old", timestamp="2024-01-01T00:00:00+00:00"))
        ledger.append(InteractionEvent(action=Action.LIKE, entity_id="new", timestamp="2024-03-01T00:00:00+00:00"))
        recent = ledger.events(since="2024-02-01T00:00:00+00:00")
        assert [e.entity_id for e in recent] == ["new"]
        assert ledger.events(Action.LIKE, since="2024-03-01T00:00:00+00:00").count() == 1

    def test_view_sees_later_appends(self):
        ledger = InteractionLedger()
        view = ledger.events()
        ledger.append(_event(1))
        assert len(view) == 1

    def test_export_round_trip(self):
        ledger = InteractionLedger()
        ledger.append(InteractionEvent(action=Action.ANNOTATION, entity_id="x", rationale="note", positive=False))
        restored = InteractionLedger.from_export(ledger.export())
        event = restored.last()
        assert event.action == Action.ANNOTATION
        assert event.positive is False
        assert event.rationale == "note"

    def test_invalid_cap(self):
        with pytest.raises(ValueError):
            InteractionLedger(max_events=0)


class TestRewards:
    def test_reward_table(self):
        assert reward_for(Action.LIKE) == 1.0
        assert reward_for("dislike") == -1.0
        assert reward_for(Action.SAVE) == 2.0
        assert reward_for(Action.SKIP) == -0.2
        assert reward_for(Action.VOICE_INPUT) == 0.0
        assert reward_for(Action.VOICE_INPUT, 0.3) == 0.3

    def test_tracker(self):
        tracker = RewardTracker()
        tracker.add(1.0)
        tracker.add(-0.2)
        assert tracker.cumulative_reward() == pytest.approx(0.8)
        tracker.reset()
        assert tracker.cumulative_reward() == 0.0
