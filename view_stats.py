"""
Learning statistics of the stored session
Run: python view_stats.py
"""
import os

import config_env
from ai_learning.engine import PreferenceEngine
from utils.formatters import format_preferences, format_stats


def main():
    if config_env.PREFS_STORE_BACKEND == "json" and not os.path.exists(config_env.PREFS_STATE_PATH):
        print(f"⚠️ State file {config_env.PREFS_STATE_PATH} not found.")
        print("📝 It is created with the first feedback in rl_agent.py.")
        return

    engine = PreferenceEngine.from_config()
    try:
        stats = engine.stats()
        patterns = engine.interaction_patterns()

        print("=" * 60)
        print("📊 LEARNING STATISTICS")
        print("=" * 60)
        print(format_stats(stats))
        print()

        print("🧭 INTERACTION PATTERNS:")
        print(f"  • Preferred industries: {', '.join(patterns['preferred_industries']) or '-'}")
        print(f"  • Avoided industries: {', '.join(patterns['avoided_industries']) or '-'}")
        print(f"  • Preferred seniorities: {', '.join(patterns['preferred_seniorities']) or '-'}")
        print(f"  • Engagement score: {patterns['engagement_score']}/100")
        print()

        print("🔥 STRONGEST PREFERENCES:")
        print(format_preferences(engine.preferences(limit=10)))
        print()

        print("🕒 LAST 10 EVENTS:")
        for event in engine.events()[-10:]:
            note = f" -- {event.rationale}" if event.rationale else ""
            print(f"  {event.timestamp[:19]}  {event.action.value:<16} {event.entity_id or '-'}{note}")
        print("=" * 60)
    finally:
        engine.close()


if __name__ == "__main__":
    main()
