"""
Interactive feedback session in the terminal.
Run: python rl_agent.py [entities.json] [--plain]
"""

import argparse
import logging

import config_env
from ai_learning.engine import PreferenceEngine
from domain.errors import CommandError
from services.command_service import CommandSession
from utils.formatters import remove_emojis

logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Train your preference model by giving feedback on entities")
    parser.add_argument("entities", nargs="?", help="JSON / JSON-lines / CSV file with entities")
    parser.add_argument("--plain", action="store_true", help="Strip emoji from output")
    parser.add_argument("--no-advance", action="store_true", help="Stay on the entity after feedback")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, config_env.LOG_LEVEL, logging.INFO), format="%(levelname)s: %(message)s")

    engine = PreferenceEngine.from_config()
    session = CommandSession(engine, export_dir=config_env.PREFS_EXPORT_DIR,
                             auto_advance=not args.no_advance)

    def show(text: str):
        if text:
            print(remove_emojis(text) if args.plain else text)

    print("=" * 60)
    print("PREFERENCE LEARNING SESSION  (type 'help' for commands)")
    print("=" * 60)

    if args.entities:
        try:
            show(session.execute(f'load "{args.entities}"').render())
        except CommandError as e:
            show(f"⚠ {e}")

    try:
        while True:
            try:
                line = input("RL> ")
            except EOFError:
                break
            if not line.strip():
                continue
            try:
                result = session.execute(line)
            except CommandError as e:
                show(f"⚠ {e}")
                continue
            show(result.render())
            if result.exit:
                break
    except KeyboardInterrupt:
        print()
    finally:
        engine.close()


if __name__ == "__main__":
    main()
