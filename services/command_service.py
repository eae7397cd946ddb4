"""
Command service -- the textual command surface of a feedback session.

A CommandSession holds the loaded entity list, the cursor and the engine.
execute(line) parses and validates the whole command first; CommandError is
raised before anything is mutated. Each handler returns a CommandResult whose
message is ready to print.
"""

from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from ai_learning.engine import PreferenceEngine
from domain.errors import CommandError, EntitySourceError
from scoring.features import extract
from services.entity_source import load_entities
from utils.formatters import (
    format_entity_card,
    format_preferences,
    format_ranking,
    format_score,
    format_stats,
)

logger = logging.getLogger(__name__)

HELP_TEXT = """\
NAVIGATION:
  load <file>           Load entities from a .json / .jsonl / .csv file
  next | prev           Move through the loaded entities
  goto <n>              Jump to entity #n
  score                 Score the current entity

FEEDBACK:
  like <reason>         Like the current entity
  dislike <reason>      Dislike the current entity
  save [reason]         Save the current entity
  skip                  Skip the current entity
  note <text>           Annotate the current entity
  compare               Compare the previous (A) and current (B) entity
  prefer_a <reason>     Record A over B
  prefer_b <reason>     Record B over A

ANALYSIS:
  rank                  Rank all loaded entities
  similar               Liked entities closest to the current one
  stats                 Learning statistics
  prefs                 Learned preferences

MEMORY:
  export [path]         Write the training export (JSON, or DPO lines for .jsonl)
  clear                 Forget everything learned

  help | quit"""


@dataclass
class CommandResult:
    command: str
    message: str = ""
    data: Any = None
    warnings: tuple[str, ...] = ()
    exit: bool = False

    def render(self) -> str:
        lines = [self.message] if self.message else []
        lines.extend(f"⚠ {w}" for w in self.warnings)
        return "\n".join(lines)


@dataclass
class _CommandDef:
    handler: str
    needs_entity: bool = False
    needs_args: bool = False
    usage: str = ""
    aliases: tuple[str, ...] = field(default_factory=tuple)


_COMMANDS: dict[str, _CommandDef] = {
    "like": _CommandDef("_like", needs_entity=True, needs_args=True, usage="like <reason>"),
    "dislike": _CommandDef("_dislike", needs_entity=True, needs_args=True, usage="dislike <reason>"),
    "save": _CommandDef("_save", needs_entity=True, usage="save [reason]"),
    "skip": _CommandDef("_skip", needs_entity=True, usage="skip"),
    "note": _CommandDef("_note", needs_entity=True, needs_args=True, usage="note <text>"),
    "compare": _CommandDef("_compare", needs_entity=True, usage="compare"),
    "prefer_a": _CommandDef("_prefer_a", needs_entity=True, needs_args=True, usage="prefer_a <reason>"),
    "prefer_b": _CommandDef("_prefer_b", needs_entity=True, needs_args=True, usage="prefer_b <reason>"),
    "score": _CommandDef("_score", needs_entity=True, usage="score"),
    "similar": _CommandDef("_similar", needs_entity=True, usage="similar"),
    "rank": _CommandDef("_rank", usage="rank"),
    "stats": _CommandDef("_stats", usage="stats"),
    "prefs": _CommandDef("_prefs", usage="prefs"),
    "export": _CommandDef("_export", usage="export [path]"),
    "clear": _CommandDef("_clear", usage="clear"),
    "load": _CommandDef("_load", needs_args=True, usage="load <file>"),
    "next": _CommandDef("_next", usage="next"),
    "prev": _CommandDef("_prev", usage="prev"),
    "goto": _CommandDef("_goto", needs_args=True, usage="goto <n>"),
    "help": _CommandDef("_help", usage="help", aliases=("?",)),
    "quit": _CommandDef("_quit", usage="quit", aliases=("exit", "q")),
}

_ALIASES = {alias: name for name, command in _COMMANDS.items() for alias in command.aliases}

# commands that work on the previous entity as well as the current one
_PAIR_COMMANDS = frozenset({"compare", "prefer_a", "prefer_b"})


def _first_arg(args: str) -> str:
    try:
        parts = shlex.split(args)
    except ValueError as e:
        raise CommandError(f"Cannot parse arguments: {e}") from None
    return parts[0] if parts else ""


def parse_command(line: str) -> tuple[str, str]:
    """Split a command line into (command, argument string)."""
    text = (line or "").strip()
    if not text:
        raise CommandError("Empty command. Type 'help' for the list.")
    head, _, rest = text.partition(" ")
    name = head.lower()
    name = _ALIASES.get(name, name)
    if name not in _COMMANDS:
        raise CommandError(f"Unknown command '{head}'. Type 'help' for the list.")
    return name, rest.strip()


class CommandSession:
    def __init__(self, engine: PreferenceEngine, entities: Optional[list] = None,
                 export_dir: str = "exports", auto_advance: bool = True):
        self.engine = engine
        self.entities: list = list(entities or [])
        self.index = 0
        self.export_dir = Path(export_dir)
        self.auto_advance = auto_advance

    @property
    def current(self):
        if not self.entities:
            return None
        return self.entities[self.index]

    @property
    def previous(self):
        if self.index == 0 or not self.entities:
            return None
        return self.entities[self.index - 1]

    def execute(self, line: str) -> CommandResult:
        name, args = parse_command(line)
        command = _COMMANDS[name]
        if command.needs_args and not args:
            raise CommandError(f"Usage: {command.usage}")
        if command.needs_entity and self.current is None:
            raise CommandError("No entity selected. Use 'load <file>' first.")
        if name in _PAIR_COMMANDS and self.previous is None:
            raise CommandError("Need a previous entity to compare. Move past the first one.")
        handler: Callable[[str], CommandResult] = getattr(self, command.handler)
        result = handler(args)
        logger.debug("Executed %s (%d warning(s))", name, len(result.warnings))
        return result

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def card(self) -> str:
        if self.current is None:
            return "No entities loaded."
        return format_entity_card(extract(self.current), self.index, len(self.entities))

    def _load(self, args: str) -> CommandResult:
        path = _first_arg(args)
        try:
            records = load_entities(path)
        except EntitySourceError as e:
            raise CommandError(str(e)) from e
        if not records:
            raise CommandError(f"No entities found in {path}")
        self.entities = records
        self.index = 0
        return CommandResult("load", f"Loaded {len(records)} entities.\n\n{self.card()}", data=len(records))

    def _move(self, name: str, index: int) -> CommandResult:
        if not self.entities:
            raise CommandError("No entities loaded.")
        if not 0 <= index < len(self.entities):
            raise CommandError(f"No entity #{index + 1} (have {len(self.entities)}).")
        self.index = index
        return CommandResult(name, self.card(), data=self.index)

    def _next(self, args: str) -> CommandResult:
        return self._move("next", self.index + 1)

    def _prev(self, args: str) -> CommandResult:
        return self._move("prev", self.index - 1)

    def _goto(self, args: str) -> CommandResult:
        try:
            n = int(args.split()[0])
        except ValueError:
            raise CommandError("Usage: goto <n>") from None
        return self._move("goto", n - 1)

    def _advance(self) -> str:
        if self.auto_advance and self.index < len(self.entities) - 1:
            self.index += 1
            return f"\n\nNext:\n{self.card()}"
        return ""

    # ------------------------------------------------------------------
    # Feedback
    # ------------------------------------------------------------------

    def _feedback(self, name: str, label: str, result, reason: str = "") -> CommandResult:
        features = result.event.features
        lines = [f"{label}: {features.name or features.id}"]
        if reason:
            lines.append(f"   Reason: {reason}")
        lines.append(f"   Reward: {result.event.reward:+.1f} (Total: {result.cumulative_reward:.1f})")
        message = "\n".join(lines) + self._advance()
        return CommandResult(name, message, data=result, warnings=result.warnings)

    def _like(self, args: str) -> CommandResult:
        return self._feedback("like", "👍 Liked", self.engine.like(self.current, args), args)

    def _dislike(self, args: str) -> CommandResult:
        return self._feedback("dislike", "👎 Disliked", self.engine.dislike(self.current, args), args)

    def _save(self, args: str) -> CommandResult:
        return self._feedback("save", "⭐ Saved", self.engine.save(self.current, args or None), args)

    def _skip(self, args: str) -> CommandResult:
        return self._feedback("skip", "⏭ Skipped", self.engine.skip(self.current))

    def _note(self, args: str) -> CommandResult:
        result = self.engine.annotate(self.current, args)
        name = result.event.features.name or result.event.entity_id
        return CommandResult("note", f"📝 Noted on {name}: {args}", data=result, warnings=result.warnings)

    def _compare(self, args: str) -> CommandResult:
        a, b = extract(self.previous), extract(self.current)
        sa, sb = self.engine.score(a), self.engine.score(b)
        message = "\n".join([
            "COMPARE:",
            f"   A: {a.name or a.id} ({sa.score}/100)",
            f"   B: {b.name or b.id} ({sb.score}/100)",
            "",
            f"   prefer_a <reason>  - choose {a.name or a.id}",
            f"   prefer_b <reason>  - choose {b.name or b.id}",
        ])
        return CommandResult("compare", message, data=(sa, sb))

    def _prefer(self, name: str, chosen, rejected, reason: str) -> CommandResult:
        result = self.engine.prefer(chosen, rejected, reason)
        c, r = extract(chosen), extract(rejected)
        message = f"✅ Recorded: \"{c.name or c.id}\" > \"{r.name or r.id}\"\n   Reason: {reason}"
        return CommandResult(name, message, data=result, warnings=result.warnings)

    def _prefer_a(self, args: str) -> CommandResult:
        return self._prefer("prefer_a", self.previous, self.current, args)

    def _prefer_b(self, args: str) -> CommandResult:
        return self._prefer("prefer_b", self.current, self.previous, args)

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def _score(self, args: str) -> CommandResult:
        features = extract(self.current)
        result = self.engine.score(features)
        return CommandResult("score", format_score(result, features.name or features.id or ""), data=result)

    def _similar(self, args: str) -> CommandResult:
        features = extract(self.current)
        matches = self.engine.similar(features)
        if not matches:
            return CommandResult("similar", "No liked entities to compare with yet.", data=[])
        lines = [f"SIMILAR TO: {features.name or features.id}"]
        for m in matches:
            lines.append(f"   {round(m.similarity * 100):>3}%  {m.name}")
            if m.reasons:
                lines.append(f"         liked for: {m.reasons[-1]}")
        return CommandResult("similar", "\n".join(lines), data=matches)

    def _rank(self, args: str) -> CommandResult:
        if not self.entities:
            raise CommandError("No entities loaded.")
        ranked = self.engine.rank(self.entities)
        return CommandResult("rank", "RANKED BY PREFERENCE SCORE:\n" + format_ranking(ranked), data=ranked)

    def _stats(self, args: str) -> CommandResult:
        stats = self.engine.stats()
        return CommandResult("stats", format_stats(stats), data=stats)

    def _prefs(self, args: str) -> CommandResult:
        records = self.engine.preferences()
        return CommandResult("prefs", format_preferences(records), data=records)

    # ------------------------------------------------------------------
    # Memory
    # ------------------------------------------------------------------

    def _export(self, args: str) -> CommandResult:
        path = Path(_first_arg(args)) if args else self.export_dir / "training-export.json"
        try:
            if path.suffix.lower() == ".jsonl":
                count = self.engine.export_dpo(path)
                return CommandResult("export", f"📦 Wrote {count} DPO examples to {path}", data=path)
            self.engine.export_to(path)
        except OSError as e:
            raise CommandError(f"Cannot write {path}: {e}") from e
        return CommandResult("export", f"📦 Training export written to {path}", data=path)

    def _clear(self, args: str) -> CommandResult:
        warnings = self.engine.clear_history()
        return CommandResult("clear", "✅ All preferences cleared.", warnings=warnings)

    def _help(self, args: str) -> CommandResult:
        return CommandResult("help", HELP_TEXT)

    def _quit(self, args: str) -> CommandResult:
        return CommandResult("quit", "Bye.", exit=True)
