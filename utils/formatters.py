"""
Text rendering for the terminal session: entity cards, score bars, tables.
"""
import re

_EMOJI_PATTERN = re.compile(
    "["
    "\U0001F300-\U0001F5FF"  # symbols, pictographs (🔗)
    "\U0001F600-\U0001F64F"
    "\U0001F680-\U0001F6FF"
    "\U00002600-\U000027BF"  # misc symbols, dingbats (✓ ⚠)
    "\U0001F900-\U0001F9FF"
    "\uFE0F"
    "]+",
    flags=re.UNICODE,
)


def remove_emojis(text: str) -> str:
    """Strip pictographs for terminals that cannot render them."""
    return _EMOJI_PATTERN.sub('', text).strip()


def score_bar(score: int, width: int = 10) -> str:
    filled = max(0, min(width, round(score * width / 100)))
    return "█" * filled + "░" * (width - filled)


def format_score(result, title: str = "") -> str:
    lines = [f"{title + ' ' if title else ''}{result.score}/100 [{score_bar(result.score)}]"]
    for reason in result.reasons:
        lines.append(f"   {reason}")
    for warning in result.warnings:
        lines.append(f"   {warning}")
    return "\n".join(lines)


def format_entity_card(features, index: int = None, total: int = None) -> str:
    position = f"[{index + 1}/{total}] " if index is not None and total else ""
    lines = [f"{position}{features.name or features.id or 'Unnamed'}"]
    if features.role or features.company:
        lines.append(f"   {features.role or ''}{' @ ' + features.company if features.company else ''}".rstrip())
    meta = [v for v in (features.industry, features.region, features.signal) if v]
    if meta:
        lines.append(f"   {' | '.join(meta)}")
    if features.highlights:
        lines.append(f"   Highlights: {', '.join(features.highlights[:5])}")
    if features.affiliations:
        lines.append(f"   Previously: {', '.join(features.affiliations[:3])}")
    return "\n".join(lines)


def format_ranking(ranked, limit: int = 20) -> str:
    lines = []
    for i, (features, result) in enumerate(ranked[:limit], 1):
        lines.append(f"{i:>2}. {result.score:>3}/100 [{score_bar(result.score)}] {features.name or features.id}")
        if result.reasons:
            lines.append(f"    {', '.join(result.reasons[:2])}")
    return "\n".join(lines) if lines else "Nothing to rank."


def format_preferences(records: list, limit: int = 15) -> str:
    if not records:
        return "No preferences learned yet."
    lines = []
    for r in records[:limit]:
        sign = "+" if r["net"] > 0 else ""
        lines.append(f"{sign}{r['net']:.2f}  {r['category']}: {r['value']}")
        reasons = r["positive_reasons"] if r["net"] >= 0 else r["negative_reasons"]
        if reasons:
            lines.append(f"       \"{reasons[-1]}\"")
    return "\n".join(lines)


def format_stats(stats: dict) -> str:
    lines = [
        f"Likes: {stats['likes']}   Dislikes: {stats['dislikes']}   Saves: {stats['saves']}   Skips: {stats['skips']}",
        f"Pairs: {stats['pairs']}   Events: {stats['events']}   Preferences: {stats['preferences']}",
        f"Cumulative reward: {stats['cumulative_reward']:.1f}",
    ]
    if stats.get("top_preferred"):
        lines.append(f"Top preferred: {', '.join(stats['top_preferred'])}")
    if stats.get("top_avoided"):
        lines.append(f"Top avoided: {', '.join(stats['top_avoided'])}")
    return "\n".join(lines)
