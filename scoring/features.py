"""
Feature extraction -- canonical feature tuple for every entity kind.

Turns a person, company or talent-signal record into the FeatureTuple that
the preference store, the scorer and the embedder all consume.

Rules:
    role       -- title of the current affiliation, else the part of the
                  headline before " at ", else the stated seniority
    industry   -- explicit industry, else inferred from headline/about text
                  with the ordered INDUSTRY_KEYWORDS table (first hit wins,
                  substring match; "ai" and "ml" only as whole words)
    highlights / affiliations
               -- de-duplicated, order-preserving tuples, never None

extract() is total: malformed input degrades to empty fields.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Any, Iterable, Optional, Union

from domain.entities import (
    BaseEntity,
    CompanyEntity,
    PersonEntity,
    TalentSignalEntity,
    parse_entity,
)
from scoring.constants import DEFAULT_INDUSTRY, HEADLINE_ROLE_SEPARATOR, INDUSTRY_KEYWORDS

# two-letter keywords must stand alone ("email" is not AI); the rest match as substrings
_WHOLE_WORD_MAX_LEN = 2

_KEYWORD_PATTERNS = tuple(
    (label, tuple(
        re.compile(rf"\b{re.escape(kw)}\b" if len(kw) <= _WHOLE_WORD_MAX_LEN else re.escape(kw))
        for kw in keywords
    ))
    for label, keywords in INDUSTRY_KEYWORDS
)


@dataclass(frozen=True)
class FeatureTuple:
    id: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None
    company: Optional[str] = None
    industry: Optional[str] = None
    region: Optional[str] = None
    highlights: tuple[str, ...] = ()
    affiliations: tuple[str, ...] = ()
    signal: Optional[str] = None
    text: str = ""
    seniority: Optional[str] = None
    entity_type: str = "person"

    def __post_init__(self):
        # callers may pass lists or sets; keep the frozen tuple form
        object.__setattr__(self, "highlights", _unique(self.highlights))
        object.__setattr__(self, "affiliations", _unique(self.affiliations))

    def to_dict(self) -> dict:
        data = asdict(self)
        data["highlights"] = list(self.highlights)
        data["affiliations"] = list(self.affiliations)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "FeatureTuple":
        known = {k: data.get(k) for k in cls.__dataclass_fields__ if k in data}
        known["highlights"] = tuple(known.get("highlights") or ())
        known["affiliations"] = tuple(known.get("affiliations") or ())
        known["text"] = known.get("text") or ""
        known["entity_type"] = known.get("entity_type") or "person"
        return cls(**known)


def _unique(items: Iterable[str] | None) -> tuple[str, ...]:
    seen = set()
    out = []
    for item in items or ():
        if not item:
            continue
        value = str(item).strip()
        key = value.lower()
        if value and key not in seen:
            seen.add(key)
            out.append(value)
    return tuple(out)


def _or_none(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


def infer_industry(text: str) -> str:
    """Keyword-based industry guess. Order of INDUSTRY_KEYWORDS is the policy."""
    lowered = (text or "").lower()
    for label, patterns in _KEYWORD_PATTERNS:
        if any(p.search(lowered) for p in patterns):
            return label
    return DEFAULT_INDUSTRY


def role_from_headline(headline: str) -> Optional[str]:
    if not headline:
        return None
    return _or_none(headline.split(HEADLINE_ROLE_SEPARATOR, 1)[0])


def _join_text(parts: Iterable[Optional[str]]) -> str:
    return " ".join(p.strip() for p in parts if p and p.strip())


# ---------------------------------------------------------------------------
# Per-kind adapters
# ---------------------------------------------------------------------------

def _from_person(person: PersonEntity) -> FeatureTuple:
    current = next((e for e in person.experience if e.is_current), None)

    role = None
    if current and current.title:
        role = current.title
    if not role:
        role = role_from_headline(person.headline) or _or_none(person.seniority)

    industry = person.industry or (current.industry if current else None)
    if not industry:
        industry = infer_industry(f"{person.headline} {person.about}")

    text = _join_text([
        person.name,
        person.headline,
        person.about,
        " ".join(person.highlights),
        " ".join(f"{e.title} {e.company_name}" for e in person.experience),
    ])

    return FeatureTuple(
        id=_or_none(person.id),
        name=_or_none(person.name),
        role=role,
        company=_or_none(current.company_name) if current else None,
        industry=industry,
        region=_or_none(person.region),
        highlights=tuple(person.highlights),
        affiliations=tuple(e.company_name for e in person.experience),
        signal=None,
        text=text,
        seniority=_or_none(person.seniority),
        entity_type="person",
    )


def _from_company(company: CompanyEntity) -> FeatureTuple:
    industry = company.industry or infer_industry(f"{company.tagline} {company.description}")
    text = _join_text([
        company.name,
        company.tagline,
        company.description,
        company.industry,
        company.growth_stage,
        " ".join(company.highlights),
    ])
    return FeatureTuple(
        id=_or_none(company.id),
        name=_or_none(company.name),
        role=None,
        company=_or_none(company.name),
        industry=industry,
        region=_or_none(company.region),
        highlights=tuple(company.highlights),
        # backers are the closest thing a company has to prior affiliations
        affiliations=tuple(company.investors),
        signal=None,
        text=text,
        seniority=None,
        entity_type="company",
    )


def _from_signal(signal: TalentSignalEntity) -> FeatureTuple:
    role = _or_none(signal.new_title) or role_from_headline(signal.headline) or _or_none(signal.seniority)
    industry = signal.industry or infer_industry(signal.headline)
    text = _join_text([
        signal.name,
        signal.signal_type,
        signal.headline,
        signal.new_company,
        signal.past_company,
        " ".join(signal.highlights),
    ])
    return FeatureTuple(
        id=_or_none(signal.id),
        name=_or_none(signal.name),
        role=role,
        company=_or_none(signal.new_company) or _or_none(signal.past_company),
        industry=industry,
        region=_or_none(signal.region),
        highlights=tuple(signal.highlights),
        affiliations=(signal.new_company, signal.past_company),
        signal=_or_none(signal.signal_type),
        text=text,
        seniority=_or_none(signal.seniority),
        entity_type="signal",
    )


def extract(entity: Union[dict, BaseEntity, FeatureTuple, Any], kind: Optional[str] = None) -> FeatureTuple:
    """Normalize any entity representation into a FeatureTuple."""
    if isinstance(entity, FeatureTuple):
        return entity
    parsed = parse_entity(entity, kind=kind)
    if isinstance(parsed, CompanyEntity):
        return _from_company(parsed)
    if isinstance(parsed, TalentSignalEntity):
        return _from_signal(parsed)
    return _from_person(parsed)
