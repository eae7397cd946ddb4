"""
Entity records as delivered by the upstream data provider.

People, companies and talent signals arrive as loosely shaped dicts with
different optional fields. Each kind gets its own pydantic model that
accepts the known field aliases, so the feature extractor works on one
typed shape per kind instead of guarding every optional key.

parse_entity() never raises: anything it cannot validate degrades to a
bare record carrying whatever identifier and name could be read.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

EntityKind = Literal["person", "company", "signal"]


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(_as_str(v) for v in value if v is not None).strip()
    return str(value).strip()


def _as_str_list(value: Any) -> list[str]:
    """Accept a list, a ';'/','-separated string or None."""
    if value is None:
        return []
    if isinstance(value, str):
        sep = ";" if ";" in value else ","
        return [part.strip() for part in value.split(sep) if part.strip()]
    if isinstance(value, (list, tuple, set)):
        return [_as_str(v) for v in value if _as_str(v)]
    return []


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------

class Affiliation(BaseModel):
    company_name: str = Field(default="", validation_alias=AliasChoices("company_name", "company", "name"))
    title: str = ""
    industry: Optional[str] = None
    is_current: bool = False

    @field_validator("company_name", "title", mode="before")
    @classmethod
    def _clean_text(cls, v):
        return _as_str(v)

    @field_validator("industry", mode="before")
    @classmethod
    def _clean_industry(cls, v):
        return _as_str(v) or None

    @field_validator("is_current", mode="before")
    @classmethod
    def _clean_flag(cls, v):
        return bool(v)


class BaseEntity(BaseModel):
    id: str = Field(default="", validation_alias=AliasChoices("id", "person_id", "company_id", "signal_id", "entity_id"))
    name: str = ""
    highlights: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("highlights", "people_highlights", "company_highlights", "tags"),
    )
    region: str = Field(default="", validation_alias=AliasChoices("region", "city", "country", "location", "hq_location"))
    industry: str = ""

    @field_validator("id", "name", "region", mode="before")
    @classmethod
    def _clean_text(cls, v):
        return _as_str(v)

    @field_validator("industry", mode="before")
    @classmethod
    def _clean_industry(cls, v):
        # providers send either a single label or a list of labels
        items = _as_str_list(v) if not isinstance(v, str) else [v.strip()]
        return items[0] if items else ""

    @field_validator("highlights", mode="before")
    @classmethod
    def _clean_highlights(cls, v):
        return _as_str_list(v)


# ---------------------------------------------------------------------------
# Entity kinds
# ---------------------------------------------------------------------------

class PersonEntity(BaseEntity):
    kind: Literal["person"] = "person"
    name: str = Field(default="", validation_alias=AliasChoices("full_name", "name"))
    headline: str = ""
    about: str = ""
    seniority: str = Field(default="", validation_alias=AliasChoices("seniority", "level_of_seniority"))
    industry: str = Field(default="", validation_alias=AliasChoices("industry", "industries"))
    experience: list[Affiliation] = Field(default_factory=list, validation_alias=AliasChoices("experience", "affiliations"))

    @field_validator("headline", "about", "seniority", mode="before")
    @classmethod
    def _clean_person_text(cls, v):
        return _as_str(v)

    @field_validator("experience", mode="before")
    @classmethod
    def _clean_experience(cls, v):
        if not isinstance(v, (list, tuple)):
            return []
        return [item for item in v if isinstance(item, dict)]


class CompanyEntity(BaseEntity):
    kind: Literal["company"] = "company"
    name: str = Field(default="", validation_alias=AliasChoices("name", "organization_name", "company_name"))
    tagline: str = ""
    description: str = Field(default="", validation_alias=AliasChoices("description", "about"))
    industry: str = Field(default="", validation_alias=AliasChoices("industry", "industries", "primary_industry"))
    growth_stage: str = Field(default="", validation_alias=AliasChoices("growth_stage", "funding_stage"))
    investors: list[str] = Field(default_factory=list)

    @field_validator("tagline", "description", "growth_stage", mode="before")
    @classmethod
    def _clean_company_text(cls, v):
        return _as_str(v)

    @field_validator("investors", mode="before")
    @classmethod
    def _clean_investors(cls, v):
        return _as_str_list(v)


class TalentSignalEntity(BaseEntity):
    kind: Literal["signal"] = "signal"
    name: str = Field(default="", validation_alias=AliasChoices("full_name", "name"))
    headline: str = ""
    signal_type: str = ""
    seniority: str = Field(default="", validation_alias=AliasChoices("seniority", "level_of_seniority"))
    new_company: str = Field(default="", validation_alias=AliasChoices("new_position_company_name", "new_company"))
    past_company: str = Field(default="", validation_alias=AliasChoices("past_position_company_name", "past_company"))
    new_title: str = Field(default="", validation_alias=AliasChoices("new_position_title", "new_title"))

    @field_validator("headline", "signal_type", "seniority", "new_company", "past_company", "new_title", mode="before")
    @classmethod
    def _clean_signal_text(cls, v):
        return _as_str(v)


Entity = Union[PersonEntity, CompanyEntity, TalentSignalEntity]

_MODELS: dict[str, type[BaseEntity]] = {
    "person": PersonEntity,
    "company": CompanyEntity,
    "signal": TalentSignalEntity,
}

_KIND_ALIASES = {
    "people": "person",
    "talent": "signal",
    "talent_signal": "signal",
    "companies": "company",
    "organization": "company",
}


def detect_kind(raw: dict) -> EntityKind:
    """Infer the entity kind from explicit tags first, then from tell-tale fields."""
    for key in ("kind", "entity_type", "type"):
        tag = _as_str(raw.get(key)).lower()
        tag = _KIND_ALIASES.get(tag, tag)
        if tag in _MODELS:
            return tag
    if raw.get("signal_type"):
        return "signal"
    if any(k in raw for k in ("full_name", "first_name", "headline", "experience", "people_highlights")):
        return "person"
    if any(k in raw for k in ("organization_name", "tagline", "company_highlights", "growth_stage", "domain")):
        return "company"
    return "person"


def parse_entity(raw: Any, kind: Optional[str] = None) -> Entity:
    """Validate a raw provider record into its typed entity. Never raises."""
    if isinstance(raw, BaseEntity):
        return raw
    if not isinstance(raw, dict):
        logger.warning("Unsupported entity payload of type %s, using empty record", type(raw).__name__)
        return PersonEntity()

    resolved = _KIND_ALIASES.get(kind, kind) if kind else detect_kind(raw)
    model = _MODELS.get(resolved or "", PersonEntity)
    payload = {k: v for k, v in raw.items() if k not in ("kind", "entity_type", "type")}
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        logger.warning("Malformed %s entity %r: %s", resolved, raw.get("id"), e.error_count())
        return model.model_validate({
            "id": _as_str(raw.get("id") or raw.get("person_id") or raw.get("company_id")),
            "name": _as_str(raw.get("name") or raw.get("full_name")),
        })
