"""Glossary document handling.

The glossary is a JSON object mapping site keys to configs, plus a
required ``default`` key.  For a given document URL the longest matching
key wins; its characters are merged over ``default.characters``.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .models import GENDERS, CharacterEntry, GlossaryView

log = logging.getLogger(__name__)

DEFAULT_CARRY_PARAGRAPHS = 2
MAX_CARRY_PARAGRAPHS = 5
DEFAULT_KEY = "default"


class GlossaryError(Exception):
    """The glossary cannot be used for this pass."""


class GlossaryUnavailable(GlossaryError):
    """Fetch or parse failed and no usable cached copy exists."""


class GlossaryEmpty(GlossaryError):
    """The resolved character map has no entries."""


class CharacterConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    gender: str = ""
    aliases: list[str] = []

    @field_validator("gender", mode="before")
    @classmethod
    def _normalise_gender(cls, v: Any) -> str:
        return str(v or "").strip().lower()

    @field_validator("aliases", mode="before")
    @classmethod
    def _coerce_aliases(cls, v: Any) -> list[str]:
        if not isinstance(v, list):
            return []
        return [str(a) for a in v if a]


class Upgrades(BaseModel):
    """Opt-in heuristics.  Values are read for truthiness."""

    model_config = ConfigDict(extra="ignore")

    onlyChangeIfWrong: Any = False
    dialogueSpeaker: Any = False
    passiveVoice: Any = False
    roleHeuristicCarry: Any = False


class SiteConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    characters: dict[str, CharacterConfig] = {}
    mode: Optional[str] = None
    primaryCharacter: Optional[str] = None
    forceGender: Optional[str] = None
    carryParagraphs: Any = None
    upgrades: Upgrades = Upgrades()

    @field_validator("upgrades", mode="before")
    @classmethod
    def _default_upgrades(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else {}


def parse_glossary(raw: Any) -> dict[str, SiteConfig]:
    """Validate a decoded glossary document.

    Raises ``GlossaryUnavailable`` if it is not an object, lacks the
    ``default`` key, or any config fails validation.
    """
    if not isinstance(raw, dict):
        raise GlossaryUnavailable("Glossary document is not a JSON object")
    if DEFAULT_KEY not in raw:
        raise GlossaryUnavailable("Glossary document has no 'default' key")
    try:
        return {key: SiteConfig.model_validate(cfg or {}) for key, cfg in raw.items()}
    except ValidationError as e:
        raise GlossaryUnavailable(f"Invalid glossary document: {e}") from e


def pick_key(glossary: dict[str, Any], url: str) -> str:
    """Longest non-default key contained in *url*, else ``"default"``."""
    matches = [k for k in glossary if k != DEFAULT_KEY and k in (url or "")]
    if not matches:
        return DEFAULT_KEY
    return max(matches, key=len)


def clamp_carry(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return DEFAULT_CARRY_PARAGRAPHS
    try:
        number = float(value)
    except (TypeError, ValueError):
        return DEFAULT_CARRY_PARAGRAPHS
    if not math.isfinite(number):
        return DEFAULT_CARRY_PARAGRAPHS
    return int(max(0, min(MAX_CARRY_PARAGRAPHS, number)))


def build_view(glossary: dict[str, SiteConfig], url: str = "") -> GlossaryView:
    """Resolve the glossary for one document URL.

    Raises ``GlossaryEmpty`` when the merged character map is empty.
    """
    key = pick_key(glossary, url)
    cfg = glossary.get(key) or SiteConfig()
    base = glossary.get(DEFAULT_KEY) or SiteConfig()

    merged = {**base.characters, **cfg.characters}
    characters = {
        name: CharacterEntry(name=name, gender=c.gender, aliases=tuple(c.aliases))
        for name, c in merged.items()
    }
    if not characters:
        raise GlossaryEmpty(f"No characters for key {key!r}")

    force = (cfg.forceGender or "").strip().lower()
    view = GlossaryView(
        characters=characters,
        site_key=key,
        primary_character=cfg.primaryCharacter or None,
        force_gender=force if force in GENDERS else None,
        carry_paragraphs=clamp_carry(cfg.carryParagraphs),
        only_change_if_wrong=bool(cfg.upgrades.onlyChangeIfWrong),
        dialogue_speaker=bool(cfg.upgrades.dialogueSpeaker),
        passive_voice=bool(cfg.upgrades.passiveVoice),
        role_heuristic_carry=bool(cfg.upgrades.roleHeuristicCarry),
        mode=(cfg.mode or "paragraph").lower(),
    )
    log.info("Glossary key=%r characters=%d primary=%r force=%r carry=%d",
             key, len(characters), view.primary_character,
             view.force_gender, view.carry_paragraphs)
    return view


class GlossaryLoader:
    """Fetches the glossary over HTTP with a TTL cache.

    A fresh cached copy is served without a request.  When a fetch fails
    (HTTP error, transport error, bad JSON or bad schema) the last good
    copy is served even if stale; with nothing cached the failure raises
    ``GlossaryUnavailable``.
    """

    def __init__(
        self,
        url: str,
        ttl_s: float = 600.0,
        client: httpx.AsyncClient | None = None,
        timeout_s: float = 30.0,
    ) -> None:
        self.url = url
        self.ttl_s = ttl_s
        self.timeout_s = timeout_s
        self.client = client
        self._cached: dict[str, SiteConfig] | None = None
        self._cached_at = 0.0

    def _is_fresh(self) -> bool:
        return (self._cached is not None
                and time.monotonic() - self._cached_at <= self.ttl_s)

    def clear(self) -> None:
        self._cached = None
        self._cached_at = 0.0

    async def load(self) -> dict[str, SiteConfig]:
        if not self.url or "?token=ghsat" in self.url.lower():
            raise GlossaryUnavailable("Glossary URL is missing or carries a temporary token")

        if self._is_fresh():
            return self._cached

        try:
            raw = await self._fetch()
            glossary = parse_glossary(raw)
        except (httpx.HTTPError, ValueError, GlossaryUnavailable) as e:
            log.error("Glossary fetch failed: %s", e)
            if self._cached is not None:
                log.warning("Serving stale cached glossary")
                return self._cached
            raise GlossaryUnavailable(f"Glossary fetch failed: {e}") from e

        self._cached = glossary
        self._cached_at = time.monotonic()
        log.info("Glossary loaded from %s (%d keys)", self.url, len(glossary))
        return glossary

    async def _fetch(self) -> Any:
        headers = {"Cache-Control": "no-cache"}
        if self.client is not None:
            resp = await self.client.get(self.url, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                resp = await client.get(self.url, headers=headers)
        resp.raise_for_status()
        return resp.json()
