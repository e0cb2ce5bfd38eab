"""Data models for the pronoun-fix engine."""

from dataclasses import dataclass, field
from typing import Optional


GENDERS = frozenset(["male", "female"])


def opposite_gender(gender: str) -> str:
    return "female" if gender == "male" else "male"


def direction_for(gender: str) -> str:
    """Map a gender to the replacer direction ("toMale" | "toFemale")."""
    return "toFemale" if gender == "female" else "toMale"


@dataclass(frozen=True)
class CharacterEntry:
    """One glossary character.  Immutable once the glossary is loaded."""

    name: str
    gender: str = "unknown"  # "male" | "female" | anything else
    aliases: tuple[str, ...] = ()

    @property
    def definite_gender(self) -> Optional[str]:
        return self.gender if self.gender in GENDERS else None

    @property
    def all_names(self) -> list[str]:
        return [n for n in (self.name, *self.aliases) if n]


@dataclass
class GlossaryView:
    """Resolved glossary for one document: the merged character map plus
    the per-site options from the matched key."""

    characters: dict[str, CharacterEntry] = field(default_factory=dict)
    site_key: str = "default"
    primary_character: Optional[str] = None
    force_gender: Optional[str] = None
    carry_paragraphs: int = 2
    only_change_if_wrong: bool = False
    dialogue_speaker: bool = False
    passive_voice: bool = False
    role_heuristic_carry: bool = False
    mode: str = "paragraph"  # compatibility only

    @property
    def entries(self) -> list[CharacterEntry]:
        return list(self.characters.values())


@dataclass(frozen=True)
class Mention:
    """A character name/alias occurrence inside one sentence."""

    position: int
    length: int
    gender: str


@dataclass(frozen=True)
class PronounToken:
    position: int
    text: str  # original surface form

    @property
    def lower(self) -> str:
        return self.text.lower()


@dataclass
class RunState:
    """Mutable state for one pass over a document's blocks."""

    last_gender: Optional[str] = None
    carry_left: int = 0
    changed_count: int = 0
    # Actor carried by the role heuristic (attack-cue paragraphs).
    last_actor_gender: Optional[str] = None
    actor_ttl: int = 0

    def reset_context(self) -> None:
        self.last_gender = None
        self.carry_left = 0
        self.last_actor_gender = None
        self.actor_ttl = 0


@dataclass
class NodeMetrics:
    """Timing and stats for one engine stage."""

    node_name: str
    node_type: str  # "programmatic" | "io"
    duration_ms: int = 0
    blocks_processed: int = 0
    blocks_affected: int = 0


@dataclass
class PassResult:
    """Complete output of one pass."""

    blocks: list[str] = field(default_factory=list)
    changed: int = 0
    characters: list[dict] = field(default_factory=list)
    glossary_ok: bool = True
    signature: str = ""
    report: dict = field(default_factory=dict)
