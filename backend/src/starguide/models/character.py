"""Knowledge base models: characters, teammate edges, compositions and banners."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class Element(str, Enum):
    """Combat elements."""

    PHYSICAL = "Physical"
    FIRE = "Fire"
    ICE = "Ice"
    LIGHTNING = "Lightning"
    WIND = "Wind"
    QUANTUM = "Quantum"
    IMAGINARY = "Imaginary"


class Path(str, Enum):
    """Character paths."""

    DESTRUCTION = "Destruction"
    HUNT = "Hunt"
    ERUDITION = "Erudition"
    HARMONY = "Harmony"
    NIHILITY = "Nihility"
    PRESERVATION = "Preservation"
    ABUNDANCE = "Abundance"
    REMEMBRANCE = "Remembrance"


class Role(str, Enum):
    """Tier-list roles a character can fill."""

    DPS = "DPS"
    SUPPORT_DPS = "Support DPS"
    AMPLIFIER = "Amplifier"
    SUSTAIN = "Sustain"


class GameMode(str, Enum):
    """Endgame modes with separate tier lists."""

    MOC = "moc"  # Memory of Chaos
    PF = "pf"  # Pure Fiction
    AS = "as"  # Apocalyptic Shadow


class TierRating(str, Enum):
    """Standalone power tier, best (T-1) to worst (T5)."""

    T_MINUS_1 = "T-1"
    T_MINUS_0_5 = "T-0.5"
    T0 = "T0"
    T0_5 = "T0.5"
    T1 = "T1"
    T1_5 = "T1.5"
    T2 = "T2"
    T3 = "T3"
    T4 = "T4"
    T5 = "T5"


class TeammateRating(str, Enum):
    """Six-level synergy scale. S+ only appears through investment boosts."""

    S_PLUS = "S+"
    S = "S"
    A = "A"
    B = "B"
    C = "C"
    D = "D"


class GranularRating(str, Enum):
    """Twelve-band output grade for calculated recommendation scores."""

    S = "S"
    S_MINUS = "S-"
    A_PLUS = "A+"
    A = "A"
    A_MINUS = "A-"
    B_PLUS = "B+"
    B = "B"
    B_MINUS = "B-"
    C_PLUS = "C+"
    C = "C"
    C_MINUS = "C-"
    D = "D"


BannerRating = GranularRating


class RoleCategory(str, Enum):
    """Teammate list a recommendation lives in."""

    DPS = "dps"
    SUB_DPS = "sub_dps"
    AMPLIFIERS = "amplifiers"
    SUSTAINS = "sustains"


@dataclass(frozen=True)
class InvestmentModifier:
    """Rating shift once the wanting character reaches an investment level.

    ``delta`` is expressed in ordinal steps on the synergy scale. A delta of
    zero means the level carries no requirement.
    """

    level: int  # 1-6
    delta: int
    note: str = ""


@dataclass(frozen=True)
class TeammateRecommendation:
    """Directed edge: ``character_id`` wants ``teammate_id`` in ``category``."""

    character_id: str
    teammate_id: str
    category: RoleCategory
    rating: TeammateRating
    reason: str = ""
    modifiers: tuple[InvestmentModifier, ...] = ()
    required_level: Optional[int] = None  # Teammate investment needed for the synergy
    composition_id: Optional[str] = None


@dataclass(frozen=True)
class TeammateOverride:
    """Composition-specific change to a base teammate entry."""

    id: str
    rating: Optional[TeammateRating] = None
    reason: Optional[str] = None
    excluded: bool = False


@dataclass(frozen=True)
class TeamStructure:
    """Slot counts for a four-character team."""

    dps: int = 1
    amplifier: int = 2
    sustain: int = 1


DEFAULT_STRUCTURE = TeamStructure()


@dataclass(frozen=True)
class TeamComposition:
    """A named team archetype for a character."""

    id: str
    name: str
    is_primary: bool = False
    description: str = ""
    structure: TeamStructure = DEFAULT_STRUCTURE
    overrides: dict[RoleCategory, tuple[TeammateOverride, ...]] = field(default_factory=dict)
    weak_modes: tuple[GameMode, ...] = ()


@dataclass(frozen=True)
class EidolonDefinition:
    """Penalty for NOT having an eidolon (always <= 0)."""

    level: int
    penalty: int
    description: str = ""


@dataclass(frozen=True)
class LightConeDefinition:
    """Light cone option with S1/S5 penalties."""

    id: str
    name: str
    is_signature: bool = False
    penalty_s1: int = 0
    penalty_s5: int = 0
    source: str = "standard"


@dataclass(frozen=True)
class CharacterInvestment:
    """Investment data for a character (knowledge side, not the user's state)."""

    eidolons: tuple[EidolonDefinition, ...] = ()
    light_cones: tuple[LightConeDefinition, ...] = ()
    minimum_viable: Optional[str] = None
    priority: Optional[str] = None


@dataclass(frozen=True)
class Character:
    """Immutable knowledge base record for a playable character."""

    id: str
    name: str
    element: Element
    path: Path
    rarity: int
    roles: tuple[Role, ...]
    teammates: dict[RoleCategory, tuple[TeammateRecommendation, ...]] = field(default_factory=dict)
    compositions: tuple[TeamComposition, ...] = ()
    investment: Optional[CharacterInvestment] = None
    avoid: tuple[tuple[str, str], ...] = ()  # (character_id, reason)

    @property
    def is_dps(self) -> bool:
        """True when the role set contains plain DPS."""
        return Role.DPS in self.roles

    @property
    def primary_composition(self) -> Optional[TeamComposition]:
        for comp in self.compositions:
            if comp.is_primary:
                return comp
        return self.compositions[0] if self.compositions else None

    def get_composition(self, composition_id: str) -> Optional[TeamComposition]:
        for comp in self.compositions:
            if comp.id == composition_id:
                return comp
        return None


@dataclass(frozen=True)
class FeaturedCharacter:
    """A character featured on a banner."""

    id: str
    is_new: bool = False


@dataclass(frozen=True)
class Banner:
    """A limited banner with its featured characters."""

    id: str
    name: str
    start_date: date
    end_date: date
    featured: tuple[FeaturedCharacter, ...] = ()

    def is_active_on(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date
