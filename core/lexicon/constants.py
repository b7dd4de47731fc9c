"""Fixed game-rules vocabularies used by the pattern grammars."""

from __future__ import annotations

from types import MappingProxyType

DAMAGE_TYPES: tuple[str, ...] = (
    "acid",
    "bludgeoning",
    "cold",
    "electricity",
    "fire",
    "force",
    "mental",
    "piercing",
    "slashing",
    "sonic",
    "spirit",
    "vitality",
    "void",
    "bleed",
    "poison",
    "chaotic",
    "evil",
    "good",
    "lawful",
    "positive",
    "negative",
)

SKILLS: tuple[str, ...] = (
    "Acrobatics",
    "Arcana",
    "Athletics",
    "Crafting",
    "Deception",
    "Diplomacy",
    "Intimidation",
    "Medicine",
    "Nature",
    "Occultism",
    "Performance",
    "Religion",
    "Society",
    "Stealth",
    "Survival",
    "Thievery",
)

# Legacy alignment and energy words mapped to their current damage types.
LEGACY_DAMAGE_TYPES = MappingProxyType(
    {
        "chaotic": "spirit",
        "evil": "spirit",
        "good": "spirit",
        "lawful": "spirit",
        "positive": "vitality",
        "negative": "void",
    }
)

CONDITIONS_WITH_VALUES: tuple[str, ...] = (
    "clumsy",
    "doomed",
    "drained",
    "dying",
    "enfeebled",
    "frightened",
    "sickened",
    "slowed",
    "stunned",
    "stupefied",
    "wounded",
)

CONDITIONS_WITHOUT_VALUES: tuple[str, ...] = (
    "blinded",
    "broken",
    "concealed",
    "confused",
    "controlled",
    "dazzled",
    "deafened",
    "fascinated",
    "fatigued",
    "fleeing",
    "grabbed",
    "immobilized",
    "invisible",
    "off-guard",
    "paralyzed",
    "petrified",
    "prone",
    "quickened",
    "restrained",
    "unconscious",
    "undetected",
)

ALL_CONDITIONS: tuple[str, ...] = tuple(sorted(CONDITIONS_WITH_VALUES + CONDITIONS_WITHOUT_VALUES))

LEGACY_CONDITION = "flat-footed"
MODERN_CONDITION = "off-guard"

TEMPLATE_SHAPES: tuple[str, ...] = ("burst", "cone", "line", "emanation")

TIME_UNITS: tuple[str, ...] = ("rounds?", "minutes?", "hours?", "days?")

ABILITY_TYPES: tuple[str, ...] = ("ability", "action", "feature", "spell")

DEFENSES: tuple[str, ...] = ("Fortitude", "Reflex", "Will", "Perception")

# Matched case-sensitively; longer names first so alternation prefers them.
ACTION_NAMES: tuple[str, ...] = (
    "Create a Diversion",
    "Recall Knowledge",
    "Tumble Through",
    "Treat Wounds",
    "Sense Motive",
    "Force Open",
    "High Jump",
    "Long Jump",
    "Demoralize",
    "Reposition",
    "Grapple",
    "Disarm",
    "Escape",
    "Feint",
    "Shove",
    "Seek",
    "Trip",
)


def alternation(words: tuple[str, ...]) -> str:
    """Join vocabulary words into a regex alternation body."""

    return "|".join(words)
