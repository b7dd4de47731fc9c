"""Default grammar set and per-rule normalizers.

Every rule owns its capture layout: normalizers turn a raw regex match into one of the
typed shapes from ``core.patterns.models`` so nothing downstream reads group indices.
The one exception is the single-skill rule, which is registered without a normalizer and
is read positionally by the Check builder.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable

from core.lexicon.constants import (
    ABILITY_TYPES,
    ACTION_NAMES,
    CONDITIONS_WITH_VALUES,
    CONDITIONS_WITHOUT_VALUES,
    DAMAGE_TYPES,
    DEFENSES,
    MODERN_CONDITION,
    SKILLS,
    TEMPLATE_SHAPES,
    TIME_UNITS,
    alternation,
)
from core.lexicon.remap import has_legacy_type_tags
from core.patterns.models import (
    ActionMatch,
    CheckGroups,
    CheckMatch,
    ConditionMatch,
    DamageMatch,
    DamagePair,
    DirectiveMatch,
    MatchSpan,
    SkillMultiMatch,
    TemplateMatch,
    UtilityMatch,
)
from core.patterns.registry import PRIORITY, PatternRegistry, assert_priority_order

_TYPES = alternation(DAMAGE_TYPES)
_TYPE = rf"(?:{_TYPES})\b"
_DICE = r"\d+d\d+(?:[+-]\d+)?"
_AMOUNT = r"\d+(?:d\d+)?(?:[+-]\d+)?"
_SKILLS = alternation(SKILLS)
_UNITS = alternation(TIME_UNITS)
_DC = r"\d{1,2}"
_SAVES = r"fort(?:itude)?|ref(?:lex)?|will"
_SAVE_WORD = r"(?:\s+(?:save|saving\s+throw)\b)?"
_SEP = r"\s*[,;:()]?\s*"

_DAMAGE_KIND = (
    rf"(?:precision\s+{_TYPE}\s+splash\b|{_TYPE}\s+splash\b|splash\s+{_TYPE}"
    rf"|{_TYPE}\s+precision\b|precision\s+{_TYPE}"
    rf"|(?:persistent\s+)?{_TYPE}(?:\s+persistent\b)?|precision\b)"
)
_DAMAGE_PAIR = rf"\b{_DICE}\s+{_DAMAGE_KIND}(?:\s+damage\b)?"
_DAMAGE_JOIN = r"(?:\s*,\s*and\s+|\s*,\s*|\s+and\s+)"

DAMAGE_RUN_RE = re.compile(rf"(?:{_DAMAGE_PAIR}{_DAMAGE_JOIN})*{_DAMAGE_PAIR}", re.IGNORECASE)

_DAMAGE_PAIR_RE = re.compile(
    rf"\b(?P<dice>{_DICE})\s+(?:precision\s+(?P<precision_splash>{_TYPES})\b\s+splash\b|"
    rf"(?P<splash_a>{_TYPES})\b\s+splash\b|splash\s+(?P<splash_b>{_TYPES})\b"
    rf"|(?P<precision_a>{_TYPES})\b\s+precision\b|precision\s+(?P<precision_b>{_TYPES})\b"
    rf"|(?:persistent\s+)?(?P<plain>{_TYPES})\b(?:\s+persistent\b)?|precision\b)"
    r"(?:\s+damage\b)?",
    re.IGNORECASE,
)

SAVE_RE = re.compile(
    r"\(?(?:"
    rf"(?:\bbasic\s+)?(?:\bDC\s*(?P<dc_a>{_DC})\b{_SEP})?\b(?P<save_a>{_SAVES})\b{_SAVE_WORD}"
    rf"{_SEP}(?:basic\s+)?\bDC\s*(?P<dc_b>{_DC})\b"
    rf"|(?:\bbasic\s+)?\b(?P<save_b>{_SAVES})\b{_SAVE_WORD}\s+basic{_SEP}\bDC\s*(?P<dc_c>{_DC})\b"
    rf"|(?:\bbasic\s+)?\bDC\s*(?P<dc_d>{_DC})\s+(?P<save_c>{_SAVES})\b{_SAVE_WORD}"
    rf"|\bDC\s*(?P<dc_e>{_DC})\s+(?:basic\s+)?(?P<save_d>{_SAVES})\b{_SAVE_WORD}"
    r")\)?",
    re.IGNORECASE,
)

_SAVE_GROUPS = CheckGroups(
    type=("save_a", "save_b", "save_c", "save_d"),
    dc=("dc_a", "dc_b", "dc_c", "dc_d", "dc_e"),
)

_DIRECTIVE_BODY = r"(?:[^\[\]]|\[[^\[\]]*\])*"
_DIRECTIVE_BODY_RE = re.compile(rf"@Damage\[(?P<body>{_DIRECTIVE_BODY})\]", re.IGNORECASE)
_DIRECTIVE_TAIL = r"(?:\s+(?:(?:splash|precision)\s+)?damage\b|\s+(?:splash|precision)\b)?"
_DIRECTIVE_JOIN = r"(?:\s*,\s*(?:and\s+)?|\s+and\s+)"
_DIRECTIVE = rf"@Damage\[{_DIRECTIVE_BODY}\]"

_SKILL_WORD_RE = re.compile(rf"\b(?:{_SKILLS})\b", re.IGNORECASE)

_ACTIONS = "|".join(name.replace(" ", r"\s+") for name in ACTION_NAMES)
# Action names link only after a lead-in ("can Trip", "attempt to Escape") or as
# "the Grapple action".
_ACTION_LEAD = (
    r"(?i:attempts?\s+to|tries\s+to|try\s+to|checks?\s+to|can|could|may|must|uses?|using)"
)
ACTION_RE = re.compile(
    rf"\b{_ACTION_LEAD}\s+(?P<name>{_ACTIONS})\b"
    rf"|\b(?i:the)\s+(?P<noun>{_ACTIONS})\s+(?i:action)\b"
)

_BASIC_WORD_RE = re.compile(r"\bbasic\b", re.IGNORECASE)
_TRAILING_DAMAGE_RE = re.compile(r"\bdamage\s*$", re.IGNORECASE)


def build_default_registry(disabled_types: Iterable[str] = ()) -> PatternRegistry:
    """Build the registry with every built-in grammar, skipping disabled type tags."""

    assert_priority_order()
    disabled = set(disabled_types)
    registry = PatternRegistry()

    for type_tag, grammar, priority_key, normalize, name, scope in _rule_table():
        if type_tag in disabled:
            continue
        registry.register(
            type_tag,
            grammar,
            PRIORITY[priority_key],
            normalize,
            name=name,
            scope=scope,
        )
    return registry


def _rule_table() -> list[tuple[str, re.Pattern[str], str, Callable | None, str, str]]:
    ci = re.IGNORECASE
    return [
        ("damage", DAMAGE_RUN_RE, "damage_multi", _normalize_damage_run, "damage.multi", "text"),
        ("save", SAVE_RE, "save", _save_normalizer(), "save.comprehensive", "text"),
        (
            "damage",
            re.compile(
                rf"\b(?P<dice>{_AMOUNT})\s+(?:persistent\s+(?P<type_a>{_TYPES})\b"
                rf"|(?P<type_b>{_TYPES})\b\s+persistent\b)(?:\s+damage\b)?",
                ci,
            ),
            "damage",
            _normalize_damage_single,
            "damage.persistent",
            "text",
        ),
        (
            "damage",
            re.compile(
                rf"\b(?P<dice>{_AMOUNT})\s+(?:(?P<type_a>{_TYPES})\b\s+splash\b"
                rf"|splash\s+(?P<type_b>{_TYPES})\b)(?:\s+damage\b)?",
                ci,
            ),
            "damage",
            _normalize_damage_single,
            "damage.splash",
            "text",
        ),
        (
            "damage",
            re.compile(
                rf"\b(?P<dice>{_AMOUNT})\s+(?:precision\s+(?P<type_a>{_TYPES})\b"
                rf"|(?P<type_b>{_TYPES})\b\s+precision\b)(?:\s+damage\b)?",
                ci,
            ),
            "damage",
            _normalize_damage_single,
            "damage.precision_typed",
            "text",
        ),
        (
            "damage",
            re.compile(rf"\b(?P<dice>{_AMOUNT})\s+precision\b(?:\s+damage\b)?", ci),
            "damage",
            _normalize_damage_single,
            "damage.precision",
            "text",
        ),
        (
            "healing",
            re.compile(
                rf"\b(?P<dice>{_AMOUNT})\s+(?P<unit>(?:hit\s+points?|HP)\b(?:\s+healed\b)?)", ci
            ),
            "healing",
            _normalize_healing,
            "healing.hit_points",
            "text",
        ),
        (
            "healing",
            re.compile(rf"\b(?P<dice>{_AMOUNT})\s+(?P<unit>healing)\b(?:\s+damage\b)?", ci),
            "healing",
            _normalize_healing,
            "healing.generic",
            "text",
        ),
        (
            "skill",
            re.compile(
                rf"\bDC\s+(?P<dc>\d+)\s+(?P<skills>(?:{_SKILLS})(?:\s*,\s*(?:{_SKILLS}))*"
                rf"\s*(?:,\s*)?(?:or\s+)?(?:{_SKILLS}))\s+check\b",
                ci,
            ),
            "skill",
            _normalize_skill_list,
            "skill.multiple",
            "text",
        ),
        (
            "skill",
            re.compile(r"\bDC\s+(?P<dc>\d+)\s+(?P<type>Perception)\s+check\b", ci),
            "skill",
            _check_normalizer(CheckGroups(type=("type",), dc=("dc",)), trailing_word="check"),
            "skill.perception",
            "text",
        ),
        (
            "skill",
            re.compile(
                rf"\b(?P<head>(?P<type>{_SKILLS})\s+check)\s+against\s+(?:the\s+)?(?:[\w'’]+\s+)?"
                rf"(?P<defense>{alternation(DEFENSES)})\s+DC\b",
                ci,
            ),
            "skill",
            _check_normalizer(
                CheckGroups(type=("type",), defense=("defense",)),
                trailing_word="check",
                span_group="head",
            ),
            "skill.against_defense",
            "text",
        ),
        (
            "flat",
            re.compile(r"\bDC\s+(?P<dc>\d+)\s+(?P<type>flat)\s+check\b", ci),
            "flat",
            _check_normalizer(CheckGroups(type=("type",), dc=("dc",)), trailing_word="check"),
            "flat.check",
            "text",
        ),
        (
            "utility",
            re.compile(rf"\bagain\s+for\s+(?P<dice>{_AMOUNT})\s+(?P<unit>{_UNITS})\b", ci),
            "utility",
            _normalize_recharge,
            "utility.again_for",
            "text",
        ),
        (
            "utility",
            re.compile(
                rf"\bcan['’]t\s+use\s+this\s+(?:{alternation(ABILITY_TYPES)})\s+again\s+for\s+"
                rf"(?P<dice>{_AMOUNT})\s+(?P<unit>{_UNITS})\b",
                ci,
            ),
            "utility",
            _normalize_recharge,
            "utility.cant_use_again",
            "text",
        ),
        (
            "utility",
            re.compile(
                rf"\brecharges?\s+(?:in|after)\s+(?P<dice>{_AMOUNT})\s+(?P<unit>{_UNITS})\b", ci
            ),
            "utility",
            _normalize_recharge,
            "utility.recharge",
            "text",
        ),
        (
            "damage",
            re.compile(rf"\b(?P<dice>{_AMOUNT})\s+(?P<type>{_TYPES})\b(?:\s+damage\b)?", ci),
            "basic_damage",
            _normalize_damage_single,
            "damage.basic",
            "text",
        ),
        (
            "skill",
            re.compile(rf"\bDC\s+(\d+)\s+({_SKILLS})\s+check\b", ci),
            "basic_skill",
            None,
            "skill.single",
            "text",
        ),
        (
            "legacy",
            _DIRECTIVE_BODY_RE,
            "legacy",
            _normalize_legacy_directive,
            "legacy.damage_types",
            "directive",
        ),
        (
            "consolidation",
            re.compile(
                rf"{_DIRECTIVE}{_DIRECTIVE_TAIL}(?:{_DIRECTIVE_JOIN}{_DIRECTIVE}{_DIRECTIVE_TAIL})+",
                ci,
            ),
            "damage_consolidation",
            _normalize_directive_run,
            "damage.consolidation",
            "directive",
        ),
        (
            "condition",
            re.compile(r"\bflat-footed\b", ci),
            "legacy_condition",
            _normalize_legacy_condition,
            "condition.flat_footed",
            "text",
        ),
        (
            "condition",
            re.compile(
                rf"\b(?P<name>{alternation(CONDITIONS_WITH_VALUES)})\s+(?P<degree>\d+)\b", ci
            ),
            "condition",
            _normalize_condition,
            "condition.valued",
            "text",
        ),
        (
            "condition",
            re.compile(
                rf"\b(?P<name>{alternation(CONDITIONS_WITHOUT_VALUES)})\b(?!-)(?!\s+\d)", ci
            ),
            "condition",
            _normalize_condition,
            "condition.plain",
            "text",
        ),
        (
            "condition",
            re.compile(r"\b(?P<name>stunned)\b(?!\s+\d)", ci),
            "condition",
            _normalize_condition,
            "condition.stunned",
            "text",
        ),
        (
            "action",
            ACTION_RE,
            "action",
            _normalize_action,
            "action.named",
            "text",
        ),
        (
            "template",
            re.compile(rf"\b(?P<distance>\d+)-foot\s+(?P<shape>{alternation(TEMPLATE_SHAPES)})\b", ci),
            "template",
            _normalize_template,
            "template.shape",
            "text",
        ),
        (
            "template",
            re.compile(
                r"\b(?P<distance>\d+)-foot\s+radius\b(?:\s+(?P<shape>burst|emanation)\b)?", ci
            ),
            "template",
            _normalize_template,
            "template.radius",
            "text",
        ),
    ]


def _normalize_damage_run(match: re.Match[str]) -> DamageMatch:
    pairs = tuple(
        DamagePair(dice=pair.group("dice"), damage_type=_pair_type(pair), text=pair.group(0))
        for pair in _DAMAGE_PAIR_RE.finditer(match.group(0))
    )
    return DamageMatch(span=MatchSpan.from_match(match), pairs=pairs)


def _pair_type(pair: re.Match[str]) -> str:
    names = ("precision_splash", "splash_a", "splash_b", "precision_a", "precision_b", "plain")
    for name in names:
        value = pair.group(name)
        if value:
            return value.lower()
    return ""


def _normalize_damage_single(match: re.Match[str]) -> DamageMatch:
    values = match.groupdict()
    damage_type = next(
        (value for key, value in values.items() if key.startswith("type") and value), ""
    )
    pair = DamagePair(dice=values["dice"], damage_type=damage_type.lower(), text=match.group(0))
    return DamageMatch(span=MatchSpan.from_match(match), pairs=(pair,))


def _normalize_healing(match: re.Match[str]) -> DamageMatch:
    pair = DamagePair(dice=match.group("dice"), damage_type="", text=match.group(0))
    return DamageMatch(span=MatchSpan.from_match(match), pairs=(pair,))


def _save_normalizer() -> Callable[[re.Match[str]], CheckMatch]:
    return _check_normalizer(
        _SAVE_GROUPS,
        trailing_word="save",
        canonical=canonical_save,
        detect_basic_word=True,
    )


def canonical_save(save: str) -> str:
    """Collapse any save inflection to fortitude, reflex or will."""

    lowered = save.lower()
    if lowered.startswith("fort"):
        return "fortitude"
    if lowered.startswith("ref"):
        return "reflex"
    if lowered.startswith("will"):
        return "will"
    return lowered


def _check_normalizer(
    groups: CheckGroups,
    *,
    trailing_word: str,
    canonical: Callable[[str], str] = str.lower,
    detect_basic_word: bool = False,
    span_group: int | str = 0,
) -> Callable[[re.Match[str]], CheckMatch]:
    def normalize(match: re.Match[str]) -> CheckMatch:
        values = match.groupdict()
        check_type = _first_group(values, groups.type)
        defense = _first_group(values, groups.defense)

        start, end = match.start(span_group), match.end(span_group)
        if span_group == 0:
            start, end = balanced_bounds(match.string, start, end)
        span = MatchSpan.from_bounds(match.string, start, end)

        basic = any(values.get(name) for name in groups.basic)
        if detect_basic_word and _BASIC_WORD_RE.search(span.text):
            basic = True

        return CheckMatch(
            span=span,
            check_type=canonical(check_type) if check_type else "",
            dc=_first_group(values, groups.dc),
            basic=basic,
            defense=defense.lower() if defense else None,
            trailing_word=trailing_word,
        )

    return normalize


def _first_group(values: dict[str, str | None], names: tuple[str, ...]) -> str | None:
    for name in names:
        value = values.get(name)
        if value:
            return value
    return None


def balanced_bounds(source: str, start: int, end: int) -> tuple[int, int]:
    """Shrink a span so it never swallows only one side of a parenthesis pair."""

    while start < end:
        segment = source[start:end]
        opens, closes = segment.count("("), segment.count(")")
        if opens > closes and segment.startswith("("):
            start += 1
        elif closes > opens and segment.endswith(")"):
            end -= 1
        else:
            break

    while start < end and source[start].isspace():
        start += 1
    while end > start and source[end - 1].isspace():
        end -= 1
    return start, end


def _normalize_skill_list(match: re.Match[str]) -> CheckMatch | SkillMultiMatch:
    skills = tuple(word.group(0).lower() for word in _SKILL_WORD_RE.finditer(match.group("skills")))
    span = MatchSpan.from_match(match)
    if len(skills) == 1:
        return CheckMatch(span=span, check_type=skills[0], dc=match.group("dc"))
    return SkillMultiMatch(span=span, skills=skills, dc=match.group("dc"))


def _normalize_recharge(match: re.Match[str]) -> UtilityMatch:
    return UtilityMatch(
        span=MatchSpan.from_match(match, "dice"),
        expression=match.group("dice"),
        unit=match.group("unit"),
    )


def _normalize_action(match: re.Match[str]) -> ActionMatch:
    group = "name" if match.group("name") else "noun"
    slug = re.sub(r"\s+", "-", match.group(group).strip()).lower()
    return ActionMatch(span=MatchSpan.from_match(match, group), action_name=slug)


def _normalize_condition(match: re.Match[str]) -> ConditionMatch:
    values = match.groupdict()
    args = tuple(value for value in (values.get("name"), values.get("degree")) if value)
    return ConditionMatch(span=MatchSpan.from_match(match), args=args)


def _normalize_legacy_condition(match: re.Match[str]) -> ConditionMatch:
    return ConditionMatch(span=MatchSpan.from_match(match), args=(MODERN_CONDITION,))


def _normalize_template(match: re.Match[str]) -> TemplateMatch:
    shape = match.group("shape") or "burst"
    return TemplateMatch(
        span=MatchSpan.from_match(match),
        shape=shape.lower(),
        distance=int(match.group("distance")),
    )


def _normalize_legacy_directive(match: re.Match[str]) -> DirectiveMatch | None:
    body = match.group("body")
    if not has_legacy_type_tags(body):
        return None
    return DirectiveMatch(span=MatchSpan.from_match(match), bodies=(body,))


def _normalize_directive_run(match: re.Match[str]) -> DirectiveMatch:
    text = match.group(0)
    bodies = tuple(directive.group("body") for directive in _DIRECTIVE_BODY_RE.finditer(text))
    suffix = " damage" if _TRAILING_DAMAGE_RE.search(text) else ""
    return DirectiveMatch(span=MatchSpan.from_match(match), bodies=bodies, suffix=suffix)
