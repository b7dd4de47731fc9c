"""Build typed replacement records from resolved matches."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from core.lexicon.remap import remap_damage_type
from core.patterns.definitions import canonical_save
from core.patterns.models import (
    ActionMatch,
    CheckMatch,
    ConditionMatch,
    DamageMatch,
    DamagePair,
    DirectiveMatch,
    NormalizedMatch,
    RawMatch,
    ResolvedMatch,
    SkillMultiMatch,
    TemplateMatch,
    UtilityMatch,
)
from core.replacements.linker import ConditionLinker
from core.replacements.models import (
    ActionReplacement,
    CheckReplacement,
    ConditionReplacement,
    DamageComponent,
    DamageReplacement,
    DirectiveReplacement,
    Replacement,
    TemplateReplacement,
    UtilityReplacement,
)
from core.utils.errors import MalformedMatchError, UnknownPatternTypeError

logger = logging.getLogger("rollconv.replacements")

ConditionResolver = Callable[[str], str | None]


@dataclass
class BuildContext:
    """Per-run collaborators handed to every builder."""

    linker: ConditionLinker
    resolve_condition_id: ConditionResolver
    secret_check_types: frozenset[str] = field(default_factory=frozenset)


Builder = Callable[[ResolvedMatch, BuildContext], Replacement]

_CHECK_TRAILING_WORDS = {"save": "save", "skill": "check", "flat": "check"}


def build_replacement(resolved: ResolvedMatch, context: BuildContext) -> Replacement:
    """Dispatch a resolved match to the builder registered for its type tag."""

    try:
        builder = _BUILDERS[resolved.type_tag]
    except KeyError as exc:
        raise UnknownPatternTypeError(resolved.type_tag, match=resolved) from exc
    return builder(resolved, context)


def supported_types() -> list[str]:
    return sorted(_BUILDERS)


def _common(resolved: ResolvedMatch) -> dict[str, object]:
    return {
        "span": resolved.span,
        "priority": resolved.priority,
        "type_tag": resolved.type_tag,
        "rule_name": resolved.rule_name,
    }


def _build_damage(resolved: ResolvedMatch, context: BuildContext) -> DamageReplacement:
    record = resolved.record
    if isinstance(record, DamageMatch):
        pairs = record.pairs
        trailing_word = record.trailing_word
    elif isinstance(record, RawMatch):
        groups = record.groups
        dice = groups[0] if groups else None
        damage_type = next((value for value in groups[1:] if value), "")
        pairs = (DamagePair(dice=dice or "", damage_type=damage_type.lower(), text=record.span.text),)
        trailing_word = "damage"
    else:
        raise _malformed(resolved, record)

    return DamageReplacement(
        **_common(resolved),
        components=[_component(pair) for pair in pairs],
        trailing_word=trailing_word,
    )


def _component(pair: DamagePair) -> DamageComponent:
    lowered = pair.text.lower()
    if "healing" in lowered or "hit point" in lowered or "hp" in lowered:
        return DamageComponent(dice=pair.dice, healing=True)
    return DamageComponent(
        dice=pair.dice,
        damage_type=remap_damage_type(pair.damage_type) if pair.damage_type else "",
        persistent="persistent" in lowered,
        precision="precision" in lowered,
        splash="splash" in lowered,
    )


def _build_check(resolved: ResolvedMatch, context: BuildContext) -> CheckReplacement:
    record = resolved.record
    default_word = _CHECK_TRAILING_WORDS.get(resolved.type_tag, "check")

    if isinstance(record, SkillMultiMatch):
        return CheckReplacement(
            **_common(resolved),
            skills=list(record.skills),
            multiple_skills=True,
            dc=record.dc,
            secret=any(skill in context.secret_check_types for skill in record.skills),
            trailing_word=record.trailing_word,
        )

    if isinstance(record, CheckMatch):
        check_type = record.check_type
        dc = record.dc
        basic = record.basic
        defense = record.defense
        trailing_word = record.trailing_word
    elif isinstance(record, RawMatch):
        groups = record.groups
        dc = groups[0] if groups else None
        raw_type = groups[1] if len(groups) > 1 and groups[1] else ""
        check_type = canonical_save(raw_type) if resolved.type_tag == "save" else raw_type.lower()
        basic = False
        defense = None
        trailing_word = default_word
    else:
        raise _malformed(resolved, record)

    return CheckReplacement(
        **_common(resolved),
        check_type=check_type,
        dc=dc,
        basic=basic,
        defense=defense,
        secret=check_type in context.secret_check_types,
        trailing_word=trailing_word,
    )


def _build_template(resolved: ResolvedMatch, context: BuildContext) -> TemplateReplacement:
    record = resolved.record
    if isinstance(record, TemplateMatch):
        shape, distance = record.shape, record.distance
    elif isinstance(record, RawMatch):
        groups = record.groups
        distance = int(groups[0]) if groups and groups[0] and groups[0].isdigit() else 0
        shape = (groups[1] or "").lower() if len(groups) > 1 else ""
    else:
        raise _malformed(resolved, record)
    return TemplateReplacement(**_common(resolved), shape=shape, distance=distance)


def _build_utility(resolved: ResolvedMatch, context: BuildContext) -> UtilityReplacement:
    record = resolved.record
    if isinstance(record, UtilityMatch):
        expression, unit = record.expression, record.unit
    elif isinstance(record, RawMatch):
        groups = record.groups
        expression = (groups[0] or "") if groups else ""
        unit = (groups[1] or "") if len(groups) > 1 else ""
    else:
        raise _malformed(resolved, record)
    return UtilityReplacement(**_common(resolved), expression=expression, unit=unit)


def _build_action(resolved: ResolvedMatch, context: BuildContext) -> ActionReplacement:
    record = resolved.record
    if isinstance(record, ActionMatch):
        action_name = record.action_name
    elif isinstance(record, RawMatch):
        action_name = (record.groups[0] or "") if record.groups else ""
    else:
        raise _malformed(resolved, record)
    return ActionReplacement(**_common(resolved), action_name=action_name)


def _build_condition(resolved: ResolvedMatch, context: BuildContext) -> ConditionReplacement:
    record = resolved.record
    if isinstance(record, ConditionMatch):
        args = record.args
    elif isinstance(record, RawMatch):
        args = tuple(value for value in record.groups if value)
    else:
        raise _malformed(resolved, record)

    condition_name = args[0] if args else ""
    degree = args[1] if len(args) > 1 else None
    resolved_id = context.resolve_condition_id(condition_name.lower()) if condition_name else None
    if condition_name and not resolved_id:
        logger.debug("no identifier for condition %r; leaving text unchanged", condition_name)

    enabled = context.linker.claim(condition_name, degree)
    if not enabled:
        logger.debug("condition %r already linked at an earlier mention", resolved.span.text)

    return ConditionReplacement(
        **_common(resolved),
        condition_name=condition_name,
        degree=degree,
        resolved_id=resolved_id,
        enabled=enabled,
    )


def _build_directive(resolved: ResolvedMatch, context: BuildContext) -> DirectiveReplacement:
    record = resolved.record
    if not isinstance(record, DirectiveMatch):
        raise _malformed(resolved, record)
    return DirectiveReplacement(
        **_common(resolved),
        bodies=list(record.bodies),
        suffix=record.suffix,
    )


def _malformed(resolved: ResolvedMatch, record: NormalizedMatch) -> MalformedMatchError:
    return MalformedMatchError(
        f"{type(record).__name__} cannot build a {resolved.type_tag} replacement",
        match=resolved,
    )


_BUILDERS: dict[str, Builder] = {
    "damage": _build_damage,
    "healing": _build_damage,
    "save": _build_check,
    "skill": _build_check,
    "flat": _build_check,
    "template": _build_template,
    "utility": _build_utility,
    "action": _build_action,
    "condition": _build_condition,
    "legacy": _build_directive,
    "consolidation": _build_directive,
}
