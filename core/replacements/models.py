"""Replacement records: typed fields parsed from a match, rendered to directives.

Rendering is a pure function of record state; only ``enabled`` is ever decided after
the typed fields, and only once, while the record is built.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from core.lexicon.constants import TEMPLATE_SHAPES
from core.lexicon.remap import remap_type_tags
from core.patterns.models import MatchSpan


@dataclass(kw_only=True)
class Replacement:
    """Shared fields of every replacement variant."""

    span: MatchSpan
    priority: int
    type_tag: str
    rule_name: str = ""
    enabled: bool = True

    @property
    def original_text(self) -> str:
        return self.span.text

    @property
    def start(self) -> int:
        return self.span.start

    @property
    def end(self) -> int:
        return self.span.end

    def render(self) -> str:
        raise NotImplementedError

    def validate(self) -> bool:
        return True


@dataclass(frozen=True)
class DamageComponent:
    """Single formula inside a damage directive."""

    dice: str
    damage_type: str = ""
    persistent: bool = False
    precision: bool = False
    splash: bool = False
    healing: bool = False

    def render(self) -> str:
        if self.healing:
            return f"{self.dice}[healing]"

        formula = self.dice
        if self.precision:
            formula = f"({formula})[precision]"
        if self.splash:
            formula = f"({formula})[splash]"
        if self.persistent and self.damage_type:
            return f"{formula}[persistent,{self.damage_type}]"
        if self.damage_type:
            return f"({formula})[{self.damage_type}]"
        return formula

    def validate(self) -> bool:
        return bool(self.dice)


@dataclass(kw_only=True)
class DamageReplacement(Replacement):
    components: list[DamageComponent] = field(default_factory=list)
    trailing_word: str = "damage"

    def render(self) -> str:
        formulas = ",".join(component.render() for component in self.components)
        return f"@Damage[{formulas}] {self.trailing_word}"

    def validate(self) -> bool:
        return bool(self.components) and all(component.validate() for component in self.components)


@dataclass(kw_only=True)
class CheckReplacement(Replacement):
    """Skill, perception, flat or save check.

    ``trailing_word`` is "save" for save-like records and "check" otherwise; it is set
    by the rule that produced the record, never guessed at render time.
    """

    check_type: str = ""
    dc: str | None = None
    basic: bool = False
    secret: bool = False
    defense: str | None = None
    skills: list[str] = field(default_factory=list)
    multiple_skills: bool = False
    trailing_word: str = "check"

    def render(self) -> str:
        if self.multiple_skills and self.skills:
            checks = [f"@Check[{'|'.join(self._parameters(skill))}]" for skill in self.skills]
            return " or ".join(checks) + f" {self.trailing_word}"
        return f"@Check[{'|'.join(self._parameters(self.check_type))}] {self.trailing_word}"

    def validate(self) -> bool:
        if self.multiple_skills:
            return bool(self.skills) and bool(self.dc)
        return bool(self.check_type) and bool(self.dc or self.defense)

    def _parameters(self, check_type: str) -> list[str]:
        params = [check_type.lower()]
        if self.dc:
            params.append(f"dc:{self.dc}")
        if self.defense:
            params.append(f"defense:{self.defense}")
        if self.basic:
            params.append("basic")
        if self.secret:
            params.append("traits:secret")
        return params


@dataclass(kw_only=True)
class TemplateReplacement(Replacement):
    shape: str = ""
    distance: int = 0
    width: int = 5

    def render(self) -> str:
        return f"@Template[type:{self.shape}|distance:{self.distance}]"

    def validate(self) -> bool:
        return self.shape in TEMPLATE_SHAPES and self.distance > 0


@dataclass(kw_only=True)
class UtilityReplacement(Replacement):
    """GM-only recharge roll; the expression doubles as its display label."""

    expression: str = ""
    unit: str = ""

    def render(self) -> str:
        return f"[[/gmr {self.expression} #Recharge]]{{{self.expression}}}"

    def validate(self) -> bool:
        return bool(self.expression)


@dataclass(kw_only=True)
class ActionReplacement(Replacement):
    action_name: str = ""

    def render(self) -> str:
        return f"[[/act {self.action_name}]]"

    def validate(self) -> bool:
        return bool(self.action_name)


@dataclass(kw_only=True)
class ConditionReplacement(Replacement):
    condition_name: str = ""
    degree: str | None = None
    resolved_id: str | None = None

    def render(self) -> str:
        if not self.resolved_id:
            return self.original_text
        label = self.condition_name[:1].upper() + self.condition_name[1:]
        if self.degree:
            label = f"{label} {self.degree}"
        return f"@UUID[{self.resolved_id}]{{{label}}}"

    def validate(self) -> bool:
        return bool(self.condition_name) and bool(self.resolved_id)


@dataclass(kw_only=True)
class DirectiveReplacement(Replacement):
    """Existing damage directives re-emitted as one, with legacy type tags remapped."""

    bodies: list[str] = field(default_factory=list)
    suffix: str = ""

    def render(self) -> str:
        merged = ",".join(remap_type_tags(body) for body in self.bodies)
        return f"@Damage[{merged}]{self.suffix}"

    def validate(self) -> bool:
        return bool(self.bodies) and all(body.strip() for body in self.bodies)
