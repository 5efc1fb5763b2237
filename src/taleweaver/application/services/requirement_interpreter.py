from __future__ import annotations

import logging
import math
import operator
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Tuple

from taleweaver.application.services.expressions import All, Always, AnyOf, Expression, Not
from taleweaver.domain.models.clock import hour_in_window


_logger = logging.getLogger(__name__)

TIME_WINDOWS = ("any", "day", "night")

_COMPARATORS: Dict[str, Callable[[float, float], bool]] = {
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
    "=": operator.eq,
    "==": operator.eq,
    "!=": operator.ne,
}


@dataclass(frozen=True)
class RequirementEnv:
    location_id: str | None = None
    scene_id: str | None = None
    current_npc_id: str | None = None
    path: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RequirementScope:
    env: RequirementEnv
    clock: Any = None
    traits: Any = None
    inventory: Any = None
    event_log: Any = None
    world_state: Any = None


def _to_number(value: object) -> float | None:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


class Unknown(Always):
    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(True)


class HasPlayerItem(Expression):
    def __init__(self, item_id: str, qty: float = 1) -> None:
        self.item_id = item_id
        self.qty = qty

    def evaluate(self, scope: RequirementScope) -> bool:
        if scope.inventory is None:
            return False
        return scope.inventory.count(self.item_id) >= self.qty


class HasLocationItem(Expression):
    def __init__(self, item_id: str, qty: float = 1) -> None:
        self.item_id = item_id
        self.qty = qty

    def evaluate(self, scope: RequirementScope) -> bool:
        if scope.world_state is None or not scope.env.location_id:
            return False
        return scope.world_state.has_location_item(scope.env.location_id, self.item_id, self.qty)


class CurrentNpc(Expression):
    def __init__(self, npc_id: str) -> None:
        self.npc_id = npc_id

    def evaluate(self, scope: RequirementScope) -> bool:
        return str(scope.env.current_npc_id or "") == self.npc_id


class CurrentScene(Expression):
    def __init__(self, scene_id: str) -> None:
        self.scene_id = scene_id

    def evaluate(self, scope: RequirementScope) -> bool:
        return str(scope.env.scene_id or "") == self.scene_id


class TimeWindow(Expression):
    def __init__(self, kind: str, start: float | None = None, end: float | None = None) -> None:
        self.kind = kind
        self.start = start
        self.end = end

    def evaluate(self, scope: RequirementScope) -> bool:
        clock = scope.clock
        if clock is None or self.kind == "any":
            return True
        if self.kind in ("day", "night"):
            return clock.get_time_window() == self.kind
        if self.end is None:
            now = _to_number(clock.current_time)
            return now is None or now >= self.start
        return hour_in_window(clock.current_time, self.start, self.end)


class EventSeen(Expression):
    def __init__(self, token: str) -> None:
        self.token = token

    def evaluate(self, scope: RequirementScope) -> bool:
        if scope.event_log is None:
            return False
        return bool(scope.event_log.has(self.token))


class TraitCompare(Expression):
    def __init__(self, name: str, op: str = ">=", rhs: float = 1) -> None:
        self.name = name
        self.op = op
        self.rhs = rhs

    def evaluate(self, scope: RequirementScope) -> bool:
        value = 0.0
        if scope.traits is not None:
            trait = scope.traits.get_trait_by_name(self.name)
            value = _to_number(getattr(trait, "value", None)) or 0.0
        return _COMPARATORS[self.op](value, self.rhs)


def compile_requirement(definition: object) -> Expression:
    if definition is None:
        return Always(True)
    if isinstance(definition, str):
        return _compile_token(definition.strip())
    if isinstance(definition, (list, tuple)):
        return All([compile_requirement(item) for item in definition])
    if isinstance(definition, Mapping):
        parts: List[Expression] = []
        if "requirements" in definition:
            parts.append(compile_requirement(definition["requirements"]))
        if "all" in definition:
            parts.append(compile_requirement(list(_as_list(definition["all"]))))
        if "any" in definition:
            parts.append(AnyOf([compile_requirement(item) for item in _as_list(definition["any"])]))
        if "not" in definition:
            parts.append(Not(compile_requirement(definition["not"])))
        if not parts:
            return Always(True)
        return parts[0] if len(parts) == 1 else All(parts)
    return Always(True)


def _as_list(value: object) -> List[object]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _compile_token(token: str) -> Expression:
    if not token:
        return Always(True)
    if token.startswith("not:"):
        return Not(_compile_token(token[4:].strip()))

    head, _, rest = token.partition(":")
    args = rest.split(":") if rest else []

    if head == "has":
        if len(args) < 2 or not args[1]:
            return Unknown(token)
        qty = _to_number(args[2]) if len(args) > 2 else 1
        if qty is None:
            return Unknown(token)
        if args[0] == "player":
            return HasPlayerItem(args[1], qty)
        if args[0] == "location":
            return HasLocationItem(args[1], qty)
        return Unknown(token)

    if head in ("currentNpc", "npc"):
        return CurrentNpc(rest)

    if head in ("currentScene", "scene"):
        return CurrentScene(rest)

    if head == "time":
        return _compile_time(token, args)

    if head in ("event", "effect"):
        return EventSeen(rest) if rest else Unknown(token)

    if head == "trait":
        return _compile_trait(token, args)

    return Unknown(token)


def _compile_time(token: str, args: List[str]) -> Expression:
    if args and args[0] == "window":
        args = args[1:]
    elif args and args[0] == "between":
        args = args[1:]
    if not args:
        return Unknown(token)
    kind = args[0].lower()
    if kind in TIME_WINDOWS:
        return TimeWindow(kind)
    start = _to_number(args[0])
    end = _to_number(args[1]) if len(args) > 1 else None
    if start is None or (len(args) > 1 and end is None):
        return Unknown(token)
    return TimeWindow("hours", start, end)


def _compile_trait(token: str, args: List[str]) -> Expression:
    if not args or not args[0]:
        return Unknown(token)
    name = args[0]
    if len(args) == 1:
        return TraitCompare(name, ">=", 1)
    if len(args) == 2:
        threshold = _to_number(args[1])
        return TraitCompare(name, ">=", threshold) if threshold is not None else Unknown(token)
    op, rhs = args[1], _to_number(args[2])
    if op not in _COMPARATORS or rhs is None:
        return Unknown(token)
    return TraitCompare(name, op, rhs)


def unknown_tokens(expression: Expression) -> List[str]:
    if isinstance(expression, Unknown):
        return [expression.token]
    found: List[str] = []
    for child in getattr(expression, "items", None) or []:
        found.extend(unknown_tokens(child))
    inner = getattr(expression, "inner", None)
    if isinstance(inner, Expression):
        found.extend(unknown_tokens(inner))
    return found


class RequirementInterpreter:
    def __init__(self, *, clock=None, traits=None, inventory=None, event_log=None, world_state=None) -> None:
        self.clock = clock
        self.traits = traits
        self.inventory = inventory
        self.event_log = event_log
        self.world_state = world_state

    def compile(self, definition: object) -> Expression:
        return compile_requirement(definition)

    def passes(self, definition: object, env: RequirementEnv | None = None) -> bool:
        scope = RequirementScope(
            env=env or RequirementEnv(),
            clock=self.clock,
            traits=self.traits,
            inventory=self.inventory,
            event_log=self.event_log,
            world_state=self.world_state,
        )
        try:
            return bool(compile_requirement(definition).evaluate(scope))
        except Exception:
            _logger.warning("Requirement evaluation failed; allowing", extra={"definition": repr(definition)}, exc_info=True)
            return True

    @staticmethod
    def is_known_token(token: str) -> bool:
        return not unknown_tokens(compile_requirement(token))
