from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, List, Mapping

from taleweaver.application.services.expressions import Expression, Sequence
from taleweaver.domain.events import (
    EFFECT_TOPIC_PREFIX,
    GO_TOPIC,
    TIME_TOPIC,
    DomainEventFired,
    GoTarget,
    TimeAdvanced,
)


_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EffectContext:
    events: Any = None
    traits: Any = None
    event_log: Any = None


def _to_number(value: object) -> float | None:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


class Go(Expression):
    def __init__(self, location_id: object, scene_id: object = None) -> None:
        self.location_id = str(location_id) if location_id else None
        self.scene_id = str(scene_id) if scene_id else None

    def evaluate(self, context: EffectContext) -> GoTarget | None:
        if not self.location_id:
            return None
        target = GoTarget(location_id=self.location_id, scene_id=self.scene_id)
        if context.events is not None:
            context.events.publish(GO_TOPIC, target)
        return target


class ChangeTrait(Expression):
    def __init__(self, name: str, delta: float) -> None:
        self.name = name
        self.delta = delta

    def evaluate(self, context: EffectContext) -> None:
        if self.name and context.traits is not None:
            context.traits.increment_trait(self.name, self.delta)
        return None


class DomainEvent(Expression):
    def __init__(self, token: str, args: List[str] | None = None) -> None:
        self.token = token
        self.args = list(args or [])

    def evaluate(self, context: EffectContext) -> None:
        if context.event_log is not None:
            context.event_log.add(self.token)
        if context.events is not None:
            head = self.token.split(":", 1)[0]
            payload = DomainEventFired(token=self.token, head=head, args=tuple(self.args))
            context.events.publish(f"{EFFECT_TOPIC_PREFIX}{self.token}", payload)
            context.events.publish(self.token, payload)
        return None


class Time(Expression):
    def __init__(self, hours: float) -> None:
        self.hours = hours

    def evaluate(self, context: EffectContext) -> None:
        if self.hours > 0 and context.events is not None:
            context.events.publish(TIME_TOPIC, TimeAdvanced(hours=self.hours))
        return None


def compile_effect(definition: object) -> Expression:
    """Build an action tree from a string, list or mapping definition.

    Anything unrecognised compiles to an empty ``Sequence``.
    """
    if definition is None:
        return Sequence()
    if isinstance(definition, (list, tuple)):
        return Sequence.flatten(compile_effect(item) for item in definition)
    if isinstance(definition, str):
        return _compile_token(definition.strip())
    if isinstance(definition, Mapping):
        return _compile_mapping(definition)
    return Sequence()


def _compile_token(token: str) -> Expression:
    if not token:
        return Sequence()
    head, _, rest = token.partition(":")

    if head == "go":
        location_id, _, scene_id = rest.partition(":")
        return Go(location_id, scene_id.split(":", 1)[0] or None) if location_id else Sequence()

    if head == "time":
        hours = _to_number(rest)
        return Time(hours) if hours is not None else Sequence()

    if head in ("trait", "changeTrait"):
        name, _, delta = rest.partition(":")
        amount = _to_number(delta)
        if name and amount is not None:
            return ChangeTrait(name, amount)
        return Sequence()

    return DomainEvent(token, rest.split(":") if rest else [])


def _compile_mapping(definition: Mapping[str, Any]) -> Expression:
    if definition.get("effects") is not None or definition.get("effect") is not None:
        payload = definition.get("effects")
        return compile_effect(payload if payload is not None else definition.get("effect"))

    go = definition.get("go")
    if isinstance(go, str):
        location_id, _, scene_id = go.partition(":")
        return Go(location_id, scene_id or None) if location_id else Sequence()
    if isinstance(go, Mapping):
        location_id = go.get("locationId") or go.get("location_id") or go.get("location")
        return Go(location_id, go.get("sceneId") or go.get("scene_id")) if location_id else Sequence()

    location_id = definition.get("locationId") or definition.get("location_id") or definition.get("location")
    if location_id:
        return Go(location_id, definition.get("sceneId") or definition.get("scene_id"))

    token = definition.get("token")
    if token:
        args = definition.get("args") or []
        return DomainEvent(str(token), [str(arg) for arg in args] if isinstance(args, list) else [str(args)])

    return Sequence()


def is_recognised_effect(definition: object) -> bool:
    """Return False when a definition compiles to nothing at all."""
    if definition is None:
        return True
    node = compile_effect(definition)
    return not (isinstance(node, Sequence) and not node.children)


class EffectInterpreter:
    def __init__(self, *, events=None, traits=None, event_log=None) -> None:
        self.events = events
        self.traits = traits
        self.event_log = event_log

    def compile(self, definition: object, *, time_cost: object = None) -> Sequence:
        parts: List[Expression] = []
        cost = _to_number(time_cost)
        if cost is not None and cost > 0:
            parts.append(Time(cost))
        parts.append(compile_effect(definition))
        return Sequence.flatten(parts)

    def interpret(self, definition: object, *, time_cost: object = None) -> Any:
        context = EffectContext(events=self.events, traits=self.traits, event_log=self.event_log)
        result = None
        for node in self.compile(definition, time_cost=time_cost).children:
            try:
                outcome = node.evaluate(context)
            except Exception:
                _logger.warning("Effect node failed and was skipped", extra={"node": repr(node)}, exc_info=True)
                continue
            if outcome is not None:
                result = outcome
        return result
