from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional


_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TraitView:
    name: str
    description: str
    side: str | None
    value: float


class Trait:
    MIN = 0
    MAX = 10

    def __init__(self, name: str, description: str = "", side: str | None = None, value: float = 0) -> None:
        self.name = str(name)
        self.description = description or self.name
        self.side = side
        self._value = 0.0
        self.value = value

    @property
    def value(self) -> float:
        return self._value

    @value.setter
    def value(self, new_value: float) -> None:
        self._value = max(self.MIN, min(self.MAX, new_value))

    def increment(self, amount: float = 1) -> None:
        self.value = self._value + amount

    def decrement(self, amount: float = 1) -> None:
        self.value = self._value - amount

    @property
    def view(self) -> TraitView:
        return TraitView(name=self.name, description=self.description, side=self.side, value=self._value)


class TraitBook:
    def __init__(self, traits: Iterable[Trait] | None = None) -> None:
        self._traits: List[Trait] = list(traits or [])
        self._listeners: List[Callable[[TraitView], None]] = []

    @property
    def traits(self) -> List[Trait]:
        return list(self._traits)

    def get_trait_by_name(self, name: str) -> Optional[Trait]:
        return next((trait for trait in self._traits if trait.name == name), None)

    def traits_by_side(self, side: str) -> List[Trait]:
        return [trait for trait in self._traits if trait.side == side]

    def total_by_side(self, side: str) -> float:
        return sum(trait.value for trait in self.traits_by_side(side))

    def update_trait_value(self, name: str, value: float) -> bool:
        trait = self.get_trait_by_name(name)
        if trait is None:
            return False
        trait.value = value
        self._notify(trait)
        return True

    def increment_trait(self, name: str, amount: float = 1) -> bool:
        trait = self.get_trait_by_name(name)
        if trait is None:
            return False
        trait.increment(amount)
        self._notify(trait)
        return True

    def decrement_trait(self, name: str, amount: float = 1) -> bool:
        trait = self.get_trait_by_name(name)
        if trait is None:
            return False
        trait.decrement(amount)
        self._notify(trait)
        return True

    def reset_traits(self) -> None:
        for trait in self._traits:
            trait.value = 0
            self._notify(trait)

    def snapshot(self) -> Dict[str, float]:
        return {trait.name: trait.value for trait in self._traits}

    def load(self, values: Dict[str, float] | None) -> None:
        for name, value in (values or {}).items():
            try:
                self.update_trait_value(str(name), float(value))
            except (TypeError, ValueError):
                _logger.warning("Skipping unreadable trait value", extra={"trait": name})

    def subscribe(self, listener: Callable[[TraitView], None]) -> None:
        self._listeners.append(listener)

    def _notify(self, trait: Trait) -> None:
        view = trait.view
        for listener in list(self._listeners):
            try:
                listener(view)
            except Exception:
                _logger.exception("Trait listener failed and was isolated", extra={"trait": trait.name})
