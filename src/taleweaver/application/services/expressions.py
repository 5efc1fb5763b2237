"""Expression-tree nodes shared by the effect and requirement interpreters.

Every node evaluates against a single context object supplied by the
interpreter that compiled it. Structural nodes live here; each interpreter
adds its own leaves.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, List


class Expression:
    def evaluate(self, context: Any) -> Any:
        return None

    def __repr__(self) -> str:
        fields = ", ".join(f"{key}={value!r}" for key, value in vars(self).items() if not key.startswith("_"))
        return f"{type(self).__name__}({fields})"


class Sequence(Expression):
    def __init__(self, children: Iterable[Expression] | None = None) -> None:
        self.children: List[Expression] = [child for child in (children or []) if isinstance(child, Expression)]

    def evaluate(self, context: Any) -> Any:
        last = None
        for child in self.children:
            result = child.evaluate(context)
            if result is not None:
                last = result
        return last

    @classmethod
    def flatten(cls, nodes: Iterable[Expression | None]) -> "Sequence":
        parts: List[Expression] = []
        for node in nodes:
            if isinstance(node, Sequence):
                parts.extend(node.children)
            elif isinstance(node, Expression):
                parts.append(node)
        return cls(parts)


class Predicate(Expression):
    def __init__(self, fn: Callable[[Any], object] | None = None) -> None:
        self.fn = fn if callable(fn) else (lambda _context: True)

    def evaluate(self, context: Any) -> bool:
        return bool(self.fn(context))


class Always(Predicate):
    def __init__(self, value: bool = True) -> None:
        self.value = bool(value)
        super().__init__(lambda _context: self.value)


class Not(Expression):
    def __init__(self, inner: Expression) -> None:
        self.inner = inner

    def evaluate(self, context: Any) -> bool:
        return not self.inner.evaluate(context)


class All(Expression):
    def __init__(self, items: Iterable[Expression] | None = None) -> None:
        self.items: List[Expression] = list(items or [])

    def evaluate(self, context: Any) -> bool:
        return all(item.evaluate(context) for item in self.items)


class AnyOf(Expression):
    def __init__(self, items: Iterable[Expression] | None = None) -> None:
        self.items: List[Expression] = list(items or [])

    def evaluate(self, context: Any) -> bool:
        if not self.items:
            return True
        return any(item.evaluate(context) for item in self.items)
