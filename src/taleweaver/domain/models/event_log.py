from typing import Dict, Iterable, List


class EventLog:
    def __init__(self) -> None:
        self._tokens: Dict[str, None] = {}

    def add(self, token: object) -> None:
        key = str(token or "").strip()
        if key:
            self._tokens[key] = None

    def has(self, token: object) -> bool:
        return str(token) in self._tokens

    def to_list(self) -> List[str]:
        return list(self._tokens)

    def clear(self) -> None:
        self._tokens.clear()

    def load(self, tokens: Iterable[object] | None) -> None:
        self.clear()
        if not isinstance(tokens, (list, tuple)):
            return
        for token in tokens:
            self.add(token)

    def __len__(self) -> int:
        return len(self._tokens)
