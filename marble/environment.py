from typing import Optional

from .objects import Value


class Environment:
    """
    Lexical scope mapping names to values. Lookups walk outward through
    enclosing scopes, while definitions always land in this scope and shadow
    any outer binding with the same name.
    """

    def __init__(self, outer: Optional["Environment"] = None):
        self.outer: Optional["Environment"] = outer
        self.store: dict[str, Value] = dict()

    def let(self, name: str, value: Value) -> None:
        self.store[name] = value

    def get(self, name: str) -> Optional[Value]:
        value = self.store.get(name, None)
        if value is None and self.outer is not None:
            return self.outer.get(name)
        return value

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None
