from typing import Dict, Optional

from esolang.types import Hash, Object, String


class Environment:
    """Represents a scope environment mapping identifiers to values.

    Function calls get a new Environment enclosed by the function's
    captured one; lookups walk outward through the parent chain. A module
    is evaluated in a fresh root Environment, so nothing leaks across
    module boundaries.
    """
    def __init__(self, parent: Optional['Environment'] = None):
        self.parent = parent
        self.values: Dict[str, Object] = {}

    def get(self, name: str) -> Optional[Object]:
        if name in self.values:
            return self.values[name]
        if self.parent is not None:
            return self.parent.get(name)
        return None

    def set(self, name: str, value: Object) -> Object:
        """Bind ``name`` in this scope."""
        self.values[name] = value
        return value

    def assign(self, name: str, value: Object) -> Object:
        """Update the nearest existing binding, or bind here when there is none."""
        env = self
        while env is not None:
            if name in env.values:
                env.values[name] = value
                return value
            env = env.parent
        self.values[name] = value
        return value

    def exported_hash(self) -> Hash:
        """Collect the uppercase-initial bindings of this scope into a Hash."""
        exports = Hash()
        for name, value in self.values.items():
            if name[:1].isupper():
                exports.put(String(name), value)
        return exports
