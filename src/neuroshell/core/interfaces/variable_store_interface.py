from __future__ import annotations

from abc import ABC, abstractmethod


class IVariableStore(ABC):
    """Flat string key/value store consumed by the interpolation engine.

    Key prefixes select a namespace (`@` computed, `#` metadata, `_` output,
    anything else user-defined) but the store itself does not police them.
    """

    @abstractmethod
    def get(self, key: str) -> str:
        """Return the value for `key`.

        Raises:
            KeyError: If the key is unknown.
        """

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def has(self, key: str) -> bool:
        pass
