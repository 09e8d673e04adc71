from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any | None: ...

    def get_many(self, keys: Iterable[str]) -> dict[str, Any]: ...

    def set(self, items: Mapping[str, Any]) -> None: ...

    def remove(self, keys: Iterable[str]) -> None: ...

    def items(self, prefix: str | None = None) -> list[tuple[str, Any]]: ...

    def keys(self, prefix: str | None = None) -> list[str]: ...
