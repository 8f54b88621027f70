from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any


class TokenStore(ABC):
    """Where the OAuth token pair lives between runs."""

    @abstractmethod
    def exists(self) -> bool:
        ...

    @abstractmethod
    def load(self) -> dict[str, Any]:
        ...

    @abstractmethod
    def save(self, token_info: dict[str, Any]) -> None:
        ...

    @abstractmethod
    def delete(self) -> None:
        ...


def _ensure_parent_dir(path: Path) -> None:
    path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)


class FileTokenStore(TokenStore):
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> dict[str, Any]:
        return json.loads(self.path.read_text(encoding="utf-8"))

    def save(self, token_info: dict[str, Any]) -> None:
        _ensure_parent_dir(self.path)
        self.path.write_text(json.dumps(token_info), encoding="utf-8")

    def delete(self) -> None:
        if self.path.exists():
            self.path.unlink()
