from pathlib import Path
from typing import Protocol


class IgnorePredicate(Protocol):
    def __call__(self, path: Path) -> bool: ...
