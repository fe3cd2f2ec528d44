"""Persistence of trained models under the textlearn root directory."""

from __future__ import annotations

import logging
import pickle
import re
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

LOGGER = logging.getLogger(__name__)
MODELS_DIRNAME = "models"
_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


@dataclass(frozen=True)
class ModelRecord:
    """A trained model together with the facts needed to describe it later."""

    name: str
    kind: str
    model: Any
    classes: tuple[float, ...]
    documents: int
    vocabulary_size: int | None = None
    epochs: int | None = None
    squared_error: float | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ModelStore:
    """Pickle-backed model storage with atomic writes."""

    def __init__(self, root_dir: Path) -> None:
        self.root_dir = root_dir.expanduser()
        self._models_dir = self.root_dir / MODELS_DIRNAME

    @property
    def models_dir(self) -> Path:
        return self._models_dir

    def path_for(self, name: str) -> Path:
        if not _NAME_PATTERN.match(name):
            raise ValueError(f"Invalid model name: {name!r}")
        return self._models_dir / f"{name}.pkl"

    def save(self, record: ModelRecord) -> Path:
        """Persist ``record`` using an atomic pickle write."""

        target = self.path_for(record.name)

        def _write(tmp_path: Path) -> None:
            with tmp_path.open("wb") as handle:
                pickle.dump(record, handle, protocol=pickle.HIGHEST_PROTOCOL)

        self._atomic_write(target, _write)
        LOGGER.info("Saved model '%s' to %s", record.name, target)
        return target

    def load(self, name: str) -> ModelRecord | None:
        """Load a stored model. Returns None on missing or corrupt data."""

        path = self.path_for(name)
        if not path.exists():
            return None
        try:
            with path.open("rb") as handle:
                record = pickle.load(handle)
        except Exception:  # corrupt or incompatible pickle
            LOGGER.warning("Failed to load model '%s' from %s", name, path, exc_info=True)
            self._quarantine_corrupt_file(path)
            return None
        if not isinstance(record, ModelRecord):
            LOGGER.warning("File %s does not contain a model record", path)
            self._quarantine_corrupt_file(path)
            return None
        return record

    def names(self) -> list[str]:
        if not self._models_dir.exists():
            return []
        return sorted(path.stem for path in self._models_dir.glob("*.pkl"))

    def delete(self, name: str) -> bool:
        path = self.path_for(name)
        if not path.exists():
            return False
        path.unlink()
        return True

    def _atomic_write(self, target: Path, writer: Callable[[Path], None]) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = target.with_name(f".{target.name}.{uuid.uuid4().hex}.tmp")
        try:
            writer(tmp_path)
            tmp_path.replace(target)
        finally:
            if tmp_path.exists():
                tmp_path.unlink(missing_ok=True)

    def _quarantine_corrupt_file(self, path: Path) -> None:
        if not path.exists():
            return
        suffix = ".corrupt"
        candidate = path.with_name(f"{path.name}{suffix}")
        counter = 1
        while candidate.exists():
            counter += 1
            candidate = path.with_name(f"{path.name}{suffix}{counter}")
        path.replace(candidate)


__all__ = ["ModelRecord", "ModelStore"]
