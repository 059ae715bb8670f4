"""Named pickled models under the model store directory."""

from __future__ import annotations

import logging
import pickle
import re
from pathlib import Path
from typing import Any, Optional

LOGGER = logging.getLogger("neurospell.model_store")

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


class ModelStore:
    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def load_named(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with path.open("rb") as fh:
                return pickle.load(fh)
        except (OSError, EOFError, pickle.UnpicklingError, AttributeError, ImportError) as exc:
            LOGGER.warning("Unreadable model file %s: %s", path.name, exc)
            return None

    def save_named(self, key: str, model: Any) -> Path:
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        with tmp.open("wb") as fh:
            pickle.dump(model, fh)
        tmp.replace(path)
        LOGGER.info("Saved model %s", path.name)
        return path

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"invalid model key: {key!r}")
        return self.directory / f"{key}.pkl"
