"""
NER provider selection.

The selected mode is owned outside the annotation source: the tiered source
only reads ``selected_provider`` at call time. The mode may be persisted to
a small JSON file so the choice survives restarts.
"""

import json
import threading
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Union

import structlog


logger = structlog.get_logger(__name__)


class NerProviderMode(str, Enum):
    """Well-known selection modes. Any provider id is also a valid mode."""

    AUTO = "auto"
    SPACY_LOCAL = "spacy_local"
    OLLAMA_LOCAL = "ollama_local"
    CLOUD = "cloud"
    OFF = "off"

    @classmethod
    def from_id(cls, mode_id: Optional[str]) -> Optional["NerProviderMode"]:
        """Well-known mode for ``mode_id`` (any case), or None."""
        if not mode_id:
            return None
        key = mode_id.strip().lower()
        for mode in cls:
            if mode.value == key:
                return mode
        return None


ModeListener = Callable[[str], None]


class NerProviderPreferences:
    """
    Thread-safe, observable holder for the selected NER mode.

    Args:
        initial_mode: Mode used when nothing is persisted
        path: Optional JSON file the mode is loaded from and saved to
    """

    def __init__(
        self,
        initial_mode: Union[str, NerProviderMode] = NerProviderMode.AUTO,
        path: Optional[Union[str, Path]] = None,
    ):
        self._lock = threading.Lock()
        self._listeners: List[ModeListener] = []
        self._path = Path(path) if path else None
        self._mode = self._normalize(initial_mode)

        persisted = self._load()
        if persisted is not None:
            self._mode = persisted

    @property
    def selected_provider(self) -> str:
        with self._lock:
            return self._mode

    def set_selected_provider(self, mode: Union[str, NerProviderMode]) -> None:
        normalized = self._normalize(mode)
        with self._lock:
            changed = normalized != self._mode
            self._mode = normalized
            listeners = list(self._listeners)

        if not changed:
            return

        self._save(normalized)
        logger.info("ner_provider_mode_changed", mode=normalized)
        for listener in listeners:
            listener(normalized)

    def subscribe(self, listener: ModeListener) -> Callable[[], None]:
        """Register ``listener`` for mode changes; returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    @staticmethod
    def _normalize(mode: Union[str, NerProviderMode]) -> str:
        # Well-known modes are lowercased; other provider ids keep their case
        value = mode.value if isinstance(mode, NerProviderMode) else str(mode).strip()
        if not value:
            return NerProviderMode.AUTO.value
        known = NerProviderMode.from_id(value)
        return known.value if known is not None else value

    def _load(self) -> Optional[str]:
        if self._path is None or not self._path.exists():
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("ner_preferences_load_failed", path=str(self._path), error=str(e))
            return None

        mode = data.get("ner_provider_mode") if isinstance(data, dict) else None
        if not isinstance(mode, str) or not mode.strip():
            return None
        return self._normalize(mode)

    def _save(self, mode: str) -> None:
        if self._path is None:
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps({"ner_provider_mode": mode}), encoding="utf-8")
        except OSError as e:
            logger.warning("ner_preferences_save_failed", path=str(self._path), error=str(e))
