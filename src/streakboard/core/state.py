# src/streakboard/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field

from ..tracker.models import TrackerData
from .ports import PersistenceBackend


@dataclass
class AppState:
    """
    Explicitly owned application state, passed to every tracker operation.

    `data` is the in-memory mirror of the remote datastore. It is replaced
    wholesale on load and on import; everything else mutates it in place.
    """

    # Settings object (config.Settings or a test stand-in).
    settings: object
    backend: PersistenceBackend

    data: TrackerData = field(default_factory=TrackerData)
    # True when `data` came from the backend, False when restored from the local snapshot.
    online: bool = False

    def replace_data(self, data: TrackerData) -> None:
        self.data = data
