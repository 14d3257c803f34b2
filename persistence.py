"""
Wizard progress storage.
A small load/save/clear port holding the serialized progress record under a
single well-known key, with a JSON-file backend and an in-memory backend.
"""
import os
from pathlib import Path
from typing import Optional, MutableMapping

PROGRESS_KEY = 'budgetWizardProgress'


class ProgressStore:
    """Storage port for the one in-progress wizard session"""

    def load(self) -> Optional[str]:
        raise NotImplementedError

    def save(self, payload: str) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class InMemoryProgressStore(ProgressStore):
    """
    Keeps the record in a mapping.

    Pass st.session_state (or any dict) to share the record with the host; the
    default is a private dict, which is what the tests use.
    """

    def __init__(self, backing: Optional[MutableMapping] = None, key: str = PROGRESS_KEY):
        self._backing = backing if backing is not None else {}
        self.key = key

    def load(self) -> Optional[str]:
        return self._backing.get(self.key)

    def save(self, payload: str) -> None:
        self._backing[self.key] = payload

    def clear(self) -> None:
        if self.key in self._backing:
            del self._backing[self.key]


class FileProgressStore(ProgressStore):
    """Stores the record as <directory>/<key>.json"""

    def __init__(self, directory: str = '.cashcompass', key: str = PROGRESS_KEY):
        self.path = Path(directory) / f"{key}.json"

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        with open(self.path, 'r') as f:
            return f.read()

    def save(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix('.tmp')
        with open(tmp_path, 'w') as f:
            f.write(payload)
        os.replace(tmp_path, self.path)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
