"""
Scoped mutation of process-wide state.

Both guards restore what they changed on exit, whether the body returned or
raised, so a failed build unit leaves the environment and cwd as it found them.
"""

import os
from pathlib import Path
from typing import Dict, Mapping, Optional, Union


class EnvironmentScope:
    """
    Temporarily set environment variables.

    Prior state is captured per variable on entry: a variable that was unset
    is deleted again on exit, one that was set gets its old value back.
    """

    def __init__(self, values: Mapping[str, str]):
        self.values = dict(values)
        self._saved: Dict[str, Optional[str]] = {}
        self._active = False

    def __enter__(self) -> "EnvironmentScope":
        if self._active:
            raise RuntimeError("EnvironmentScope is not re-entrant")
        self._saved = {name: os.environ.get(name) for name in self.values}
        self._active = True
        for name, value in self.values.items():
            os.environ[name] = value
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.restore()
        return False

    def restore(self) -> None:
        if not self._active:
            return
        for name, previous in self._saved.items():
            if previous is None:
                os.environ.pop(name, None)
            else:
                os.environ[name] = previous
        self._saved = {}
        self._active = False


class WorkingDirectoryScope:
    """Temporarily change the process working directory."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._previous: Optional[str] = None

    def __enter__(self) -> Path:
        self._previous = os.getcwd()
        os.chdir(self.path)
        return self.path

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._previous is not None:
            os.chdir(self._previous)
            self._previous = None
        return False
