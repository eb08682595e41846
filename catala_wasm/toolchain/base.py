import shlex
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Sequence, Union


@dataclass
class ExecutionResult:
    """Outcome of one blocking external command."""
    command: Sequence[str]
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


def format_command(command: Sequence[str]) -> str:
    return " ".join(shlex.quote(str(part)) for part in command)


class BaseRunner(ABC):
    """
    Runs external commands to completion.

    Implementations block until the child exits and never apply a timeout.
    With ``check=True`` a non-zero exit raises ``CommandError``.
    """

    @abstractmethod
    def run(
        self,
        command: Sequence[Union[str, Path]],
        *,
        cwd: Optional[Path] = None,
        env: Optional[Dict[str, str]] = None,
        check: bool = True,
    ) -> ExecutionResult:
        """Run ``command``; ``env`` entries are added to the inherited environment."""
        pass
