"""
Pipeline errors.

Everything raised here is fatal: the CLI logs it and exits non-zero.
Optional misses (absent working directories, unmatched template patterns)
are never reported through these types.
"""

from pathlib import Path
from typing import Optional, Sequence


class PipelineError(Exception):
    """Base exception for build pipeline failures."""
    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class CommandError(PipelineError):
    """An external command exited non-zero or could not be started."""
    def __init__(
        self,
        command: Sequence[str],
        exit_code: Optional[int],
        stderr: str = "",
        *,
        cause: Optional[BaseException] = None,
    ):
        self.command = list(command)
        self.exit_code = exit_code
        self.stderr = stderr
        shown = " ".join(self.command)
        if exit_code is None:
            message = f"Could not run `{shown}`"
        else:
            message = f"`{shown}` failed with exit code {exit_code}"
        tail = stderr.strip().splitlines()[-5:]
        if tail:
            message += ":\n  " + "\n  ".join(tail)
        super().__init__(message, cause=cause)


class StagingError(PipelineError):
    """Cloning or refreshing a repository failed."""
    pass


class BuildUnitError(PipelineError):
    """One (variant, language) unit failed during its toolchain steps."""
    def __init__(self, unit, step: str, state, *, cause: Optional[BaseException] = None):
        self.unit = unit
        self.step = step
        self.state = state
        message = f"Build unit {unit.name} failed during '{step}' (reached: {state.value})"
        if cause is not None:
            message += f"\n{cause}"
        super().__init__(message, cause=cause)


class MissingAssetError(PipelineError):
    """A required input file is absent."""
    def __init__(self, path: Path, description: str = ""):
        self.path = Path(path)
        what = description or self.path.name
        super().__init__(f"Required {what} not found: {self.path}")


class TemplateError(PipelineError):
    """A substitution marked as required did not match the template."""
    pass


class AssetFetchError(PipelineError):
    """Downloading a remote asset failed."""
    def __init__(self, url: str, *, cause: Optional[BaseException] = None):
        self.url = url
        message = f"Failed to download {url}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message, cause=cause)
