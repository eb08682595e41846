import logging
import shutil
from pathlib import Path
from typing import Optional

from catala_wasm.errors import CommandError, StagingError
from catala_wasm.toolchain import BaseRunner, LocalRunner

logger = logging.getLogger(__name__)


def stage(
    remote_url: str,
    local_path: Path,
    *,
    branch: Optional[str] = None,
    fresh: bool = False,
    runner: Optional[BaseRunner] = None,
) -> Path:
    """
    Leave ``local_path`` at the current head of ``remote_url``.

    A missing path is shallow-cloned. An existing checkout is either removed
    and re-cloned (``fresh``) or fetched at depth 1 and hard-reset to
    ``origin/<branch>``, discarding local modifications. Without a branch
    the remote's default branch (``origin/HEAD``) is used.

    Raises:
        StagingError: if any git command fails.
    """
    runner = runner or LocalRunner()
    local_path = Path(local_path)

    if local_path.exists() and fresh:
        logger.info("Removing existing checkout %s", local_path)
        shutil.rmtree(local_path)

    try:
        if not local_path.exists():
            logger.info("Shallow cloning %s -> %s", remote_url, local_path)
            local_path.parent.mkdir(parents=True, exist_ok=True)
            runner.run(["git", "clone", "--depth", "1", remote_url, local_path])
        else:
            logger.info("Refreshing checkout %s from %s (%s)", local_path, remote_url, branch or "default branch")
            fetch = ["git", "fetch", "--depth", "1", "origin"] + ([branch] if branch else [])
            runner.run(fetch, cwd=local_path)
            runner.run(["git", "reset", "--hard", f"origin/{branch}" if branch else "origin/HEAD"], cwd=local_path)
    except CommandError as e:
        raise StagingError(f"Could not stage {remote_url} at {local_path}: {e}", cause=e)

    return local_path
