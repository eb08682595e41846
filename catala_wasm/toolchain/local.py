import logging
import os
import subprocess
import time
from pathlib import Path
from typing import Dict, Optional, Sequence, Union

from catala_wasm.errors import CommandError
from .base import BaseRunner, ExecutionResult, format_command

logger = logging.getLogger(__name__)


class LocalRunner(BaseRunner):
    """subprocess-backed runner; child output is captured and logged at debug level, undecodable bytes replaced."""

    def run(
        self,
        command: Sequence[Union[str, Path]],
        *,
        cwd: Optional[Path] = None,
        env: Optional[Dict[str, str]] = None,
        check: bool = True,
    ) -> ExecutionResult:
        cmd = [str(part) for part in command]
        where = f" (in {cwd})" if cwd else ""
        logger.info("$ %s%s", format_command(cmd), where)

        child_env = None
        if env:
            # Inherit the current process environment, including scoped variables.
            child_env = dict(os.environ)
            child_env.update(env)

        start_time = time.time()
        try:
            completed = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd else None,
                env=child_env,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
            )
        except (FileNotFoundError, PermissionError) as e:
            raise CommandError(cmd, None, str(e), cause=e)

        result = ExecutionResult(
            command=cmd,
            exit_code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            duration_ms=(time.time() - start_time) * 1000,
        )
        if result.stdout:
            logger.debug(result.stdout.rstrip())
        if result.stderr:
            logger.debug(result.stderr.rstrip())

        status = "ok" if result.ok else f"FAILED (exit {result.exit_code})"
        logger.info("  -> %s in %.0f ms", status, result.duration_ms)

        if check and not result.ok:
            raise CommandError(cmd, result.exit_code, result.stderr or result.stdout)
        return result
