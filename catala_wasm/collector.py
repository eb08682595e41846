import logging
import shutil
from pathlib import Path
from typing import List, Sequence

from catala_wasm.matrix import BuildUnit

logger = logging.getLogger(__name__)

ARTIFACT_SUFFIX = ".wasm"
QUERIES_DIR = "queries"


def collect(repo_root: Path, units: Sequence[BuildUnit], output_dir: Path) -> List[Path]:
    """
    Copy each unit's ``.wasm`` parsers, and the shared ``queries/`` tree, into ``output_dir``.

    The output is flat: artifacts keep their file name and a later copy with
    the same name replaces an earlier one. Units without a working directory
    are skipped.
    """
    repo_root = Path(repo_root)
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    copied: List[Path] = []
    for unit in units:
        work_dir = unit.working_dir(repo_root)
        if not work_dir.is_dir():
            logger.debug("Skipping %s: no working directory", unit.name)
            continue
        for entry in sorted(work_dir.iterdir()):
            if not entry.is_file() or not entry.name.endswith(ARTIFACT_SUFFIX):
                continue
            dest = output_dir / entry.name
            shutil.copyfile(entry, dest)
            copied.append(dest)
            logger.info("  Copied %s -> %s/", entry.name, output_dir.name)

    queries = repo_root / QUERIES_DIR
    if queries.is_dir():
        shutil.copytree(queries, output_dir / QUERIES_DIR, dirs_exist_ok=True)
        logger.info("Copied %s/ -> %s/%s/", QUERIES_DIR, output_dir.name, QUERIES_DIR)

    return copied
