import logging
import shutil
from pathlib import Path
from typing import Optional

from catala_wasm.compiler_page import INTERPRETER_SCRIPT
from catala_wasm.errors import MissingAssetError
from catala_wasm.toolchain import BaseRunner, LocalRunner

logger = logging.getLogger(__name__)

# Targets of the catala Makefile; OPAMYES answers opam's prompts.
MAKE_TARGETS = ("dependencies-js", "web-interpreter-tests")
MAKE_ENV = {"OPAMYES": "1"}

BUILT_INTERPRETER = Path("_build", "default", "compiler", "web", INTERPRETER_SCRIPT)


def build_interpreter(
    catala_root: Path,
    output_dir: Path,
    *,
    runner: Optional[BaseRunner] = None,
) -> Path:
    """
    Build the js_of_ocaml web interpreter in a catala checkout and copy it to ``output_dir``.

    Raises:
        CommandError: if a make target fails.
        MissingAssetError: if the build did not produce the interpreter script.
    """
    runner = runner or LocalRunner()
    catala_root = Path(catala_root)

    for target in MAKE_TARGETS:
        logger.info("Running make %s", target)
        runner.run(["make", target], cwd=catala_root, env=MAKE_ENV)

    built = catala_root / BUILT_INTERPRETER
    if not built.is_file():
        raise MissingAssetError(built, "web interpreter (not produced by dune)")

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    dest = output_dir / INTERPRETER_SCRIPT
    shutil.copyfile(built, dest)
    logger.info("  Copied %s -> %s/", INTERPRETER_SCRIPT, output_dir.name)
    return dest
