"""
Parser matrix: one tree-sitter build per (variant, language) pair.

Each unit gets its own working directory under the grammar checkout and its
own values for the two variables ``grammar.js`` reads, so units never see
each other's state and their order does not affect the output.
"""

import logging
import shutil
from dataclasses import dataclass
from enum import Enum
from itertools import product
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from catala_wasm.config import settings
from catala_wasm.errors import BuildUnitError, CommandError, MissingAssetError
from catala_wasm.scope import EnvironmentScope, WorkingDirectoryScope
from catala_wasm.toolchain import BaseRunner, LocalRunner

logger = logging.getLogger(__name__)

VARIANT_ENV = "TREESITTER_CATALA_VARIANT"
LANGUAGE_ENV = "TREESITTER_CATALA_LANG"

CONFIG_TEMPLATE = "Cargo.toml.in"
CONFIG_FILE = "Cargo.toml"
GRAMMAR_FILE = "grammar.js"


class UnitState(Enum):
    PENDING = "pending"
    GENERATED = "generated"
    BUILT_NATIVE = "built_native"
    BUILT_PORTABLE = "built_portable"
    DONE = "done"


@dataclass(frozen=True)
class BuildUnit:
    variant: str
    language: str

    @property
    def name(self) -> str:
        return f"{self.variant}_{self.language}"

    @property
    def environment(self) -> Dict[str, str]:
        return {VARIANT_ENV: self.variant, LANGUAGE_ENV: self.language}

    def working_dir(self, repo_root: Path) -> Path:
        return Path(repo_root) / self.name


def expand_matrix(variants: Sequence[str], languages: Sequence[str]) -> List[BuildUnit]:
    """Every (variant, language) pair, variant-major."""
    return [BuildUnit(variant, language) for variant, language in product(variants, languages)]


def render_config(template: str, unit: BuildUnit) -> str:
    """Replace the ``${VAR}`` placeholders of ``Cargo.toml.in`` with the unit's values."""
    text = template
    for name, value in unit.environment.items():
        text = text.replace("${" + name + "}", value)
    return text


def toolchain_steps(abi: int, command: Optional[Sequence[str]] = None) -> List[Tuple[str, List[str], UnitState]]:
    """The per-unit command sequence and the state each step leads to."""
    base = list(command or settings.TREE_SITTER_COMMAND)
    return [
        ("generate", base + ["generate", f"--abi={abi}"], UnitState.GENERATED),
        ("build", base + ["build"], UnitState.BUILT_NATIVE),
        ("build --wasm", base + ["build", "--wasm"], UnitState.BUILT_PORTABLE),
    ]


def prepare_unit(repo_root: Path, unit: BuildUnit, config_template: str) -> Path:
    """Create the unit's working directory with its Cargo.toml and grammar.js."""
    repo_root = Path(repo_root)
    work_dir = unit.working_dir(repo_root)
    work_dir.mkdir(parents=True, exist_ok=True)
    (work_dir / CONFIG_FILE).write_text(render_config(config_template, unit), encoding="utf-8")
    shutil.copyfile(repo_root / GRAMMAR_FILE, work_dir / GRAMMAR_FILE)
    return work_dir


def build_unit(
    repo_root: Path,
    unit: BuildUnit,
    config_template: str,
    *,
    runner: BaseRunner,
    abi: int,
    command: Optional[Sequence[str]] = None,
) -> UnitState:
    """
    Generate and build one unit.

    The toolchain runs with cwd set to the unit's working directory and the
    unit's variables in the environment. Both are restored before this
    returns or raises.

    Raises:
        BuildUnitError: naming the failed step and the last state reached.
    """
    logger.info("Generating and building %s", unit.name)
    work_dir = prepare_unit(repo_root, unit, config_template)

    state = UnitState.PENDING
    with EnvironmentScope(unit.environment), WorkingDirectoryScope(work_dir):
        for step, cmd, next_state in toolchain_steps(abi, command):
            try:
                runner.run(cmd)
            except CommandError as e:
                raise BuildUnitError(unit, step, state, cause=e)
            state = next_state
    return UnitState.DONE


def build_matrix(
    repo_root: Path,
    units: Sequence[BuildUnit],
    *,
    runner: Optional[BaseRunner] = None,
    abi: Optional[int] = None,
    command: Optional[Sequence[str]] = None,
) -> Dict[BuildUnit, UnitState]:
    """
    Build every unit in order, stopping at the first failure.

    Returns the final state of each unit. A failing unit raises instead,
    carrying the state it reached.
    """
    runner = runner or LocalRunner()
    abi = settings.TREE_SITTER_ABI if abi is None else abi
    repo_root = Path(repo_root).resolve()

    template_path = repo_root / CONFIG_TEMPLATE
    if not template_path.is_file():
        raise MissingAssetError(template_path, "configuration template")
    if not (repo_root / GRAMMAR_FILE).is_file():
        raise MissingAssetError(repo_root / GRAMMAR_FILE, "grammar definition")
    config_template = template_path.read_text(encoding="utf-8")

    states: Dict[BuildUnit, UnitState] = {}
    with WorkingDirectoryScope(repo_root):
        for unit in units:
            states[unit] = build_unit(
                repo_root, unit, config_template, runner=runner, abi=abi, command=command
            )
    logger.info("Built %d parser units", len(states))
    return states
