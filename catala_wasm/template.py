"""
Rewrite the tree-sitter playground page for the Catala parsers.

The upstream page is edited with plain text substitutions, no HTML parsing.
Each substitution is a separate step run in a fixed order; a step whose
pattern is not found leaves the text alone unless it is marked required.
"""

import html
import json
import logging
import re
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Sequence, Tuple

from catala_wasm.compiler_page import COMPILER_PAGE
from catala_wasm.config import settings
from catala_wasm.errors import MissingAssetError, TemplateError

logger = logging.getLogger(__name__)

INDEX_FILE = "index.html"
SCRIPT_FILE = "playground.js"

NAME_PLACEHOLDER = "THE_LANGUAGE_NAME"
BASE_URL_PATTERN = re.compile(r'LANGUAGE_BASE_URL = "[^"]*";')
SELECT_ID = "language-select"
SELECT_PATTERN = re.compile(r'<select id="language-select"[^>]*>[\s\S]*?</select>')

_JS_REGEX_SPECIALS = re.compile(r"[\\^$.*+?()\[\]{}|/]")


class Outcome(Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"


@dataclass
class Substitution:
    """One rewrite: every match of ``pattern`` (or the first ``count``) is replaced by ``apply(match)``."""
    name: str
    pattern: "re.Pattern[str]"
    apply: Callable[["re.Match[str]"], str]
    required: bool = False
    count: int = 0

    def __call__(self, text: str) -> Tuple[str, Outcome]:
        new_text, replaced = self.pattern.subn(self.apply, text, count=self.count)
        if not replaced:
            if self.required:
                raise TemplateError(
                    f"Template substitution '{self.name}' found no match for {self.pattern.pattern!r}"
                )
            return text, Outcome.SKIPPED
        return new_text, Outcome.APPLIED


def apply_substitutions(
    text: str, steps: Sequence[Substitution]
) -> Tuple[str, List[Tuple[str, Outcome]]]:
    outcomes = []
    for step in steps:
        text, outcome = step(text)
        outcomes.append((step.name, outcome))
        if outcome is Outcome.SKIPPED:
            logger.debug("Template step '%s' skipped: pattern not found", step.name)
    return text, outcomes


def _js_regex_escape(text: str) -> str:
    return _JS_REGEX_SPECIALS.sub(lambda m: "\\" + m.group(0), text)


def base_url_expression(mode: str, mount_prefix: str) -> str:
    """
    JavaScript expression assigned to ``LANGUAGE_BASE_URL``.

    ``static`` serves the parsers from the site root. ``path-aware`` checks
    the page path at load time and uses ``mount_prefix`` when the bundle is
    served below it, so one build works both at the root and under a mount.
    """
    if mode == "static":
        return '""'
    if mode == "path-aware":
        prefix = "/" + mount_prefix.strip("/")
        return (
            "(function(){ var p = window.location.pathname; "
            f"if (/{_js_regex_escape(prefix)}(\\/|$)/.test(p)) return {json.dumps(prefix)}; "
            'return ""; })()'
        )
    raise ValueError(f"Unknown base URL mode: {mode}")


def render_language_options(languages: Sequence[str], labels: Mapping[str, str]) -> str:
    """The ``<select>`` element with one option per language, labels falling back to the code."""
    options = "\n          ".join(
        f'<option value="{html.escape(code)}">{html.escape(labels.get(code, code))}</option>'
        for code in languages
    )
    return f'<select id="{SELECT_ID}">\n          {options}\n        </select>'


def playground_substitutions(
    languages: Sequence[str],
    labels: Mapping[str, str],
    *,
    product_name: str,
    base_url_mode: str,
    mount_prefix: str,
    compiler_link: bool,
) -> List[Substitution]:
    base_url = base_url_expression(base_url_mode, mount_prefix)
    select = render_language_options(languages, labels)
    steps = [
        Substitution(
            "product-name",
            re.compile(re.escape(NAME_PLACEHOLDER)),
            lambda m: product_name,
        ),
        Substitution(
            "base-url",
            BASE_URL_PATTERN,
            lambda m: f"LANGUAGE_BASE_URL = {base_url};",
            count=1,
        ),
        Substitution("language-select", SELECT_PATTERN, lambda m: select, count=1),
    ]
    if compiler_link:
        badge = f'<span class="language-name">Language: {product_name}</span>'
        steps.append(
            Substitution(
                "compiler-link",
                re.compile(re.escape(badge)),
                lambda m: f'{badge} <a href="./{COMPILER_PAGE}">Compiler</a>',
                count=1,
            )
        )
    return steps


def check_sources(template_path: Path, script_path: Path) -> Tuple[Path, Path]:
    """Fail unless both the playground page and its script exist."""
    template_path = Path(template_path)
    script_path = Path(script_path)
    for path, what in ((template_path, "playground page"), (script_path, "playground script")):
        if not path.is_file():
            raise MissingAssetError(path, what)
    return template_path, script_path


def rewrite_template(
    template_path: Path,
    script_path: Path,
    languages: Sequence[str],
    labels: Mapping[str, str],
    output_dir: Path,
    *,
    product_name: Optional[str] = None,
    base_url_mode: Optional[str] = None,
    mount_prefix: Optional[str] = None,
    compiler_link: Optional[bool] = None,
) -> Path:
    """
    Write the rewritten playground ``index.html`` and its ``playground.js`` to ``output_dir``.

    Raises:
        MissingAssetError: if the page or its script is absent. Nothing is
            written to ``output_dir`` in that case.
    """
    template_path, script_path = check_sources(template_path, script_path)
    output_dir = Path(output_dir)

    steps = playground_substitutions(
        languages,
        labels,
        product_name=product_name if product_name is not None else settings.PRODUCT_NAME,
        base_url_mode=base_url_mode or settings.BASE_URL_MODE,
        mount_prefix=mount_prefix or settings.MOUNT_PREFIX,
        compiler_link=settings.COMPILER_LINK if compiler_link is None else compiler_link,
    )
    text, _ = apply_substitutions(template_path.read_text(encoding="utf-8"), steps)

    output_dir.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(script_path, output_dir / SCRIPT_FILE)
    logger.info("  Copied %s -> %s/", SCRIPT_FILE, output_dir.name)

    index_path = output_dir / INDEX_FILE
    index_path.write_text(text, encoding="utf-8")
    logger.info("  Wrote %s -> %s/", INDEX_FILE, output_dir.name)
    return index_path
