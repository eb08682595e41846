"""
The full bundle build.

Two independent halves write into the same output directory:

1. tree-sitter parsers: stage the grammar, build the (variant x language)
   matrix, collect the wasm parsers and queries, then add the tree-sitter
   playground (rewritten index.html, playground.js, web-tree-sitter runtime).
2. web interpreter: stage catala, build the js_of_ocaml interpreter and
   write compiler.html next to it.
"""

import logging
from pathlib import Path
from typing import Optional

import requests

from catala_wasm.assets import fetch_assets
from catala_wasm.collector import collect
from catala_wasm.compiler_page import generate_compiler_page
from catala_wasm.config import Settings, settings
from catala_wasm.interpreter import build_interpreter
from catala_wasm.matrix import build_matrix, expand_matrix
from catala_wasm.stager import stage
from catala_wasm.template import check_sources, rewrite_template
from catala_wasm.toolchain import BaseRunner, LocalRunner

logger = logging.getLogger(__name__)

# Locations inside the tree-sitter checkout
PLAYGROUND_HTML = Path("crates", "cli", "src", "playground.html")
PLAYGROUND_JS = Path("docs", "src", "assets", "js", "playground.js")


def build_parsers(
    config: Optional[Settings] = None,
    runner: Optional[BaseRunner] = None,
    session: Optional[requests.Session] = None,
) -> Path:
    config = config or settings
    runner = runner or LocalRunner()
    dist = config.DIST_DIR.resolve()
    units = expand_matrix(config.VARIANTS, config.LANGUAGES)

    logger.info("Building Catala tree-sitter WASM parsers...")
    repo = stage(
        config.PARSER_REPO_URL,
        config.parser_build_dir.resolve(),
        fresh=True,
        runner=runner,
    )
    build_matrix(
        repo,
        units,
        runner=runner,
        abi=config.TREE_SITTER_ABI,
        command=config.TREE_SITTER_COMMAND,
    )
    collect(repo, units, dist)

    logger.info("Adding tree-sitter playground static files...")
    tree_sitter = stage(
        config.TREE_SITTER_REPO_URL,
        config.tree_sitter_build_dir.resolve(),
        branch=config.TREE_SITTER_BRANCH,
        runner=runner,
    )
    template_path, script_path = check_sources(
        tree_sitter / PLAYGROUND_HTML, tree_sitter / PLAYGROUND_JS
    )
    fetch_assets(config.ASSET_BASE_URL, dist, session=session)
    rewrite_template(
        template_path,
        script_path,
        config.playground_languages,
        config.PLAYGROUND_LABELS,
        dist,
        product_name=config.PRODUCT_NAME,
        base_url_mode=config.BASE_URL_MODE,
        mount_prefix=config.MOUNT_PREFIX,
        compiler_link=config.COMPILER_LINK,
    )
    return dist


def build_web_interpreter(
    config: Optional[Settings] = None,
    runner: Optional[BaseRunner] = None,
) -> Path:
    config = config or settings
    runner = runner or LocalRunner()
    dist = config.DIST_DIR.resolve()

    logger.info("Building Catala js_of_ocaml web interpreter...")
    catala = stage(
        config.CATALA_REPO_URL,
        config.catala_build_dir.resolve(),
        branch=config.CATALA_BRANCH,
        runner=runner,
    )
    build_interpreter(catala, dist, runner=runner)
    generate_compiler_page(
        dist,
        languages=config.LANGUAGES,
        product_name=config.PRODUCT_NAME,
    )
    return dist


def run(
    config: Optional[Settings] = None,
    runner: Optional[BaseRunner] = None,
    session: Optional[requests.Session] = None,
) -> Path:
    """Build the whole bundle. Any PipelineError aborts the run."""
    config = config or settings
    runner = runner or LocalRunner()
    dist = build_parsers(config, runner, session)
    if config.BUILD_INTERPRETER:
        build_web_interpreter(config, runner)
    else:
        logger.info("Skipping web interpreter (BUILD_INTERPRETER is off)")
    logger.info("Done. Output is in %s (deploy it to any static host).", dist)
    return dist
