"""
Build configuration.

Values come from ``CATALA_WASM_*`` environment variables or a local ``.env``
file, falling back to the defaults below. List and dict fields are read from
the environment as JSON, e.g. ``CATALA_WASM_LANGUAGES='["en", "fr"]'``.
"""

from pathlib import Path
from typing import Dict, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_URL_MODES = ("static", "path-aware")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CATALA_WASM_",
        env_file=".env",
        extra="ignore",
    )

    # Remote repositories
    PARSER_REPO_URL: str = "https://github.com/CatalaLang/tree-sitter-catala"
    TREE_SITTER_REPO_URL: str = "https://github.com/tree-sitter/tree-sitter"
    CATALA_REPO_URL: str = "https://github.com/CatalaLang/catala"
    TREE_SITTER_BRANCH: str = "master"
    CATALA_BRANCH: str = "master"

    # Local layout
    BUILD_ROOT: Path = Path(".build")
    DIST_DIR: Path = Path("dist")

    # Parser matrix
    VARIANTS: List[str] = ["catala", "catala_code", "catala_expr"]
    LANGUAGES: List[str] = ["en", "fr", "pl"]
    PLAYGROUND_LABELS: Dict[str, str] = {
        "catala_en": "Catala (en)",
        "catala_fr": "Catala (fr)",
        "catala_pl": "Catala (pl)",
    }
    TREE_SITTER_COMMAND: List[str] = ["npx", "tree-sitter"]
    TREE_SITTER_ABI: int = 14

    # Playground
    PRODUCT_NAME: str = "Catala"
    ASSET_BASE_URL: str = "https://tree-sitter.github.io"
    BASE_URL_MODE: str = "path-aware"
    MOUNT_PREFIX: str = "/catala-wasm"
    COMPILER_LINK: bool = True

    # Web interpreter
    BUILD_INTERPRETER: bool = True

    LOG_LEVEL: str = "INFO"

    @field_validator("BASE_URL_MODE")
    @classmethod
    def _check_base_url_mode(cls, value: str) -> str:
        value = value.lower()
        if value not in BASE_URL_MODES:
            raise ValueError(
                f"BASE_URL_MODE must be one of {', '.join(BASE_URL_MODES)}, got {value!r}"
            )
        return value

    @field_validator("MOUNT_PREFIX")
    @classmethod
    def _check_mount_prefix(cls, value: str) -> str:
        value = "/" + value.strip("/")
        if value == "/":
            raise ValueError("MOUNT_PREFIX must name a path segment")
        return value

    @property
    def parser_build_dir(self) -> Path:
        return self.BUILD_ROOT / "tree-sitter-catala"

    @property
    def tree_sitter_build_dir(self) -> Path:
        return self.BUILD_ROOT / "tree-sitter"

    @property
    def catala_build_dir(self) -> Path:
        return self.BUILD_ROOT / "catala"

    @property
    def playground_languages(self) -> List[str]:
        """Language codes offered by the playground, one per grammar language."""
        return [f"catala_{lang}" for lang in self.LANGUAGES]


settings = Settings()
