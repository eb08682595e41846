import logging
from pathlib import Path
from typing import List, Optional, Sequence

import requests

from catala_wasm.errors import AssetFetchError

logger = logging.getLogger(__name__)

# web-tree-sitter runtime and the wasm module it loads at startup
ASSET_NAMES = ("web-tree-sitter.js", "web-tree-sitter.wasm")

CHUNK_SIZE = 64 * 1024


def fetch_file(url: str, dest: Path, session: requests.Session) -> Path:
    """Download ``url`` to ``dest``; a partial file is removed on failure."""
    try:
        with session.get(url, stream=True, allow_redirects=True) as resp:
            resp.raise_for_status()
            with open(dest, "wb") as f:
                for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
    except (requests.RequestException, OSError) as e:
        Path(dest).unlink(missing_ok=True)
        raise AssetFetchError(url, cause=e)
    return Path(dest)


def fetch_assets(
    base_url: str,
    output_dir: Path,
    *,
    session: Optional[requests.Session] = None,
    names: Sequence[str] = ASSET_NAMES,
) -> List[Path]:
    """Download the fixed playground runtime files from ``base_url`` into ``output_dir``."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    own_session = session is None
    session = session or requests.Session()

    written: List[Path] = []
    try:
        for name in names:
            url = f"{base_url.rstrip('/')}/{name}"
            logger.info("Downloading %s", url)
            written.append(fetch_file(url, output_dir / name, session))
    finally:
        if own_session:
            session.close()

    logger.info("  Downloaded %s -> %s/", " and ".join(names), output_dir.name)
    return written
