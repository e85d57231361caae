from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Optional

from .errors import QueryNotFoundError


_QUERY_NAME_RE = re.compile(r"^[a-z][a-z0-9_]*$")

GRAPHQL_DIR = Path(__file__).resolve().parent / "graphql"


class PackageQueryLoader:
    """Loads `<name>.graphql` documents from a directory (the packaged set by default)."""

    def __init__(self, query_dir: Optional[Path] = None):
        self.query_dir = Path(query_dir) if query_dir is not None else GRAPHQL_DIR
        self._cache: Dict[str, str] = {}

    def load_query(self, name: str) -> str:
        n = str(name or "").strip()
        if not _QUERY_NAME_RE.match(n):
            raise QueryNotFoundError(f"Invalid GraphQL query name: {name!r}")
        if n in self._cache:
            return self._cache[n]
        path = self.query_dir / f"{n}.graphql"
        if not path.is_file():
            raise QueryNotFoundError(f"GraphQL query not found: {n} ({path})")
        text = path.read_text(encoding="utf-8")
        self._cache[n] = text
        return text

    def list_queries(self) -> List[str]:
        return sorted(p.stem for p in self.query_dir.glob("*.graphql"))
