from __future__ import annotations

from functools import lru_cache
from pathlib import Path

ANALYSES_SQL_DIR = Path(__file__).with_name("sql")


@lru_cache(maxsize=None)
def load_sql(name: str, *, sql_dir: Path = ANALYSES_SQL_DIR) -> str:
    """Read one statement from the repository's sql directory."""
    if not name.endswith(".sql") or Path(name).name != name:
        raise ValueError(f"expected a bare .sql file name, got {name!r}")
    statement = (sql_dir / name).read_text(encoding="utf-8").strip()
    if not statement:
        raise ValueError(f"sql file {name} is empty")
    return statement
