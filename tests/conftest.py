from pathlib import Path
from typing import Any, List, Optional

import pytest

from app.core.sql_text import ResourceBundle, SqlTextOptions, SqlTextResolver


def write_sql(root: Path, key: str, text: str, suffix: str = ".sql") -> Path:
    path = root / f"{key}{suffix}"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class FakeDatabase:
    """Stands in for DatabaseManager; records every query it is asked to run"""

    def __init__(self, rows: Optional[List[dict]] = None, error: Optional[Exception] = None):
        self.rows = rows or []
        self.error = error
        self.queries: List[tuple] = []

    async def execute_query(self, query: str, params: tuple = None, fetch_one: bool = False, fetch_all: bool = True) -> Any:
        self.queries.append((query, params))
        if self.error is not None:
            raise self.error
        return self.rows


@pytest.fixture
def dev_dir(tmp_path: Path) -> Path:
    return tmp_path / "content" / "Sql"


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    return tmp_path / "bin" / "Sql"


@pytest.fixture
def bundle_dir(tmp_path: Path) -> Path:
    path = tmp_path / "bundle"
    path.mkdir()
    return path


@pytest.fixture
def make_resolver(dev_dir: Path, out_dir: Path):
    created: List[SqlTextResolver] = []

    def _make(
        prefer_file_system: bool = True,
        bundle: Optional[ResourceBundle] = None,
        namespace: Optional[str] = None,
    ) -> SqlTextResolver:
        options = SqlTextOptions(
            prefer_file_system=prefer_file_system,
            resource_bundle=bundle,
            resource_namespace=namespace,
        )
        resolver = SqlTextResolver(options, dev_dir, out_dir, watch=False)
        created.append(resolver)
        return resolver

    yield _make
    for resolver in created:
        resolver.close()
