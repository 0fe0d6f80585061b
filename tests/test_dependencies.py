from pathlib import Path

from app.core.config import Settings
from app.core.dependencies import APP_DIR, create_sql_text_resolver
from app.core.sql_text import EmbeddedSource, FileSystemSource, NullSource
from conftest import write_sql


def _settings(tmp_path, **overrides) -> Settings:
    values = {"SQL_CONTENT_ROOT": str(tmp_path), "SQL_WATCH": False, "DEBUG": False}
    values.update(overrides)
    return Settings(_env_file=None, **values)


def test_development_folder_is_preferred_in_debug(tmp_path):
    write_sql(tmp_path / "Sql", "User/GetAllUsers", "SELECT 'dev copy'")

    with create_sql_text_resolver(_settings(tmp_path, DEBUG=True)) as resolver:
        assert resolver.get("User/GetAllUsers") == "SELECT 'dev copy'"
        assert resolver.sources[0].directory == (tmp_path / "Sql").resolve()


def test_application_folder_is_preferred_outside_debug(tmp_path):
    write_sql(tmp_path / "Sql", "User/GetAllUsers", "SELECT 'dev copy'")

    with create_sql_text_resolver(_settings(tmp_path)) as resolver:
        assert resolver.sources[0].directory == (APP_DIR / "Sql").resolve()
        assert "FROM users" in resolver.get("User/GetAllUsers")


def test_sources_layout(tmp_path):
    with create_sql_text_resolver(_settings(tmp_path)) as resolver:
        out_source, dev_source, embedded = resolver.sources

    assert isinstance(out_source, FileSystemSource)
    assert isinstance(dev_source, NullSource)
    assert isinstance(embedded, EmbeddedSource)
    assert embedded.namespace == "app.Sql"
    assert embedded.bundle.name == "app"


def test_embedded_bundle_can_be_disabled(tmp_path):
    settings = _settings(tmp_path, SQL_RESOURCE_PACKAGE=None)

    with create_sql_text_resolver(settings) as resolver:
        assert not any(isinstance(s, EmbeddedSource) for s in resolver.sources)


def test_default_content_root_is_the_app_source_folder(monkeypatch):
    repo_root = Path(__file__).resolve().parents[1]
    monkeypatch.chdir(repo_root)
    settings = Settings(_env_file=None, SQL_WATCH=False, DEBUG=True, SQL_PREFER_FILESYSTEM=None)

    with create_sql_text_resolver(settings) as resolver:
        dev_source = resolver.sources[0]

    assert isinstance(dev_source, FileSystemSource)
    assert dev_source.directory == (repo_root / "app" / "Sql").resolve()
