import pytest


@pytest.fixture(autouse=True)
def isolate_cache_db(tmp_path, monkeypatch):
    """Point the default DuckDB cache at a per-test file."""
    db_file = tmp_path / "prx_cache.duckdb"
    monkeypatch.setenv("PRX_CACHE_DB", str(db_file))
    yield
