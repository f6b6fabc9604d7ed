from __future__ import annotations

import click

from .db import DuckDbStore


db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=str),
    default=None,
    help="DuckDB cache file (defaults to $PRX_CACHE_DB or ~/.prx_cache.duckdb)",
)


@click.group()
def click_main() -> None:
    """Inspect and maintain a DuckDB-backed method cache."""


@click_main.command()
@db_option
def count(db_path: str | None) -> None:
    """Print the number of cached entries."""
    with DuckDbStore(db_path) as store:
        click.echo(store.count())


@click_main.command()
@db_option
@click.option("--prefix", default=None, help="Only list keys starting with PREFIX")
def keys(db_path: str | None, prefix: str | None) -> None:
    """List cached keys, one per line."""
    with DuckDbStore(db_path) as store:
        for key in store.keys(prefix=prefix):
            click.echo(key)


@click_main.command()
@db_option
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
def clear(db_path: str | None, yes: bool) -> None:
    """Delete every cached entry."""
    with DuckDbStore(db_path) as store:
        if not yes:
            click.confirm(f"Delete all entries in {store.db_path}?", abort=True)
        removed = store.clear()
        click.echo(f"Removed {removed} entries from {store.db_path}")


def main() -> None:
    click_main(standalone_mode=True)


if __name__ == "__main__":
    main()
