"""SQLite repository implementation."""

import sqlite3
from pathlib import Path

import databases
import sqlalchemy as sa
from loguru import logger
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from ..exceptions import NotFoundError, SlugTakenError, StorageError
from ..models import LinkRecord

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS links (
    slug VARCHAR PRIMARY KEY NOT NULL,
    name TEXT NOT NULL,
    note TEXT NOT NULL,
    file_url TEXT
)
"""


class SQLiteRepository:
    """Link repository on a local SQLite database, used for development."""

    def __init__(self, database_url: str):
        """Initialize SQLite repository.

        Args:
            database_url: Database connection URL.
        """
        self.database = databases.Database(database_url)
        self.metadata = sa.MetaData()

        self.links = sa.Table(
            "links",
            self.metadata,
            sa.Column("slug", sa.String, primary_key=True),
            sa.Column("name", sa.Text, nullable=False),
            sa.Column("note", sa.Text, nullable=False),
            sa.Column("file_url", sa.Text),
        )

    async def startup(self) -> None:
        """Open the connection and create the links table."""
        self._ensure_directory()
        await self.database.connect()
        await self.database.execute(CREATE_TABLE_SQL)
        logger.info(f"Connected to database: {self.database.url.database}")

    async def shutdown(self) -> None:
        """Close database connection."""
        await self.database.disconnect()

    async def put(self, slug: str, record: LinkRecord) -> None:
        """Write a record under slug, overwriting any existing value."""
        values = self._values(slug, record)
        query = (
            sqlite_insert(self.links)
            .values(**values)
            .on_conflict_do_update(
                index_elements=[self.links.c.slug],
                set_={k: v for k, v in values.items() if k != "slug"},
            )
        )
        try:
            await self.database.execute(query)
        except sqlite3.Error as e:
            logger.error(f"Database put failed for slug {slug}: {e}")
            raise StorageError(f"Failed to store link: {e}") from e

    async def create(self, slug: str, record: LinkRecord) -> None:
        """Insert a record, failing if slug already exists.

        Raises:
            SlugTakenError: If the slug is already stored.
            StorageError: If the insert fails for any other reason.
        """
        query = self.links.insert().values(**self._values(slug, record))
        try:
            await self.database.execute(query)
        except sqlite3.IntegrityError as e:
            raise SlugTakenError(slug) from e
        except sqlite3.Error as e:
            logger.error(f"Database insert failed for slug {slug}: {e}")
            raise StorageError(f"Failed to store link: {e}") from e

    async def get(self, slug: str) -> LinkRecord:
        """Get the record stored under slug.

        Raises:
            NotFoundError: If no row exists for slug.
            StorageError: If the query fails.
        """
        query = self.links.select().where(self.links.c.slug == slug)
        try:
            row = await self.database.fetch_one(query)
        except sqlite3.Error as e:
            logger.error(f"Database get failed for slug {slug}: {e}")
            raise StorageError(f"Failed to read link: {e}") from e

        if row is None:
            raise NotFoundError(slug)
        return LinkRecord(name=row["name"], note=row["note"], file_url=row["file_url"])

    async def health_check(self) -> bool:
        """Check if database is accessible.

        Returns:
            True if database is healthy, False otherwise.
        """
        try:
            await self.database.execute("SELECT 1")
            return True
        except (sqlite3.Error, ConnectionError, TimeoutError):
            logger.exception("Database health check failed")
            return False

    def _ensure_directory(self) -> None:
        path = self.database.url.database
        if path and path != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _values(slug: str, record: LinkRecord) -> dict[str, str | None]:
        return {"slug": slug, "name": record.name, "note": record.note, "file_url": record.file_url}
