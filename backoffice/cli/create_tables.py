# backoffice/cli/create_tables.py
import asyncio
import click
from sqlalchemy.ext.asyncio import create_async_engine
from backoffice.database import Base

# Registers every model with Base.metadata
import backoffice.models  # noqa: F401


@click.command()
@click.option('--echo/--no-echo', default=False, help='Echo the generated SQL')
def create_tables(echo):
    """Create all database tables directly using SQLAlchemy (bypasses Alembic)"""
    from backoffice.core.config import get_settings
    settings = get_settings()

    async def _create_tables():
        engine = create_async_engine(settings.async_database_url, echo=echo)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()
        click.echo("All tables created successfully!")

    asyncio.run(_create_tables())


if __name__ == "__main__":
    create_tables()
