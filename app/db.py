"""Database engine, session factory and Litestar SQLAlchemy plugin."""

from litestar.contrib.sqlalchemy.plugins import SQLAlchemyAsyncConfig, SQLAlchemyInitPlugin
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.config import DATABASE_URL, DEBUG
from app.models import Base

engine_kwargs = {}
if DATABASE_URL.startswith("sqlite"):
    # aiosqlite connections belong to the event loop that opened them
    engine_kwargs["poolclass"] = NullPool

engine = create_async_engine(DATABASE_URL, **engine_kwargs)

# Sessions for work outside a request (live dashboard refreshes)
session_maker = async_sessionmaker(engine, expire_on_commit=False)

config = SQLAlchemyAsyncConfig(
    engine_instance=engine,
    session_dependency_key="session",
    metadata=Base.metadata,
    create_all=DEBUG,  # Auto-create tables on startup (dev only)
)
plugin = SQLAlchemyInitPlugin(config)
