from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from settings import DATABASE_ASYNC_URL, DATABASE_SYNC_URL

# Engines connect lazily, so importing this module never touches the database.
sync_engine = create_engine(
    DATABASE_SYNC_URL, echo=False, future=True, pool_size=5, max_overflow=10
)
async_engine = create_async_engine(
    DATABASE_ASYNC_URL, echo=False, future=True, pool_size=5, max_overflow=10
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=sync_engine)
AsyncSessionLocal = async_sessionmaker(
    bind=async_engine, autoflush=False, expire_on_commit=False
)

Base = declarative_base()
