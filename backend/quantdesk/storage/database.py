"""Database connection and table definitions."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    Numeric,
    String,
    text,
)
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class TradeAnalysisTable(Base):
    """Issued trade recommendations and their evaluated outcomes."""

    __tablename__ = "trade_analyses"

    id = Column(String(36), primary_key=True)
    symbol = Column(String(32), nullable=False)
    market = Column(String(10), nullable=False, default="STOCK")
    timeframe = Column(String(10), nullable=False, default="60m")
    direction = Column(String(5), nullable=False)  # long | short
    entry_price = Column(Numeric(20, 8), nullable=False)
    stop_price = Column(Numeric(20, 8), nullable=False)
    target1_price = Column(Numeric(20, 8), nullable=True)
    target2_price = Column(Numeric(20, 8), nullable=True)
    target3_price = Column(Numeric(20, 8), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=text("NOW()"))

    # Outcome fields, written by the evaluator
    outcome = Column(String(12), nullable=True)  # NULL | PENDING | TARGET_HIT | STOP_HIT | EXPIRED
    outcome_price = Column(Numeric(20, 8), nullable=True)
    outcome_time = Column(DateTime(timezone=True), nullable=True)
    target_hit = Column(Integer, nullable=True)
    hours_to_outcome = Column(Float, nullable=True)
    pnl_percentage = Column(Float, nullable=True)
    checked_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_trade_analyses_outcome_created", "outcome", "created_at"),
        Index("idx_trade_analyses_symbol_created", "symbol", "created_at"),
    )


class Database:
    """Database connection manager."""

    def __init__(self, database_url: str, echo: bool = False):
        url = database_url

        # Convert postgresql:// to postgresql+asyncpg://
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)

        self.engine = create_async_engine(
            url,
            echo=echo,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
            pool_recycle=3600,
            pool_timeout=30,
            connect_args={
                "timeout": 10,
                "command_timeout": 60,
            },
        )
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def create_tables(self) -> None:
        """Create all tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get a database session."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def close(self) -> None:
        """Close database connection."""
        await self.engine.dispose()


async def init_database(database_url: str, echo: bool = False) -> Database:
    """Initialize the database and create tables."""
    db = Database(database_url, echo=echo)
    await db.create_tables()
    return db
