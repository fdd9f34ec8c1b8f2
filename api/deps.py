"""
Peptide Protocol Engine - Dependency Injection

Database connection, settings and shared dependencies for FastAPI.
Supports protocol-based injection for testing.
"""

from typing import Optional, Union
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from fastapi import Header
from functools import lru_cache
import os

from api.protocols import IDatabase


def _build_mongo_url() -> str:
    """Build MongoDB URL from environment"""
    # Check MONGODB_URL first (user-configured)
    mongo_url = os.getenv("MONGODB_URL")
    if mongo_url and mongo_url != "mongodb://localhost:27017":
        return mongo_url

    # Fall back to MONGO_PUBLIC_URL
    mongo_url = os.getenv("MONGO_PUBLIC_URL")
    if mongo_url:
        return mongo_url

    # Last resort: local
    return "mongodb://localhost:27017"

# Global database connection
# Supports both real Motor client and mock implementations
_db_client: Optional[AsyncIOMotorClient] = None
_db: Optional[Union[AsyncIOMotorDatabase, IDatabase]] = None


class Settings:
    """Application settings from environment"""

    # Database
    mongodb_url: str = _build_mongo_url()
    mongodb_database: str = os.getenv("MONGODB_DATABASE", "peptide_protocols")

    # Insights
    insights_top_metrics: int = int(os.getenv("INSIGHTS_TOP_METRICS", "10"))
    insights_outcome_window: int = int(os.getenv("INSIGHTS_OUTCOME_WINDOW", "200"))
    insights_recent_events: int = int(os.getenv("INSIGHTS_RECENT_EVENTS", "10"))


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


async def init_database():
    """Initialize database connection"""
    global _db_client, _db

    settings = get_settings()
    _db_client = AsyncIOMotorClient(settings.mongodb_url)
    _db = _db_client[settings.mongodb_database]

    # Create indexes
    await _create_indexes(_db)


async def _create_indexes(db: AsyncIOMotorDatabase):
    """Create necessary database indexes"""
    # Catalog
    await db.compounds.create_index("compound_id", unique=True)
    await db.compounds.create_index("slug", unique=True)
    await db.compounds.create_index("name")
    await db.protocol_templates.create_index("template_id", unique=True)

    # Users
    await db.users.create_index("user_id", unique=True)

    # User protocols
    await db.user_protocols.create_index("protocol_id", unique=True)
    await db.user_protocols.create_index([("user_id", 1), ("status", 1)])

    # Logs
    await db.dose_logs.create_index([("protocol_id", 1), ("taken_at", 1)])
    await db.dose_logs.create_index("user_id")
    await db.outcome_logs.create_index([("user_id", 1), ("recorded_at", -1)])
    await db.protocol_events.create_index([("protocol_id", 1), ("occurred_at", 1)])
    await db.protocol_events.create_index([("user_id", 1), ("occurred_at", -1)])


async def close_database():
    """Close database connection"""
    global _db_client
    if _db_client:
        _db_client.close()


def get_database() -> Union[AsyncIOMotorDatabase, IDatabase]:
    """Get database instance for dependency injection.

    Returns either a real AsyncIOMotorDatabase or a mock IDatabase.
    """
    if _db is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _db


def set_database(db: Union[AsyncIOMotorDatabase, IDatabase]) -> None:
    """Set database instance for testing.

    Allows injecting a mock database implementation.

    Args:
        db: Database instance (real or mock)
    """
    global _db
    _db = db


async def get_current_user_id(x_user_id: str = Header(..., min_length=1)) -> str:
    """Caller identity forwarded by the gateway in the X-User-Id header"""
    return x_user_id


def reset_for_testing() -> None:
    """Reset all global state for testing.

    Call this in test fixtures to ensure clean state between tests.
    """
    global _db_client, _db
    _db_client = None
    _db = None
    # Clear settings cache
    get_settings.cache_clear()
