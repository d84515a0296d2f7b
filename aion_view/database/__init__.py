from .session import Base, engine, AsyncSessionLocal, get_db, init_db, ensure_default_admin

__all__ = [
    "Base",
    "engine",
    "AsyncSessionLocal",
    "get_db",
    "init_db",
    "ensure_default_admin"
]
