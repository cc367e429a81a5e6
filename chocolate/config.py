"""
Configuration module for the Chocolate registry.

Centralizes configuration with environment variable support and
validation.
"""

import os
from pathlib import Path
from typing import Dict, Optional

from .logging_config import audit_log
from .records import AccountRef
from .registry import Environment, Registry
from .signing import CryptoBackend
from .storage import MemoryStorage, SqliteStorage, Storage

# ============================================================
# Environment Configuration
# ============================================================

ENV = os.getenv("CHOCOLATE_ENV", "dev")  # dev|stage|prod

# Storage backend: memory|sqlite
STORAGE_BACKEND = os.getenv("CHOCOLATE_STORAGE", "memory")
DB_PATH = os.getenv("CHOCOLATE_DB_PATH", "data/chocolate.db")

# Logging
LOG_LEVEL = os.getenv("CHOCOLATE_LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("CHOCOLATE_LOG_JSON", "true").lower() in ("1", "true", "yes")
LOG_FILE = os.getenv("CHOCOLATE_LOG_FILE", "")

# Account allowed to appoint authorizers (hex). Empty means open.
ADMIN_ACCOUNT = os.getenv("CHOCOLATE_ADMIN", "")


# ============================================================
# Builders
# ============================================================

def get_storage() -> Storage:
    """Build the configured storage backend."""
    if STORAGE_BACKEND == "sqlite":
        return SqliteStorage(DB_PATH)
    if STORAGE_BACKEND == "memory":
        return MemoryStorage()
    raise ValueError(f"Unknown storage backend: {STORAGE_BACKEND}")


def get_admin() -> Optional[AccountRef]:
    """Configured admin account, or None."""
    if not ADMIN_ACCOUNT:
        return None
    return AccountRef.from_hex(ADMIN_ACCOUNT)


def build_registry(
    env: Optional[Environment] = None,
    crypto: Optional[CryptoBackend] = None
) -> Registry:
    """
    Build a Registry over the configured storage and admin.

    In production, open authorizer appointment and non-persistent storage
    are reported as security events.
    """
    admin = get_admin()
    if is_production():
        if admin is None:
            audit_log.security_event("authorizer_appointment_open", severity="high")
        if STORAGE_BACKEND == "memory":
            audit_log.security_event("non_persistent_storage", severity="high")
    return Registry(get_storage(), env or Environment(), crypto=crypto, admin=admin)


# ============================================================
# Validation
# ============================================================

def validate_config() -> Dict[str, bool]:
    """
    Check configuration values.
    Returns dict of check name -> passed.
    """
    checks = {
        "storage_backend": STORAGE_BACKEND in ("memory", "sqlite"),
        "log_level": LOG_LEVEL.upper() in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
    }

    if STORAGE_BACKEND == "sqlite":
        parent = Path(DB_PATH).parent
        checks["db_dir"] = not parent.exists() or os.access(parent, os.W_OK)

    try:
        get_admin()
        checks["admin_account"] = True
    except ValueError:
        checks["admin_account"] = False

    return checks


# ============================================================
# Feature Flags
# ============================================================

def is_production() -> bool:
    """Check if running in production mode."""
    return ENV == "prod"


def is_debug() -> bool:
    """Check if debug mode is enabled."""
    return os.getenv("CHOCOLATE_DEBUG", "").lower() in ("1", "true", "yes")
