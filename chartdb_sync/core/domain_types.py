"""Domain Types — enums shared by the codec, client and services.

Invariants:
    - All valid states encoded as Enums, no raw string matching
    - Enum values equal their wire spelling

Design Decisions:
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum


# ─── Enums ───────────────────────────────────────────────────────

class DatabaseType(str, Enum):
    """Database dialect a diagram models."""
    GENERIC = "generic"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQL_SERVER = "sql_server"
    MARIADB = "mariadb"
    SQLITE = "sqlite"
    CLICKHOUSE = "clickhouse"
    COCKROACHDB = "cockroachdb"
    ORACLE = "oracle"


class Cardinality(str, Enum):
    """Relationship end cardinality."""
    ONE = "one"
    MANY = "many"
    ZERO_OR_ONE = "zero_or_one"
    ZERO_OR_MANY = "zero_or_many"


class CustomTypeKind(str, Enum):
    """Custom type flavor: enums carry no fields, composites do."""
    ENUM = "enum"
    COMPOSITE = "composite"


class LoadPhase(str, Enum):
    """Startup load guard states."""
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"


class LoadOutcome(str, Enum):
    """Which branch of the startup decision tree ran."""
    SUPPRESSED = "suppressed"
    LOADED = "loaded"
    NOT_FOUND = "not_found"
    REDIRECTED = "redirected"
    OPEN_PROMPT = "open_prompt"
    CREATE_PROMPT = "create_prompt"


class SyncOperation(str, Enum):
    """Remote operations, used in error context and log extras."""
    PUSH = "push"
    PULL = "pull"
    LIST = "list"
    HEALTH = "health"
