"""Policy storage, audit logging, state resolution, POSIX permission checks and eFLINT phrases."""

__version__ = "0.1.0"

__all__ = [
    "cli",
    "cliargs",
    "eflint_handlers",
    "eflint_phrases",
    "logger",
    "models",
    "permissions",
    "posix_policy",
    "resolver",
    "sqlite_store",
    "state",
]