"""Protocol types, errors and helpers for clients of the Mapepire Db2 for IBM i daemon."""

__version__ = "0.1.0"

__all__ = ["codec", "errors", "helpers", "password", "request", "response"]