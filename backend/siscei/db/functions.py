"""SQL functions used by the filter predicates."""
from __future__ import annotations

from typing import Any

from sqlalchemy import String, event
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import GenericFunction


class casefold(GenericFunction):
    """Unicode case folding of a string expression.

    SQLite gets the Python implementation registered by
    :func:`install_sqlite_functions`; other backends fall back to ``lower()``.
    """

    type = String()
    inherit_cache = True


@compiles(casefold)
def _compile_casefold(element: casefold, compiler, **kw: Any) -> str:
    return f"lower({compiler.process(element.clauses, **kw)})"


@compiles(casefold, "sqlite")
def _compile_casefold_sqlite(element: casefold, compiler, **kw: Any) -> str:
    return f"casefold({compiler.process(element.clauses, **kw)})"


def _sqlite_casefold(value: str | None) -> str | None:
    return value.casefold() if value is not None else None


def _register_functions(dbapi_connection, connection_record) -> None:
    dbapi_connection.create_function("casefold", 1, _sqlite_casefold)


def install_sqlite_functions(engine: AsyncEngine) -> AsyncEngine:
    """Register the Python SQL functions on every new SQLite connection."""

    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _register_functions)
    return engine


def folded_contains(column, token: str):
    """Case-insensitive substring match that also folds non-ASCII letters."""

    return casefold(column).contains(token.casefold(), autoescape=True)
