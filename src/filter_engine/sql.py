"""SQL rendering of the filter predicate for DuckDB tables.

Produces the same matches as ``predicate.filter_records`` for tables whose
filtered columns hold scalar values. List columns are not supported here.
"""

from typing import List, Optional, Sequence, Tuple

import duckdb
import pandas as pd

from .config import config, get_logger
from .models import FilterCatalog, MultiSelection, RangeSelection, SingleSelection, coerce_catalog
from .normalizer import NULLISH_STRINGS, selection_fits
from .predicate import active_constraints
from .state import FilterState, coerce_state

logger = get_logger("sql")


def quote_identifier(name: str) -> str:
    """Quote a column or table name for DuckDB."""
    return '"' + str(name).replace('"', '""') + '"'


def _column(name: str, table_alias: Optional[str]) -> str:
    quoted = quote_identifier(name)
    return f"{table_alias}.{quoted}" if table_alias else quoted


def _nullish_condition(column: str) -> Tuple[str, list]:
    placeholders = ", ".join(["?" for _ in NULLISH_STRINGS])
    return (
        f"({column} IS NULL OR CAST({column} AS VARCHAR) IN ({placeholders}))",
        list(NULLISH_STRINGS),
    )


def build_filter_clause(
    catalog: FilterCatalog,
    state: FilterState,
    query: Optional[str] = None,
    search_fields: Optional[Sequence[str]] = None,
    table_alias: Optional[str] = None,
) -> Tuple[str, list]:
    """Build WHERE clause and parameters for the current filter state.

    Args:
        catalog: Filter catalog.
        state: Current filter state.
        query: Optional free-text query, matched case-insensitively.
        search_fields: Columns searched by the query.
        table_alias: SQL table alias to prefix columns with.

    Returns:
        Tuple of (WHERE clause string, list of parameters).
    """
    conditions: List[str] = []
    params: list = []
    catalog = coerce_catalog(catalog)
    null_option_id = catalog.null_option_id

    for category, selection in active_constraints(catalog, coerce_state(state)):
        column = _column(category.id, table_alias)

        if not selection_fits(category, selection):
            conditions.append("1=0")
            continue

        if isinstance(selection, SingleSelection):
            if null_option_id is not None and selection.value_id == null_option_id:
                clause, clause_params = _nullish_condition(column)
                conditions.append(clause)
                params.extend(clause_params)
            else:
                conditions.append(f"{column} = ?")
                params.append(selection.value_id)

        elif isinstance(selection, MultiSelection):
            ids = [v for v in selection.value_ids if v != null_option_id]
            parts = []
            if ids:
                placeholders = ", ".join(["?" for _ in ids])
                parts.append(f"{column} IN ({placeholders})")
                params.extend(ids)
            if null_option_id is not None and null_option_id in selection.value_ids:
                clause, clause_params = _nullish_condition(column)
                parts.append(clause)
                params.extend(clause_params)
            conditions.append(f"({' OR '.join(parts)})")

        elif isinstance(selection, RangeSelection):
            conditions.append(f"{column} BETWEEN ? AND ?")
            params.extend([selection.low, selection.high])

    if query:
        fields = search_fields if search_fields is not None else config.search.fields
        if fields:
            parts = []
            for name in fields:
                parts.append(f"contains(LOWER(CAST({_column(name, table_alias)} AS VARCHAR)), ?)")
                params.append(query.lower())
            conditions.append(f"({' OR '.join(parts)})")
        else:
            conditions.append("1=0")

    where_clause = " AND ".join(conditions) if conditions else "1=1"
    return where_clause, params


def query_records(
    conn: duckdb.DuckDBPyConnection,
    table: str,
    catalog: FilterCatalog,
    state: FilterState,
    query: Optional[str] = None,
    search_fields: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """
    Select the rows of ``table`` that match the filter state.

    Args:
        conn: DuckDB connection
        table: Table to query
        catalog: Filter catalog
        state: Current filter state
        query: Optional free-text query
        search_fields: Columns searched by the query

    Returns:
        DataFrame of matching rows; empty if the query fails.
    """
    where_clause, params = build_filter_clause(catalog, state, query, search_fields)
    sql = f"SELECT * FROM {quote_identifier(table)} WHERE {where_clause}"

    try:
        return conn.execute(sql, params).df()
    except duckdb.Error as e:
        logger.error(f"Error filtering {table}: {e}")
        return pd.DataFrame()
