"""Predicate evaluation of filter state and free-text search over records.

A record matches when the free-text query (if any) is found in one of the
searchable fields, and every instance holding a value accepts the record
field named by its category id. Evaluation is total: malformed records or
selections fail to match instead of raising.
"""

from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from .config import config, get_logger
from .models import (
    FilterCatalog,
    FilterCategory,
    MultiSelection,
    RangeSelection,
    Selection,
    SingleSelection,
    coerce_catalog,
)
from .normalizer import LIST_TYPES, is_nullish, is_real_number, selection_fits
from .state import FilterState, coerce_state

logger = get_logger("predicate")

Constraint = Tuple[FilterCategory, Selection]


def active_constraints(catalog: FilterCatalog, state: FilterState) -> List[Constraint]:
    """
    Resolve the instances that constrain records.

    Instances without a value impose nothing. Instances referencing a
    category missing from the catalog are ignored.
    """
    constraints: List[Constraint] = []
    for instance in state:
        if not instance.has_value:
            continue
        category = catalog.get(instance.category_id)
        if category is None:
            logger.debug(f"Ignoring instance {instance.id}: unknown category {instance.category_id!r}")
            continue
        constraints.append((category, instance.value))
    return constraints


def selection_matches(
    category: FilterCategory,
    selection: Selection,
    field_value: Any,
    null_option_id: Optional[str] = None,
) -> bool:
    """
    Test one record field against one selection.

    Args:
        category: Category the selection belongs to.
        selection: Selection held by the instance.
        field_value: Record field named by the category id.
        null_option_id: Id of the catalog's null option, if any.

    Returns:
        True if the field satisfies the selection. A selection whose type
        does not match the category's variant never matches.
    """
    if not selection_fits(category, selection):
        return False

    if isinstance(selection, SingleSelection):
        if null_option_id is not None and selection.value_id == null_option_id:
            return is_nullish(field_value)
        return isinstance(field_value, str) and field_value == selection.value_id

    if isinstance(selection, MultiSelection):
        ids = set(selection.value_ids)
        if null_option_id is not None and null_option_id in ids and is_nullish(field_value):
            return True
        if isinstance(field_value, LIST_TYPES):
            return any(isinstance(item, str) and item in ids for item in field_value)
        return isinstance(field_value, str) and field_value in ids

    if isinstance(selection, RangeSelection):
        # A list field is not a number, so it fails the range test
        if isinstance(field_value, LIST_TYPES):
            return False
        return is_real_number(field_value) and selection.contains(field_value)

    return False


def text_matches(record: Mapping, query: str, search_fields: Sequence[str]) -> bool:
    """Whether the lower-cased query occurs in any searchable field of the record."""
    needle = query.lower()
    for name in search_fields:
        value = record.get(name)
        items = value if isinstance(value, LIST_TYPES) else (value,)
        for item in items:
            if item is None or (not isinstance(item, str) and is_nullish(item)):
                continue
            if needle in str(item).lower():
                return True
    return False


def _matches(
    record: Any,
    constraints: List[Constraint],
    query: Optional[str],
    search_fields: Sequence[str],
    null_option_id: Optional[str],
) -> bool:
    if not isinstance(record, Mapping):
        return False
    if query and not text_matches(record, query, search_fields):
        return False
    return all(
        selection_matches(category, selection, record.get(category.id), null_option_id)
        for category, selection in constraints
    )


def record_matches(
    catalog: FilterCatalog,
    state: FilterState,
    record: Any,
    query: Optional[str] = None,
    search_fields: Optional[Sequence[str]] = None,
) -> bool:
    """
    Evaluate the free-text query and every active instance against a record.

    Args:
        catalog: Filter catalog.
        state: Current filter state.
        record: Mapping of field name to scalar or list of scalars.
        query: Optional free-text query.
        search_fields: Fields searched by the query (defaults to the
            configured search fields).

    Returns:
        True if the record passes every constraint.
    """
    catalog = coerce_catalog(catalog)
    fields = search_fields if search_fields is not None else config.search.fields
    constraints = active_constraints(catalog, coerce_state(state))
    return _matches(record, constraints, query, fields, catalog.null_option_id)


def filter_records(
    catalog: FilterCatalog,
    state: FilterState,
    records: Iterable[Any],
    query: Optional[str] = None,
    search_fields: Optional[Sequence[str]] = None,
) -> List[Any]:
    """
    Return the records that match, in their original order.

    Args:
        catalog: Filter catalog.
        state: Current filter state.
        records: List of record mappings.
        query: Optional free-text query.
        search_fields: Fields searched by the query.

    Returns:
        Matching records. Malformed (non list-shaped) input yields [].
    """
    if not isinstance(records, (list, tuple)):
        logger.warning(f"Records are not list-shaped ({type(records).__name__}); returning no matches")
        return []

    catalog = coerce_catalog(catalog)
    fields = search_fields if search_fields is not None else config.search.fields
    constraints = active_constraints(catalog, coerce_state(state))
    null_option_id = catalog.null_option_id

    matched = [r for r in records if _matches(r, constraints, query, fields, null_option_id)]
    logger.debug(f"Matched {len(matched)}/{len(records)} records ({len(constraints)} constraints)")
    return matched


def filter_dataframe(
    df: pd.DataFrame,
    catalog: FilterCatalog,
    state: FilterState,
    query: Optional[str] = None,
    search_fields: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """
    Return the DataFrame rows that match, keeping the original index and order.

    Columns are looked up by category id; missing values (NaN/None) count as
    empty for the null option.
    """
    if not isinstance(df, pd.DataFrame):
        logger.warning(f"Expected a DataFrame, got {type(df).__name__}; returning empty frame")
        return pd.DataFrame()
    if df.empty:
        return df.copy()

    catalog = coerce_catalog(catalog)
    fields = search_fields if search_fields is not None else config.search.fields
    constraints = active_constraints(catalog, coerce_state(state))
    null_option_id = catalog.null_option_id

    mask = [
        _matches(row, constraints, query, fields, null_option_id)
        for row in df.to_dict(orient="records")
    ]
    return df.loc[pd.Series(mask, index=df.index, dtype=bool)]
