"""Composable filter engine for filter-pill and selection-palette UIs."""

from .models import (
    FilterCatalog,
    FilterCategory,
    FilterDependency,
    FilterInstance,
    FilterValue,
    MatchMode,
    MultiSelection,
    RangeSelection,
    Selection,
    SingleSelection,
    Variant,
    coerce_catalog,
)
from .normalizer import coerce_selection, is_nullish, selection_ids
from .state import FilterState, StateChange, coerce_state
from .availability import addable_categories, candidate_values, search_values
from .cascade import cascade_values, cascaded_categories, parent_values
from .predicate import (
    filter_dataframe,
    filter_records,
    record_matches,
    selection_matches,
)
from .sql import build_filter_clause, query_records
from .display import display_value, pill_labels, summarize_state, truncate_text
from .palette import FilterPalette

__all__ = [
    # Models
    "FilterCatalog",
    "FilterCategory",
    "FilterDependency",
    "FilterInstance",
    "FilterValue",
    "MatchMode",
    "MultiSelection",
    "RangeSelection",
    "Selection",
    "SingleSelection",
    "Variant",
    "coerce_catalog",
    # Normalizer
    "coerce_selection",
    "is_nullish",
    "selection_ids",
    # State
    "FilterState",
    "StateChange",
    "coerce_state",
    # Availability
    "addable_categories",
    "candidate_values",
    "search_values",
    # Cascading
    "cascade_values",
    "cascaded_categories",
    "parent_values",
    # Predicate
    "filter_dataframe",
    "filter_records",
    "record_matches",
    "selection_matches",
    # SQL
    "build_filter_clause",
    "query_records",
    # Display
    "display_value",
    "pill_labels",
    "summarize_state",
    "truncate_text",
    # Palette
    "FilterPalette",
]
