"""Filter palette: one object bundling a catalog with the engine operations.

The palette holds no filter state of its own. The caller owns the state,
passes it into every call and keeps the state returned by transitions.
"""

from typing import Any, Callable, List, Optional, Sequence

import pandas as pd

from .availability import addable_categories, candidate_values, search_values
from .cascade import cascaded_categories
from .config import config, get_logger
from .display import display_value, summarize_state
from .models import FilterCatalog, FilterCategory, FilterValue, coerce_catalog
from .predicate import filter_dataframe, filter_records, record_matches
from .state import FilterState, StateChange

logger = get_logger("palette")


class FilterPalette:
    """
    Searchable selection palette over a filter catalog.

    Features:
    - Add, update, remove and clear filter instances
    - Cascading dependencies between categories
    - Exclusion of values already used by sibling instances
    - Free-text search over configurable record fields

    Example:
        palette = FilterPalette(catalog, search_fields=["label", "status"])
        change = palette.add(state, "status")
        state = palette.update(change.state, change.instance_id, "active").state
        visible = palette.filter_records(records, state, query="acme")
    """

    def __init__(
        self,
        catalog: FilterCatalog,
        search_fields: Optional[Sequence[str]] = None,
        allow_duplicates: bool = True,
    ):
        """
        Initialize the palette.

        Args:
            catalog: Filter catalog
            search_fields: Record fields searched by free text
                (defaults to the configured search fields)
            allow_duplicates: Allow several instances of one category
        """
        self.catalog = coerce_catalog(catalog)
        self.search_fields = tuple(search_fields) if search_fields is not None else config.search.fields
        self.allow_duplicates = allow_duplicates

    def initial_state(self, selections: Optional[List[dict]] = None) -> FilterState:
        """State pre-populated from ``[{"id": category_id, "value": raw}]``."""
        if not selections:
            return FilterState()
        return FilterState.from_selections(self.catalog, selections)

    def add(self, state: FilterState, category_id: str) -> StateChange:
        if not self.allow_duplicates and state.instances_for(category_id):
            return StateChange.rejected(state, f"Category {category_id!r} is already in use")
        return state.add_instance(self.catalog, category_id)

    def update(self, state: FilterState, instance_id: str, value: Any) -> StateChange:
        return state.update_instance_value(self.catalog, instance_id, value)

    def remove(self, state: FilterState, instance_id: str) -> StateChange:
        return state.remove_instance(instance_id)

    def clear(self, state: FilterState) -> StateChange:
        return state.clear_all()

    def addable_categories(
        self,
        state: FilterState,
        search: Optional[str] = None,
        predicate: Optional[Callable[[FilterCategory], bool]] = None,
    ) -> List[FilterCategory]:
        return addable_categories(
            self.catalog,
            state,
            allow_duplicates=self.allow_duplicates,
            predicate=predicate,
            search=search,
        )

    def candidate_values(
        self,
        state: FilterState,
        instance_id: str,
        search: Optional[str] = None,
    ) -> List[FilterValue]:
        """Values the instance's picker should list, optionally narrowed by a label search."""
        return search_values(candidate_values(self.catalog, state, instance_id), search)

    def cascaded_categories(self, state: FilterState) -> List[FilterCategory]:
        return cascaded_categories(self.catalog, state)

    def matches(self, record: Any, state: FilterState, query: Optional[str] = None) -> bool:
        return record_matches(self.catalog, state, record, query, self.search_fields)

    def filter_records(
        self,
        records: List[Any],
        state: FilterState,
        query: Optional[str] = None,
    ) -> List[Any]:
        return filter_records(self.catalog, state, records, query, self.search_fields)

    def filter_dataframe(
        self,
        df: pd.DataFrame,
        state: FilterState,
        query: Optional[str] = None,
    ) -> pd.DataFrame:
        return filter_dataframe(df, self.catalog, state, query, self.search_fields)

    def display_value(self, state: FilterState, instance_id: str) -> Optional[str]:
        instance = state.get(instance_id)
        return display_value(self.catalog, instance) if instance else None

    def summary(self, state: FilterState) -> str:
        return summarize_state(self.catalog, state)
