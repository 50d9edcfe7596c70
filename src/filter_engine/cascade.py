"""Cascading filter dependencies.

A category that declares a dependency on a parent category only offers the
values that match what is currently selected for the parent, anywhere in the
state. With no parent selection the values are left as they are.
"""

from typing import List, Optional

from .config import get_logger
from .models import FilterCatalog, FilterCategory, FilterValue, MatchMode, coerce_catalog
from .normalizer import selection_ids
from .state import FilterState, coerce_state

logger = get_logger("cascade")


def parent_values(
    state: FilterState,
    parent_id: str,
    null_option_id: Optional[str] = None,
) -> List[str]:
    """
    Collect the discrete values selected for ``parent_id`` across the state.

    Multi-select values are flattened. Ranges and the null option carry no
    discrete value and contribute nothing.
    """
    values: List[str] = []
    for instance in coerce_state(state).instances_for(parent_id):
        values.extend(selection_ids(instance.value, exclude=null_option_id))
    return values


def value_matches(value: FilterValue, parent_value: str, match_mode: MatchMode) -> bool:
    """Case-insensitive match of a parent value against a value's label or id."""
    needle = parent_value.lower()
    label = value.label.lower()
    value_id = value.id.lower()
    if match_mode is MatchMode.EXACT:
        return label == needle or value_id == needle
    return needle in label or needle in value_id


def cascade_values(
    category: FilterCategory,
    state: FilterState,
    null_option_id: Optional[str] = None,
) -> List[FilterValue]:
    """
    Narrow a dependent category's values by its parent's selection.

    Args:
        category: Category to narrow.
        state: Current filter state.
        null_option_id: Id of the catalog's null option, if any.

    Returns:
        The category's values that match at least one parent value, in
        catalog order. All values when the category has no dependency or
        the parent has no selection. May be empty.
    """
    if category.dependency is None:
        return list(category.values)

    parents = parent_values(state, category.dependency.depends_on, null_option_id)
    if not parents:
        return list(category.values)

    mode = category.dependency.match_mode
    narrowed = [
        value
        for value in category.values
        if any(value_matches(value, parent, mode) for parent in parents)
    ]
    logger.debug(
        f"Cascaded {category.id} by {category.dependency.depends_on}={parents}: "
        f"{len(narrowed)}/{len(category.values)} values"
    )
    return narrowed


def cascaded_categories(catalog: FilterCatalog, state: FilterState) -> List[FilterCategory]:
    """Every catalog category with its values replaced by the cascaded list."""
    catalog = coerce_catalog(catalog)
    state = coerce_state(state)
    result = []
    for category in catalog:
        if category.dependency is None:
            result.append(category)
        else:
            result.append(category.with_values(cascade_values(category, state, catalog.null_option_id)))
    return result
