"""Which categories can be added and which values each instance may offer."""

from typing import Callable, List, Optional

from .cascade import cascade_values
from .config import get_logger
from .models import FilterCatalog, FilterCategory, FilterValue, Variant, coerce_catalog
from .normalizer import selection_ids
from .state import FilterState, coerce_state

logger = get_logger("availability")


def addable_categories(
    catalog: FilterCatalog,
    state: FilterState,
    allow_duplicates: bool = True,
    predicate: Optional[Callable[[FilterCategory], bool]] = None,
    search: Optional[str] = None,
) -> List[FilterCategory]:
    """
    List the categories the user may add a new instance of.

    Any catalog category may be used by several instances at once. The
    remaining arguments only express what the caller wants to show.

    Args:
        catalog: Filter catalog.
        state: Current filter state.
        allow_duplicates: If False, hide categories already in the state.
        predicate: Optional caller filter on categories.
        search: Optional case-insensitive substring of the category label.

    Returns:
        Matching categories in catalog order.
    """
    catalog = coerce_catalog(catalog)
    state = coerce_state(state)
    used = {instance.category_id for instance in state}
    needle = search.lower() if search else None

    result = []
    for category in catalog:
        if not allow_duplicates and category.id in used:
            continue
        if predicate is not None and not predicate(category):
            continue
        if needle and needle not in category.label.lower():
            continue
        result.append(category)
    return result


def claimed_values(state: FilterState, category_id: str, except_instance_id: Optional[str] = None) -> List[str]:
    """Value ids held by instances of ``category_id`` other than ``except_instance_id``."""
    claimed: List[str] = []
    for instance in coerce_state(state).instances_for(category_id):
        if instance.id != except_instance_id:
            claimed.extend(selection_ids(instance.value))
    return claimed


def candidate_values(
    catalog: FilterCatalog,
    state: FilterState,
    instance_id: str,
    apply_cascade: bool = True,
) -> List[FilterValue]:
    """
    Values instance ``instance_id`` may still offer.

    Starts from the category's cascaded values, drops every value claimed
    by a sibling instance of the same category, and appends the catalog's
    null option unless a sibling already claimed it.

    Args:
        catalog: Filter catalog.
        state: Current filter state.
        instance_id: Instance whose value picker is being shown.
        apply_cascade: Narrow by the category's dependency first.

    Returns:
        Candidate values, or an empty list for an unknown instance or category.
    """
    catalog = coerce_catalog(catalog)
    state = coerce_state(state)
    instance = state.get(instance_id)
    if instance is None:
        logger.debug(f"No candidates for unknown instance {instance_id!r}")
        return []

    category = catalog.get(instance.category_id)
    if category is None:
        logger.debug(f"No candidates for instance {instance_id}: unknown category {instance.category_id!r}")
        return []

    if apply_cascade:
        base = cascade_values(category, state, catalog.null_option_id)
    else:
        base = list(category.values)

    claimed = set(claimed_values(state, category.id, except_instance_id=instance_id))
    candidates = [value for value in base if value.id not in claimed]

    null_option = catalog.null_option
    # Ranges cannot hold the null option
    if (
        null_option is not None
        and category.variant is not Variant.RANGE
        and null_option.id not in claimed
    ):
        candidates.append(null_option)

    return candidates


def search_values(values: List[FilterValue], query: Optional[str]) -> List[FilterValue]:
    """Case-insensitive label filter used by the value pickers."""
    if not query:
        return list(values)
    needle = query.lower()
    return [value for value in values if needle in value.label.lower()]
