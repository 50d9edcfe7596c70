"""Text shown on filter pills and in the active-filter summary."""

from typing import List, Optional, Tuple

from .config import config
from .models import (
    FilterCatalog,
    FilterCategory,
    FilterInstance,
    MultiSelection,
    RangeSelection,
    SingleSelection,
    coerce_catalog,
)
from .state import FilterState, coerce_state


def truncate_text(text: str, max_length: int) -> str:
    """Cut ``text`` to ``max_length`` characters, marking the cut with '...'."""
    return text[:max_length] + "..." if len(text) > max_length else text


def _format_number(number: float) -> str:
    if isinstance(number, float) and number.is_integer():
        return str(int(number))
    return str(number)


def _known_label(catalog: FilterCatalog, category: FilterCategory, value_id: str) -> Optional[str]:
    if catalog.null_option is not None and value_id == catalog.null_option.id:
        return catalog.null_option.label
    value = category.get_value(value_id)
    return value.label if value else None


def _value_label(catalog: FilterCatalog, category: FilterCategory, value_id: str) -> str:
    label = _known_label(catalog, category, value_id)
    return label if label is not None else value_id


def _multi_labels(catalog: FilterCatalog, category: FilterCategory, selection: MultiSelection) -> List[str]:
    """Labels of the selected values the category still offers."""
    labels = [_known_label(catalog, category, v) for v in selection.value_ids]
    return [label for label in labels if label is not None]


def display_value(
    catalog: FilterCatalog,
    instance: FilterInstance,
    max_selected_labels: Optional[int] = None,
) -> Optional[str]:
    """
    Text for an instance's value pill.

    Args:
        catalog: Filter catalog.
        instance: Instance to describe.
        max_selected_labels: From this many selected values on, a
            multi-select pill shows "N selected" instead of a label.

    Returns:
        The pill text, or None when the instance has no value or its
        category is unknown. Multi-select ids the category does not
        offer are left out, and a selection with no known ids has no text.
    """
    catalog = coerce_catalog(catalog)
    category = catalog.get(instance.category_id)
    if category is None or not instance.has_value:
        return None

    limit = max_selected_labels if max_selected_labels is not None else config.display.max_selected_labels
    selection = instance.value

    if isinstance(selection, SingleSelection):
        return _value_label(catalog, category, selection.value_id)
    if isinstance(selection, RangeSelection):
        return f"{_format_number(selection.low)} - {_format_number(selection.high)}"
    if isinstance(selection, MultiSelection):
        labels = _multi_labels(catalog, category, selection)
        if not labels:
            return None
        if len(labels) >= limit:
            return f"{len(labels)} selected"
        return labels[0]
    return None


def pill_labels(
    catalog: FilterCatalog,
    instance: FilterInstance,
    mobile: bool = False,
) -> Tuple[str, str]:
    """(category label, value label) pair, truncated for the pill width."""
    catalog = coerce_catalog(catalog)
    category = catalog.get(instance.category_id)
    max_length = (
        config.display.mobile_label_max_length if mobile else config.display.label_max_length
    )
    category_label = truncate_text(category.label, max_length) if category else instance.category_id
    value = display_value(catalog, instance)
    if value is None:
        return category_label, "Select value"
    # Labels may carry line breaks or tabs from the source data
    value = value.replace("\n", "").replace("\r", "").replace("\t", "")
    return category_label, truncate_text(value, max_length)


def summarize_state(catalog: FilterCatalog, state: FilterState) -> str:
    """Get a human-readable summary of active filters."""
    catalog = coerce_catalog(catalog)
    parts = []
    for instance in coerce_state(state):
        category = catalog.get(instance.category_id)
        if category is None or not instance.has_value:
            continue

        if isinstance(instance.value, MultiSelection) and len(instance.value.value_ids) <= 3:
            value = ", ".join(_multi_labels(catalog, category, instance.value))
        else:
            value = display_value(catalog, instance)
        if not value:
            continue
        parts.append(f"{category.label}: {value}")

    return " | ".join(parts) if parts else "No filters active"
