"""Conversion of raw filter values into typed selections.

The selection type is always chosen from the owning category's declared
variant, never from the shape of the raw value alone.
"""

import math
import numbers
from typing import Any, Dict, Iterable, List, Optional, Type

import pandas as pd

from .models import (
    FilterCategory,
    MultiSelection,
    RangeSelection,
    Selection,
    SingleSelection,
    Variant,
)

# Record field values treated as "no value" by the null option
NULLISH_STRINGS = ("", "none", "null")

SELECTION_TYPES: Dict[Variant, Type] = {
    Variant.SINGLE: SingleSelection,
    Variant.MULTI: MultiSelection,
    Variant.RANGE: RangeSelection,
}

LIST_TYPES = (list, tuple, set, frozenset)


def is_nullish(value: Any) -> bool:
    """
    Check whether a record field counts as empty.

    None, the empty string and the literal strings "none"/"null" are empty.
    Missing values coming from pandas (NaN, NA, NaT) are empty as well.
    Lists, even empty ones, are never empty in this sense.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value in NULLISH_STRINGS
    if isinstance(value, LIST_TYPES) or isinstance(value, dict):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def is_real_number(value: Any) -> bool:
    """True for finite-or-infinite real numbers, excluding bools and NaN."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return not math.isnan(float(value))


def selection_fits(category: FilterCategory, selection: Any) -> bool:
    """Whether ``selection`` is the selection type of the category's variant."""
    expected = SELECTION_TYPES.get(category.variant)
    return expected is not None and isinstance(selection, expected)


def coerce_selection(
    category: FilterCategory,
    raw: Any,
    null_option_id: Optional[str] = None,
) -> Optional[Selection]:
    """
    Convert a raw value into the selection type of ``category``.

    Accepted shapes:
        single-select: a value id string (or SingleSelection)
        multi-select:  a list, tuple or set of value id strings (or MultiSelection)
        range:         a pair of real numbers ``(low, high)`` (or RangeSelection)

    Value ids must belong to the category, or be the null option id.

    Args:
        category: Category owning the value.
        raw: Raw value supplied by the caller.
        null_option_id: Id of the catalog's null option, if any.

    Returns:
        The typed selection, or None if ``raw`` does not fit the variant.
    """
    allowed = set(category.value_ids)
    if null_option_id:
        allowed.add(null_option_id)

    if category.variant is Variant.SINGLE:
        if isinstance(raw, SingleSelection):
            raw = raw.value_id
        if isinstance(raw, str) and raw in allowed:
            return SingleSelection(value_id=raw)
        return None

    if category.variant is Variant.MULTI:
        if isinstance(raw, MultiSelection):
            raw = raw.value_ids
        if isinstance(raw, (set, frozenset)):
            items = sorted(raw, key=str)
        elif isinstance(raw, (list, tuple)):
            items = list(raw)
        else:
            return None
        if not all(isinstance(item, str) and item in allowed for item in items):
            return None
        # De-duplicate, keeping pick order
        return MultiSelection(value_ids=tuple(dict.fromkeys(items)))

    if category.variant is Variant.RANGE:
        if isinstance(raw, RangeSelection):
            raw = (raw.low, raw.high)
        if not isinstance(raw, (list, tuple)) or len(raw) != 2:
            return None
        low, high = raw
        if not (is_real_number(low) and is_real_number(high)) or low > high:
            return None
        return RangeSelection(low=low, high=high)

    return None


def selection_ids(
    selection: Optional[Selection],
    exclude: Optional[str] = None,
) -> List[str]:
    """
    Flatten a selection to its discrete value ids.

    Ranges have no discrete values and contribute nothing.

    Args:
        selection: Selection to flatten (None contributes nothing).
        exclude: Optional id to leave out, e.g. the null option id.

    Returns:
        List of value ids in selection order.
    """
    if isinstance(selection, SingleSelection):
        ids: Iterable[str] = [selection.value_id]
    elif isinstance(selection, MultiSelection):
        ids = selection.value_ids
    else:
        return []
    return [value_id for value_id in ids if value_id != exclude]
