"""Filter state store.

A FilterState is an immutable, ordered collection of filter instances owned
by the caller. Every transition returns a new state wrapped in a StateChange;
the input state is never modified.
"""

import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .config import get_logger
from .models import FilterCatalog, FilterInstance, Selection, coerce_catalog
from .normalizer import coerce_selection

logger = get_logger("state")


@dataclass(frozen=True)
class StateChange:
    """Result of a state transition."""

    state: "FilterState"
    instance_id: Optional[str] = None
    applied: bool = True
    errors: Tuple[str, ...] = ()

    @classmethod
    def rejected(cls, state: "FilterState", message: str, instance_id: Optional[str] = None) -> "StateChange":
        logger.warning(message)
        return cls(state=state, instance_id=instance_id, applied=False, errors=(message,))


@dataclass(frozen=True)
class FilterState:
    """Ordered, immutable sequence of active filter instances."""

    instances: Tuple[FilterInstance, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[FilterInstance]:
        return iter(self.instances)

    def __len__(self) -> int:
        return len(self.instances)

    @property
    def is_empty(self) -> bool:
        return not self.instances

    @property
    def active_filter_count(self) -> int:
        """Count of instances that currently constrain records."""
        return sum(1 for instance in self.instances if instance.has_value)

    @property
    def instance_ids(self) -> List[str]:
        return [instance.id for instance in self.instances]

    def get(self, instance_id: str) -> Optional[FilterInstance]:
        for instance in self.instances:
            if instance.id == instance_id:
                return instance
        return None

    def instances_for(self, category_id: str) -> List[FilterInstance]:
        """All instances referencing ``category_id``, in state order."""
        return [i for i in self.instances if i.category_id == category_id]

    def selected_values(self) -> Dict[str, List[Selection]]:
        """Map of category id to the selections made for it, in state order."""
        result: Dict[str, List[Selection]] = {}
        for instance in self.instances:
            if instance.value is not None:
                result.setdefault(instance.category_id, []).append(instance.value)
        return result

    def to_dict(self) -> List[Dict[str, Any]]:
        return [instance.to_dict() for instance in self.instances]

    def add_instance(
        self,
        catalog: FilterCatalog,
        category_id: str,
        instance_id: Optional[str] = None,
    ) -> StateChange:
        """
        Append a new instance of ``category_id`` with no value.

        Args:
            catalog: Catalog the category must exist in.
            category_id: Category to add an instance of.
            instance_id: Optional explicit id; a random UUID is used otherwise.

        Returns:
            StateChange carrying the new instance id, or a rejected change
            if the category is unknown or the id is already taken.
        """
        catalog = coerce_catalog(catalog)
        if catalog.get(category_id) is None:
            return StateChange.rejected(self, f"Unknown filter category: {category_id!r}")

        new_id = instance_id if instance_id is not None else str(uuid.uuid4())
        if self.get(new_id) is not None:
            return StateChange.rejected(self, f"Duplicate filter instance id: {new_id!r}")

        instance = FilterInstance(id=new_id, category_id=category_id, value=None)
        logger.debug(f"Added filter instance {new_id} for category {category_id}")
        return StateChange(state=FilterState(self.instances + (instance,)), instance_id=new_id)

    def update_instance_value(
        self,
        catalog: FilterCatalog,
        instance_id: str,
        value: Any,
    ) -> StateChange:
        """
        Replace the value of an existing instance.

        The value must fit the variant of the instance's category; otherwise
        the update is ignored and the prior value is kept.

        Args:
            catalog: Catalog used to resolve the instance's category.
            instance_id: Instance to update.
            value: Raw value or selection (see ``coerce_selection``).

        Returns:
            StateChange with the updated state, or a rejected change.
        """
        catalog = coerce_catalog(catalog)
        instance = self.get(instance_id)
        if instance is None:
            return StateChange.rejected(self, f"Unknown filter instance: {instance_id!r}", instance_id)

        category = catalog.get(instance.category_id)
        if category is None:
            return StateChange.rejected(
                self,
                f"Instance {instance_id} references unknown category {instance.category_id!r}",
                instance_id,
            )

        selection = coerce_selection(category, value, catalog.null_option_id)
        if selection is None:
            return StateChange.rejected(
                self,
                f"Value {value!r} does not fit {category.variant.value} category {category.id!r}",
                instance_id,
            )

        updated = tuple(
            replace(existing, value=selection) if existing.id == instance_id else existing
            for existing in self.instances
        )
        logger.debug(f"Updated filter instance {instance_id}: {selection}")
        return StateChange(state=FilterState(updated), instance_id=instance_id)

    def remove_instance(self, instance_id: str) -> StateChange:
        """Remove one instance; every other instance is left untouched."""
        if self.get(instance_id) is None:
            return StateChange.rejected(self, f"Unknown filter instance: {instance_id!r}", instance_id)

        remaining = tuple(i for i in self.instances if i.id != instance_id)
        logger.debug(f"Removed filter instance {instance_id}")
        return StateChange(state=FilterState(remaining), instance_id=instance_id)

    def clear_all(self) -> StateChange:
        """Drop every instance."""
        logger.debug(f"Cleared {len(self.instances)} filter instances")
        return StateChange(state=FilterState())

    @classmethod
    def from_selections(
        cls,
        catalog: FilterCatalog,
        selections: Iterable[Dict[str, Any]],
    ) -> "FilterState":
        """
        Build an initial state from ``[{"id": category_id, "value": raw}]``.

        Entries naming an unknown category are skipped. An entry whose value
        does not fit its category keeps the instance with no value.

        Args:
            catalog: Catalog to resolve categories against.
            selections: Initial selections, one instance per entry.

        Returns:
            New FilterState.
        """
        catalog = coerce_catalog(catalog)
        state = cls()
        if not isinstance(selections, (list, tuple)):
            logger.warning("Initial selections are not a list; starting from an empty state")
            return state

        for entry in selections:
            if not isinstance(entry, dict):
                logger.warning(f"Skipping malformed initial selection: {entry!r}")
                continue
            change = state.add_instance(catalog, entry.get("id"))
            if not change.applied:
                continue
            state = change.state
            if entry.get("value") is not None:
                state = state.update_instance_value(catalog, change.instance_id, entry["value"]).state
        return state


def coerce_state(state: Any) -> FilterState:
    """
    Accept a FilterState or a plain sequence of instances.

    Anything else is malformed input and degrades to an empty state.
    """
    if isinstance(state, FilterState):
        return state
    if isinstance(state, (list, tuple)):
        return FilterState(tuple(i for i in state if isinstance(i, FilterInstance)))
    if state is not None:
        logger.warning(f"Filter state is not list-shaped ({type(state).__name__}); treating as empty")
    return FilterState()
