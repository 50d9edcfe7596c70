"""Core data model for the filter engine.

Categories, values and the catalog are read-only input defined by the caller.
Instances and selections are created by the state store and never mutated
after creation.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Tuple, Union

from .config import config, get_logger

logger = get_logger("models")


class Variant(str, Enum):
    """Shape of the values a category accepts."""

    SINGLE = "single-select"
    MULTI = "multi-select"
    RANGE = "range"

    @classmethod
    def parse(cls, raw: Any) -> "Variant":
        """
        Parse a variant name.

        Accepts the canonical names as well as the picker names used by the
        filter-pill UI ("command", "checkbox", "slider").

        Raises:
            ValueError: If the name is not recognised.
        """
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            key = raw.strip().lower()
            if key in VARIANT_ALIASES:
                return VARIANT_ALIASES[key]
        raise ValueError(f"Unknown filter variant: {raw!r}")


VARIANT_ALIASES: Dict[str, Variant] = {
    "single-select": Variant.SINGLE,
    "single": Variant.SINGLE,
    "command": Variant.SINGLE,
    "multi-select": Variant.MULTI,
    "multi": Variant.MULTI,
    "checkbox": Variant.MULTI,
    "range": Variant.RANGE,
    "slider": Variant.RANGE,
}


class MatchMode(str, Enum):
    """How a dependent category's values are matched against parent values."""

    SUBSTRING = "substring"
    EXACT = "exact"


@dataclass(frozen=True)
class FilterValue:
    """A single selectable value within a filter category."""

    id: str
    label: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "label": self.label}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterValue":
        """Create from dictionary. The label defaults to the id."""
        value_id = str(data["id"])
        return cls(id=value_id, label=str(data.get("label", value_id)))


@dataclass(frozen=True)
class FilterDependency:
    """Declares that a category's values are narrowed by a parent category."""

    depends_on: str
    match_mode: MatchMode = MatchMode.SUBSTRING

    def to_dict(self) -> Dict[str, str]:
        return {"depends_on": self.depends_on, "match_mode": self.match_mode.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterDependency":
        """Create from dictionary (snake_case or camelCase keys)."""
        parent = data.get("depends_on", data.get("dependsOn"))
        if not parent:
            raise KeyError("depends_on")
        mode = data.get("match_mode", data.get("matchMode", data.get("matchType")))
        return cls(
            depends_on=str(parent),
            match_mode=MatchMode(mode) if mode else MatchMode.SUBSTRING,
        )


@dataclass(frozen=True)
class FilterCategory:
    """A named axis of filtering with a declared variant and its values."""

    id: str
    label: str
    variant: Variant
    values: Tuple[FilterValue, ...] = ()
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    dependency: Optional[FilterDependency] = None

    @property
    def value_ids(self) -> Tuple[str, ...]:
        return tuple(v.id for v in self.values)

    def get_value(self, value_id: str) -> Optional[FilterValue]:
        """Look up one of this category's values by id."""
        for value in self.values:
            if value.id == value_id:
                return value
        return None

    def with_values(self, values: List[FilterValue]) -> "FilterCategory":
        """Return a copy of this category offering only ``values``."""
        return replace(self, values=tuple(values))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage."""
        data: Dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "variant": self.variant.value,
            "values": [v.to_dict() for v in self.values],
        }
        for key in ("min", "max", "step"):
            if getattr(self, key) is not None:
                data[key] = getattr(self, key)
        if self.dependency:
            data["dependency"] = self.dependency.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterCategory":
        """
        Create from dictionary.

        Raises:
            KeyError: If ``id`` is missing.
            ValueError: If the variant is missing or not recognised, or the
                match mode is not recognised.
        """
        category_id = str(data["id"])
        dependency = data.get("dependency")
        return cls(
            id=category_id,
            label=str(data.get("label", category_id)),
            # The value picker's variant decides the selection shape
            variant=Variant.parse(data.get("childVariant", data.get("variant"))),
            values=tuple(
                v if isinstance(v, FilterValue) else FilterValue.from_dict(v)
                for v in data.get("values") or []
            ),
            min=data.get("min"),
            max=data.get("max"),
            step=data.get("step"),
            dependency=(
                dependency
                if isinstance(dependency, FilterDependency) or dependency is None
                else FilterDependency.from_dict(dependency)
            ),
        )


@dataclass(frozen=True)
class SingleSelection:
    """One value id picked from a single-select category."""

    variant: ClassVar[Variant] = Variant.SINGLE
    value_id: str


@dataclass(frozen=True)
class MultiSelection:
    """A set of value ids picked from a multi-select category, in pick order."""

    variant: ClassVar[Variant] = Variant.MULTI
    value_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RangeSelection:
    """An inclusive numeric interval. Always ``low <= high``."""

    variant: ClassVar[Variant] = Variant.RANGE
    low: float
    high: float

    def contains(self, number: float) -> bool:
        return self.low <= number <= self.high


Selection = Union[SingleSelection, MultiSelection, RangeSelection]


@dataclass(frozen=True)
class FilterInstance:
    """One concrete, active use of a category within the filter state."""

    id: str
    category_id: str
    value: Optional[Selection] = None

    @property
    def has_value(self) -> bool:
        """Whether this instance constrains anything."""
        if self.value is None:
            return False
        if isinstance(self.value, MultiSelection):
            return bool(self.value.value_ids)
        return True

    def to_dict(self) -> Dict[str, Any]:
        value: Any = None
        if isinstance(self.value, SingleSelection):
            value = self.value.value_id
        elif isinstance(self.value, MultiSelection):
            value = list(self.value.value_ids)
        elif isinstance(self.value, RangeSelection):
            value = [self.value.low, self.value.high]
        return {"id": self.id, "category_id": self.category_id, "value": value}


@dataclass(frozen=True)
class FilterCatalog:
    """
    The read-only set of filter categories a state may reference.

    The optional ``null_option`` is the "unset/none" pseudo-value offered by
    every discrete category. It matches records whose field is absent or
    explicitly empty.
    """

    categories: Tuple[FilterCategory, ...] = ()
    null_option: Optional[FilterValue] = None
    _index: Dict[str, FilterCategory] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        index: Dict[str, FilterCategory] = {}
        for category in self.categories:
            index.setdefault(category.id, category)
        object.__setattr__(self, "_index", index)

    def __iter__(self) -> Iterator[FilterCategory]:
        return iter(self.categories)

    def __len__(self) -> int:
        return len(self.categories)

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._index

    @property
    def ids(self) -> List[str]:
        return [c.id for c in self.categories]

    @property
    def null_option_id(self) -> Optional[str]:
        return self.null_option.id if self.null_option else None

    def get(self, category_id: str) -> Optional[FilterCategory]:
        """Look up a category by id, or None if the catalog has no such category."""
        if not isinstance(category_id, str):
            return None
        return self._index.get(category_id)

    @classmethod
    def from_categories(
        cls,
        categories: Any,
        include_null: Union[bool, FilterValue, Dict[str, Any]] = False,
    ) -> "FilterCatalog":
        """
        Build a catalog from categories or their dictionary form.

        Malformed input degrades instead of raising: anything that is not a
        list yields an empty catalog, and entries that cannot be parsed or
        that repeat an earlier id are skipped.

        Args:
            categories: List of FilterCategory objects or dicts.
            include_null: True to offer the configured null option, or an
                explicit FilterValue / dict to use as the null option.

        Returns:
            FilterCatalog with the valid categories in input order.
        """
        null_option = _resolve_null_option(include_null)

        if not isinstance(categories, (list, tuple)):
            logger.warning(
                f"Catalog input is not a list ({type(categories).__name__}); using empty catalog"
            )
            return cls(categories=(), null_option=null_option)

        parsed: List[FilterCategory] = []
        seen = set()
        for entry in categories:
            try:
                category = entry if isinstance(entry, FilterCategory) else FilterCategory.from_dict(entry)
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping malformed category {entry!r}: {e}")
                continue
            if category.id in seen:
                logger.warning(f"Skipping duplicate category id: {category.id}")
                continue
            seen.add(category.id)
            parsed.append(category)

        return cls(categories=tuple(parsed), null_option=null_option)


def coerce_catalog(catalog: Any) -> FilterCatalog:
    """
    Accept a FilterCatalog or a plain list of categories.

    Anything else is malformed input and degrades to an empty catalog.
    """
    if isinstance(catalog, FilterCatalog):
        return catalog
    if isinstance(catalog, (list, tuple)):
        return FilterCatalog.from_categories(catalog)
    logger.warning(f"Catalog is not list-shaped ({type(catalog).__name__}); treating as empty")
    return FilterCatalog()


def _resolve_null_option(include_null: Union[bool, FilterValue, Dict[str, Any]]) -> Optional[FilterValue]:
    if isinstance(include_null, FilterValue):
        return include_null
    if isinstance(include_null, dict):
        return FilterValue.from_dict(include_null)
    if include_null:
        return FilterValue(id=config.null_option.id, label=config.null_option.label)
    return None
