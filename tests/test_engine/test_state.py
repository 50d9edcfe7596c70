"""Tests for the filter state store."""

from filter_engine.availability import addable_categories
from filter_engine.models import FilterCatalog, MultiSelection, RangeSelection, SingleSelection
from filter_engine.state import FilterState, coerce_state


class TestAddInstance:
    """Tests for adding instances."""

    def test_add_appends_instance_without_value(self, catalog, empty_state):
        change = empty_state.add_instance(catalog, "status")

        assert change.applied
        assert change.instance_id is not None
        instance = change.state.get(change.instance_id)
        assert instance.category_id == "status"
        assert instance.value is None
        assert empty_state.is_empty

    def test_generated_ids_are_unique(self, catalog, empty_state):
        state = empty_state
        for _ in range(20):
            state = state.add_instance(catalog, "tags").state

        assert len(set(state.instance_ids)) == 20

    def test_add_unknown_category_is_rejected(self, catalog, make_state):
        state = make_state(("s1", "status", "active"))

        change = state.add_instance(catalog, "missing")

        assert not change.applied
        assert change.state is state
        assert change.instance_id is None
        assert "missing" in change.errors[0]

    def test_add_duplicate_instance_id_is_rejected(self, catalog, make_state):
        state = make_state(("s1", "status", None))

        change = state.add_instance(catalog, "tags", instance_id="s1")

        assert not change.applied
        assert len(change.state) == 1

    def test_same_category_can_be_added_twice(self, catalog, make_state):
        state = make_state(("t1", "tags", None), ("t2", "tags", None))

        assert [i.id for i in state.instances_for("tags")] == ["t1", "t2"]

    def test_add_then_remove_restores_state(self, catalog, make_state):
        state = make_state(("s1", "status", "active"), ("t1", "tags", ["urgent"]))
        before_addable = addable_categories(catalog, state)

        for category in catalog:
            added = state.add_instance(catalog, category.id)
            removed = added.state.remove_instance(added.instance_id)

            assert removed.state == state
            assert addable_categories(catalog, removed.state) == before_addable


class TestUpdateInstanceValue:
    """Tests for updating instance values."""

    def test_update_each_variant(self, make_state):
        state = make_state(
            ("s1", "status", "inactive"),
            ("t1", "tags", ["urgent", "billing"]),
            ("a1", "age", [18, 65]),
        )

        assert state.get("s1").value == SingleSelection("inactive")
        assert state.get("t1").value == MultiSelection(("urgent", "billing"))
        assert state.get("a1").value == RangeSelection(18, 65)

    def test_type_mismatch_keeps_prior_value(self, catalog, make_state):
        state = make_state(("s1", "status", "active"), ("a1", "age", [1, 10]))

        for instance_id, value in [("s1", ["inactive"]), ("a1", "young"), ("a1", [10, 1])]:
            change = state.update_instance_value(catalog, instance_id, value)
            assert not change.applied
            assert change.state is state

        assert state.get("s1").value == SingleSelection("active")
        assert state.get("a1").value == RangeSelection(1, 10)

    def test_update_unknown_instance(self, catalog, empty_state):
        change = empty_state.update_instance_value(catalog, "nope", "active")

        assert not change.applied
        assert change.errors

    def test_update_does_not_mutate_input(self, catalog, make_state):
        state = make_state(("s1", "status", "active"))

        change = state.update_instance_value(catalog, "s1", "pending")

        assert state.get("s1").value == SingleSelection("active")
        assert change.state.get("s1").value == SingleSelection("pending")

    def test_update_instance_with_unknown_category(self, catalog, make_state):
        state = make_state(("p1", "payerFamily", None))
        narrow = FilterCatalog.from_categories([c for c in catalog if c.id != "payerFamily"])

        change = state.update_instance_value(narrow, "p1", "Aetna")

        assert not change.applied


class TestRemoveAndClear:
    """Tests for removing instances."""

    def test_remove_leaves_others_untouched(self, catalog, make_state):
        state = make_state(
            ("t1", "tags", ["urgent"]),
            ("t2", "tags", ["billing"]),
            ("s1", "status", "active"),
        )

        change = state.remove_instance("t1")

        assert change.state.instance_ids == ["t2", "s1"]
        assert change.state.get("t2") is state.get("t2")
        assert change.state.get("s1") is state.get("s1")

    def test_remove_unknown_instance(self, make_state):
        state = make_state(("s1", "status", "active"))

        change = state.remove_instance("nope")

        assert not change.applied
        assert change.state is state

    def test_clear_all(self, make_state):
        state = make_state(("s1", "status", "active"), ("a1", "age", [1, 2]))

        change = state.clear_all()

        assert change.state.is_empty
        assert len(state) == 2


class TestStateHelpers:
    """Tests for state queries and construction."""

    def test_active_filter_count(self, make_state):
        state = make_state(
            ("s1", "status", "active"),
            ("t1", "tags", []),
            ("a1", "age", None),
        )

        assert state.active_filter_count == 1

    def test_selected_values(self, make_state):
        state = make_state(("t1", "tags", ["urgent"]), ("t2", "tags", ["review"]), ("s1", "status", None))

        assert state.selected_values() == {
            "tags": [MultiSelection(("urgent",)), MultiSelection(("review",))],
        }

    def test_from_selections(self, catalog):
        state = FilterState.from_selections(catalog, [
            {"id": "status", "value": "active"},
            {"id": "missing", "value": "x"},
            {"id": "tags"},
            {"id": "age", "value": "bad"},
            "garbage",
        ])

        assert [i.category_id for i in state] == ["status", "tags", "age"]
        assert state.instances[0].value == SingleSelection("active")
        assert state.instances[1].value is None
        assert state.instances[2].value is None

    def test_from_selections_malformed(self, catalog):
        assert FilterState.from_selections(catalog, "status=active").is_empty

    def test_coerce_state(self, make_state):
        state = make_state(("s1", "status", "active"))

        assert coerce_state(state) is state
        assert coerce_state(list(state.instances)) == state
        assert coerce_state({"bad": "input"}).is_empty
        assert coerce_state(None).is_empty

    def test_transitions_accept_plain_catalog(self, catalog, empty_state):
        categories = list(catalog.categories)

        change = empty_state.add_instance(categories, "tags", instance_id="t1")
        updated = change.state.update_instance_value(categories, "t1", ["urgent"])

        assert updated.applied
        assert updated.state.get("t1").value == MultiSelection(("urgent",))
        assert not empty_state.add_instance(None, "tags").applied
        assert FilterState.from_selections(None, [{"id": "status", "value": "active"}]).is_empty
