"""Tests for the mapping store, validator and display projection."""

import random

import pytest

from csvbridge.mapping import (
    NA_LABEL,
    NA_SENTINEL,
    HeaderNotFoundError,
    MappingEdit,
    MappingStore,
    MappingValidator,
    NothingMappedError,
    TargetField,
    build_display_rows,
    clean_mapping,
    is_clean,
)


@pytest.fixture
def store():
    """A store bound to a three-column file."""
    return MappingStore(["Name", "Email", "Phone"])


# Store Tests


class TestMappingStore:
    """Test MappingStore operations."""

    def test_starts_empty(self, store):
        assert store.mapping == {}
        assert len(store) == 0

    def test_set_valid_header(self, store):
        store.set("Email__c", "Email")
        assert store.mapping == {"Email__c": "Email"}
        assert "Email__c" in store
        assert store.get("Email__c") == "Email"

    def test_set_unknown_header_is_rejected(self, store):
        store.set("Email__c", "Email")

        with pytest.raises(HeaderNotFoundError) as exc_info:
            store.set("Email__c", "Mail")

        assert exc_info.value.header == "Mail"
        assert store.mapping == {"Email__c": "Email"}

    @pytest.mark.parametrize("value", [NA_SENTINEL, "", "   "])
    def test_set_sentinel_or_blank_is_rejected(self, store, value):
        with pytest.raises(HeaderNotFoundError):
            store.set("Name__c", value)
        assert store.mapping == {}

    def test_mapping_is_a_copy(self, store):
        store.set("Name__c", "Name")
        snapshot = store.mapping
        snapshot["Name__c"] = "Bogus"
        snapshot["Other__c"] = "Phone"
        assert store.mapping == {"Name__c": "Name"}

    def test_set_produces_new_value(self, store):
        before = store.mapping
        store.set("Name__c", "Name")
        assert before == {}

    def test_clear_is_idempotent(self, store):
        store.set("Name__c", "Name")
        assert store.clear("Name__c") is True
        assert store.clear("Name__c") is False
        assert store.mapping == {}

    def test_reset_drops_only_missing_headers(self, store):
        store.set("Name__c", "Name")
        store.set("Email__c", "Email")

        store.reset_for_new_headers(["Email", "Mobile"])

        assert store.headers == ("Email", "Mobile")
        assert store.mapping == {"Email__c": "Email"}

    def test_replace_cleans_against_headers(self, store):
        store.replace({"Name__c": "Name", "Email__c": "Old Email", "Phone__c": NA_SENTINEL})
        assert store.mapping == {"Name__c": "Name"}

    def test_apply_edits(self, store):
        store.set("Phone__c", "Phone")

        rejected = store.apply_edits(
            [
                MappingEdit(api_name="Name__c", mapped_to="Name"),
                MappingEdit(api_name="Phone__c", mapped_to=NA_SENTINEL),
                MappingEdit(api_name="Email__c", mapped_to="Missing"),
                MappingEdit(api_name="Other__c", mapped_to=None),
            ]
        )

        assert store.mapping == {"Name__c": "Name"}
        assert [e.header for e in rejected] == ["Missing"]

    def test_edit_accepts_wire_names(self):
        edit = MappingEdit.model_validate({"apiName": "Name__c", "mappedTo": "Name"})
        assert edit.api_name == "Name__c"
        assert edit.mapped_to == "Name"

    def test_invariant_holds_after_random_operations(self):
        rng = random.Random(42)
        header_pool = ["A", "B", "C", "D", "E", NA_SENTINEL, "", " "]
        fields = ["f1", "f2", "f3", "f4"]
        store = MappingStore(["A", "B", "C"])

        for _ in range(300):
            op = rng.choice(["set", "clear", "reset", "edit"])
            if op == "set":
                try:
                    store.set(rng.choice(fields), rng.choice(header_pool))
                except HeaderNotFoundError:
                    pass
            elif op == "clear":
                store.clear(rng.choice(fields))
            elif op == "reset":
                store.reset_for_new_headers(rng.sample(["A", "B", "C", "D", "E"], k=3))
            else:
                store.apply_edits(
                    [MappingEdit(api_name=rng.choice(fields), mapped_to=rng.choice(header_pool))]
                )

            assert all(value in store.headers for value in store.mapping.values())
            assert is_clean(store.mapping, store.headers)


# Validator Tests


class TestCleanMapping:
    """Test mapping cleaning."""

    def test_drops_sentinel_blank_and_unknown(self):
        mapping = {
            "a": "Name",
            "b": NA_SENTINEL,
            "c": "",
            "d": "   ",
            "e": "Gone",
            "f": None,
        }
        assert clean_mapping(mapping, ["Name", "Email"]) == {"a": "Name"}

    def test_is_idempotent(self):
        headers = ["Name", "Email"]
        once = clean_mapping({"a": "Name", "b": "Gone", "c": "Email"}, headers)
        assert clean_mapping(once, headers) == once

    def test_all_invalid_yields_empty(self):
        assert clean_mapping({"a": NA_SENTINEL, "b": "Old"}, ["New"]) == {}

    def test_does_not_mutate_input(self):
        mapping = {"a": "Gone"}
        clean_mapping(mapping, ["Name"])
        assert mapping == {"a": "Gone"}


class TestMappingValidator:
    """Test MappingValidator."""

    def test_clean(self):
        validator = MappingValidator()
        assert validator.clean({"a": "Name", "b": "Gone"}, ["Name"]) == {"a": "Name"}

    def test_require_entries_raises_when_nothing_survives(self):
        validator = MappingValidator()
        with pytest.raises(NothingMappedError):
            validator.require_entries({"a": NA_SENTINEL, "b": "Old"}, ["New"])

    def test_require_entries_returns_cleaned(self):
        validator = MappingValidator()
        assert validator.require_entries({"a": "New", "b": "Old"}, ["New"]) == {"a": "New"}


# Display Tests


class TestDisplayRows:
    """Test the mapping table projection."""

    def test_rows_follow_field_order(self):
        fields = [
            TargetField(api_name="B__c", label="B"),
            TargetField(api_name="A__c", label="A"),
        ]
        rows = build_display_rows(fields, {"A__c": "Col1"}, ["Col1", "Col2"])

        assert [r.api_name for r in rows] == ["B__c", "A__c"]
        assert rows[0].mapped_to == ""
        assert rows[1].mapped_to == "Col1"

    def test_options_start_with_na_and_skip_blank_headers(self):
        fields = [TargetField(api_name="A__c", label="A")]
        rows = build_display_rows(fields, {}, ["Col1", "", "  ", "Col2"])

        options = rows[0].options
        assert options[0].value == NA_SENTINEL
        assert options[0].label == NA_LABEL
        assert [o.value for o in options[1:]] == ["Col1", "Col2"]

    def test_stale_value_shows_as_unmapped(self):
        fields = [TargetField(api_name="A__c", label="A")]
        rows = build_display_rows(fields, {"A__c": "Old"}, ["New"])
        assert rows[0].mapped_to == ""

    def test_store_projection_reflects_edits(self):
        fields = [TargetField(api_name="A__c", label="A")]
        store = MappingStore(["Col1"])
        assert store.display_rows(fields)[0].mapped_to == ""

        store.set("A__c", "Col1")
        assert store.display_rows(fields)[0].mapped_to == "Col1"

        store.clear("A__c")
        assert store.display_rows(fields)[0].mapped_to == ""

    def test_no_fields_no_rows(self):
        assert build_display_rows([], {"A__c": "Col1"}, ["Col1"]) == []
