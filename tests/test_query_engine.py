"""Tests for the pure list query engine."""

import copy

import pytest

from student_registry.app.core.errors import ValidationError
from student_registry.app.services.query_engine import QueryConfig, query_from_params, run_query

ALICE = {"id": "1004803", "name": "Alice", "gpa": 4.0}
BOB = {"id": "1004529", "name": "Bob", "gpa": 3.6}
CAROL = {"id": "1004111", "name": "Carol", "gpa": 3.6}


def ids(result):
    return [r["id"] for r in result.items]


class TestScenarios:

    def test_empty_collection(self):
        result = run_query([], QueryConfig())
        assert result.items == []
        assert result.total == 0

    def test_sort_by_gpa_ascending(self):
        result = run_query([ALICE, BOB], QueryConfig(sort_by="gpa"))
        assert [r["name"] for r in result.items] == ["Bob", "Alice"]
        assert result.total == 2

    def test_count_and_offset(self):
        records = [ALICE, BOB, CAROL]
        result = run_query(records, QueryConfig(count=2, offset=1))
        assert result.items == [BOB, CAROL]
        assert result.total == 3


class TestPagination:

    @pytest.mark.parametrize("offset", [3, 4, 100])
    def test_offset_past_end_is_empty(self, offset):
        result = run_query([ALICE, BOB, CAROL], QueryConfig(offset=offset))
        assert result.items == []
        assert result.total == 3

    def test_count_larger_than_collection_is_clamped(self):
        assert ids(run_query([ALICE, BOB], QueryConfig(count=10))) == ["1004803", "1004529"]

    def test_count_zero(self):
        assert run_query([ALICE, BOB], QueryConfig(count=0)).items == []

    def test_offset_zero_is_noop(self):
        assert run_query([ALICE, BOB], QueryConfig(offset=0)).items == [ALICE, BOB]

    @pytest.mark.parametrize("config", [QueryConfig(offset=-1), QueryConfig(count=-1)])
    def test_negative_bounds_are_rejected(self, config):
        with pytest.raises(ValidationError, match="negative"):
            run_query([ALICE], config)

    def test_negative_bound_is_rejected_on_empty_collection(self):
        with pytest.raises(ValidationError):
            run_query([], QueryConfig(count=-5))

    def test_non_integer_bound_is_rejected(self):
        with pytest.raises(ValidationError, match="integer"):
            run_query([ALICE], QueryConfig(count="2"))


class TestSorting:

    def test_stable_for_equal_values(self):
        records = [BOB, ALICE, CAROL]
        # Bob and Carol share gpa 3.6 and keep their input order.
        assert ids(run_query(records, QueryConfig(sort_by="gpa"))) == ["1004529", "1004111", "1004803"]
        assert ids(run_query([CAROL, ALICE, BOB], QueryConfig(sort_by="gpa"))) == [
            "1004111",
            "1004529",
            "1004803",
        ]

    def test_missing_field_sorts_last(self):
        no_gpa = {"id": "1000001", "name": "Zero"}
        null_gpa = {"id": "1000002", "name": "Null", "gpa": None}
        records = [no_gpa, ALICE, null_gpa, BOB]
        assert ids(run_query(records, QueryConfig(sort_by="gpa"))) == [
            "1004529",
            "1004803",
            "1000001",
            "1000002",
        ]

    def test_numeric_field_sorts_numerically(self):
        records = [{"id": "a", "name": "A", "gpa": 10}, {"id": "b", "name": "B", "gpa": 9.5}]
        assert ids(run_query(records, QueryConfig(sort_by="gpa"))) == ["b", "a"]

    def test_text_field_sorts_lexicographically(self):
        records = [{"id": "9", "name": "x"}, {"id": "10", "name": "y"}]
        assert ids(run_query(records, QueryConfig(sort_by="id"))) == ["10", "9"]

    def test_sort_by_name(self):
        assert [r["name"] for r in run_query([CAROL, ALICE, BOB], QueryConfig(sort_by="name")).items] == [
            "Alice",
            "Bob",
            "Carol",
        ]

    def test_sort_then_paginate(self):
        result = run_query([ALICE, BOB, CAROL], QueryConfig(sort_by="name", count=1, offset=1))
        assert result.items == [BOB]

    def test_unknown_field_is_rejected(self):
        with pytest.raises(ValidationError, match="unknown field"):
            run_query([ALICE], QueryConfig(sort_by="height"))

    def test_undeclared_extra_attribute_is_not_sortable(self):
        with pytest.raises(ValidationError):
            run_query([{**ALICE, "major": "ISTD"}], QueryConfig(sort_by="major"))

    def test_non_numeric_value_in_numeric_field_is_rejected(self):
        with pytest.raises(ValidationError, match="non-numeric"):
            run_query([ALICE, {"id": "x", "name": "X", "gpa": "A+"}], QueryConfig(sort_by="gpa"))

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_value_in_numeric_field_is_rejected(self, value):
        records = [ALICE, {"id": "n", "name": "N", "gpa": value}, BOB]
        with pytest.raises(ValidationError, match="non-finite"):
            run_query(records, QueryConfig(sort_by="gpa"))

    def test_custom_schema(self):
        records = [{"id": "a", "age": 30}, {"id": "b", "age": 20}]
        assert ids(run_query(records, QueryConfig(sort_by="age"), schema={"age": "numeric"})) == ["b", "a"]


class TestPurity:

    def test_input_is_not_modified(self):
        records = [ALICE, BOB, CAROL]
        before = copy.deepcopy(records)
        run_query(records, QueryConfig(sort_by="gpa", count=1, offset=1))
        assert records == before

    def test_same_query_twice_gives_same_page(self):
        records = [CAROL, ALICE, BOB]
        config = QueryConfig(sort_by="gpa", count=2)
        assert run_query(records, config).items == run_query(records, config).items


class TestQueryFromParams:

    def test_empty_sort_by_means_absent(self):
        assert query_from_params(sort_by="") == QueryConfig()

    def test_values_are_passed_through(self):
        assert query_from_params("gpa", 2, 1) == QueryConfig(sort_by="gpa", count=2, offset=1)

    def test_raw_strings_are_parsed(self):
        assert query_from_params("gpa", "2", " 1 ") == QueryConfig(sort_by="gpa", count=2, offset=1)

    def test_empty_bounds_mean_absent(self):
        assert query_from_params(count="", offset="") == QueryConfig()

    @pytest.mark.parametrize("raw", ["abc", "1.5", "2x"])
    def test_unparseable_count_is_rejected(self, raw):
        with pytest.raises(ValidationError, match="count: must be an integer"):
            query_from_params(count=raw)

    def test_negative_string_is_rejected_by_run_query(self):
        config = query_from_params(offset="-1")
        with pytest.raises(ValidationError, match="offset: must not be negative"):
            run_query([ALICE], config)
