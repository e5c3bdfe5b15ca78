"""Unit tests for list-query parsing and the filter combinators."""

import unittest
from datetime import UTC, datetime

from civreg.core.errors import ValidationError
from civreg.services.query_filter import (
    AnyOf,
    Condition,
    ListQuery,
    SortKey,
    parse_bool,
    parse_datetime,
    parse_sort,
    project,
    split_csv,
)


def build(params: dict[str, str]) -> ListQuery:
    query = ListQuery.from_params(params, default_limit=10, max_limit=100)
    return (
        query.with_equals("gender", query.param("gender"))
        .with_equals("maritalStatus", query.param("maritalStatus"))
        .with_text_search(("firstName", "lastName", "phoneNumber", "email"), query.param("search"))
        .with_date_range("createdAt", query.param("startDate"), query.param("endDate"))
        .with_flag("isCanceled", query.param("isCanceled"))
    )


class TestPagination(unittest.TestCase):
    def test_defaults(self) -> None:
        query = ListQuery.from_params({}, default_limit=10, max_limit=100)
        self.assertEqual((query.page, query.limit, query.skip), (1, 10, 0))
        self.assertEqual(query.sort, (SortKey("createdAt", True),))
        self.assertIsNone(query.select)
        self.assertIsNone(query.populate)

    def test_skip_from_page_and_limit(self) -> None:
        query = ListQuery.from_params({"page": "3", "limit": "20"})
        self.assertEqual(query.skip, 40)

    def test_invalid_values_fall_back_to_defaults(self) -> None:
        query = ListQuery.from_params({"page": "zero", "limit": "-5"}, default_limit=10)
        self.assertEqual((query.page, query.limit), (1, 10))

    def test_limit_is_capped(self) -> None:
        query = ListQuery.from_params({"limit": "5000"}, max_limit=100)
        self.assertEqual(query.limit, 100)


class TestParsing(unittest.TestCase):
    def test_sort_only_asc_is_ascending(self) -> None:
        self.assertEqual(
            parse_sort("createdAt:asc, title:desc,sort:whatever,name"),
            (
                SortKey("createdAt", False),
                SortKey("title", True),
                SortKey("sort", True),
                SortKey("name", True),
            ),
        )

    def test_absent_sort_is_newest_first(self) -> None:
        self.assertEqual(parse_sort(None), (SortKey("createdAt", True),))
        self.assertEqual(parse_sort(" , "), (SortKey("createdAt", True),))

    def test_split_csv_drops_blanks(self) -> None:
        self.assertEqual(split_csv("a, b,,c "), ("a", "b", "c"))
        self.assertEqual(split_csv(""), ())

    def test_parse_bool(self) -> None:
        self.assertTrue(parse_bool("true", "x"))
        self.assertFalse(parse_bool("FALSE", "x"))
        with self.assertRaises(ValidationError):
            parse_bool("maybe", "x")

    def test_bare_end_date_covers_whole_day(self) -> None:
        end = parse_datetime("2024-05-01", "endDate", end_of_day=True)
        self.assertEqual((end.hour, end.minute, end.second), (23, 59, 59))
        self.assertEqual(end.tzinfo, UTC)

    def test_invalid_date_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            parse_datetime("yesterday", "startDate")


class TestFilters(unittest.TestCase):
    def test_identical_inputs_produce_equal_queries(self) -> None:
        params = {
            "gender": "F",
            "search": "ann",
            "startDate": "2024-01-01",
            "endDate": "2024-12-31",
            "sort": "createdAt:asc",
            "select": "firstName,email",
        }
        self.assertEqual(build(params), build(dict(params)))

    def test_absent_or_empty_parameters_add_no_constraint(self) -> None:
        query = build({"gender": "", "maritalStatus": "   ", "search": "", "startDate": "", "isCanceled": ""})
        self.assertEqual(query.filters, ())

    def test_present_parameters_add_conditions(self) -> None:
        query = build({"gender": "M", "isCanceled": "false"})
        self.assertEqual(
            query.filters,
            (Condition("gender", "eq", "M"), Condition("isCanceled", "eq", False)),
        )

    def test_date_bounds_apply_independently(self) -> None:
        lower_only = build({"startDate": "2024-01-01"})
        self.assertEqual(len(lower_only.filters), 1)
        self.assertEqual(lower_only.filters[0].op, "gte")
        self.assertEqual(lower_only.filters[0].value, datetime(2024, 1, 1, tzinfo=UTC))

        upper_only = build({"endDate": "2024-01-31"})
        self.assertEqual(len(upper_only.filters), 1)
        self.assertEqual(upper_only.filters[0].op, "lte")

    def test_text_search_is_one_or_group(self) -> None:
        query = build({"search": " ann "})
        self.assertEqual(len(query.filters), 1)
        group = query.filters[0]
        self.assertIsInstance(group, AnyOf)
        self.assertEqual({c.field for c in group.conditions}, {"firstName", "lastName", "phoneNumber", "email"})
        self.assertTrue(all(c.op == "icontains" and c.value == "ann" for c in group.conditions))

    def test_combinators_do_not_mutate(self) -> None:
        base = ListQuery.from_params({})
        base.with_equals("gender", "F")
        self.assertEqual(base.filters, ())

    def test_invalid_integer_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            ListQuery.from_params({}).with_int("branchId", "abc")


class TestProject(unittest.TestCase):
    def test_keeps_selected_and_id(self) -> None:
        item = {"id": 1, "firstName": "Ann", "email": "a@example.com", "gender": "F"}
        self.assertEqual(project(item, ("firstName", "unknown")), {"id": 1, "firstName": "Ann"})

    def test_no_select_keeps_everything(self) -> None:
        item = {"id": 1, "firstName": "Ann"}
        self.assertEqual(project(item, None), item)
