import pytest

from dyngraph.core.errors import InvalidQueryError
from dyngraph.core.query_types import NormalizedOrder, QueryPlan
from dyngraph.core.sanitizer import sanitize_filter, sanitize_query, sanitize_sort
from dyngraph.runtime.context import Accountability


def test_numbers_are_coerced():
    plan = sanitize_query({"limit": "5", "offset": "10", "page": "2"})

    assert (plan.limit, plan.offset, plan.page) == (5, 10, 2)


def test_unlimited_is_kept():
    assert sanitize_query({"limit": "-1"}).limit == -1


def test_invalid_limit_raises():
    with pytest.raises(InvalidQueryError):
        sanitize_query({"limit": "many"})


def test_sort_accepts_string_and_list():
    expected = [NormalizedOrder(field="date", dir="desc"), NormalizedOrder(field="title")]

    assert sanitize_sort("-date,title") == expected
    assert sanitize_sort(["-date", "title"]) == expected


def test_search_must_be_a_string():
    assert sanitize_query({"search": "cats"}).search == "cats"
    assert sanitize_query({"search": ["cats"]}).search is None


def test_unknown_keys_are_ignored():
    assert sanitize_query({"bogus": 1}) == QueryPlan()


def test_filter_leaves_are_parsed():
    result = sanitize_filter({"_and": [{"id": {"_eq": "1"}}, {"published": {"_eq": "true"}}, {"title": {"_eq": "Hi"}}]})

    assert result == {"_and": [{"id": {"_eq": 1}}, {"published": {"_eq": True}}, {"title": {"_eq": "Hi"}}]}


def test_and_keeps_every_branch_on_the_same_field():
    result = sanitize_filter({"_and": [{"views": {"_eq": "1"}}, {"views": {"_eq": "2"}}]})

    assert result == {"_and": [{"views": {"_eq": 1}}, {"views": {"_eq": 2}}]}


def test_non_standard_json_constants_stay_strings():
    result = sanitize_filter({"title": {"_in": ["NaN", "Infinity", "-Infinity"]}, "code": {"_eq": "NaN"}})

    assert result == {"title": {"_in": ["NaN", "Infinity", "-Infinity"]}, "code": {"_eq": "NaN"}}


def test_filter_string_with_nan_is_rejected():
    with pytest.raises(InvalidQueryError):
        sanitize_filter('{"rating": {"_eq": NaN}}')


def test_filter_from_json_string():
    assert sanitize_filter('{"id": {"_in": [1, 2]}}') == {"id": {"_in": [1, 2]}}


def test_invalid_filter_json_raises():
    with pytest.raises(InvalidQueryError):
        sanitize_filter("{not json")


def test_dynamic_variables():
    accountability = Accountability(user=7, role="editor")

    result = sanitize_filter(
        {"owner": {"_eq": "$CURRENT_USER"}, "role": {"_eq": "$CURRENT_ROLE"}, "date": {"_lte": "$NOW"}},
        accountability,
    )

    assert result["owner"] == {"_eq": 7}
    assert result["role"] == {"_eq": "editor"}
    assert isinstance(result["date"]["_lte"], str)
    assert result["date"]["_lte"] != "$NOW"


def test_options_are_prefixed():
    plan = sanitize_query({"limit": 3, "sort": ["-id"]})

    assert plan.to_options() == {"_limit": 3, "_sort": [{"field": "id", "dir": "desc"}]}
