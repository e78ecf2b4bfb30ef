"""Tests for the id-set helpers."""

from clinic_directory_api.app.core.idsets import add_to_set, pull, union_all


def test_add_to_set_returns_new_set_without_duplicates():
    current = {"a", "b"}
    result = add_to_set(current, ["b", "c", "c"])
    assert result == {"a", "b", "c"}
    assert current == {"a", "b"}


def test_pull_ignores_missing_ids():
    current = {"a", "b"}
    assert pull(current, ["b", "z"]) == {"a"}
    assert current == {"a", "b"}


def test_union_all_dedupes_across_groups():
    assert union_all([{"h1", "h2"}, ["h2", "h3"], set()]) == {"h1", "h2", "h3"}


def test_union_all_of_nothing_is_empty():
    assert union_all([]) == set()
