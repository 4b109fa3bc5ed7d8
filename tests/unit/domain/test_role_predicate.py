"""Unit tests for SearchFilter and in-memory role filtering."""

import pytest

from rolestore.domain.entities import Role, RoleMember, SearchFilter
from rolestore.domain.services import apply_filter, build_predicates


@pytest.fixture
def roles():
    return [
        Role(
            id=1,
            name="etl-writers",
            members=[RoleMember.user("alice"), RoleMember.group("etl-team")],
        ),
        Role(
            id=2,
            name="ETL-readers",
            members=[RoleMember.user("bob"), RoleMember.role("etl-writers")],
        ),
        Role(id=3, name="auditors", members=[RoleMember.group("Audit-Team")]),
    ]


def names(result):
    return [role.name for role in result]


class TestSearchFilter:
    """Tests for SearchFilter validation."""

    def test_defaults(self):
        search_filter = SearchFilter()
        assert search_filter.start_index == 0
        assert search_filter.max_rows == 200
        assert search_filter.sort_by == "id"
        assert search_filter.is_empty()

    def test_unknown_param_rejected(self):
        with pytest.raises(ValueError, match="Unknown filter parameter"):
            SearchFilter(params={"colour": "blue"})

    def test_bad_sort_rejected(self):
        with pytest.raises(ValueError, match="Cannot sort roles by"):
            SearchFilter(sort_by="members")
        with pytest.raises(ValueError, match="sort_type"):
            SearchFilter(sort_type="up")

    def test_negative_page_rejected(self):
        with pytest.raises(ValueError, match="max_rows"):
            SearchFilter(max_rows=-1)

    def test_blank_values_ignored(self):
        search_filter = SearchFilter(params={"role_name": "  ", "user_name": ""})
        assert search_filter.is_empty()
        assert search_filter.get("role_name") is None


class TestApplyFilter:
    """Tests for predicate filtering."""

    def test_empty_filter_keeps_all(self, roles):
        assert names(apply_filter(roles, None)) == ["etl-writers", "ETL-readers", "auditors"]
        assert len(apply_filter(roles, SearchFilter())) == 3

    def test_role_name_is_exact(self, roles):
        result = apply_filter(roles, SearchFilter(params={"role_name": "etl-writers"}))
        assert names(result) == ["etl-writers"]
        assert apply_filter(roles, SearchFilter(params={"role_name": "ETL-WRITERS"})) == []

    def test_role_name_partial_ignores_case(self, roles):
        result = apply_filter(roles, SearchFilter(params={"role_name_partial": "etl"}))
        assert names(result) == ["etl-writers", "ETL-readers"]

    def test_role_id(self, roles):
        assert names(apply_filter(roles, SearchFilter(params={"role_id": "3"}))) == ["auditors"]

    def test_user_name(self, roles):
        result = apply_filter(roles, SearchFilter(params={"user_name": "bob"}))
        assert names(result) == ["ETL-readers"]

    def test_user_name_partial(self, roles):
        result = apply_filter(roles, SearchFilter(params={"user_name_partial": "LIC"}))
        assert names(result) == ["etl-writers"]

    def test_group_name_and_partial(self, roles):
        assert names(apply_filter(roles, SearchFilter(params={"group_name": "etl-team"}))) == [
            "etl-writers"
        ]
        assert names(
            apply_filter(roles, SearchFilter(params={"group_name_partial": "audit"}))
        ) == ["auditors"]

    def test_role_member(self, roles):
        result = apply_filter(roles, SearchFilter(params={"role_member": "etl-writers"}))
        assert names(result) == ["ETL-readers"]

    def test_all_params_must_match(self, roles):
        search_filter = SearchFilter(params={"role_name_partial": "etl", "user_name": "alice"})
        assert len(build_predicates(search_filter)) == 2
        assert names(apply_filter(roles, search_filter)) == ["etl-writers"]
