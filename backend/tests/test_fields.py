"""
Tests for field authorization and projection.
"""

import pytest

from entity_actions.services.crud import (
    FieldAuthorizer,
    MISSING,
    filter_fields,
    get_path,
    set_path,
    split_path,
)


class TestFieldAuthorizer:
    """Tests for allow-list reduction of requested fields."""

    @pytest.fixture
    def authorizer(self):
        return FieldAuthorizer(["user.name", "user.email"])

    def test_parent_expands_to_allowed_children(self, authorizer):
        assert authorizer.authorize(["user"]) == ["user.name", "user.email"]

    def test_exact_match_is_kept(self, authorizer):
        assert authorizer.authorize(["user.name"]) == ["user.name"]

    def test_unknown_field_is_dropped(self, authorizer):
        assert authorizer.authorize(["secret"]) == []

    def test_allowed_ancestor_covers_narrower_request(self):
        authorizer = FieldAuthorizer(["user", "title"])
        assert authorizer.authorize(["user.address.city"]) == ["user.address.city"]

    def test_segments_are_compared_whole(self):
        authorizer = FieldAuthorizer(["user.name"])
        assert authorizer.authorize(["use"]) == []
        assert authorizer.authorize(["user.nam"]) == []

    def test_comparison_is_case_sensitive(self, authorizer):
        assert authorizer.authorize(["User.name"]) == []

    def test_results_are_deduplicated(self, authorizer):
        assert authorizer.authorize(["user", "user.name"]) == ["user.name", "user.email"]

    def test_unrestricted_returns_request_unchanged(self):
        requested = ["anything", "at.all"]
        assert FieldAuthorizer(None).authorize(requested) is requested
        assert FieldAuthorizer([]).authorize(requested) is requested

    def test_empty_request_is_returned_unchanged(self, authorizer):
        assert authorizer.authorize(None) is None
        assert authorizer.authorize([]) == []

    def test_restricted_flag(self, authorizer):
        assert authorizer.restricted
        assert not FieldAuthorizer().restricted
        assert authorizer.allowed == ("user.name", "user.email")


class TestPaths:
    """Tests for nested path helpers."""

    def test_split_path(self):
        assert split_path("meta.size") == ("meta", "size")
        assert split_path("name") == ("name",)

    def test_get_path(self):
        doc = {"meta": {"size": 3, "tags": ["a", "b"]}}

        assert get_path(doc, ("meta", "size")) == 3
        assert get_path(doc, ("meta", "tags", "1")) == "b"
        assert get_path(doc, ("meta", "missing")) is MISSING
        assert get_path(doc, ("meta", "size", "deeper")) is MISSING
        assert get_path(doc, ("meta", "tags", "9")) is MISSING

    def test_get_path_keeps_falsy_values(self):
        assert get_path({"n": 0}, ("n",)) == 0
        assert get_path({"n": None}, ("n",)) is None

    def test_set_path_creates_intermediate_dicts(self):
        target = {}
        set_path(target, ("a", "b", "c"), 1)
        set_path(target, ("a", "d"), 2)

        assert target == {"a": {"b": {"c": 1}, "d": 2}}


class TestFilterFields:
    """Tests for projection."""

    def test_nested_paths_are_projected(self):
        doc = {"_id": 1, "name": "x", "meta": {"size": 3, "secret": "s"}}

        assert filter_fields(doc, ["_id", "meta.size"]) == {"_id": 1, "meta": {"size": 3}}

    def test_missing_paths_are_omitted(self):
        assert filter_fields({"name": "x"}, ["name", "meta.size"]) == {"name": "x"}

    def test_none_means_no_projection(self):
        doc = {"a": 1}
        assert filter_fields(doc, None) is doc

    def test_empty_list_projects_everything_away(self):
        assert filter_fields({"a": 1}, []) == {}

    def test_source_document_is_not_mutated(self):
        doc = {"meta": {"size": 3, "secret": "s"}}

        result = filter_fields(doc, ["meta.size"])
        result["meta"]["size"] = 99

        assert doc == {"meta": {"size": 3, "secret": "s"}}
