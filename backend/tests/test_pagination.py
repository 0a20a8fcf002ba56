"""
Property-based tests for pagination arithmetic.
"""

import math

import pytest
from hypothesis import given, settings, strategies as st

from entity_actions.services.crud import total_pages


class TestTotalPagesProperties:
    """Property-based tests for total_pages."""

    @given(
        total=st.integers(min_value=0, max_value=10_000_000),
        page_size=st.integers(min_value=1, max_value=10_000),
    )
    @settings(max_examples=200)
    def test_total_pages_is_ceiling(self, total, page_size):
        """Property: totalPages == ceil(total / pageSize)."""
        assert total_pages(total, page_size) == math.ceil(total / page_size)

    @given(
        total=st.integers(min_value=0, max_value=10_000_000),
        page_size=st.integers(min_value=1, max_value=10_000),
    )
    def test_zero_pages_only_without_rows(self, total, page_size):
        """Property: totalPages is 0 exactly when total is 0."""
        assert (total_pages(total, page_size) == 0) == (total == 0)

    @given(
        total=st.integers(min_value=1, max_value=1_000_000),
        page_size=st.integers(min_value=1, max_value=1_000),
    )
    def test_pages_cover_all_rows(self, total, page_size):
        """Property: the last page starts before the last row."""
        pages = total_pages(total, page_size)
        assert (pages - 1) * page_size < total <= pages * page_size


class TestTotalPages:
    """Example-based tests for total_pages."""

    @pytest.mark.parametrize("total,page_size,expected", [
        (0, 10, 0),
        (1, 10, 1),
        (10, 10, 1),
        (11, 10, 2),
        (25, 2, 13),
    ])
    def test_examples(self, total, page_size, expected):
        assert total_pages(total, page_size) == expected

    @pytest.mark.parametrize("page_size", [0, -5])
    def test_non_positive_page_size_is_rejected(self, page_size):
        with pytest.raises(ValueError):
            total_pages(10, page_size)
