"""Tests for list query-parameter parsing."""

from datetime import datetime

import pytest

from taskflow.errors import ValidationError
from taskflow.models.task import Priority, TaskStatus
from taskflow.services.query import (
    SortField,
    SortOrder,
    parse_page_query,
    parse_task_query,
)


class TestParseTaskQuery:
    """Tests for parsing task list parameters."""
    def test_defaults(self):
        """Test an empty query yields the defaults."""
        query = parse_task_query({})

        assert query.page == 1
        assert query.limit == 10
        assert query.status is None
        assert query.priority is None
        assert query.search is None
        assert query.tag is None
        assert query.due_before is None
        assert query.due_after is None
        assert query.sort_by == SortField.CREATED_AT
        assert query.sort_order == SortOrder.DESC
        assert query.offset == 0

    def test_all_parameters(self):
        """Test every supported parameter is parsed and typed."""
        query = parse_task_query(
            {
                "page": "3",
                "limit": "25",
                "status": "in-progress",
                "priority": "urgent",
                "search": "  report ",
                "tag": "work",
                "dueBefore": "2026-04-01T00:00:00Z",
                "dueAfter": "2026-03-01",
                "sortBy": "dueDate",
                "sortOrder": "asc",
            }
        )

        assert query.page == 3
        assert query.limit == 25
        assert query.offset == 50
        assert query.status == TaskStatus.IN_PROGRESS
        assert query.priority == Priority.URGENT
        assert query.search == "report"
        assert query.tag == "work"
        assert query.due_before == datetime(2026, 4, 1)
        assert query.due_after == datetime(2026, 3, 1)
        assert query.sort_by == SortField.DUE_DATE
        assert query.sort_order == SortOrder.ASC

    def test_reports_every_violation_at_once(self):
        """Test all invalid parameters are reported together."""
        with pytest.raises(ValidationError) as exc_info:
            parse_task_query(
                {
                    "page": "0",
                    "limit": "500",
                    "status": "done",
                    "priority": "critical",
                    "sortBy": "owner",
                    "sortOrder": "sideways",
                    "dueBefore": "not-a-date",
                }
            )

        fields = {e.field: e.message for e in exc_info.value.errors}
        assert fields == {
            "page": "Page must be a positive integer",
            "limit": "Limit must be between 1 and 100",
            "status": "Invalid status",
            "priority": "Invalid priority",
            "sortBy": "Invalid sort field",
            "sortOrder": "Sort order must be asc or desc",
            "dueBefore": "dueBefore must be a valid date",
        }

    @pytest.mark.parametrize("limit", ["1", "100"])
    def test_limit_bounds_accepted(self, limit):
        """Test limit accepts both ends of its range."""
        assert parse_task_query({"limit": limit}).limit == int(limit)

    @pytest.mark.parametrize("limit", ["0", "101", "-5", "ten"])
    def test_limit_out_of_range_rejected(self, limit):
        """Test limit outside 1..100 is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            parse_task_query({"limit": limit})

        assert [e.field for e in exc_info.value.errors] == ["limit"]

    def test_non_numeric_page_rejected(self):
        """Test a non-numeric page is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            parse_task_query({"page": "abc"})

        assert exc_info.value.errors[0].field == "page"

    def test_timezone_offsets_normalized_to_utc(self):
        """Test offset timestamps are converted to naive UTC."""
        query = parse_task_query({"dueAfter": "2026-03-14T12:00:00+02:00"})

        assert query.due_after == datetime(2026, 3, 14, 10, 0)
        assert query.due_after.tzinfo is None

    def test_blank_search_and_tag_ignored(self):
        """Test blank search and tag values are dropped."""
        query = parse_task_query({"search": "   ", "tag": ""})

        assert query.search is None
        assert query.tag is None

    def test_unknown_parameters_ignored(self):
        """Test unknown parameters have no effect."""
        query = parse_task_query({"owner": "someone-else", "user": "x"})

        assert query == parse_task_query({})

    def test_descriptor_is_immutable(self):
        """Test the parsed descriptor cannot be changed."""
        query = parse_task_query({})

        with pytest.raises(Exception):
            query.page = 2


class TestParsePageQuery:
    """Tests for parsing page/limit parameters."""
    def test_defaults(self):
        """Test page 1, limit 10 by default."""
        query = parse_page_query({})

        assert (query.page, query.limit, query.offset) == (1, 10, 0)

    def test_invalid_page(self):
        """Test a negative page is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            parse_page_query({"page": "-1"})

        assert exc_info.value.errors[0].field == "page"
