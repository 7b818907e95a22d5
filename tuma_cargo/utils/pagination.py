from __future__ import annotations

from typing import Any

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardPagination(PageNumberPagination):
    """``?page=&limit=`` pagination with a summary block next to the results."""

    page_size = 20
    page_size_query_param = "limit"
    max_page_size = 100

    def get_pagination_summary(self) -> dict[str, Any]:
        page = self.page
        return {
            "current": page.number,
            "pages": page.paginator.num_pages,
            "total": page.paginator.count,
            "limit": page.paginator.per_page,
            "has_next": page.has_next(),
            "has_prev": page.has_previous(),
        }

    def get_paginated_response(self, data):
        return Response(
            {"results": data, "pagination": self.get_pagination_summary()},
        )

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "required": ["results", "pagination"],
            "properties": {
                "results": schema,
                "pagination": {
                    "type": "object",
                    "properties": {
                        "current": {"type": "integer"},
                        "pages": {"type": "integer"},
                        "total": {"type": "integer"},
                        "limit": {"type": "integer"},
                        "has_next": {"type": "boolean"},
                        "has_prev": {"type": "boolean"},
                    },
                },
            },
        }
