"""
Page/limit pagination used by list endpoints.

Clients send ``?page=<n>&limit=<m>`` and receive::

    {"<items_key>": [...], "total": 42, "page": 1, "limit": 10, "has_more": true}
"""
from rest_framework.pagination import PageNumberPagination

from common.responses import success_response


class PageLimitPagination(PageNumberPagination):
    """
    ``PageNumberPagination`` that reports totals in the project envelope.

    Out-of-range pages return an empty list instead of a 404 so that
    infinite-scroll clients can stop on ``has_more == false``.
    """
    page_size = 10
    page_size_query_param = 'limit'
    max_page_size = 100
    items_key = 'results'

    def paginate_queryset(self, queryset, request, view=None):
        self.request = request
        self.limit = self.get_page_size(request)
        try:
            self.page_number = max(int(request.query_params.get(self.page_query_param, 1)), 1)
        except (TypeError, ValueError):
            self.page_number = 1

        self.total = queryset.count()
        offset = (self.page_number - 1) * self.limit
        return list(queryset[offset:offset + self.limit])

    def get_paginated_response(self, data):
        return success_response({
            self.items_key: data,
            'total': self.total,
            'page': self.page_number,
            'limit': self.limit,
            'has_more': self.total > self.page_number * self.limit,
        })
