"""
Core — Pagination

Page-number paginator with a configurable page size, a hard max cap,
and page metadata (current page, last page) in the response.

@file core/pagination.py
"""

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


class StandardPagination(PageNumberPagination):
    page_size = DEFAULT_PAGE_SIZE
    page_size_query_param = 'limit'
    max_page_size = MAX_PAGE_SIZE

    def get_paginated_response(self, data):
        return Response({
            'count': self.page.paginator.count,
            'next': self.get_next_link(),
            'previous': self.get_previous_link(),
            'per_page': self.page.paginator.per_page,
            'current_page': self.page.number,
            'last_page': self.page.paginator.num_pages,
            'results': data,
        })
