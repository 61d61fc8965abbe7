# mx_core/common/api/pagination.py
from __future__ import annotations

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class DefaultPagination(PageNumberPagination):
    """
    ?page=<n>&limit=<size>, the query contract the clinic frontend already speaks.
    """
    page_size = 20
    page_size_query_param = "limit"
    max_page_size = 200


class WorklistPagination(DefaultPagination):
    # doctors review approval queues in larger pages
    page_size = 50


def paginate(request, queryset, serializer_class, *, paginator: PageNumberPagination | None = None) -> Response:
    """
    Paginated response with a stable shape:
      { count, next, previous, results }
    """
    p = paginator or DefaultPagination()
    page = p.paginate_queryset(queryset, request)
    if page is None:
        return Response(serializer_class(queryset, many=True).data)
    return p.get_paginated_response(serializer_class(page, many=True).data)
