from __future__ import annotations

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class DefaultPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 200


def paginate(request, queryset, serializer_class, *, paginator: PageNumberPagination | None = None) -> Response:
    """
    Shared pagination helper to enforce a stable contract:
      { count, next, previous, results }
    """
    p = paginator or DefaultPagination()
    page = p.paginate_queryset(queryset, request)
    if page is not None:
        ser = serializer_class(page, many=True)
        return p.get_paginated_response(ser.data)

    ser = serializer_class(queryset, many=True)
    return Response(ser.data)


def limit_from_query(request, *, default: int, maximum: int = 100) -> int:
    """
    Dashboard widgets ask for "the latest N" rather than pages.
    """
    raw = request.query_params.get("limit")
    try:
        n = int(raw) if raw else default
    except (TypeError, ValueError):
        n = default
    return max(1, min(n, maximum))
