from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class ClinicPagination(PageNumberPagination):
    """
    ?page=2&limit=20  →  {"results": [...], "pagination": {...}}
    """
    page_size = 20
    page_size_query_param = "limit"
    max_page_size = 100

    def get_paginated_response(self, data):
        total = self.page.paginator.count
        limit = self.get_page_size(self.request)
        return Response({
            "results": data,
            "pagination": {
                "page": self.page.number,
                "limit": limit,
                "total": total,
                "total_pages": self.page.paginator.num_pages if total else 0,
            },
        })
