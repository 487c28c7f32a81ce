"""
Custom pagination classes
"""
from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    """
    Standard pagination with 20 items per page
    """
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class CatalogPagination(PageNumberPagination):
    """
    Catalog pagination: 20 items per page, page size clamped to 5-50
    """
    page_size = 20
    page_size_query_param = 'page_size'
    min_page_size = 5
    max_page_size = 50

    def get_page_size(self, request):
        raw = request.query_params.get(self.page_size_query_param)
        if raw is None:
            return self.page_size
        try:
            size = int(raw)
        except (TypeError, ValueError):
            return self.page_size
        return min(max(size, self.min_page_size), self.max_page_size)
