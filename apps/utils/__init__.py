from .api_response import (
    api_error,
    api_success,
    get_pagination_params,
    paginate_items,
    paginated_payload,
)

__all__ = [
    "api_error",
    "api_success",
    "get_pagination_params",
    "paginate_items",
    "paginated_payload",
]
