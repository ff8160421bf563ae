from __future__ import annotations

from django.urls import Resolver404, resolve

API_PREFIX = "/api/"

class APITrailingSlashMiddleware:
    """
    Resolve ``/api/`` paths with or without a trailing slash.

    API routes are registered without trailing slashes; when the requested
    path does not resolve but its slash-toggled twin does, the request is
    routed to the twin instead of redirecting.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.path_info.startswith(API_PREFIX):
            self._rewrite(request)
        return self.get_response(request)

    @staticmethod
    def _rewrite(request) -> None:
        path = request.path_info
        try:
            resolve(path)
            return
        except Resolver404:
            pass

        alternate = path.rstrip("/") if path.endswith("/") else f"{path}/"
        try:
            resolve(alternate)
        except Resolver404:
            return
        request.path_info = alternate
        request.path = request.path[: len(request.path) - len(path)] + alternate
