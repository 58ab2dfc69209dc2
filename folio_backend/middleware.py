"""
Middleware for folio_backend.
"""
from django.middleware.common import CommonMiddleware


class APICommonMiddleware(CommonMiddleware):
    """
    CommonMiddleware without the APPEND_SLASH redirect on /api/ paths.
    A redirected POST or multipart upload loses its body, so API clients get
    the 404 instead of a silent 301.
    """
    def should_redirect_with_slash(self, request):
        if request.path.startswith('/api/'):
            return False
        return super().should_redirect_with_slash(request)
