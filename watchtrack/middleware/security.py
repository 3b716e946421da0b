"""
Security middleware for WatchTrack API
Adds security headers to every response
"""
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

# Swagger UI loads its bundle and favicon from these hosts
DOCS_SCRIPT_HOSTS = ["https://cdn.jsdelivr.net"]
DOCS_IMAGE_HOSTS = ["https://fastapi.tiangolo.com"]


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add security headers (XSS, CSP, HSTS, etc.)

    allow_docs_assets: widen the CSP for the Swagger UI CDN; only set it
    where /docs is actually served.
    """

    def __init__(self, app, allow_docs_assets: bool = False):
        super().__init__(app)
        self.content_security_policy = self.build_csp(allow_docs_assets)

    @staticmethod
    def build_csp(allow_docs_assets: bool) -> str:
        script_src = ["'self'"]
        style_src = ["'self'", "'unsafe-inline'"]
        img_src = ["'self'", "https://image.tmdb.org", "data:"]
        if allow_docs_assets:
            script_src += ["'unsafe-inline'"] + DOCS_SCRIPT_HOSTS
            style_src += DOCS_SCRIPT_HOSTS
            img_src += DOCS_IMAGE_HOSTS
        directives = [
            "default-src 'self'",
            "script-src " + " ".join(script_src),
            "style-src " + " ".join(style_src),
            "img-src " + " ".join(img_src),
            "connect-src 'self'",
        ]
        return "; ".join(directives)

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["Content-Security-Policy"] = self.content_security_policy
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"

        return response
