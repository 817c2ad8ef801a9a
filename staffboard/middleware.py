import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("staffboard.access")


class ContextProcessorMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, company: str = "Company"):
        super().__init__(app)
        self.company = company

    async def dispatch(self, request: Request, call_next):

        # Set a context variable for the company name
        request.state.company = self.company

        response = await call_next(request)
        return response


class ClientIPLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        # Get client IP from Cloudflare header or fallback
        client_host = request.client.host if request.client else "unknown"
        client_ip = request.headers.get("cf-connecting-ip", client_host)
        username = request.headers.get("cf-ray", "anonymous")
        platform = request.headers.get("sec-ch-ua-platform", "")
        if platform == "":
            platform = request.headers.get("user-agent", "unknown")

        response = await call_next(request)
        logger.info(
            "User: %s | IP: %s | Platform: %s | %s %s -> %s",
            username, client_ip, platform, request.method, request.url, response.status_code,
        )
        return response
