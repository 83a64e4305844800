"""Rate limiting global / Global rate limiter.

Utilise slowapi : par jeton de session si present, sinon par IP.
Uses slowapi: per session token when present, otherwise per IP.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request


def session_or_ip(request: Request) -> str:
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth[7:]
    return get_remote_address(request)


limiter = Limiter(key_func=session_or_ip)
