from typing import Optional, Tuple

from fastapi import Request

UNKNOWN = "unknown"


def client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    if request.client is not None:
        return request.client.host
    return UNKNOWN


def request_provenance(request: Request) -> Tuple[str, Optional[str]]:
    """(client ip, user agent) of a request"""
    return client_ip(request), request.headers.get("user-agent")
