"""
RecipeShare Request Utilities
Client identity for rate limiting and request logs
"""

from fastapi import Request
from typing import Any, Dict, Optional
import ipaddress
from user_agents import parse

# Checked in order; the first valid address wins
PROXY_IP_HEADERS = ("x-forwarded-for", "x-real-ip", "cf-connecting-ip")
FALLBACK_IP = "127.0.0.1"


def _first_valid_ip(value: str) -> Optional[str]:
    # X-Forwarded-For lists the originating client first
    candidate = value.split(",")[0].strip()
    try:
        return str(ipaddress.ip_address(candidate))
    except ValueError:
        return None


def get_client_ip(request: Request) -> str:
    """
    Address used as the rate-limit key

    Proxy headers take precedence over the socket peer.
    """
    for header in PROXY_IP_HEADERS:
        value = request.headers.get(header)
        ip = _first_valid_ip(value) if value else None
        if ip:
            return ip

    if request.client and request.client.host:
        return request.client.host
    return FALLBACK_IP


def get_user_agent(request: Request) -> str:
    return request.headers.get("user-agent", "Unknown")


def parse_user_agent(user_agent: str) -> Dict[str, Any]:
    """Browser, OS and device summary for request logs"""
    parsed = parse(user_agent or "")
    return {
        "browser": f"{parsed.browser.family} {parsed.browser.version_string}".strip(),
        "os": parsed.os.family,
        "device": "mobile" if parsed.is_mobile else "bot" if parsed.is_bot else "desktop",
    }


def is_secure_request(request: Request) -> bool:
    """HTTPS directly or as reported by a TLS-terminating proxy"""
    return request.url.scheme == "https" or request.headers.get("x-forwarded-proto", "").lower() == "https"
