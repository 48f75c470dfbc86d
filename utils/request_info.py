from flask import request

# fits Comment.ip_address and AuditLog.ip
IP_MAX_LEN = 64


def client_ip() -> str:
    """
    Best-effort client address: first X-Forwarded-For hop, then X-Real-IP.
    Client-supplied, so it is truncated to the stored column width.
    """
    forwarded = request.headers.get("X-Forwarded-For", "")
    first_hop = forwarded.split(",")[0].strip()
    if first_hop:
        return first_hop[:IP_MAX_LEN]
    return ((request.headers.get("X-Real-IP") or "").strip() or "unknown")[:IP_MAX_LEN]


def user_agent() -> str:
    return (request.headers.get("User-Agent") or "")[:255]
