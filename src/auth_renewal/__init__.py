"""
Authentication-renewal retry policy.

When a token-bearing HTTP request comes back 401, the token it carried has
expired or been revoked. This package decides whether to renew the token
and re-send, bounded by a per-request retry budget and a backoff delay,
without ever looping on a failing authentication call.

Architecture: load-collapsing Access cache + TTL retry ledger (memory or
Redis) + stateless decision engine, with an httpx execution layer on top.
"""

__version__ = "0.1.0"
