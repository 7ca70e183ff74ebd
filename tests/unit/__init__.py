"""
Unit tests for auth-renewal.

Test individual components in isolation:
- Authentication cache and token endpoint authenticator
- Retry ledger, backoff and renewal retry policy
- Renewing HTTP client and adapters
- Configuration, logging and wiring
"""
