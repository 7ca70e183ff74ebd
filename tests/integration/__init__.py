"""
Integration tests for auth-renewal.

Test components against real external services:
- Redis retry ledger (marked with @pytest.mark.integration)
- Retry policy backed by a live Redis ledger
"""
