"""
Integration tests.

These run against a real Redis (USE_REAL_REDIS=1) and exercise both tiers
together: write-through, invalidation, bloom markers and locks.
"""
