"""
Redis key layouts and TTLs.
"""
