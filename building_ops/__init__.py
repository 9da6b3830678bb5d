"""
building_ops – Sheet-backed row source, TTL cache and month/quarter
aggregation helpers for the building operations dashboard.
"""
