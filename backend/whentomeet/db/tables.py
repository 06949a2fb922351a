"""
Single source of truth for database tables used by the SQL blob backend.
"""
ALL_TABLE_NAMES = ("kv_blobs",)
