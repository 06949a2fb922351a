from whentomeet.models.kv_blob import KvBlob

__all__ = ["KvBlob"]
