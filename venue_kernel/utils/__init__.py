"""Utility modules for the venue kernel."""

from venue_kernel.utils.hashing import canonicalize_json, hash_content, hash_payload

__all__ = ["canonicalize_json", "hash_content", "hash_payload"]
