from typing import Optional, Protocol


class CachePort(Protocol):
    """
    String key/value cache with per-key expiry.

    Implementations must never raise from any of these methods; backend
    trouble degrades durability, never availability.
    """

    async def get(self, key: str) -> Optional[str]:
        """Value stored under key, or None when absent/expired."""

    async def set_with_expiry(self, key: str, ttl_seconds: int, value: str) -> str:
        """Store/replace value with TTL=ttl_seconds. Returns "OK"."""

    async def delete(self, key: str) -> int:
        """Remove key. Returns the number of keys removed (0 or 1)."""

    async def incr_with_expiry(self, key: str, ttl_seconds: int, amount: int = 1) -> int:
        """Atomically add amount to a decimal counter and reset its TTL. Returns the new count."""

    def is_ready(self) -> bool:
        """True while the remote backend is serving calls."""
