from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable

from quizhub.application import cache_keys
from quizhub.domain.ports.cache import CachePort
from quizhub.settings import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuizResult:
    score: int
    correct_answers: int


async def cached_json(
    cache: CachePort,
    key: str,
    ttl_seconds: int,
    compute: Callable[[], Awaitable[Any]],
) -> Any:
    """
    Read-through: return the JSON value cached under key, or compute it,
    cache it for ttl_seconds and return it.

    The cache stores text only; (de)serialization happens here.
    """
    raw = await cache.get(key)
    if raw is not None:
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("undecodable cached value; recomputing", extra={"key": key})

    value = await compute()
    await cache.set_with_expiry(key, ttl_seconds, json.dumps(value))
    return value


async def invalidate(cache: CachePort, *keys: str) -> None:
    """Drop derived values after the data they were computed from changed."""
    for key in keys:
        await cache.delete(key)


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def summarize_results(results: Iterable[QuizResult]) -> dict[str, int]:
    results = list(results)
    if not results:
        return {"totalQuizzes": 0, "averageScore": 0, "bestScore": 0, "totalCorrect": 0}
    total = len(results)
    return {
        "totalQuizzes": total,
        "averageScore": _round_half_up(sum(r.score for r in results) / total),
        "bestScore": max(r.score for r in results),
        "totalCorrect": sum(r.correct_answers for r in results),
    }


async def student_stats(
    cache: CachePort,
    student_id: int | str,
    load_results: Callable[[int | str], Awaitable[Iterable[QuizResult]]],
    ttl_seconds: int | None = None,
) -> dict[str, int]:
    if ttl_seconds is None:
        ttl_seconds = get_settings().stats_ttl_seconds

    async def _compute() -> dict[str, int]:
        return summarize_results(await load_results(student_id))

    return await cached_json(
        cache, cache_keys.student_stats(student_id), ttl_seconds, _compute
    )


async def invalidate_student(cache: CachePort, student_id: int | str) -> None:
    """Call after a new quiz result for student_id has been stored."""
    await invalidate(
        cache,
        cache_keys.student_stats(student_id),
        cache_keys.student_results(student_id),
        cache_keys.PUBLIC_STATS,
    )
