import time
from typing import Optional

import redis
from django.conf import settings

PREFIX = "grading:metrics"


def _client():
    """
    Redis client for the metrics keys. Default to CELERY_BROKER_URL if it is Redis, otherwise fallback to localhost.
    """
    url = getattr(settings, "METRICS_REDIS_URL", None)
    if not url:
        broker = getattr(settings, "CELERY_BROKER_URL", "") or ""
        url = broker if broker.startswith(("redis://", "rediss://")) else "redis://localhost:6379/0"
    return redis.Redis.from_url(url)


def _safe_int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def reset_metrics():
    cli = _client()
    pipe = cli.pipeline()
    pipe.delete(f"{PREFIX}:queued", f"{PREFIX}:compiled", f"{PREFIX}:failed", f"{PREFIX}:timing")
    pipe.set(f"{PREFIX}:start", time.time())
    pipe.execute()


def _ensure_start(cli):
    if not cli.exists(f"{PREFIX}:start"):
        cli.set(f"{PREFIX}:start", time.time())


def mark_queued(count: int):
    cli = _client()
    _ensure_start(cli)
    cli.incrby(f"{PREFIX}:queued", count)


def mark_batch_done(compiled: int, failed: int, duration_seconds: float):
    """
    Move a finished batch out of the queued counter and update timing stats.
    """
    cli = _client()
    _ensure_start(cli)
    pipe = cli.pipeline()
    pipe.decrby(f"{PREFIX}:queued", compiled + failed)
    pipe.incrby(f"{PREFIX}:compiled", compiled)
    pipe.incrby(f"{PREFIX}:failed", failed)
    pipe.hincrbyfloat(f"{PREFIX}:timing", "sum", max(duration_seconds, 0))
    pipe.hincrby(f"{PREFIX}:timing", "count", compiled)
    pipe.execute()


def get_metrics() -> Optional[dict]:
    """
    Returns counters and timings from Redis. If Redis is unreachable, returns None.
    """
    try:
        cli = _client()
        now = time.time()
        queued = _safe_int(cli.get(f"{PREFIX}:queued"))
        compiled = _safe_int(cli.get(f"{PREFIX}:compiled"))
        failed = _safe_int(cli.get(f"{PREFIX}:failed"))
        start_val = cli.get(f"{PREFIX}:start")
        started_at = float(start_val) if start_val else None
        timing = cli.hgetall(f"{PREFIX}:timing")
        total = float(timing.get(b"sum", 0) or 0)
        count = _safe_int(timing.get(b"count", 0) or 0)
        avg = round(total / count, 3) if count else None
        elapsed = round(now - started_at, 2) if started_at else None
        rate = round(compiled / elapsed, 2) if elapsed and elapsed > 0 else None
        return {
            "queued": max(queued, 0),
            "compiled": compiled,
            "failed": failed,
            "avg_seconds": avg,
            "total_seconds": round(total, 2),
            "elapsed_seconds": elapsed,
            "reports_per_sec": rate,
        }
    except redis.RedisError:
        return None
