import redis

from ...application.ports.rate_limiter import RateLimiter


class RedisRateLimiter(RateLimiter):
    def __init__(self, url: str, prefix: str = "rl:", client=None) -> None:
        self.client = client or redis.Redis.from_url(url, socket_timeout=2, socket_connect_timeout=2)
        self.prefix = prefix

    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        rk = f"{self.prefix}{key}:{window_seconds}"
        # Use Redis INCR with EXPIRE for fixed window
        pipe = self.client.pipeline()
        pipe.incr(rk, 1)
        pipe.expire(rk, window_seconds)
        count, _ = pipe.execute()
        return int(count) <= int(max_requests)
