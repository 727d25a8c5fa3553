"""
Cache utilities for Props With Pals
Leaderboard payloads are cached per pool and dropped whenever the pool changes
"""

import functools

from flask import current_app

from propspals import cache


def leaderboard_cache_key(code):
    return f"leaderboard_{code}"


def cached_pool_view(key_func, timeout_config="LEADERBOARD_CACHE_TIMEOUT"):
    """
    Decorator for caching a per-pool payload

    Args:
        key_func: builds the cache key from the pool invite code
        timeout_config: config key holding the timeout in seconds
    """

    def decorator(f):
        @functools.wraps(f)
        def wrapped(code, *args, **kwargs):
            cache_key = key_func(code)

            result = cache.get(cache_key)
            if result is not None:
                current_app.logger.debug(f"Cache hit for key: {cache_key}")
                return result

            result = f(code, *args, **kwargs)
            cache.set(
                cache_key, result, timeout=current_app.config.get(timeout_config, 60)
            )
            current_app.logger.debug(f"Cache set for key: {cache_key}")

            return result

        return wrapped

    return decorator


def invalidate_pool_cache(code):
    """Drop cached views for a pool after any change to it"""
    try:
        cache.delete(leaderboard_cache_key(code))
    except Exception as e:
        # A cache outage must not fail the write that triggered it
        current_app.logger.error(f"Failed to invalidate cache for pool {code}: {e}")
