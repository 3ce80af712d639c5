"""
Caching utilities for expensive aggregate queries
Redis backs the cache in production; LocMemCache in development and tests
"""
from django.conf import settings
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
PROJECT_STATS_CACHE_TTL = 300  # 5 minutes
PREDICTIONS_CACHE_TTL = 900  # 15 minutes

PROJECT_STATS_PREFIX = 'project_stats'
PREDICTIONS_PREFIX = 'equipment_predictions'


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive queries

    Usage:
        @cached_query(cache_ttl=900, key_prefix="equipment_predictions")
        def get_predictions(today):
            return data
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = make_cache_key(key_prefix, *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(*args, **kwargs)
            cache.set(cache_key, result, cache_ttl)
            return result
        return wrapper
    return decorator


def _uses_redis():
    return 'django_redis' in settings.CACHES['default']['BACKEND']


def invalidate_cache_pattern(pattern):
    """
    Invalidate all cache keys matching a pattern
    Redis: SCAN + DELETE. Other backends cannot list keys, so the whole cache is cleared.
    """
    if not _uses_redis():
        cache.clear()
        logger.debug(f"Cleared local cache for pattern: {pattern}")
        return

    try:
        from django_redis import get_redis_connection
        redis_conn = get_redis_connection("default")

        keys = []
        cursor = 0
        while True:
            cursor, partial_keys = redis_conn.scan(cursor, match=f"*{pattern}*", count=100)
            keys.extend(partial_keys)
            if cursor == 0:
                break

        if keys:
            redis_conn.delete(*keys)
            logger.info(f"Invalidated {len(keys)} cache keys matching pattern: {pattern}")
    except Exception as e:
        logger.warning(f"Could not invalidate cache pattern {pattern}: {str(e)}")


def project_stats_key(project_id):
    return f"{PROJECT_STATS_PREFIX}:{project_id}"


def get_cached_project_stats(project_id):
    """Returns the cached stats dict for a project, or None"""
    return cache.get(project_stats_key(project_id))


def cache_project_stats(project_id, data, ttl=PROJECT_STATS_CACHE_TTL):
    cache.set(project_stats_key(project_id), data, ttl)
    logger.debug(f"Cached project stats: {project_id}")


def invalidate_project_stats(*project_ids):
    """Drop the cached stats of the given projects"""
    keys = [project_stats_key(pid) for pid in project_ids if pid]
    if keys:
        cache.delete_many(keys)
        logger.debug(f"Invalidated project stats: {keys}")


def invalidate_predictions_cache():
    invalidate_cache_pattern(PREDICTIONS_PREFIX)
