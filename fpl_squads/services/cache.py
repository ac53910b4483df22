# fpl_squads/services/cache.py
from __future__ import annotations
import asyncio
import functools
import time
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar, Union

from starlette.concurrency import run_in_threadpool

# In-process TTL caches by namespace
# value = (expires_at_epoch, stored_at_epoch, data)
_CACHES: Dict[str, Dict[Tuple[Any, ...], Tuple[float, int, Any]]] = {}

T = TypeVar("T")


def _cache_for(namespace: str) -> Dict[Tuple[Any, ...], Tuple[float, int, Any]]:
    if namespace not in _CACHES:
        _CACHES[namespace] = {}
    return _CACHES[namespace]


def _now() -> float:
    return time.time()


def _lookup(namespace: str, key: Tuple[Any, ...], now: float) -> Optional[Tuple[int, Any]]:
    cache = _cache_for(namespace)
    entry = cache.get(key)
    if not entry:
        return None
    exp_at, stored_at, data = entry
    if exp_at > now:
        return stored_at, data
    cache.pop(key, None)
    return None


def _store(namespace: str, key: Tuple[Any, ...], now: float, ttl_seconds: int, data: Any) -> int:
    stored_at = int(now)
    if ttl_seconds > 0:
        _cache_for(namespace)[key] = (now + ttl_seconds, stored_at, data)
    return stored_at


def clear_cache(namespace: str | None = None) -> None:
    if namespace is None:
        _CACHES.clear()
    else:
        _CACHES.pop(namespace, None)


def cached_call(*, namespace: str, ttl_seconds: int, key: Tuple[Any, ...], fn: Callable[[], T]) -> T:
    """Return the cached value for key or compute it with fn(). ttl_seconds <= 0 disables caching."""
    now = _now()
    hit = _lookup(namespace, key, now)
    if hit is not None:
        return hit[1]
    data = fn()
    _store(namespace, key, now, ttl_seconds, data)
    return data


def cache_route(
    *,
    namespace: str,
    ttl_seconds: Union[int, Callable[..., int]],
    key_builder: Callable[..., Tuple[Any, ...]],
    cache_control: str | None = None,  # defaults to public,max-age=ttl
):
    """
    Decorator for FastAPI routes (sync or async).
    - Caches the returned data by a computed key.
    - Sets X-Cache: HIT|MISS, X-Cache-Stored-At, and Cache-Control on the Response if present in kwargs.
    - ttl_seconds is a number or a callable taking the route's arguments.
    """

    def _set_headers(response, state: str, stored_at: int, ttl: int) -> None:
        if response is None:
            return
        response.headers["X-Cache"] = state
        response.headers["X-Cache-Stored-At"] = str(stored_at)
        response.headers["Cache-Control"] = cache_control or f"public, max-age={ttl}"

    def decorator(fn: Callable):
        is_async = asyncio.iscoroutinefunction(fn)

        async def _call(*args, **kwargs):
            if is_async:
                return await fn(*args, **kwargs)
            # keep blocking feed calls off the event loop
            return await run_in_threadpool(fn, *args, **kwargs)

        @functools.wraps(fn)
        async def wrapper(*args, **kwargs):
            response = kwargs.get("response")  # FastAPI Response if included in signature
            key = key_builder(*args, **kwargs)
            # a callable TTL is resolved per request (e.g. from injected settings)
            ttl = ttl_seconds(*args, **kwargs) if callable(ttl_seconds) else ttl_seconds
            now = _now()

            hit = _lookup(namespace, key, now)
            if hit is not None:
                stored_at, data = hit
                _set_headers(response, "HIT", stored_at, ttl)
                return data

            # MISS → call downstream
            data = await _call(*args, **kwargs)
            stored_at = _store(namespace, key, now, ttl, data)
            _set_headers(response, "MISS", stored_at, ttl)
            return data

        return wrapper
    return decorator


# ------------- common key helpers -------------

def key_tuple(*parts: Any) -> Tuple[Any, ...]:
    return tuple(parts)
