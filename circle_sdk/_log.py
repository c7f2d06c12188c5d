"""
Logging helpers for the Circle SDK.

Request bodies are only logged after secrets are redacted, and repeated
server errors are rate limited so a failing endpoint does not flood the log.
"""
import logging
import threading
from typing import Any, Dict, Optional

from cachetools import TTLCache

logger = logging.getLogger(__name__)

# Fields that must never reach a log line in clear text
REDACTED_FIELDS = ("entitySecretCiphertext", "entity_secret_ciphertext", "entitySecret")
# Fields that are shortened because they are large and opaque
TRUNCATED_FIELDS = ("unsignedDelegateAction", "rawTransaction", "data")

_error_log_cache = TTLCache(maxsize=100, ttl=3600)
_error_log_cache_lock = threading.RLock()


def sanitize_payload(payload: Any) -> Any:
    """
    Remove sensitive data from a request body for logging.

    Args:
        payload: Request body about to be sent

    Returns:
        Copy of the body that is safe to log
    """
    if not isinstance(payload, dict):
        return {"type": type(payload).__name__}

    result = payload.copy()
    for key in REDACTED_FIELDS:
        if key in result:
            result[key] = f"[REDACTED - {len(str(result[key]))} chars]"
    for key in TRUNCATED_FIELDS:
        value = result.get(key)
        if isinstance(value, str) and len(value) > 32:
            result[key] = f"{value[:16]}... [{len(value)} chars]"
    return result


def rate_limited_log(
    message: str,
    level: str = "warning",
    logger_instance: Optional[logging.Logger] = None
) -> bool:
    """
    Log a message at most once per cache TTL, in a thread-safe manner.

    Args:
        message: Message to log
        level: Log level (debug, info, warning, error, critical)
        logger_instance: Logger to use (defaults to module logger)

    Returns:
        True if the message was logged, False if it was suppressed
    """
    log_instance = logger_instance or logger
    log_method = getattr(log_instance, level.lower(), log_instance.warning)
    key = f"{level}:{message}"

    with _error_log_cache_lock:
        if key in _error_log_cache:
            return False
        log_method(message)
        _error_log_cache[key] = True
        return True


def clear_rate_limit_cache() -> None:
    """Forget which messages were already logged (used by tests)."""
    with _error_log_cache_lock:
        _error_log_cache.clear()


def headers_for_log(headers: Dict[str, str]) -> Dict[str, str]:
    """Return request headers with the bearer token masked."""
    safe = dict(headers)
    if "Authorization" in safe:
        safe["Authorization"] = "Bearer [REDACTED]"
    return safe
