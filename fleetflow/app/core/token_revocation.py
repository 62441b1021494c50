"""
Token Revocation System using Redis.

Implements token blacklisting to immediately invalidate JWT tokens
on logout or when a user is deactivated.
"""

import logging

from redis.exceptions import RedisError

import fleetflow.app.core.redis_client as redis_client_module
from fleetflow.app.core.config import settings

logger = logging.getLogger(__name__)

# Redis key prefix for blacklisted tokens
TOKEN_BLACKLIST_PREFIX = "blacklist:token:"
USER_TOKENS_PREFIX = "user:tokens:"


def _client():
    # Resolved at call time so tests can swap the module-level client
    return redis_client_module.redis_client


def _ttl_seconds() -> int:
    # Tokens expire on their own after this, so the blacklist entry can too
    return settings.access_token_expire_minutes * 60


async def revoke_token(token: str, user_id: int) -> bool:
    """
    Revoke a specific JWT token by adding it to the blacklist.

    Args:
        token: The JWT token string to revoke
        user_id: User ID who owns the token

    Returns:
        True if successfully revoked, False otherwise
    """
    try:
        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        await _client().set(key, str(user_id), ex=_ttl_seconds())
        return True
    except (RedisError, OSError) as e:
        logger.error("Error revoking token for user %s: %s", user_id, e)
        return False


async def is_token_revoked(token: str) -> bool:
    """
    Check if a token has been revoked.

    If Redis is unreachable the request is allowed (availability over strictness).
    """
    try:
        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        exists = await _client().exists(key)
        return exists > 0
    except (RedisError, OSError) as e:
        logger.error("Error checking token revocation: %s", e)
        return False


async def revoke_all_user_tokens(user_id: int) -> bool:
    """
    Revoke all active tokens for a specific user.

    Called when a user is deactivated to terminate all sessions at once.
    """
    try:
        key = f"{USER_TOKENS_PREFIX}{user_id}:revoked"
        await _client().set(key, "1", ex=_ttl_seconds())
        return True
    except (RedisError, OSError) as e:
        logger.error("Error revoking all tokens for user %s: %s", user_id, e)
        return False


async def are_user_tokens_revoked(user_id: int) -> bool:
    """Check if all tokens for a user have been revoked."""
    try:
        key = f"{USER_TOKENS_PREFIX}{user_id}:revoked"
        exists = await _client().exists(key)
        return exists > 0
    except (RedisError, OSError) as e:
        logger.error("Error checking user token revocation: %s", e)
        return False


async def clear_user_token_revocation(user_id: int) -> bool:
    """
    Clear the global token revocation flag for a user.

    Called when a deactivated user is re-activated.
    """
    try:
        key = f"{USER_TOKENS_PREFIX}{user_id}:revoked"
        await _client().delete(key)
        return True
    except (RedisError, OSError) as e:
        logger.error("Error clearing token revocation for user %s: %s", user_id, e)
        return False
