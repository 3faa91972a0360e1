"""
Fail-open rate limiting

Tiers (see REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']):
- strict: mutations (create/update/cancel/refund)
- moderate: authenticated reads
- relaxed: public reads

A view picks its tier through `throttle_scope`. If the cache backend holding
the counters is unreachable, the request is allowed.
"""
import logging

from rest_framework.throttling import ScopedRateThrottle

logger = logging.getLogger(__name__)


class FailOpenScopedRateThrottle(ScopedRateThrottle):
    """
    ScopedRateThrottle keyed by user id, or client IP for anonymous requests.
    """

    def allow_request(self, request, view):
        try:
            return super().allow_request(request, view)
        except Exception as e:
            logger.error(f"Rate limit check failed, allowing request: {e}")
            return True
