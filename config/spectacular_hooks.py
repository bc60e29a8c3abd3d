"""
drf-spectacular preprocessing hooks.
"""

# Django admin, probes and the docs views themselves
_INTERNAL_PREFIXES = ('/admin/', '/health/', '/api/schema/', '/api/docs/')


def preprocess_exclude_internal(endpoints, **kwargs):
    """Keep only the award, redemption and staff login API in the published schema."""
    return [
        endpoint for endpoint in endpoints
        if not endpoint[0].startswith(_INTERNAL_PREFIXES)
    ]
