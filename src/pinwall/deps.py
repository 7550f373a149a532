"""
Pinwall - Dependency Injection.

FastAPI dependencies for settings and feature flags.
"""

from typing import Annotated

from fastapi import Depends

from pinwall.config import FeatureFlags, Settings, get_settings
from pinwall.exceptions import FeatureDisabledException


# =============================================================================
# Settings Dependencies
# =============================================================================


def get_features(settings: Annotated[Settings, Depends(get_settings)]) -> FeatureFlags:
    """Get feature flags from settings."""
    return settings.features


# =============================================================================
# Feature Flag Guards
# =============================================================================


def require_feature(feature_name: str):
    """Create a dependency that requires a specific feature to be enabled."""

    def check_feature(features: Annotated[FeatureFlags, Depends(get_features)]) -> bool:
        if not getattr(features, feature_name, False):
            raise FeatureDisabledException(feature_name)
        return True

    return check_feature


require_pins = Depends(require_feature("pins"))
require_comments = Depends(require_feature("comments"))
require_tags = Depends(require_feature("tags"))
