"""Geocoder registry.

Uses the placeholder geocoder by default. Configure via the
GEOCODER_ADAPTER environment variable.
"""

import os

_geocoder_instance = None


def get_geocoder():
    """Return the configured geocoder adapter (singleton)."""
    global _geocoder_instance
    if _geocoder_instance is None:
        adapter = os.environ.get("GEOCODER_ADAPTER", "placeholder")
        if adapter == "placeholder":
            from groupbuy.geocoding.placeholder import PlaceholderGeocoder

            _geocoder_instance = PlaceholderGeocoder()
        else:
            raise ValueError(f"Unknown geocoder adapter: {adapter}")
    return _geocoder_instance


def reset_geocoder():
    """Reset the geocoder singleton (useful for testing)."""
    global _geocoder_instance
    _geocoder_instance = None
