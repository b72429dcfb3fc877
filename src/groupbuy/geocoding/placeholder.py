"""Placeholder geocoder: positions scattered around a fixed reference point.

Real geocoding is out of scope. Each address maps to a stable offset of at
most ``SPREAD_DEGREES`` from the reference point, derived from a hash of the
address so the same address always lands on the same spot. Tests can pin
exact positions with ``configure``.
"""

import hashlib

from groupbuy.geocoding.port import GeocoderPort

REFERENCE_POINT = (28.6139, 77.2090)
SPREAD_DEGREES = 0.05


class PlaceholderGeocoder(GeocoderPort):
    def __init__(self):
        self._pinned: dict[str, tuple[float, float]] = {}

    def configure(self, positions: dict[str, tuple[float, float]]):
        """Pin exact positions for specific addresses."""
        self._pinned.update({address: (float(lat), float(lng)) for address, (lat, lng) in positions.items()})

    def reset(self):
        self._pinned.clear()

    def locate(self, address: str) -> tuple[float, float]:
        if address in self._pinned:
            return self._pinned[address]

        digest = hashlib.sha256((address or "").encode("utf-8")).digest()
        # Two bytes per axis mapped onto [-SPREAD_DEGREES, SPREAD_DEGREES]
        lat_offset = (int.from_bytes(digest[0:2], "big") / 0xFFFF * 2 - 1) * SPREAD_DEGREES
        lng_offset = (int.from_bytes(digest[2:4], "big") / 0xFFFF * 2 - 1) * SPREAD_DEGREES
        return (
            round(REFERENCE_POINT[0] + lat_offset, 6),
            round(REFERENCE_POINT[1] + lng_offset, 6),
        )
