"""Geocoder port: turns a delivery address into a map position."""

from abc import ABC, abstractmethod


class GeocoderPort(ABC):
    @abstractmethod
    def locate(self, address: str) -> tuple[float, float]:
        """Return ``(lat, lng)`` for an address."""
        ...
