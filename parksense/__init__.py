"""ParkSense: photograph a parking sign, get structured parking rules."""

__version__ = "1.0.0"
