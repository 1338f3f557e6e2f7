"""scanloot: barcode-scanning collectible game backend."""

__version__ = "1.0.0"
