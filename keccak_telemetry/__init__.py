"""Usage telemetry backend for the keccak-model teaching page."""

__version__ = "0.1.0"
