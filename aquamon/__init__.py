"""aquamon - aquarium controller dashboard client."""

__version__ = "0.1.0"
