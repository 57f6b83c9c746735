"""Cloud security posture assessment over collector caches."""

__version__ = "1.0.0"
