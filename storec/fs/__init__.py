from .client import FSClient

__all__ = ["FSClient"]
