"""audiocatalog - local audio recordings catalog with server upload."""

__version__ = "0.1.0"
