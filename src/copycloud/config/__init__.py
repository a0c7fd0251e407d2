from .config import CloudApiConfig

__all__ = ["CloudApiConfig"]
