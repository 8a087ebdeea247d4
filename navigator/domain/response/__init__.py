from .normalizer import normalize

__all__ = ["normalize"]
