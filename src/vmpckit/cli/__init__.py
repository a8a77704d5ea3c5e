__all__ = ["main"]

from .main import main
