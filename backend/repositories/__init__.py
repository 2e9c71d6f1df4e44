from .books import BooksRepository
from . import models

__all__ = ["BooksRepository", "models"]
