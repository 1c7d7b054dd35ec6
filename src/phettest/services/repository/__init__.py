"""Repository operations and lists."""

from .catalog import RepositoryCatalog, read_repository_list
from .operations import RepositoryOperations

__all__ = ["RepositoryCatalog", "RepositoryOperations", "read_repository_list"]
