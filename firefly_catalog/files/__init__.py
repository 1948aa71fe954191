"""Entity descriptor YAML files."""

from .reader import EntityReader
from .writer import EntityWriter

__all__ = ["EntityReader", "EntityWriter"]
