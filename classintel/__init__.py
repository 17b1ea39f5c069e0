"""Class hierarchy intelligence for Python source trees."""

from .exceptions import (
    AmbiguousClassName,
    ClassIntelError,
    ClassNotFound,
    ParseError,
    SourceIOError,
)
from .finder import Finder
from .graph import InheritanceGraph
from .models import ClassId, ClassReference, ParsedFile, SearchMode
from .registry import Registry

__all__ = [
    "AmbiguousClassName",
    "ClassId",
    "ClassIntelError",
    "ClassNotFound",
    "ClassReference",
    "Finder",
    "InheritanceGraph",
    "ParseError",
    "ParsedFile",
    "Registry",
    "SearchMode",
    "SourceIOError",
]
