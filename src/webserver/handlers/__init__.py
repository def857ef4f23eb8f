from .static import (
    StaticFileHandler,
    PathResolver,
    ResolvedResource,
    ResourceStatus,
)
from .connection import ConnectionHandler

__all__ = [
    "StaticFileHandler",
    "PathResolver",
    "ResolvedResource",
    "ResourceStatus",
    "ConnectionHandler",
]
