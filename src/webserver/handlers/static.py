"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Maps a request's resource path onto a file under the web root and builds
the response for it: the file itself, a 403, or a 404 page.

=============================================================================
REQUEST PROCESSING
=============================================================================

    GET /css/site.css HTTP/1.0
              │
              ▼
    ┌──────────────────────┐
    │ "/" → "/index.html"  │
    └──────────┬───────────┘
               ▼
    ┌──────────────────────┐   yes
    │ contains ".." ?      │ ──────► 403 Forbidden   (no filesystem call)
    └──────────┬───────────┘
               ▼
    ┌──────────────────────┐
    │ PathResolver         │   join + resolve + confinement check
    └──────────┬───────────┘
               │
               ├── escapes root ─────────► 403 Forbidden
               ├── missing / not a file ─► 404 (custom 404.html or default)
               ├── unreadable ───────────► 403 Forbidden
               │
               ▼
    200 OK, Content-Type from extension, file streamed

=============================================================================
PATH TRAVERSAL
=============================================================================

An attacker asks for:

    GET /../../../etc/passwd HTTP/1.0

Joined naively with the web root:

    /srv/www/../../../etc/passwd  →  /etc/passwd      ← leaked!

We defend twice:

1. STRING CHECK: any resource containing the two characters ".." is
   refused with 403 before we build a path. This also refuses harmless
   names like "/a..b.html". That is accepted: simple and conservative
   beats clever.

2. CONFINEMENT CHECK: the joined path is fully resolved (".", "//" and
   symlinks) and must still be inside the resolved web root. A symlink
   inside the root that points at /etc is refused here.

Neither check replaces the other.

=============================================================================
"""

import logging
import os
import stat
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse,
    DEFAULT_SERVER_NAME,
    forbidden,
    not_found,
)
from ..http.status_codes import HTTPStatus
from ..http.mime_types import get_mime_type


logger = logging.getLogger(__name__)

TRAVERSAL_MARKER = ".."

# Custom 404 pages are static files; no charset is claimed for them
NOT_FOUND_PAGE_CONTENT_TYPE = "text/html"


class ResourceStatus(Enum):
    """Outcome of resolving a resource path."""
    FOUND = "found"            # Confined, regular, readable file
    NOT_FOUND = "not_found"    # Absent, or not a regular file
    FORBIDDEN = "forbidden"    # Outside the root, or unreadable


@dataclass(frozen=True)
class ResolvedResource:
    """
    Result of PathResolver.resolve().

    Attributes:
        status: FOUND, NOT_FOUND or FORBIDDEN.
        path: Fully resolved path inside the web root (FOUND only).
        size: File size in bytes at resolution time (FOUND only).
    """

    status: ResourceStatus
    path: Optional[Path] = None
    size: int = 0

    @property
    def found(self) -> bool:
        return self.status is ResourceStatus.FOUND


_NOT_FOUND = ResolvedResource(ResourceStatus.NOT_FOUND)
_FORBIDDEN = ResolvedResource(ResourceStatus.FORBIDDEN)


class PathResolver:
    """
    Resolves resource paths against a fixed web root.

    Every FOUND result is a regular, readable file whose resolved path is
    a descendant of the resolved web root.

    Usage:
        resolver = PathResolver("/srv/www")
        resolver.resolve("/css/site.css")
        # ResolvedResource(status=FOUND, path=/srv/www/css/site.css, size=812)
    """

    def __init__(self, web_root):
        # Resolve once so symlinked roots compare correctly later
        self.web_root = Path(web_root).resolve()

    def resolve(self, resource_path: str) -> ResolvedResource:
        """
        Resolve a resource to a file under the web root.

        Args:
            resource_path: Resource as received, e.g. "/img/logo.png".

        Returns:
            A ResolvedResource. Never raises for bad input.
        """
        # Callers check this first; repeated so the resolver is safe alone
        if TRAVERSAL_MARKER in resource_path:
            return _FORBIDDEN

        relative = resource_path.lstrip("/")

        try:
            full_path = (self.web_root / relative).resolve()
        except (OSError, ValueError, RuntimeError):
            # Embedded NUL, name too long, symlink loop
            return _NOT_FOUND

        # ─────────────────────────────────────────────────────────────────
        # SECURITY: CONFINEMENT CHECK
        # ─────────────────────────────────────────────────────────────────
        try:
            full_path.relative_to(self.web_root)
        except ValueError:
            logger.warning(f"Resource escapes web root: {resource_path} -> {full_path}")
            return _FORBIDDEN

        try:
            st = full_path.stat()
        except (OSError, ValueError):
            return _NOT_FOUND

        if not stat.S_ISREG(st.st_mode):
            return _NOT_FOUND

        if not os.access(full_path, os.R_OK):
            return _FORBIDDEN

        return ResolvedResource(ResourceStatus.FOUND, full_path, st.st_size)


class StaticFileHandler:
    """
    Builds the response for a validated GET request.

    Usage:
        static = StaticFileHandler("/srv/www")
        response = static.handle(request)    # 200, 403 or 404
        writer.send(response)                # streams and closes the file
    """

    def __init__(
        self,
        web_root,
        index_file: str = "index.html",
        not_found_page: str = "404.html",
        server_name: str = DEFAULT_SERVER_NAME,
    ):
        """
        Args:
            web_root: Directory to serve files from.
            index_file: File served for "/".
            not_found_page: Custom 404 body inside web_root, if present.
            server_name: Shown in generated error pages.
        """
        self.resolver = PathResolver(web_root)
        self.index_file = index_file
        self.not_found_page = not_found_page
        self.server_name = server_name

    @classmethod
    def from_config(cls, config) -> "StaticFileHandler":
        return cls(
            config.web_root,
            index_file=config.index_file,
            not_found_page=config.not_found_page,
            server_name=config.server_name,
        )

    @property
    def web_root(self) -> Path:
        return self.resolver.web_root

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Handle a GET request.

        Args:
            request: A request whose method and protocol are already valid.

        Returns:
            HTTPResponse. For 200 and custom 404 responses it holds an open
            file that the caller must send or close.
        """
        resource = request.resource_path
        if resource == "/":
            resource = "/" + self.index_file

        # String-level traversal guard, before any filesystem access
        if TRAVERSAL_MARKER in resource:
            logger.warning(f"Path traversal attempt from {request.client_ip}: {resource}")
            return forbidden(self.server_name, resource)

        resolved = self.resolver.resolve(resource)

        if resolved.status is ResourceStatus.NOT_FOUND:
            logger.info(f"File not found: {resource}")
            return self._not_found(resource)

        if resolved.status is ResourceStatus.FORBIDDEN:
            return forbidden(self.server_name, resource)

        logger.debug(f"Serving {resolved.path} ({resolved.size} bytes)")

        try:
            return self._serve_file(resolved, HTTPStatus.OK, get_mime_type(resource))
        except PermissionError:
            return forbidden(self.server_name, resource)
        except OSError as e:
            # Removed between resolve() and open()
            logger.warning(f"Could not open {resolved.path}: {e}")
            return self._not_found(resource)

    def _not_found(self, resource: str) -> HTTPResponse:
        """404 with the custom page when web_root has one, else the default."""
        custom = self.resolver.resolve("/" + self.not_found_page)
        if custom.found:
            try:
                return self._serve_file(custom, HTTPStatus.NOT_FOUND, NOT_FOUND_PAGE_CONTENT_TYPE)
            except OSError as e:
                logger.warning(f"Could not open custom 404 page {custom.path}: {e}")

        return not_found(self.server_name, resource)

    def _serve_file(
        self,
        resolved: ResolvedResource,
        status: HTTPStatus,
        content_type: str,
    ) -> HTTPResponse:
        """
        Open a resolved file for streaming.

        Content-Length comes from fstat() on the open handle, so it
        describes exactly the file we are about to read.

        Raises:
            OSError: If the file cannot be opened.
        """
        file = resolved.path.open("rb")
        size = os.fstat(file.fileno()).st_size

        return HTTPResponse(
            status=status,
            content_type=content_type,
            file=file,
            content_length=size,
            source=resolved.path.name,
        )
