"""Static file serving routes for family_dashboard."""

from __future__ import annotations

import logging
from pathlib import Path

from aiohttp import web

logger = logging.getLogger(__name__)


def register_static_routes(app: web.Application, static_dir: Path) -> None:
    """Serve files below ``static_dir`` verbatim under /static/.

    Args:
        app: aiohttp web application
        static_dir: Directory holding the stylesheet and other assets
    """
    root = Path(static_dir).resolve()
    if not root.is_dir():
        logger.warning("Static directory %s does not exist; /static/ will return 404", root)

    async def serve_static(request: web.Request) -> web.StreamResponse:
        """Serve one file from the static directory."""
        relative = request.match_info["path"]
        target = (root / relative).resolve()

        if not target.is_relative_to(root) or not target.is_file():
            logger.debug("Static file not found: %s", relative)
            return web.Response(text="File not found", status=404)

        return web.FileResponse(target)

    app.router.add_get("/static/{path:.+}", serve_static)

    logger.debug("Static routes registered for %s", root)
