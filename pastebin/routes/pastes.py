"""
Paste routes.
Handles create, fetch (API), and view (HTML) operations.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from pastebin import service
from pastebin.database import PasteStore
from pastebin.dependencies import get_now_ms, get_store
from pastebin.exceptions import NotFoundError, StorageError
from pastebin.models import PasteCreate, PasteResponse, PasteView

router = APIRouter()
view_router = APIRouter()
logger = logging.getLogger(__name__)

_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
}


def escape_html(text: str) -> str:
    """Escape the five HTML-significant characters."""
    return "".join(_HTML_ESCAPES.get(char, char) for char in text)


@router.post("/pastes", response_model=PasteResponse, status_code=201)
def create_paste(
    paste: PasteCreate,
    request: Request,
    store: PasteStore = Depends(get_store),
    now_ms: int = Depends(get_now_ms),
) -> PasteResponse:
    """
    Create a new paste.

    Args:
        paste: Paste data (content, optional ttl_seconds, optional max_views)
        request: HTTP request context, used to build the share link

    Returns:
        Paste ID and shareable URL

    Raises:
        ValidationError: If input is invalid (400)
    """
    paste_id = service.create_paste(
        store,
        content=paste.content,
        ttl_seconds=paste.ttl_seconds,
        max_views=paste.max_views,
        now_ms=now_ms,
    )

    url = str(request.url_for("view_paste", paste_id=paste_id))
    return PasteResponse(id=paste_id, url=url)


@router.get("/pastes/{paste_id}", response_model=PasteView)
def fetch_paste(
    paste_id: str,
    store: PasteStore = Depends(get_store),
    now_ms: int = Depends(get_now_ms),
) -> PasteView:
    """
    Fetch a paste (API endpoint).
    Each fetch counts as one view.

    Raises:
        NotFoundError: If paste not found, expired, or view limit exceeded (404)
    """
    opened = service.open_paste(store, paste_id, now_ms)

    return PasteView(
        content=opened.record.content,
        remaining_views=opened.remaining_views,
        expires_at=opened.expires_at,
    )


@view_router.get("/p/{paste_id}", response_class=HTMLResponse)
def view_paste(
    paste_id: str,
    store: PasteStore = Depends(get_store),
    now_ms: int = Depends(get_now_ms),
):
    """
    View a paste as HTML.
    Each view counts toward the view limit.
    """
    try:
        opened = service.open_paste(store, paste_id, now_ms)
    except NotFoundError as e:
        logger.info(f"HTML view of paste {paste_id} refused: {e.reason}")
        return HTMLResponse(_render_404_page(), status_code=404)
    except StorageError as e:
        logger.error(f"HTML view of paste {paste_id} failed: {e}")
        return HTMLResponse(_render_error_page(), status_code=500)

    views_line = f"Views: {opened.views}"
    if opened.record.max_views is not None:
        views_line += f" / {opened.record.max_views}"

    return _render_paste_page(
        paste_id=paste_id,
        content=opened.record.content,
        views_line=views_line,
        expires_at=opened.expires_at,
    )


def _render_paste_page(
    paste_id: str,
    content: str,
    views_line: str,
    expires_at: Optional[str],
) -> str:
    """Render the paste page; every interpolated value is escaped."""
    expiry_line = f"Expires at {expires_at}" if expires_at else "Never expires"

    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Paste - Pastebin Lite</title>
    <style>
        body {{
            font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Helvetica Neue", Arial, sans-serif;
            background: #f0f2f5;
            margin: 0;
            padding: 40px 20px;
        }}
        .container {{
            background: white;
            border-radius: 10px;
            box-shadow: 0 4px 20px rgba(0, 0, 0, 0.15);
            max-width: 900px;
            margin: 0 auto;
            padding: 40px;
        }}
        .paste-id {{
            color: #666;
            font-size: 12px;
            margin-bottom: 20px;
            font-family: monospace;
        }}
        .content {{
            background: #f5f5f5;
            border: 1px solid #ddd;
            border-radius: 5px;
            padding: 20px;
            font-family: "Courier New", monospace;
            font-size: 14px;
            line-height: 1.6;
            white-space: pre-wrap;
            word-wrap: break-word;
        }}
        .meta {{
            margin-top: 20px;
            color: #999;
            font-size: 12px;
        }}
    </style>
</head>
<body>
    <div class="container">
        <div class="paste-id">ID: {escape_html(paste_id)}</div>
        <div class="content">{escape_html(content)}</div>
        <div class="meta">
            <p>{escape_html(views_line)}</p>
            <p>{escape_html(expiry_line)}</p>
        </div>
    </div>
</body>
</html>"""


def _render_404_page() -> str:
    """Render a 404 error page."""
    return """<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>Not Found - Pastebin Lite</title>
    <style>
        body {
            font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Helvetica Neue", Arial, sans-serif;
            background: #f0f2f5;
            text-align: center;
            padding: 60px 20px;
        }
        h1 {
            font-size: 48px;
            color: #667eea;
        }
    </style>
</head>
<body>
    <h1>404</h1>
    <p>This paste was not found, has expired, or its view limit has been reached.</p>
</body>
</html>"""


def _render_error_page() -> str:
    """Render a generic 500 page; no storage detail is shown."""
    return """<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>Error - Pastebin Lite</title>
</head>
<body style="font-family: sans-serif; text-align: center; padding: 60px 20px;">
    <h1>500</h1>
    <p>Something went wrong while loading this paste. Please try again later.</p>
</body>
</html>"""
