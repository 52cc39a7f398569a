"""
utils/embed.py
--------------
iframe snippet for embedding the dashboard on the parish website.
"""

from html import escape
from urllib.parse import urlsplit, urlunsplit

from utils.constants import APP_TITLE


def clean_app_url(url: str) -> str:
    """Drop the query string and fragment so the embed always opens the default view."""
    parts = urlsplit(url.strip())
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def is_local_url(url: str) -> bool:
    host = urlsplit(url).hostname or ""
    return host in ("localhost", "127.0.0.1", "0.0.0.0")


def build_embed_code(app_url: str, title: str = APP_TITLE, height: int = 900) -> str:
    src = escape(clean_app_url(app_url), quote=True)
    return (
        "<iframe \n"
        f'  src="{src}" \n'
        '  width="100%" \n'
        f'  height="{int(height)}" \n'
        '  style="border:none; border-radius: 12px; overflow: hidden;" \n'
        f'  title="{escape(title, quote=True)}"\n'
        "></iframe>"
    )
