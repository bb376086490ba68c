"""HTML escaping for untrusted text."""

import html as html_lib
from typing import Optional


def escape_html(value: Optional[str]) -> str:
    """
    escapes text for insertion into HTML content or attribute values.

    Args:
        value: text to escape (None is treated as empty)

    Returns:
        escaped text, with single quotes as &#39;
    """
    if value is None:
        return ""
    return html_lib.escape(str(value), quote=True).replace("&#x27;", "&#39;")
