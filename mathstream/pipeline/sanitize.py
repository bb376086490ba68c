"""HTML sanitization backed by bleach."""

from typing import Iterable

import bleach

MATHML_TAGS = (
    "math",
    "semantics",
    "annotation",
    "mrow",
    "mi",
    "mo",
    "mn",
    "msup",
    "msub",
    "mfrac",
    "mroot",
    "msqrt",
    "mtable",
    "mtr",
    "mtd",
    "mtext",
    "mspace",
    "mover",
    "munder",
    "munderover",
)

MATHML_ATTRIBUTES = (
    "mathvariant",
    "encoding",
    "xmlns",
    "display",
    "accent",
    "accentunder",
    "columnalign",
    "rowalign",
    "columnspacing",
    "rowspacing",
    "aria-hidden",
)

# tags produced by the markdown renderer and the highlighter
BASE_TAGS = frozenset(bleach.sanitizer.ALLOWED_TAGS).union(
    {
        "p",
        "br",
        "hr",
        "pre",
        "span",
        "div",
        "del",
        "s",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "table",
        "thead",
        "tbody",
        "tr",
        "th",
        "td",
        "img",
    }
)

BASE_ATTRIBUTES: dict[str, list[str]] = {
    **bleach.sanitizer.ALLOWED_ATTRIBUTES,
    "code": ["class"],
    "span": ["class", "title"],
    "div": ["class"],
    "img": ["src", "alt", "title"],
    "ol": ["start"],
}


class BleachSanitizer:  # pylint: disable=too-few-public-methods
    """strips disallowed tags, attributes and comments from HTML."""

    def sanitize(
        self,
        html: str,
        extra_tags: Iterable[str] = (),
        extra_attributes: Iterable[str] = (),
    ) -> str:
        """
        sanitizes HTML against the base allow-list plus extras.

        Args:
            html: HTML to clean
            extra_tags: additional allowed tags
            extra_attributes: additional attributes allowed on any tag

        Returns:
            sanitized HTML
        """
        tags = BASE_TAGS.union(extra_tags)
        attributes = {tag: list(names) for tag, names in BASE_ATTRIBUTES.items()}
        attributes["*"] = [*attributes.get("*", []), *extra_attributes]
        return str(
            bleach.clean(
                html,
                tags=tags,
                attributes=attributes,
                strip=True,
                strip_comments=True,
            )
        )
