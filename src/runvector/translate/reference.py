"""Image reference grammar.

Follows the distribution reference grammar used by podman and docker::

    reference := name [ ":" tag ] [ "@" digest ]
    name      := [ domain "/" ] path-component [ "/" path-component ]*
    domain    := host [ ":" port ]

Only syntax is checked; whether the image exists is the runtime's business.
"""

from __future__ import annotations

import re

NAME_TOTAL_LENGTH_MAX = 255

_ALPHA_NUMERIC = r"[a-z0-9]+"
_SEPARATOR = r"(?:[._]|__|[-]+)"
_PATH_COMPONENT = rf"{_ALPHA_NUMERIC}(?:{_SEPARATOR}{_ALPHA_NUMERIC})*"
_DOMAIN_COMPONENT = r"(?:[a-zA-Z0-9]|[a-zA-Z0-9][a-zA-Z0-9-]*[a-zA-Z0-9])"
_IPV6 = r"\[(?:[a-fA-F0-9:]+)\]"
_DOMAIN = rf"(?:{_DOMAIN_COMPONENT}(?:\.{_DOMAIN_COMPONENT})*|{_IPV6})(?::[0-9]+)?"
_NAME = rf"(?:{_DOMAIN}/)?{_PATH_COMPONENT}(?:/{_PATH_COMPONENT})*"
_TAG = r"[\w][\w.-]{0,127}"
_DIGEST = r"[A-Za-z][A-Za-z0-9]*(?:[-_+.][A-Za-z][A-Za-z0-9]*)*:[0-9a-fA-F]{32,}"

REFERENCE_RE = re.compile(rf"(?P<name>{_NAME})(?::(?P<tag>{_TAG}))?(?:@(?P<digest>{_DIGEST}))?", re.ASCII)


def reference_problem(image: str) -> str | None:
    """Return why ``image`` is not a valid reference, or ``None`` if it is.

    >>> reference_problem("library/app:1.0") is None
    True
    >>> reference_problem("Ubuntu")
    'does not match the image reference grammar'
    """
    if not image:
        return "must not be empty"
    if image != image.strip() or any(ch.isspace() for ch in image):
        return "must not contain whitespace"
    match = REFERENCE_RE.fullmatch(image)
    if match is None:
        return "does not match the image reference grammar"
    if len(match.group("name")) > NAME_TOTAL_LENGTH_MAX:
        return f"repository name longer than {NAME_TOTAL_LENGTH_MAX} characters"
    return None
