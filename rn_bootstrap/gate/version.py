"""Version comparison used by every compatibility gate.

Versions follow Semantic Versioning 2.0 and are parsed with :mod:`semver`:
pre-release identifiers sort below the release (``0.59.0-rc.3`` <
``0.59.0``, ``1.0.0-1`` < ``1.0.0``), numeric identifiers compare
numerically and sort below alphanumeric ones, and build metadata
(``+12``) is ignored.  Tools that report only ``major.minor`` (Xcode's
``9.4``) or just ``major`` are padded with zeros.  A leading ``v`` is
dropped.

Some tools append a vendor suffix after an underscore (``1.8.0_202``);
callers that know this ask for a prefix-only comparison, which drops
everything from the first underscore.
"""

from __future__ import annotations

from enum import IntEnum

import semver

from rn_bootstrap.errors import MalformedVersion


class Ordering(IntEnum):
    LESS = -1
    EQUAL = 0
    GREATER = 1


def parse_version(text: str, *, prefix_only: bool = False) -> semver.Version:
    """Parse *text* into a comparable ``semver.Version``.

    Raises:
        MalformedVersion: If the text is not a semantic version.
    """
    raw = (text or "").strip()
    if prefix_only:
        raw = raw.split("_", 1)[0]
    if raw[:1] in ("v", "V"):
        raw = raw[1:]
    if not raw:
        raise MalformedVersion(text)
    try:
        return semver.Version.parse(raw, optional_minor_and_patch=True)
    except (ValueError, TypeError):
        raise MalformedVersion(text) from None


def compare(a: str, b: str, *, prefix_only: bool = False) -> Ordering:
    """Return the ordering of *a* relative to *b*.

    Examples::

        compare("0.57.8", "0.59.0")   -> Ordering.LESS
        compare("v10.0.0", "10.0.0")  -> Ordering.EQUAL
        compare("1.0.0-1", "1.0.0")   -> Ordering.LESS
        compare("1.8.0_202", "1.8.0", prefix_only=True) -> Ordering.EQUAL
    """
    left = parse_version(a, prefix_only=prefix_only)
    right = parse_version(b, prefix_only=prefix_only)
    return Ordering(left.compare(right))
