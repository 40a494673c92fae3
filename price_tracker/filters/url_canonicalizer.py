# price_tracker/filters/url_canonicalizer.py

"""URL canonicalization: strip tracking params to get a stable identity key."""

import logging
from collections.abc import Iterable
from urllib.parse import unquote_plus, urlsplit, urlunsplit

from price_tracker.config.settings import Settings

logger = logging.getLogger("price_tracker.filters")


def _param_name(pair: str) -> str:
    """Return the decoded name of a ``name=value`` query segment."""
    return unquote_plus(pair.split("=", 1)[0])


def canonicalize(
    raw_url: str,
    tracking_params: Iterable[str] | None = None,
) -> str:
    """Strip tracking/session query params from *raw_url*.

    Kept params retain their original encoding and order, so the
    result is a fixed point: canonicalizing it again is a no-op.  An
    empty query drops the ``?`` entirely.  Strings that do not parse as
    an absolute URL are returned unchanged.
    """
    blocked = frozenset(
        Settings.TRACKING_PARAMS
        if tracking_params is None
        else tracking_params
    )
    try:
        parts = urlsplit(raw_url)
    except ValueError:
        logger.debug("Unparseable URL left as-is: %r", raw_url)
        return raw_url
    if not parts.scheme or not parts.netloc:
        logger.debug("Non-absolute URL left as-is: %r", raw_url)
        return raw_url

    kept = [
        pair
        for pair in parts.query.split("&")
        if pair and _param_name(pair) not in blocked
    ]
    return urlunsplit((
        parts.scheme,
        parts.netloc,
        parts.path,
        "&".join(kept),
        parts.fragment,
    ))
