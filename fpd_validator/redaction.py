"""Opt-out detection feeding the engine's redaction flag.

The opt-out signal is the ``_pubcid_optout`` key in either the cookie jar
or local storage.  Cookies are consulted first; each store can be
disabled independently (e.g. cookies blocked by the browser).
"""

from __future__ import annotations

from http.cookies import CookieError, SimpleCookie
from typing import Any, Mapping, Optional

import structlog

from fpd_validator.config import DEFAULT_OPTOUT_KEY

logger = structlog.get_logger(__name__)


class OptOutDetector:
    """Callable redaction source: truthy when an opt-out marker is set."""

    def __init__(
        self,
        cookies: Optional[Mapping[str, Any]] = None,
        local_storage: Optional[Mapping[str, Any]] = None,
        *,
        key: str = DEFAULT_OPTOUT_KEY,
        cookies_enabled: bool = True,
        local_storage_enabled: bool = True,
    ) -> None:
        self._cookies = cookies or {}
        self._local_storage = local_storage or {}
        self._key = key
        self._cookies_enabled = cookies_enabled
        self._local_storage_enabled = local_storage_enabled

    @classmethod
    def from_cookie_header(
        cls, header: str, **kwargs: Any
    ) -> "OptOutDetector":
        """Build a detector from a raw ``Cookie:`` header value.

        An unparseable header is treated as carrying no cookies.
        """
        jar: SimpleCookie = SimpleCookie()
        try:
            jar.load(header or "")
        except CookieError:
            logger.warning("cookie_header_unparseable")
            jar = SimpleCookie()
        cookies = {name: morsel.value for name, morsel in jar.items()}
        return cls(cookies=cookies, **kwargs)

    def __call__(self) -> bool:
        if self._cookies_enabled and self._cookies.get(self._key):
            return True
        if self._local_storage_enabled and self._local_storage.get(self._key):
            return True
        return False
