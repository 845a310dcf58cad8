import logging
import os
from http.cookiejar import Cookie, CookiePolicy, LWPCookieJar, LoadError
from typing import Optional

log = logging.getLogger(__name__)


class FileCookieJar(LWPCookieJar):
    """A cookie jar backed by a file, rewritten in full on every change.

    The file is read on construction. A missing, empty or unreadable file
    gives an empty jar. A failed write is logged and the cookies are kept in
    memory. Session cookies are stored as well, so a login survives a restart
    of the process.

    Examples:
        >>> jar = FileCookieJar('cookies.lwp')
        >>> api = ActionApi('https://en.wikipedia.org/w/api.php', cookiejar=jar)

    Args:
        filename (str): Path to the cookie file.
        policy (http.cookiejar.CookiePolicy): Passed on to
            :py:class:`http.cookiejar.CookieJar`.
    """

    def __init__(self, filename: str, policy: Optional[CookiePolicy] = None) -> None:
        self._loading = False
        super().__init__(filename, policy=policy)
        if os.path.exists(self.filename) and os.path.getsize(self.filename) > 0:
            try:
                self.load()
            except (LoadError, OSError, ValueError) as e:
                log.warning('Ignoring unreadable cookie file %s: %s', self.filename, e)
                super().clear()

    def load(
        self,
        filename: Optional[str] = None,
        ignore_discard: bool = True,
        ignore_expires: bool = True
    ) -> None:
        self._loading = True
        try:
            super().load(filename, ignore_discard, ignore_expires)
        finally:
            self._loading = False

    def save(
        self,
        filename: Optional[str] = None,
        ignore_discard: bool = True,
        ignore_expires: bool = True
    ) -> None:
        with self._cookies_lock:
            super().save(filename, ignore_discard, ignore_expires)

    def set_cookie(self, cookie: Cookie) -> None:
        with self._cookies_lock:
            super().set_cookie(cookie)
            if not self._loading:
                self._persist()

    def clear(
        self,
        domain: Optional[str] = None,
        path: Optional[str] = None,
        name: Optional[str] = None
    ) -> None:
        with self._cookies_lock:
            super().clear(domain, path, name)
            self._persist()

    def _persist(self) -> None:
        # Cookies are updated from inside requests, after the exchange succeeded
        try:
            self.save()
        except OSError as e:
            log.warning('Could not save cookie file %s: %s', self.filename, e)
