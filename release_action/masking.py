"""Logging filter that scrubs secret values from every log record."""

import logging
from collections.abc import Iterable

MASK = "**********"


class SecretMaskingFilter(logging.Filter):
    """Replace registered secret values with a fixed mask.

    The record is formatted before scrubbing and its arguments are dropped, so
    a secret that looks like a format directive (e.g. "%s") is replaced as
    plain text and cannot be re-interpreted by a formatter.
    """

    def __init__(self, secrets: Iterable[str] = ()) -> None:
        super().__init__()
        self._secrets: set[str] = set()
        for secret in secrets:
            self.register(secret)

    def register(self, secret: str) -> None:
        """Register a secret value; empty values are ignored."""
        if secret:
            self._secrets.add(secret)

    def mask(self, text: str) -> str:
        # Longest first so a secret containing another is masked whole.
        for secret in sorted(self._secrets, key=len, reverse=True):
            text = text.replace(secret, MASK)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True

        record.msg = self.mask(record.getMessage())
        record.args = None

        if record.exc_info and not record.exc_text:
            record.exc_text = logging.Formatter().formatException(record.exc_info)
        if record.exc_text:
            record.exc_text = self.mask(record.exc_text)

        return True


def install_secret_masking(
    secrets: Iterable[str], logger: logging.Logger | None = None
) -> SecretMaskingFilter:
    """Attach a masking filter to every handler of `logger` (root by default)."""
    masking = SecretMaskingFilter(secrets)
    for handler in (logger or logging.getLogger()).handlers:
        handler.addFilter(masking)
    return masking
