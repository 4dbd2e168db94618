import os
from typing import Optional, List

from .clients import TIMEOUT_SECONDS, valid_subdomain
from .errors import ConfigurationError

REQUIRED_OPTIONS = ['subdomain', 'pdkey', 'okey']


class Options:
    """Run configuration, built once at startup and passed to every component."""

    def __init__(
        self,
        subdomain: Optional[str] = None,
        pdkey: Optional[str] = None,
        okey: Optional[str] = None,
        addhooks: bool = False,
        verbose: bool = False,
        timeout: float = TIMEOUT_SECONDS,
    ):
        self.subdomain = subdomain
        self.pdkey = pdkey
        self.okey = okey
        self.addhooks = addhooks
        self.verbose = verbose
        self.timeout = timeout

    @classmethod
    def from_env(cls, environ=None, timeout: Optional[float] = None) -> 'Options':
        """Read options from the environment; an explicit ``timeout`` wins over PAGERDUTY_TIMEOUT."""
        environ = os.environ if environ is None else environ
        if timeout is None:
            raw = environ.get('PAGERDUTY_TIMEOUT')
            try:
                timeout = float(raw) if raw else TIMEOUT_SECONDS
            except ValueError:
                raise ConfigurationError(f"PAGERDUTY_TIMEOUT must be a number, got {raw!r}")
        return cls(
            subdomain=environ.get('PAGERDUTY_SUBDOMAIN'),
            pdkey=environ.get('PAGERDUTY_API_KEY') or environ.get('PAGERDUTY_TOKEN'),
            okey=environ.get('OPSMATIC_TOKEN'),
            timeout=timeout,
        )

    def missing(self) -> List[str]:
        return [name for name in REQUIRED_OPTIONS if not getattr(self, name)]

    def validate(self) -> 'Options':
        missing = self.missing()
        if missing:
            raise ConfigurationError(f"Missing options: {', '.join(missing)}", missing=missing)
        if not valid_subdomain(self.subdomain):
            raise ConfigurationError(f"Subdomain must be a single DNS label, got {self.subdomain!r}")
        if self.timeout is None or self.timeout <= 0:
            raise ConfigurationError(f"Timeout must be a positive number of seconds, got {self.timeout}")
        return self

    def __repr__(self):
        return (f"Options(subdomain={self.subdomain!r}, addhooks={self.addhooks}, "
                f"verbose={self.verbose}, timeout={self.timeout})")
