from typing import Optional


class PagerDutySetupError(Exception):
    pass


class ConfigurationError(PagerDutySetupError):
    def __init__(self, message: str, missing: Optional[list] = None):
        super().__init__(message)
        self.missing = missing or []


class PagerDutyRequestError(PagerDutySetupError):
    def __init__(self, message: str, url: str = None):
        super().__init__(message)
        self.url = url


class RequestTimeout(PagerDutyRequestError):
    def __init__(self, url: str, timeout: float):
        super().__init__(f"Request to {url} timed out after {timeout}s", url=url)
        self.timeout = timeout


class PagerDutyHTTPError(PagerDutyRequestError):
    def __init__(self, url: str, status_code: int, body: str):
        super().__init__(f"HTTP {status_code} from {url}: {body[:200]}", url=url)
        self.status_code = status_code
        self.body = body


class MalformedResponseError(PagerDutySetupError):
    def __init__(self, message: str, url: str = None):
        super().__init__(message)
        self.url = url


class UnsupportedMethodError(PagerDutySetupError):
    pass
