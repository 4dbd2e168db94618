import json
import logging
import re
import time
import requests
from typing import Optional, Dict, Any, List

from .errors import (
    ConfigurationError,
    MalformedResponseError,
    PagerDutyHTTPError,
    PagerDutyRequestError,
    RequestTimeout,
    UnsupportedMethodError,
)

logger = logging.getLogger(__name__)

PAGERDUTY_API_BASE_URL = 'https://{subdomain}.pagerduty.com/api/v1'
PAGERDUTY_SERVICES_ENDPOINT = 'services'
PAGERDUTY_WEBHOOKS_ENDPOINT = 'webhooks'

# documented max page size for the PagerDuty v1 API
PAGERDUTY_MAX_PAGE_SIZE = 100
TIMEOUT_SECONDS = 30

# deadline is checked after every chunk read
READ_CHUNK_SIZE = 128

SUBDOMAIN_RE = re.compile(r'[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?')


def valid_subdomain(subdomain: Optional[str]) -> bool:
    return bool(subdomain) and SUBDOMAIN_RE.fullmatch(subdomain) is not None


class PagerDutyClient:
    def __init__(self, subdomain: str, token: str, timeout: float = TIMEOUT_SECONDS,
                 session: Optional[requests.Session] = None):
        if not valid_subdomain(subdomain):
            raise ConfigurationError(f"Invalid PagerDuty subdomain: {subdomain!r}")
        self.subdomain = subdomain
        self.token = token
        self.timeout = timeout
        self.limit = PAGERDUTY_MAX_PAGE_SIZE
        self.base_url = PAGERDUTY_API_BASE_URL.format(subdomain=subdomain)
        self.session = session or requests.Session()
        self.headers = {
            'Authorization': f'Token token={self.token}',
            'Content-Type': 'application/json',
            'Accept': 'application/json'
        }

    def endpoint_url(self, endpoint: str, page: Optional[int] = None) -> str:
        url = f'{self.base_url}/{endpoint}'
        if page is not None:
            url = f'{url}?offset={page * self.limit}&limit={self.limit}'
        return url

    def _read_body(self, resp, url: str, deadline: float) -> str:
        chunks = []
        try:
            if time.monotonic() > deadline:
                raise RequestTimeout(url, self.timeout)
            for chunk in resp.iter_content(chunk_size=READ_CHUNK_SIZE):
                if time.monotonic() > deadline:
                    raise RequestTimeout(url, self.timeout)
                chunks.append(chunk)
        finally:
            resp.close()
        return b''.join(chunks).decode(resp.encoding or 'utf-8', errors='replace')

    def request(self, method: str, url: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        """Issue a single GET or POST and return the decoded JSON body.

        The whole call, including reading the body, must finish within
        ``self.timeout`` seconds or RequestTimeout is raised.
        PagerDutyHTTPError is raised on a non-2xx status and
        MalformedResponseError when the body is not JSON. Nothing is retried.
        """
        method = method.upper()
        if method not in ('GET', 'POST'):
            raise UnsupportedMethodError(f"Unsupported HTTP method: {method}")

        logger.debug(f"{method} {url}")
        deadline = time.monotonic() + self.timeout
        try:
            if method == 'GET':
                resp = self.session.get(url, headers=self.headers, timeout=self.timeout, stream=True)
            else:
                resp = self.session.post(url, headers=self.headers, json=payload,
                                         timeout=self.timeout, stream=True)
            text = self._read_body(resp, url, deadline)
        except requests.exceptions.Timeout as e:
            raise RequestTimeout(url, self.timeout) from e
        except requests.exceptions.RequestException as e:
            # a stalled stream surfaces as ConnectionError from iter_content
            if time.monotonic() >= deadline:
                raise RequestTimeout(url, self.timeout) from e
            raise PagerDutyRequestError(f"Request to {url} failed: {e}", url=url) from e

        logger.debug(f"PagerDuty response: status={resp.status_code}")
        if not 200 <= resp.status_code < 300:
            raise PagerDutyHTTPError(url, resp.status_code, text)
        if not text:
            return {}
        try:
            return json.loads(text)
        except ValueError as e:
            raise MalformedResponseError(f"Invalid JSON from {url}: {e}", url=url) from e

    def fetch(self, url: str) -> Any:
        return self.request('GET', url)

    def submit(self, url: str, payload: Dict[str, Any]) -> Any:
        return self.request('POST', url, payload)

    def get_resources(self, endpoint: str, key: Optional[str] = None) -> List[Dict]:
        """Collect every element of a paginated collection.

        Pages are requested at offsets 0, limit, 2*limit, ... until the number
        of collected elements reaches the ``total`` reported by the first page.
        """
        key = key or endpoint
        elements = []
        total = None
        page = 0
        while total is None or len(elements) < total:
            url = self.endpoint_url(endpoint, page=page)
            result = self.fetch(url)
            if not isinstance(result, dict) or not isinstance(result.get(key), list):
                raise MalformedResponseError(f"Response from {url} has no '{key}' list", url=url)
            if total is None:
                total = result.get('total')
                if not isinstance(total, int):
                    raise MalformedResponseError(f"Response from {url} has no integer 'total'", url=url)

            page_of_elements = result[key]
            if not page_of_elements:
                if len(elements) < total:
                    # collection shrank while paging
                    logger.warning(f"Empty page for {endpoint} at offset {page * self.limit}, "
                                   f"got {len(elements)} of {total}")
                break
            elements.extend(page_of_elements)
            page += 1

        logger.debug(f"Fetched {len(elements)} {key} in {page} page(s)")
        return elements

    def create_resource(self, endpoint: str, data: Dict[str, Any]) -> Any:
        return self.submit(self.endpoint_url(endpoint), data)

    def list_services(self) -> List[Dict]:
        return self.get_resources(PAGERDUTY_SERVICES_ENDPOINT)

    def list_webhooks(self) -> List[Dict]:
        return self.get_resources(PAGERDUTY_WEBHOOKS_ENDPOINT)

    def create_webhook(self, webhook: Dict[str, Any]) -> Any:
        return self.create_resource(PAGERDUTY_WEBHOOKS_ENDPOINT, webhook)
