"""Shared fixtures: an in-memory stand-in for the PagerDuty v1 REST API."""

import json
from urllib.parse import urlparse, parse_qs

import pytest
import requests

from pager_duty_setup import PagerDutyClient

SUBDOMAIN = 'acme'
PDKEY = 'pd-key'
OKEY = 'ops-token'
OPSMATIC_URL = f'https://api.opsmatic.com/webhooks/events/pagerduty?token={OKEY}'


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self.text = text if text is not None else ('' if body is None else json.dumps(body))
        self.encoding = 'utf-8'
        self.closed = False

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def iter_content(self, chunk_size=1):
        content = self.text.encode(self.encoding)
        for start in range(0, len(content), chunk_size):
            yield content[start:start + chunk_size]

    def close(self):
        self.closed = True

    def json(self):
        return json.loads(self.text)


class FakePagerDuty:
    """Session double serving ``services`` and ``webhooks`` with offset/limit paging."""

    def __init__(self, services=None, webhooks=None):
        self.collections = {
            'services': list(services or []),
            'webhooks': list(webhooks or []),
        }
        self.requests = []
        self.fail_with = None
        self.fail_post_after = None
        self.posts = 0

    def _record(self, method, url, headers, timeout, payload=None, stream=False):
        self.requests.append({
            'method': method,
            'url': url,
            'headers': headers,
            'timeout': timeout,
            'json': payload,
            'stream': stream,
        })
        if self.fail_with is not None:
            raise self.fail_with

    def get(self, url, headers=None, timeout=None, stream=False):
        self._record('GET', url, headers, timeout, stream=stream)
        parsed = urlparse(url)
        endpoint = parsed.path.rsplit('/', 1)[-1]
        if endpoint not in self.collections:
            return FakeResponse(404, {'error': {'message': 'Not Found'}})
        query = parse_qs(parsed.query)
        offset = int(query.get('offset', ['0'])[0])
        limit = int(query.get('limit', ['25'])[0])
        items = self.collections[endpoint]
        return FakeResponse(200, {
            endpoint: items[offset:offset + limit],
            'total': len(items),
            'offset': offset,
            'limit': limit,
        })

    def post(self, url, headers=None, json=None, timeout=None, stream=False):
        self._record('POST', url, headers, timeout, payload=json, stream=stream)
        if self.fail_post_after is not None and self.posts >= self.fail_post_after:
            return FakeResponse(500, text='internal error')
        self.posts += 1
        webhook = dict(json, id=f'PWH{len(self.collections["webhooks"]) + 1}')
        self.collections['webhooks'].append(webhook)
        return FakeResponse(201, {'webhook': webhook})

    def offsets(self, endpoint):
        return [
            int(parse_qs(urlparse(r['url']).query)['offset'][0])
            for r in self.requests
            if r['method'] == 'GET' and urlparse(r['url']).path.endswith(f'/{endpoint}')
        ]


def make_service(service_id, name):
    return {
        'id': service_id,
        'name': name,
        'service_url': f'/services/{service_id}',
        'status': 'active',
    }


def make_webhook(service_id, url=OPSMATIC_URL, object_type='service'):
    return {
        'id': f'W-{service_id}',
        'name': 'Some Webhook',
        'url': url,
        'webhook_object': {'type': object_type, 'id': service_id},
    }


@pytest.fixture
def fake_api():
    return FakePagerDuty(
        services=[make_service('S1', 'Web'), make_service('S2', 'DB')],
        webhooks=[make_webhook('S1')],
    )


@pytest.fixture
def client(fake_api):
    return PagerDutyClient(SUBDOMAIN, PDKEY, timeout=5, session=fake_api)


@pytest.fixture
def timeout_error():
    return requests.exceptions.ReadTimeout('read timed out')
