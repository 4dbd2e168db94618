"""
Reconcile PagerDuty services against their Opsmatic webhooks.

A service counts as "installed" when at least one service-scoped webhook
attached to it points at the Opsmatic PagerDuty events endpoint. Nothing is
cached between runs, so every run starts from the current remote state and
adding webhooks twice never installs a second copy.
"""

import logging
import re
from datetime import datetime
from typing import Optional, Dict, Any, List

from .clients import PagerDutyClient
from .config import Options
from .errors import MalformedResponseError

logger = logging.getLogger(__name__)

PAGERDUTY_SERVICE_TYPE = 'service'
OPSMATIC_WEBHOOK_NAME = 'Opsmatic Webhook'
OPSMATIC_WEBHOOK_BASE_URL = 'https://api.opsmatic.com/webhooks/events/pagerduty?token='
OPSMATIC_WEBHOOK_BASE_URL_RE = re.compile(r'\s*' + re.escape(OPSMATIC_WEBHOOK_BASE_URL), re.IGNORECASE)

STATUS_INSTALLED = 'installed'
STATUS_NOT_INSTALLED = 'not installed'


def opsmatic_webhook_url_matches(url: Optional[str]) -> bool:
    return isinstance(url, str) and OPSMATIC_WEBHOOK_BASE_URL_RE.match(url) is not None


def is_opsmatic_webhook_for(webhook: Dict[str, Any], service_id: str) -> bool:
    if not isinstance(webhook, dict):
        return False
    target = webhook.get('webhook_object')
    if not isinstance(target, dict):
        return False
    return (
        target.get('id') == service_id
        and target.get('type') == PAGERDUTY_SERVICE_TYPE
        and opsmatic_webhook_url_matches(webhook.get('url'))
    )


def combine_services_and_webhooks(services: List[Dict], webhooks: List[Dict]) -> List[Dict]:
    """Attach to each service the Opsmatic webhooks that target it.

    Returns one dict per service, in input order, holding the service's id,
    name and service_url plus a ``webhooks`` list. Duplicate matches are kept.
    Webhooks of the wrong shape never match; a service without an id raises
    MalformedResponseError.
    """
    combined = []
    for service in services:
        if not isinstance(service, dict) or not service.get('id'):
            raise MalformedResponseError(f"Service entry has no id: {service!r}")
        service_id = service['id']
        combined.append({
            'id': service_id,
            'name': service.get('name'),
            'service_url': service.get('service_url'),
            'webhooks': [w for w in webhooks if is_opsmatic_webhook_for(w, service_id)],
        })
    return combined


def webhook_installed(service: Dict) -> bool:
    return bool(service.get('webhooks'))


def webhook_status(service: Dict) -> str:
    return STATUS_INSTALLED if webhook_installed(service) else STATUS_NOT_INSTALLED


def format_service_status(service: Dict) -> str:
    return f"{service['id']}\t{service['name']}\t{webhook_status(service)}"


def report_service_webhook_status(services: List[Dict]) -> List[str]:
    lines = [format_service_status(service) for service in services]
    print("Status of PagerDuty Services")
    for line in lines:
        print(line)
    return lines


def webhook_object(service_id: str, okey: str) -> Dict[str, Any]:
    return {
        'name': OPSMATIC_WEBHOOK_NAME,
        'url': f'{OPSMATIC_WEBHOOK_BASE_URL}{okey}',
        'webhook_object': {
            'type': PAGERDUTY_SERVICE_TYPE,
            'id': service_id
        }
    }


def add_webhook_to_services(client: PagerDutyClient, services: List[Dict], okey: str) -> int:
    """Create the Opsmatic webhook on every service that lacks one.

    Stops at the first failed call; webhooks created before it stay in place.
    Returns the number of services that received a new webhook.
    """
    logger.info("Adding webhooks")
    count = 0
    for service in services:
        if webhook_installed(service):
            continue
        client.create_webhook(webhook_object(service['id'], okey))
        logger.info(f"Created webhook for service {service['id']} ({service['name']})")
        count += 1

    if count > 0:
        logger.warning(f"Created {count} webhook(s)")
    else:
        logger.warning("No webhooks created")
    return count


class PagerDutySetup:
    def __init__(self, options: Options, client: Optional[PagerDutyClient] = None):
        self.options = options
        self.client = client or PagerDutyClient(options.subdomain, options.pdkey, timeout=options.timeout)

    def process(self) -> Dict[str, Any]:
        logger.info("Starting Service Scan")

        services = self.client.list_services()
        logger.info(f"Found {len(services)} services")

        webhooks = self.client.list_webhooks()
        logger.info(f"Found {len(webhooks)} webhooks")

        combined = combine_services_and_webhooks(services, webhooks)
        results = {
            'services': combined,
            'webhooks_found': len(webhooks),
            'report': report_service_webhook_status(combined),
            'created': 0,
        }
        if self.options.addhooks:
            results['created'] = add_webhook_to_services(self.client, combined, self.options.okey)
        return results

    def run(self) -> Dict[str, Any]:
        run_time = datetime.now()
        logger.info(f"Starting PagerDutySetup at {run_time}")
        results = self.process()
        logger.info(f"Stopping PagerDutySetup at {datetime.now()}")
        return results
