from .clients import (
    PagerDutyClient,
    PAGERDUTY_API_BASE_URL,
    PAGERDUTY_MAX_PAGE_SIZE,
    TIMEOUT_SECONDS,
)
from .config import Options
from .errors import (
    PagerDutySetupError,
    ConfigurationError,
    PagerDutyRequestError,
    RequestTimeout,
    PagerDutyHTTPError,
    MalformedResponseError,
    UnsupportedMethodError,
)
from .webhooks import (
    PagerDutySetup,
    combine_services_and_webhooks,
    report_service_webhook_status,
    add_webhook_to_services,
    webhook_installed,
    webhook_status,
    OPSMATIC_WEBHOOK_BASE_URL,
)

__all__ = [
    'PagerDutyClient',
    'PAGERDUTY_API_BASE_URL',
    'PAGERDUTY_MAX_PAGE_SIZE',
    'TIMEOUT_SECONDS',
    'Options',
    'PagerDutySetupError',
    'ConfigurationError',
    'PagerDutyRequestError',
    'RequestTimeout',
    'PagerDutyHTTPError',
    'MalformedResponseError',
    'UnsupportedMethodError',
    'PagerDutySetup',
    'combine_services_and_webhooks',
    'report_service_webhook_status',
    'add_webhook_to_services',
    'webhook_installed',
    'webhook_status',
    'OPSMATIC_WEBHOOK_BASE_URL',
]
