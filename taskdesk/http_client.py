"""HTTP session for the webhook notifier."""

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

WEBHOOK_TIMEOUT = 10  # seconds, per attempt

# A 500 may mean the receiver already accepted the message, so only
# rate limiting and gateway errors are retried.
WEBHOOK_RETRY_STATUSES = (429, 502, 503, 504)

_webhook_session: requests.Session | None = None


def get_session() -> requests.Session:
    """Return the shared webhook session.

    A POST is retried up to 3 times with exponential backoff (1s, 2s, 4s),
    honouring ``Retry-After`` on 429/503.
    """
    global _webhook_session
    if _webhook_session is None:
        _webhook_session = requests.Session()
        _webhook_session.headers["Content-Type"] = "application/json"
        retry = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=WEBHOOK_RETRY_STATUSES,
            allowed_methods=["POST"],
            respect_retry_after_header=True,
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        _webhook_session.mount("http://", adapter)
        _webhook_session.mount("https://", adapter)
    return _webhook_session
