import requests
import structlog
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

log = structlog.get_logger()


class FeedClient:
    """Fetches a host/address inventory export (CSV or plain lines) over HTTP."""

    def __init__(self, url, timeout=10):
        self.url = url
        self.timeout = timeout
        self.session = self._get_requests_session()

    def _get_requests_session(self):
        retry_strategy = Retry(
            total=4,
            connect=4,
            read=4,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "OPTIONS"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session = requests.Session()
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def fetch_lines(self):
        log.info("Fetching inventory feed", url=self.url)
        try:
            response = self.session.get(self.url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            log.error(
                "Inventory feed HTTP error",
                error=e,
                response=e.response.text[:200] if e.response is not None and e.response.text else "No response text",
            )
            return None
        except requests.exceptions.RequestException as e:
            log.error("Inventory feed request failed due to network or request issue", error=e)
            return None

        lines = response.text.splitlines()
        log.debug("Fetched inventory feed", url=self.url, lines=len(lines))
        return lines
