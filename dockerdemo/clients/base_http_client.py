import requests
import time
import re

from typing import Dict, Optional
from urllib.parse import urljoin
from abc import ABC
from dockerdemo.utils.log import app_logger


def sanitize_error(e: Exception) -> str:
    """Strip memory addresses like <HTTPConnection(...) at 0x...> from an exception message."""
    return re.sub(r'0x[0-9a-fA-F]+', '<ptr>', str(e))


class BaseHTTPClient(ABC):
    """Base HTTP client with common functionalities like GET, retries, and error handling"""

    USER_AGENT = "dockerdemo-client/1.0"

    def __init__(self,
                 base_url: str,
                 timeout: float = 10, max_retries: int = 0,
                 retry_delay: float = 1.5,
                 accept: Optional[str] = 'application/json'
                 ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.accept = accept
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.session = requests.Session()

        # setup default headers
        self._setup_default_headers()

    def _setup_default_headers(self):
        """setup default headers for the client"""
        self.session.headers.update({
            'User-Agent': self.USER_AGENT,
            'Accept': self.accept,
        })

    def _build_url(self, endpoint: str) -> str:
        """build full URL"""
        return urljoin(f"{self.base_url}/", endpoint.lstrip('/'))

    def _make_request(self, method: str, endpoint: str,
                      params: Optional[Dict] = None,
                      headers: Optional[Dict] = None) -> requests.Response:
        """do HTTP request with retries on network errors; HTTP error statuses are returned, not raised"""
        url = self._build_url(endpoint)
        request_headers = headers or {}

        for attempt in range(self.max_retries + 1):
            try:
                response = self.session.request(
                    method=method,
                    url=url,
                    params=params,
                    headers=request_headers,
                    timeout=self.timeout
                )

                # check rate limiting
                if response.status_code == 429 and attempt < self.max_retries:
                    retry_after = int(response.headers.get('Retry-After', 1))
                    app_logger.warning("request.rate_limited", url=url, attempt=attempt + 1, wait=retry_after)
                    time.sleep(retry_after)
                    continue

                if response.status_code >= 400:
                    app_logger.debug("request.status", method=method, url=url, status_code=response.status_code)
                return response

            except requests.exceptions.RequestException as e:
                app_logger.error("request.failed", method=method, url=url, attempt=attempt + 1,
                                 exc_type=type(e).__name__, error=sanitize_error(e))

                if attempt == self.max_retries:
                    raise

                # exponential backoff
                wait_time = self.retry_delay * (2 ** attempt)
                time.sleep(wait_time)

        return response

    def get(self, endpoint: str, params: Optional[Dict] = None,
            headers: Optional[Dict] = None) -> requests.Response:
        """do GET request"""
        return self._make_request('GET', endpoint, params=params, headers=headers)

    def close(self):
        """close HTTP session"""
        self.session.close()
