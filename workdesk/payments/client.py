import logging
import os
import threading
from typing import Any, Dict, Optional

import requests

from workdesk.payments.errors import GatewayBusinessError, GatewayTransportError, MalformedResponseError

logger = logging.getLogger(__name__)


class GatewayClient:
    """
    JSON client for the billing API's invoice payment endpoints.

    Every call returns the decoded body of a successful response or raises:
      GatewayTransportError   network failure, or non-2xx without a JSON body
      MalformedResponseError  2xx whose body is not JSON
      GatewayBusinessError    body says success: false

    requests.Session is not shared between threads: each request thread
    gets its own unless a session is passed in.
    """

    def __init__(self, base_url: Optional[str] = None, token: Optional[str] = None,
                 timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.base_url = (base_url or os.getenv('BILLING_API_URL', 'http://localhost:8000')).rstrip('/')
        self.token = token if token is not None else os.getenv('BILLING_API_TOKEN')
        self.timeout = timeout or float(os.getenv('BILLING_API_TIMEOUT', '30'))
        self._session = session
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        if self._session is not None:
            return self._session
        session = getattr(self._local, 'session', None)
        if session is None:
            session = self._local.session = requests.Session()
        return session

    @session.setter
    def session(self, value: Optional[requests.Session]):
        self._session = value

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-Requested-With": "XMLHttpRequest",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def post(self, endpoint: str, payload: Dict[str, Any], gateway: Optional[str] = None) -> Dict[str, Any]:
        """
        POST `payload` to `endpoint` (a path relative to the billing API).

        Args:
            endpoint: e.g. 'mollie/invoice-payment/<token>'
            payload: JSON body
            gateway: gateway id, for logging only
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        try:
            response = self.session.post(url, json=payload, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Gateway %s POST %s failed: %s", gateway, endpoint, e)
            raise GatewayTransportError('Payment service is unreachable. Please try again.', details=str(e))

        try:
            data = response.json()
        except ValueError:
            data = None

        if not isinstance(data, dict):
            if not response.ok:
                logger.warning("Gateway %s POST %s answered %s", gateway, endpoint, response.status_code)
                raise GatewayTransportError(
                    f'Payment service error ({response.status_code}).',
                    details={'status': response.status_code}
                )
            logger.warning("Gateway %s POST %s returned a non-JSON body", gateway, endpoint)
            raise MalformedResponseError('Unexpected response from payment service.',
                                         details={'status': response.status_code})

        if data.get('success') is False or not response.ok:
            error = data.get('error')
            if isinstance(error, dict):
                error = error.get('message')
            message = error or data.get('message') or 'Payment failed'
            logger.info("Gateway %s POST %s rejected: %s", gateway, endpoint, message)
            raise GatewayBusinessError(message, details={'status': response.status_code})

        logger.info("Gateway %s POST %s succeeded", gateway, endpoint)
        return data
