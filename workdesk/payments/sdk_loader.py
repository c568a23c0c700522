import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Callable, Dict, Optional

import requests

from workdesk.payments.errors import SdkLoadError

logger = logging.getLogger(__name__)


class SdkHandle:
    """A provider checkout script known to be reachable."""

    def __init__(self, gateway_id: str, script_url: str):
        self.gateway_id = gateway_id
        self.script_url = script_url

    def to_dict(self):
        return {'gateway': self.gateway_id, 'script': self.script_url}


def check_script(script_url: str, timeout: float) -> None:
    response = requests.head(script_url, timeout=timeout, allow_redirects=True)
    response.raise_for_status()


class SdkLoader:
    """
    Loads provider SDKs at most once per gateway per process.

    `load()` returns the same Future to every caller until it resolves. A
    failed load is dropped from the cache so the next caller starts over.
    """

    def __init__(self, executor: Optional[ThreadPoolExecutor] = None,
                 fetch: Optional[Callable[[str, float], None]] = None,
                 timeout: Optional[float] = None):
        self.timeout = timeout or float(os.getenv('SDK_LOAD_TIMEOUT', '10'))
        self._executor = executor or ThreadPoolExecutor(max_workers=4, thread_name_prefix="sdk-loader")
        self._fetch = fetch or check_script
        self._futures: Dict[str, Future] = {}
        self._lock = threading.RLock()

    def _run(self, gateway_id: str, script_url: str) -> SdkHandle:
        self._fetch(script_url, self.timeout)
        logger.info("SDK for %s loaded from %s", gateway_id, script_url)
        return SdkHandle(gateway_id, script_url)

    @staticmethod
    def _failed(future: Future) -> bool:
        return future.done() and (future.cancelled() or future.exception() is not None)

    def _evict_on_failure(self, gateway_id: str, future: Future) -> None:
        if self._failed(future):
            with self._lock:
                if self._futures.get(gateway_id) is future:
                    del self._futures[gateway_id]
            logger.warning("SDK for %s failed to load; next request retries", gateway_id)

    def load(self, gateway_id: str, script_url: str) -> Future:
        with self._lock:
            future = self._futures.get(gateway_id)
            if future is None or self._failed(future):
                future = self._executor.submit(self._run, gateway_id, script_url)
                self._futures[gateway_id] = future
                future.add_done_callback(lambda f, gid=gateway_id: self._evict_on_failure(gid, f))
        return future

    def is_loaded(self, gateway_id: str) -> bool:
        with self._lock:
            future = self._futures.get(gateway_id)
        return bool(future and future.done() and not self._failed(future))

    def wait(self, gateway_id: str, script_url: str, timeout: Optional[float] = None) -> SdkHandle:
        """Block until the SDK is available. Raises SdkLoadError."""
        future = self.load(gateway_id, script_url)
        try:
            return future.result(timeout=timeout if timeout is not None else self.timeout)
        except FutureTimeout:
            raise SdkLoadError(f'Timed out loading the {gateway_id} checkout.')
        except Exception as e:
            raise SdkLoadError(f'Could not load the {gateway_id} checkout.', details=str(e))

    def shutdown(self):
        self._executor.shutdown(wait=False)
