"""Report encoding and delivery."""

import json
import logging
from typing import Any

import requests

from btfs_analytics.config import DEFAULT_ENDPOINT, DEFAULT_REQUEST_TIMEOUT
from btfs_analytics.errors import SerializationFailure, TransportFailure
from btfs_analytics.models import IdentitySnapshot, TickSnapshot

logger = logging.getLogger(__name__)

HEADERS = {"Content-Type": "application/json"}


def build_payload(identity: IdentitySnapshot, tick: TickSnapshot) -> dict[str, Any]:
    """Merge identity and tick into the flat report object."""
    return {
        "node_id": identity.node_id,
        "cpu_info": identity.cpu_info,
        "btfs_version": identity.btfs_version,
        "os_type": identity.os_type,
        "arch_type": identity.arch_type,
        "up_time": tick.up_time,
        "storage_used": tick.storage_used,
        "memory_used": tick.memory_used,
        "cpu_used": tick.cpu_used,
        "upload": tick.upload,
        "download": tick.download,
        "total_upload": tick.total_upload,
        "total_download": tick.total_download,
        "blocks_up": tick.blocks_up,
        "blocks_down": tick.blocks_down,
        "exchanges": tick.exchanges,
        "peers_connected": tick.peers_connected,
    }


def encode_payload(payload: dict[str, Any]) -> bytes:
    try:
        return json.dumps(payload, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationFailure(f"cannot encode report: {e}") from e


class Transmitter:
    """
    Fire-and-forget delivery of reports to the collection endpoint.

    Each report is a single POST. The response is drained and discarded
    without looking at the status code; nothing is retried.
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._timeout = timeout
        self._session = session if session is not None else requests.Session()
        self.last_error: Exception | None = None

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def send(self, identity: IdentitySnapshot, tick: TickSnapshot) -> bool:
        """
        Deliver one report.

        Never raises. The failure, if any, is kept in `last_error`.

        Returns:
            True if the endpoint answered, False if the report was dropped.
        """
        self.last_error = None
        try:
            self._post(encode_payload(build_payload(identity, tick)))
        except (SerializationFailure, TransportFailure) as e:
            logger.debug("Report dropped: %s", e)
            self.last_error = e
            return False
        return True

    def close(self) -> None:
        self._session.close()

    def _post(self, body: bytes) -> None:
        try:
            response = self._session.post(
                self._endpoint,
                data=body,
                headers=HEADERS,
                timeout=self._timeout,
            )
        except (requests.RequestException, ValueError) as e:
            raise TransportFailure(f"POST {self._endpoint} failed: {e}") from e

        try:
            response.content  # Drain the body so the connection can be reused
        except requests.RequestException as e:
            raise TransportFailure(f"reading response failed: {e}") from e
        finally:
            response.close()
        logger.debug("Report delivered to %s (HTTP %s)", self._endpoint, response.status_code)
