import json
import logging
from typing import Any, Dict, Optional

import httpx

from bootstrap.exceptions import SecretStoreError

logger = logging.getLogger(__name__)

DEFAULT_SIDECAR_HOST = "http://localhost"
DEFAULT_SIDECAR_PORT = "3500"


class SecretStoreClient:
    """
    Bulk reader for the local secret-store sidecar.

    * One ``GET /v1.0/secrets/{store}/bulk`` per call, no retries.
    * No timeout of its own; pass an ``httpx.AsyncClient`` configured with one
      if startup must not hang on a stuck sidecar.
    * Any transport, status or payload problem raises ``SecretStoreError``.
    """

    def __init__(self, base_url: str, http_client: Optional[httpx.AsyncClient] = None):
        self.base_url: str = base_url.rstrip("/")
        self._http_client = http_client

    def bulk_url(self, store_id: str) -> str:
        return f"{self.base_url}/v1.0/secrets/{store_id}/bulk"

    async def fetch_bulk_secrets(self, store_id: str) -> Dict[str, str]:
        url = self.bulk_url(store_id)
        headers = {"Accept": "application/json"}
        logger.info("Fetching bulk secrets from store '%s'", store_id)

        try:
            if self._http_client is not None:
                resp = await self._http_client.get(url, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=None) as client:
                    resp = await client.get(url, headers=headers)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SecretStoreError(
                "Secret store returned an error status", url=url, status_code=e.response.status_code, original_error=e
            ) from e
        except httpx.HTTPError as e:
            raise SecretStoreError("Secret store request failed", url=url, original_error=e) from e

        try:
            body = resp.json()
        except json.JSONDecodeError as e:
            raise SecretStoreError("Secret store response is not valid JSON", url=url, original_error=e) from e

        secrets = self.parse_bulk_payload(body, url=url)
        logger.info("Loaded %d secrets from store '%s'", len(secrets), store_id)
        return secrets

    @staticmethod
    def parse_bulk_payload(body: Any, url: Optional[str] = None) -> Dict[str, str]:
        """Each entry is ``{name: {name: value}}``; keep ``value`` per name."""
        if body is None:
            return {}
        if not isinstance(body, dict):
            raise SecretStoreError(f"Expected a JSON object, got {type(body).__name__}", url=url)

        secrets: Dict[str, str] = {}
        for name, payload in body.items():
            if payload is None or name in secrets:
                continue
            if not isinstance(payload, dict):
                raise SecretStoreError(f"Secret '{name}' payload is not an object", url=url)
            if name not in payload:
                raise SecretStoreError(f"Secret '{name}' payload has no entry for its own name", url=url)
            value = payload[name]
            if value is None:
                logger.debug("Secret '%s' has a null value – skipped", name)
                continue
            if not isinstance(value, str):
                raise SecretStoreError(f"Secret '{name}' value is not a string", url=url)
            secrets[name] = value
        return secrets
