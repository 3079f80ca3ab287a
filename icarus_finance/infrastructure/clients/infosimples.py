"""InfoSimples HTTP client for the ANVISA product registry"""

from typing import Any, Dict

import httpx

from icarus_finance.domain.exceptions import ExternalServiceError
from icarus_finance.infrastructure.observability.metrics import external_failure_counter


class InfoSimplesClient:
    """Client for InfoSimples ANVISA registry lookups"""

    def __init__(self, api_key: str, base_url: str, timeout: float = 30.0):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def _post(self, endpoint: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST to an InfoSimples query endpoint.

        Raises:
            ExternalServiceError: On timeout, HTTP errors, or invalid JSON
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/{endpoint}",
                    json={"token": self.api_key, **body},
                )
                response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                external_failure_counter.labels(service="infosimples").inc()
                raise ExternalServiceError(f"InfoSimples timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                external_failure_counter.labels(service="infosimples").inc()
                raise ExternalServiceError(f"API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                external_failure_counter.labels(service="infosimples").inc()
                raise ExternalServiceError(f"InfoSimples unreachable: {e}") from e
            except ValueError as e:
                raise ExternalServiceError(f"Invalid JSON from InfoSimples: {e}") from e

    async def consultar_registro(self, numero_registro: str) -> Dict[str, Any]:
        """Look up a single registration number (digits only)"""
        return await self._post("registro", {"numero_registro": numero_registro})

    async def buscar_registros(self, termo: str, limite: int = 10) -> Dict[str, Any]:
        """Free-text search over product name, holder, etc."""
        return await self._post("busca", {"termo": termo, "limite": limite})
