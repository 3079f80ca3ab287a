"""Client for the pluggy-sync edge function (Open Finance bank sync)"""

from typing import Any, Dict

import httpx

from icarus_finance.domain.exceptions import ExternalServiceError
from icarus_finance.infrastructure.observability.metrics import external_failure_counter


class PluggySyncClient:
    """Triggers a bank account sync through the Supabase edge function"""

    def __init__(self, supabase_url: str, service_role_key: str, timeout: float = 30.0):
        self.endpoint = f"{supabase_url.rstrip('/')}/functions/v1/pluggy-sync"
        self.service_role_key = service_role_key
        self.timeout = timeout

    async def sync_account(self, conta_id: str, empresa_id: str) -> Dict[str, Any]:
        """
        Request a sync of one bank account.

        Raises:
            ExternalServiceError: On timeout, non-2xx status, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(
                    self.endpoint,
                    json={"contaId": conta_id, "empresaId": empresa_id},
                    headers={"Authorization": f"Bearer {self.service_role_key}"},
                )
                response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                external_failure_counter.labels(service="pluggy").inc()
                raise ExternalServiceError(f"Erro ao sincronizar Pluggy: timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                external_failure_counter.labels(service="pluggy").inc()
                raise ExternalServiceError(
                    f"Erro ao sincronizar Pluggy: {e.response.reason_phrase}"
                ) from e
            except httpx.RequestError as e:
                external_failure_counter.labels(service="pluggy").inc()
                raise ExternalServiceError(f"Erro ao sincronizar Pluggy: {e}") from e
            except ValueError as e:
                raise ExternalServiceError(f"Erro ao sincronizar Pluggy: resposta inválida ({e})") from e
