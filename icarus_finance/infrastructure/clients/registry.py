"""Owner of the external API clients for one application instance"""

from typing import Optional

from icarus_finance.config import Settings
from icarus_finance.domain.exceptions import ConfigurationError
from icarus_finance.infrastructure.clients.infosimples import InfoSimplesClient
from icarus_finance.infrastructure.clients.llm import AnthropicClient, LLMClient, OpenAIClient
from icarus_finance.infrastructure.clients.pluggy import PluggySyncClient


class ClientRegistry:
    """
    Builds each external client on first use and reuses it afterwards.

    One registry is created by `create_app()` and stored on `app.state`, so
    every client is constructed at most once per application. Missing
    credentials raise ConfigurationError when the client is first requested.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._llm: Optional[LLMClient] = None
        self._infosimples: Optional[InfoSimplesClient] = None
        self._pluggy: Optional[PluggySyncClient] = None

    def llm(self) -> LLMClient:
        """Anthropic when configured, OpenAI otherwise"""
        if self._llm is None:
            s = self.settings
            if s.anthropic_configured:
                self._llm = AnthropicClient(
                    api_key=s.anthropic_api_key,
                    model=s.anthropic_model,
                    base_url=s.anthropic_base_url,
                    version=s.anthropic_version,
                    temperature=s.llm_temperature,
                    max_tokens=s.llm_max_tokens,
                    timeout=s.http_timeout_seconds,
                )
            elif s.openai_configured:
                self._llm = OpenAIClient(
                    api_key=s.openai_api_key,
                    model=s.openai_model,
                    base_url=s.openai_base_url,
                    temperature=0.0,
                    max_tokens=s.llm_max_tokens,
                    timeout=s.http_timeout_seconds,
                )
            else:
                raise ConfigurationError("Nenhuma API de LLM configurada (OPENAI_API_KEY ou ANTHROPIC_API_KEY)")
        return self._llm

    def infosimples(self) -> InfoSimplesClient:
        if self._infosimples is None:
            if not self.settings.infosimples_api_key:
                raise ConfigurationError("INFOSIMPLES_API_KEY não configurada")
            self._infosimples = InfoSimplesClient(
                api_key=self.settings.infosimples_api_key,
                base_url=self.settings.infosimples_base_url,
                timeout=self.settings.http_timeout_seconds,
            )
        return self._infosimples

    def pluggy(self) -> PluggySyncClient:
        if self._pluggy is None:
            if not self.settings.supabase_url or not self.settings.supabase_service_role_key:
                raise ConfigurationError("Finance Agent: configure SUPABASE_URL e SUPABASE_SERVICE_ROLE_KEY.")
            self._pluggy = PluggySyncClient(
                supabase_url=self.settings.supabase_url,
                service_role_key=self.settings.supabase_service_role_key,
                timeout=self.settings.http_timeout_seconds,
            )
        return self._pluggy
