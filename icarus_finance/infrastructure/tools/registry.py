"""Named tool dispatch with uniform failure handling"""

import logging
import time
from typing import Any, Awaitable, Callable, Dict, List

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from icarus_finance.agents.state import ToolResult
from icarus_finance.domain.exceptions import DomainException
from icarus_finance.infrastructure.observability.logging import log_tool_call
from icarus_finance.infrastructure.observability.metrics import record_tool_call

ToolHandler = Callable[[Dict[str, Any], str], Awaitable[ToolResult]]

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Maps tool names to async handlers.

    `run` never raises for expected failures: invalid parameters, database
    errors and external API errors become a ToolResult with success=False.
    """

    def __init__(self, handlers: Dict[str, ToolHandler], on_db_error: Callable[[], None] | None = None):
        self.handlers = dict(handlers)
        self.on_db_error = on_db_error

    @property
    def names(self) -> List[str]:
        return sorted(self.handlers)

    async def run(self, tool: str, params: Dict[str, Any], empresa_id: str) -> ToolResult:
        handler = self.handlers.get(tool)
        if handler is None:
            result = ToolResult(tool=tool, success=False, error=f"Tool {tool} não encontrada.")
            record_tool_call(tool, False)
            return result

        started = time.time()
        try:
            result = await handler(params, empresa_id)
        except ValidationError as e:
            result = ToolResult(tool=tool, success=False, error=f"Parâmetros inválidos: {e.errors()}")
        except SQLAlchemyError as e:
            if self.on_db_error is not None:
                self.on_db_error()
            logger.error(f"Database error in tool {tool}: {e}")
            result = ToolResult(tool=tool, success=False, error="Erro ao acessar o banco de dados")
        except DomainException as e:
            result = ToolResult(tool=tool, success=False, error=str(e))

        duration_ms = (time.time() - started) * 1000
        record_tool_call(tool, result.success)
        log_tool_call(tool, result.success, duration_ms, result.error)
        return result
