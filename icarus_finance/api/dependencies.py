"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from icarus_finance.config import settings
from icarus_finance.domain.models import AnalysisThresholds
from icarus_finance.infrastructure.clients.registry import ClientRegistry
from icarus_finance.infrastructure.database.session import get_db
from icarus_finance.infrastructure.tools.finance import FinanceToolbox
from icarus_finance.infrastructure.tools.opme import OpmeToolbox


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_clients(request: Request) -> ClientRegistry:
    """Client registry created once by create_app()"""
    return request.app.state.clients


def get_thresholds() -> AnalysisThresholds:
    return settings.analysis_thresholds()


def get_finance_toolbox(
    db: Session = Depends(get_db),
    clients: ClientRegistry = Depends(get_clients),
) -> FinanceToolbox:
    return FinanceToolbox(db, pluggy_client=clients.pluggy)


def get_opme_toolbox(
    db: Session = Depends(get_db),
    clients: ClientRegistry = Depends(get_clients),
) -> OpmeToolbox:
    return OpmeToolbox(db, infosimples_client=clients.infosimples)
