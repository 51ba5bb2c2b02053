"""Acts API: generation, approval, listing and report export."""

import uuid
from datetime import date, datetime
from decimal import Decimal
from urllib.parse import quote

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Response, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from src.models import ActStatus
from src.services import get_db
from src.services.act_service import ActService
from src.services.authorization import Principal, Role
from src.services.domain import ReportFormat
from src.services.ledger_gateway import LedgerGateway
from src.services.report_service import ReportService

router = APIRouter(prefix="/acts", tags=["acts"])


# Request/response models


class GenerateActRequest(BaseModel):
    contract_id: uuid.UUID
    period_start: date
    period_end: date


class RejectActRequest(BaseModel):
    reason: str = ""


class ExportActsRequest(BaseModel):
    mode: str
    target_id: uuid.UUID
    period_start: date
    period_end: date


class ActResponse(BaseModel):
    """Act as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    contract_id: uuid.UUID
    contractor_id: uuid.UUID | None = None
    landfill_id: uuid.UUID | None = None
    act_number: str
    act_date: date
    period_start: date
    period_end: date
    total_volume_m3: Decimal
    price_per_m3: Decimal
    amount_wo_vat: Decimal
    vat_rate: Decimal
    vat_amount: Decimal
    amount_with_vat: Decimal
    status: ActStatus
    rejection_reason: str | None = None
    approved_by_org_id: uuid.UUID | None = None
    approved_by_user_id: uuid.UUID | None = None
    approved_at: datetime | None = None


class ActListResponse(BaseModel):
    acts: list[ActResponse] = Field(default_factory=list)


# Dependencies


def get_principal(
    x_org_id: str | None = Header(default=None),
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Principal:
    """Caller identity from headers set by the upstream gateway."""
    try:
        return Principal(
            org_id=uuid.UUID(x_org_id),
            user_id=uuid.UUID(x_user_id),
            role=Role.parse(x_user_role),
        )
    except (TypeError, ValueError, AttributeError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized") from None


def get_act_service(db: Session = Depends(get_db)) -> ActService:  # noqa: B008
    return ActService(LedgerGateway(db))


def get_report_service(db: Session = Depends(get_db)) -> ReportService:  # noqa: B008
    return ReportService(LedgerGateway(db))


def attachment(content: bytes, file_name: str, media_type: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(file_name)}"},
    )


# Routes


@router.post("/generate")
def generate_act(
    payload: GenerateActRequest,
    principal: Principal = Depends(get_principal),  # noqa: B008
    service: ActService = Depends(get_act_service),  # noqa: B008
) -> Response:
    """Generate an act for a contract and period; returns the PDF."""
    generated = service.generate_act(payload.contract_id, principal, payload.period_start, payload.period_end)
    response = attachment(generated.content, generated.file_name, "application/pdf")
    response.headers["X-Act-ID"] = str(generated.act.id)
    response.headers["X-Act-Status"] = generated.act.status.value
    return response


@router.get("", response_model=ActListResponse)
def list_acts(
    act_status: str | None = Query(default=None, alias="status"),
    principal: Principal = Depends(get_principal),  # noqa: B008
    service: ActService = Depends(get_act_service),  # noqa: B008
) -> ActListResponse:
    """List acts of the caller's landfill, optionally filtered by status."""
    acts = service.list_acts_for_landfill(principal, act_status)
    return ActListResponse(acts=[ActResponse.model_validate(act) for act in acts])


@router.get("/{act_id}", response_model=ActResponse)
def get_act(
    act_id: uuid.UUID,
    principal: Principal = Depends(get_principal),  # noqa: B008
    service: ActService = Depends(get_act_service),  # noqa: B008
) -> ActResponse:
    return ActResponse.model_validate(service.get_act(act_id, principal))


@router.post("/{act_id}/approve", response_model=ActResponse)
def approve_act(
    act_id: uuid.UUID,
    principal: Principal = Depends(get_principal),  # noqa: B008
    service: ActService = Depends(get_act_service),  # noqa: B008
) -> ActResponse:
    return ActResponse.model_validate(service.approve_act(act_id, principal))


@router.post("/{act_id}/reject", response_model=ActResponse)
def reject_act(
    act_id: uuid.UUID,
    payload: RejectActRequest,
    principal: Principal = Depends(get_principal),  # noqa: B008
    service: ActService = Depends(get_act_service),  # noqa: B008
) -> ActResponse:
    return ActResponse.model_validate(service.reject_act(act_id, principal, payload.reason))


def _export(payload: ExportActsRequest, principal: Principal, service: ReportService, fmt: ReportFormat) -> Response:
    generated = service.generate_report(
        payload.mode, payload.target_id, payload.period_start, payload.period_end, principal, fmt
    )
    return attachment(generated.content, generated.file_name, generated.media_type)


@router.post("/export")
def export_acts(
    payload: ExportActsRequest,
    principal: Principal = Depends(get_principal),  # noqa: B008
    service: ReportService = Depends(get_report_service),  # noqa: B008
) -> Response:
    """Export a trip report as XLSX."""
    return _export(payload, principal, service, ReportFormat.XLSX)


@router.post("/export/pdf")
def export_acts_pdf(
    payload: ExportActsRequest,
    principal: Principal = Depends(get_principal),  # noqa: B008
    service: ReportService = Depends(get_report_service),  # noqa: B008
) -> Response:
    """Export a trip report as PDF."""
    return _export(payload, principal, service, ReportFormat.PDF)


__all__ = ["router", "get_principal", "get_act_service", "get_report_service"]
