# app/api/routers/reports.py
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.core.config import get_db
from app.core.security import get_current_user
from app.services.wellbeing_report import wellbeing_report_service
from app.models.user_auth import UserAuth
from app.schemas.wellbeing_report import (
    GenerateReportRequest,
    WellbeingReportOut,
    WellbeingReportList,
    UsageStatusOut,
)

router = APIRouter(prefix="/reports", tags=["Wellbeing Reports"])


# =====================================================================
# GENERATE
# =====================================================================

@router.post(
    "",
    response_model=WellbeingReportOut,
    status_code=status.HTTP_201_CREATED,
    summary="Generate a wellbeing report"
)
def generate_report(
    payload: GenerateReportRequest,
    current_user: UserAuth = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Generate a new wellbeing report for the authenticated user.

    - **window_days**: trailing window ending now (default 7)
    - **start** / **end**: explicit window instead of window_days
    - **client_summary**: narrative assembled by the client

    Each call counts against the plan's monthly report limit, and a new
    report is created every time. Returns 403 with code QUOTA_EXCEEDED
    when the limit is reached.
    """
    return wellbeing_report_service.generate_report(
        db,
        user=current_user,
        window_days=payload.window_days,
        start=payload.start,
        end=payload.end,
        client_summary=payload.client_summary,
    )


# =====================================================================
# READ (static paths before /{report_id})
# =====================================================================

@router.get(
    "/latest",
    response_model=Optional[WellbeingReportOut],
    summary="Get my latest report"
)
def get_latest_report(
    current_user: UserAuth = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Latest report for the authenticated user, or null if none exists."""
    return wellbeing_report_service.get_latest_report(db, user=current_user)


@router.get(
    "/usage",
    response_model=UsageStatusOut,
    summary="Get my report usage for this month"
)
def get_usage(
    current_user: UserAuth = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return wellbeing_report_service.usage(db, user=current_user)


@router.get(
    "",
    response_model=WellbeingReportList,
    summary="List my reports"
)
def list_reports(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: UserAuth = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Reports for the authenticated user, newest first."""
    return wellbeing_report_service.list_reports(db, user=current_user, page=page, limit=limit)


@router.get(
    "/{report_id}",
    response_model=WellbeingReportOut,
    summary="Get a report by ID"
)
def get_report(
    report_id: UUID,
    current_user: UserAuth = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Users can only view their own reports; other IDs return 404."""
    return wellbeing_report_service.get_report(db, user=current_user, report_id=report_id)


@router.get(
    "/{report_id}/document",
    response_class=Response,
    summary="Download a report as PDF"
)
def download_report(
    report_id: UUID,
    current_user: UserAuth = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    pdf = wellbeing_report_service.render_document(db, user=current_user, report_id=report_id)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="wellbeing_report_{report_id}.pdf"'},
    )
