"""
Report endpoints.
"""

from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from bank_ledger.api.deps import get_current_subject
from bank_ledger.models.base import get_db, utcnow
from bank_ledger.services.report_service import (
    RENDERERS,
    ReportDelivery,
    ReportDocument,
    ReportService,
    SmtpReportDelivery,
)

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    dependencies=[Depends(get_current_subject)],
)

ReportFormat = Literal["pdf", "csv"]


def get_report_delivery() -> ReportDelivery:
    return SmtpReportDelivery()


def as_download(document: ReportDocument) -> Response:
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={
            "Content-Disposition": f"attachment; filename={document.filename}"
        },
    )


@router.get("/daily")
def daily_report(
    day: date | None = Query(default=None),
    report_format: ReportFormat = Query(default="pdf", alias="format"),
    db: Session = Depends(get_db),
):
    """
    Download the transaction report for one day (UTC).

    Defaults to today, as a PDF.
    """
    service = ReportService(db, renderer=RENDERERS[report_format]())
    return as_download(service.daily_report(day or utcnow().date()))


@router.post("/daily/send")
def send_daily_report(
    day: date | None = Query(default=None),
    report_format: ReportFormat = Query(default="pdf", alias="format"),
    delivery: ReportDelivery = Depends(get_report_delivery),
    db: Session = Depends(get_db),
):
    """
    Email the report for one day and return it as a download too.

    Responds 502, without the document, when the mail server
    refuses it or cannot be reached.
    """
    service = ReportService(db, renderer=RENDERERS[report_format]())
    document = service.send_daily_report(day or utcnow().date(), delivery)
    return as_download(document)
