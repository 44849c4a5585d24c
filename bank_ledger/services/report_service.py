"""
Report service: daily transaction reports.

The service gathers an immutable snapshot of one day's
transactions plus the bank-wide totals, then hands it to a
renderer. Rendering knows nothing about the database, and the
report is only ever built from committed data; it never runs
inside a ledger operation.

A rendered document can also be handed to a delivery, which for
now means emailing it over SMTP.
"""

import csv
import io
import logging
import smtplib
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from email.message import EmailMessage
from typing import Protocol

from reportlab.lib import colors
from reportlab.lib.enums import TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from sqlalchemy.orm import Session

from bank_ledger.config import get_settings
from bank_ledger.errors import DeliveryFailure
from bank_ledger.models.base import utcnow
from bank_ledger.models.enums import TransactionType
from bank_ledger.schemas.transaction import TransactionActivity
from bank_ledger.services.query_service import QueryService
from bank_ledger.services.transaction_log import TransactionLog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DailyReport:
    day: date
    currency: str
    transactions: tuple[TransactionActivity, ...]
    total_deposited: Decimal
    total_withdrawn: Decimal
    total_in_bank: Decimal
    generated_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class ReportDocument:
    filename: str
    media_type: str
    content: bytes


class ReportRenderer(Protocol):
    def render(self, report: DailyReport) -> ReportDocument:
        ...


class ReportDelivery(Protocol):
    def deliver(self, document: ReportDocument) -> None:
        ...


def _timestamp(value: datetime) -> str:
    return value.isoformat(sep=" ", timespec="seconds")


class CsvReportRenderer:
    """
    Renders a daily report as CSV: one row per transaction,
    followed by the summary totals.
    """

    HEADERS = ["Date & Time", "Type", "Amount", "Customer", "Account#"]

    def render(self, report: DailyReport) -> ReportDocument:
        output = io.StringIO()
        writer = csv.writer(output)

        writer.writerow(["Daily Banking Transactions", report.day.isoformat()])
        writer.writerow([])
        writer.writerow(self.HEADERS)
        for tx in report.transactions:
            writer.writerow([
                _timestamp(tx.created_at),
                tx.type.value,
                f"{tx.amount:.2f}",
                tx.customer_name,
                tx.account_number,
            ])

        writer.writerow([])
        writer.writerow([f"Total Deposited ({report.currency})", f"{report.total_deposited:.2f}"])
        writer.writerow([f"Total Withdrawn ({report.currency})", f"{report.total_withdrawn:.2f}"])
        writer.writerow([f"Total Left in Bank ({report.currency})", f"{report.total_in_bank:.2f}"])
        writer.writerow([
            "Generated on",
            _timestamp(report.generated_at),
        ])

        return ReportDocument(
            filename=f"report-{report.day.isoformat()}.csv",
            media_type="text/csv",
            content=output.getvalue().encode("utf-8"),
        )


class PdfReportRenderer:
    """
    Renders a daily report as an A4 PDF.

    The page carries an underlined title, the transaction table
    (its header repeats on every page), the three totals side by
    side and a right-aligned "Generated on" footer. Deposits are
    shown in green, withdrawals in red.
    """

    TITLE = "Daily Banking Transactions"
    COLUMN_WIDTHS = [110, 80, 100, 150, 95]
    SUMMARY_COLORS = (colors.green, colors.red, colors.black)
    MARGIN = 30

    def table_rows(self, report: DailyReport) -> list[list[str]]:
        rows = [[
            "Date & Time",
            "Type",
            f"Amount ({report.currency})",
            "Customer",
            "Account#",
        ]]
        for tx in report.transactions:
            rows.append([
                _timestamp(tx.created_at),
                tx.type.value,
                f"{tx.amount:.2f}",
                tx.customer_name,
                tx.account_number,
            ])
        return rows

    def summary_rows(self, report: DailyReport) -> list[list[str]]:
        return [
            [
                f"Total Deposited ({report.currency}):",
                f"Total Withdrawn ({report.currency}):",
                f"Total Left in Bank ({report.currency}):",
            ],
            [
                f"{report.total_deposited:.2f}",
                f"{report.total_withdrawn:.2f}",
                f"{report.total_in_bank:.2f}",
            ],
        ]

    def render(self, report: DailyReport) -> ReportDocument:
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=self.MARGIN,
            rightMargin=self.MARGIN,
            topMargin=self.MARGIN,
            bottomMargin=self.MARGIN,
            title=f"{self.TITLE} {report.day.isoformat()}",
        )
        styles = getSampleStyleSheet()
        title_style = ParagraphStyle("ReportTitle", parent=styles["Title"], fontSize=20)
        footer_style = ParagraphStyle(
            "ReportFooter", parent=styles["Normal"], fontSize=10, alignment=TA_RIGHT
        )

        transactions = Table(
            self.table_rows(report), colWidths=self.COLUMN_WIDTHS, repeatRows=1
        )
        transactions.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, 0), 12),
            ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
            ("FONTSIZE", (0, 1), (-1, -1), 10),
            ("LINEBELOW", (0, 0), (-1, 0), 1, colors.black),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]))

        summary = Table(self.summary_rows(report), colWidths=[doc.width / 3] * 3)
        summary_style = [
            ("FONTNAME", (0, 0), (-1, -1), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 12),
        ]
        for column, color in enumerate(self.SUMMARY_COLORS):
            summary_style.append(("TEXTCOLOR", (column, 1), (column, 1), color))
        summary.setStyle(TableStyle(summary_style))

        doc.build([
            Paragraph(f"<u>{self.TITLE}</u>", title_style),
            Spacer(1, 12),
            transactions,
            Spacer(1, 24),
            summary,
            Spacer(1, 36),
            Paragraph(f"Generated on: {_timestamp(report.generated_at)}", footer_style),
        ])

        return ReportDocument(
            filename=f"report-{report.day.isoformat()}.pdf",
            media_type="application/pdf",
            content=buffer.getvalue(),
        )


RENDERERS = {
    "pdf": PdfReportRenderer,
    "csv": CsvReportRenderer,
}


class SmtpReportDelivery:
    """
    Emails a report document as an attachment.

    Connection details come from the SMTP_* settings. Nothing is
    sent when SMTP_HOST or REPORT_RECIPIENT is unset.
    """

    SUBJECT = "Daily Banking Report"
    BODY = "Attached is the daily banking report."

    def __init__(self, settings=None):
        self.settings = settings or get_settings()

    def build_message(self, document: ReportDocument) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = self.SUBJECT
        message["From"] = self.settings.REPORT_SENDER
        message["To"] = self.settings.REPORT_RECIPIENT
        message.set_content(self.BODY)

        maintype, subtype = document.media_type.split("/", 1)
        message.add_attachment(
            document.content,
            maintype=maintype,
            subtype=subtype,
            filename=document.filename,
        )
        return message

    def deliver(self, document: ReportDocument) -> None:
        settings = self.settings
        if not settings.SMTP_HOST or not settings.REPORT_RECIPIENT:
            raise DeliveryFailure(
                "Report email is not configured, set SMTP_HOST and REPORT_RECIPIENT"
            )

        message = self.build_message(document)
        try:
            with smtplib.SMTP(
                settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.SMTP_TIMEOUT
            ) as smtp:
                if settings.SMTP_USE_TLS:
                    smtp.starttls()
                if settings.SMTP_USERNAME:
                    smtp.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error(
                "Sending %s to %s failed", document.filename, settings.REPORT_RECIPIENT,
                exc_info=True,
                extra={"error": DeliveryFailure.error},
            )
            raise DeliveryFailure(
                f"Could not send {document.filename}: {exc}"
            ) from exc

        logger.info("Sent %s to %s", document.filename, settings.REPORT_RECIPIENT)


class ReportService:

    def __init__(self, db: Session, renderer: ReportRenderer | None = None):
        self.db = db
        self.renderer = renderer or PdfReportRenderer()
        self.log = TransactionLog(db)
        self.queries = QueryService(db)

    def build_daily_report(self, day: date) -> DailyReport:
        """
        Collect the snapshot for one UTC calendar day.

        Only deposits and withdrawals count towards the totals;
        transfers move money inside the bank and change neither.
        """
        start = datetime.combine(day, time.min)
        end = start + timedelta(days=1)
        transactions = self.log.list_in_range(start, end)

        total_deposited = sum(
            (tx.amount for tx in transactions if tx.type == TransactionType.DEPOSIT),
            Decimal("0.00"),
        )
        total_withdrawn = sum(
            (tx.amount for tx in transactions if tx.type == TransactionType.WITHDRAW),
            Decimal("0.00"),
        )

        return DailyReport(
            day=day,
            currency=get_settings().REPORT_CURRENCY,
            transactions=tuple(transactions),
            total_deposited=total_deposited,
            total_withdrawn=total_withdrawn,
            total_in_bank=self.queries.total_balance(),
        )

    def daily_report(self, day: date) -> ReportDocument:
        report = self.build_daily_report(day)
        document = self.renderer.render(report)
        logger.info(
            "Daily report for %s rendered with %d transactions",
            day.isoformat(), len(report.transactions),
        )
        return document

    def send_daily_report(
        self, day: date, delivery: ReportDelivery
    ) -> ReportDocument:
        """
        Render the day's report and hand it to delivery.

        Returns the document so the caller can also offer it as
        a download.
        """
        document = self.daily_report(day)
        delivery.deliver(document)
        logger.info("Daily report for %s delivered", day.isoformat())
        return document
