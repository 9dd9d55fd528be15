from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas as pdfcanvas

from automation import ArtifactError, TicketRecord

from .utils import ticket_filename

__all__ = ["TicketPdfEmitter", "IMPORTANT_INFORMATION"]

IMPORTANT_INFORMATION: Sequence[str] = (
    "One of the passengers booked on an E-ticket is required to present any of the five identity cards "
    "noted below in original during the train journey and same will be accepted as a proof of identity "
    "failing which all the passengers will be treated as travelling without ticket and shall be dealt as "
    "per extant Railway Rules. Valid IDs: Voter Identity Card / Passport / PAN Card / Driving License / "
    "Photo ID card issued by Central / State Govt. for their employees.",
    "The accommodation booked is not transferable and is valid only if one of the ID card noted above is "
    "presented during the journey. The passenger should carry with him the Electronic Reservation Slip "
    "print out. In case the passenger does not carry the electronic reservation slip, a charge of Rs.50/- "
    "per ticket shall be recovered by the ticket checking staff and an excess fare ticket will be issued "
    "in lieu of that.",
    "E-ticket cancellations are permitted through www.irctc.co.in by the user. In case e-ticket is booked "
    "through an agent, please contact respective agent for cancellations.",
    "Just dial 139 from your landline, mobile & CDMA phones for railway enquiries.",
    "Contact us on: 24*7 Hrs. Customer Support at 011-23340000, MON - SAT(10 AM - 6 PM) "
    "011-23345500/4787/4773/5800/8539/8543, Chennai Customer Care 044 - 25300000 or Mail To: "
    "care@irctc.co.in",
)

_TABLE_HEADERS = ("Name", "Age", "Gender", "Booking Status")


class TicketPdfEmitter:
    """Render one Electronic Reservation Slip per passenger."""

    def __init__(
        self,
        output_dir: str | Path = "tickets",
        *,
        logo_path: Optional[str | Path] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._output_dir = Path(output_dir)
        self._logo_path = Path(logo_path) if logo_path else None
        self._logger = logger or logging.getLogger(__name__)

    def path_for(self, record: TicketRecord) -> Path:
        return self._output_dir / ticket_filename(record.passenger_name)

    def emit(self, record: TicketRecord) -> Path:
        self._logger.info("Generating PDF ticket for: %s", record.passenger_name)
        file_path = self.path_for(record)
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
            self._render(file_path, record)
        except Exception as exc:
            raise ArtifactError(
                f"PDF generation failed for {record.passenger_name}",
                cause=exc,
            ) from exc
        self._logger.info("✅ PDF ticket generated: %s", file_path.name)
        return file_path

    def _render(self, file_path: Path, record: TicketRecord) -> None:
        page_width, page_height = A4
        margin = 50
        usable_width = page_width - 2 * margin

        canvas = pdfcanvas.Canvas(str(file_path), pagesize=A4)
        canvas.setTitle(f"Electronic Reservation Slip - {record.passenger_name}")

        top = page_height - margin
        if self._logo_path and self._logo_path.is_file():
            canvas.drawImage(str(self._logo_path), margin, top - 50, width=50, height=50, preserveAspectRatio=True, mask="auto")

        canvas.setFillColor(colors.HexColor("#444444"))
        canvas.setFont("Helvetica", 20)
        canvas.drawString(margin + 60, top - 20, "IRCTC e-Ticketing Service")
        canvas.setFont("Helvetica", 16)
        canvas.drawString(margin + 60, top - 42, "Electronic Reservation Slip")

        canvas.setFont("Helvetica", 10)
        right = page_width - margin
        canvas.drawRightString(right, top - 20, f"Transaction ID: {record.transaction_id}")
        canvas.drawRightString(right, top - 35, f"PNR No: {record.reservation_id}")
        canvas.setFont("Helvetica", 9)
        canvas.drawString(margin, top - 70, f"From: {record.origin}")
        canvas.drawString(margin + usable_width / 2, top - 70, f"To: {record.destination}")

        current_y = self._draw_table(
            canvas,
            x=margin,
            y=top - 110,
            width=usable_width,
            rows=[(record.passenger_name, record.age, record.gender, "CONFIRMED")],
        )

        current_y -= 30
        canvas.setFont("Helvetica-Bold", 10)
        canvas.drawString(margin, current_y, "Important Information:")
        canvas.line(margin, current_y - 2, margin + 115, current_y - 2)
        current_y -= 16

        canvas.setFont("Helvetica", 8)
        for paragraph in IMPORTANT_INFORMATION:
            lines = simpleSplit(f"• {paragraph}", "Helvetica", 8, usable_width)
            for line in lines:
                canvas.drawString(margin, current_y, line)
                current_y -= 10
            current_y -= 6

        canvas.setFont("Helvetica", 8)
        canvas.drawCentredString(
            page_width / 2,
            margin,
            f"Generated on: {datetime.now().strftime('%d/%m/%Y, %H:%M:%S')}",
        )
        canvas.showPage()
        canvas.save()

    @staticmethod
    def _draw_table(canvas, *, x: float, y: float, width: float, rows: Sequence[Sequence[str]]) -> float:
        column_width = width / len(_TABLE_HEADERS)

        canvas.setFont("Helvetica-Bold", 10)
        for index, header in enumerate(_TABLE_HEADERS):
            canvas.drawString(x + index * column_width, y, header)

        y -= 8
        canvas.setLineWidth(2)
        canvas.line(x, y, x + width, y)
        y -= 14

        canvas.setFont("Helvetica", 9)
        canvas.setLineWidth(1)
        for row_index, row in enumerate(rows):
            for index, cell in enumerate(row):
                canvas.drawString(x + index * column_width, y, str(cell))
            if row_index < len(rows) - 1:
                canvas.line(x, y - 6, x + width, y - 6)
            y -= 20
        return y
