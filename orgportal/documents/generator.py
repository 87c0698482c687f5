"""Render an organization's registration record as a DOCX document."""

from __future__ import annotations

import io
from datetime import datetime, timezone
from typing import Any, Iterable

from docx import Document
from docx.shared import Pt


class DocumentGenerator:
    """Builds the registration DOCX from an organization and its services."""

    title = "Organization Registration"

    def render(self, org: Any, services: Iterable[Any]) -> bytes:
        doc = Document()
        self._apply_core_properties(doc, org)

        doc.add_heading(self.title, level=0)
        doc.add_heading(org.institution_name, level=1)

        self._add_field_table(
            doc,
            [
                ("Province", org.province),
                ("District", org.district),
                ("Website", org.website_url or "-"),
                ("Status", org.status),
            ],
        )

        doc.add_heading("Contact person", level=2)
        self._add_field_table(
            doc,
            [
                ("Name", org.contact_name),
                ("Designation", org.contact_designation),
                ("Email", org.contact_email),
                ("Contact number", org.contact_number),
            ],
        )

        doc.add_heading("Services", level=2)
        services = list(services)
        if not services:
            doc.add_paragraph("No services registered.")
        for index, service in enumerate(services, start=1):
            doc.add_heading(f"{index}. {service.service_name}", level=3)
            self._add_field_table(
                doc,
                [
                    ("Category", service.category),
                    ("Description", service.description or "-"),
                    ("Requirements", service.requirements or "-"),
                ],
            )

        footer = doc.add_paragraph(
            f"Generated {datetime.now(timezone.utc):%Y-%m-%d %H:%M} UTC"
        )
        footer.runs[0].font.size = Pt(8)

        buffer = io.BytesIO()
        doc.save(buffer)
        return buffer.getvalue()

    @staticmethod
    def _add_field_table(doc: Any, rows: list[tuple[str, str]]) -> None:
        table = doc.add_table(rows=0, cols=2)
        table.style = "Table Grid"
        for label, value in rows:
            cells = table.add_row().cells
            cells[0].text = label
            cells[1].text = str(value)

    def _apply_core_properties(self, doc: Any, org: Any) -> None:
        cp = doc.core_properties
        cp.title = f"{self.title}: {org.institution_name}"
        cp.subject = self.title
        cp.category = org.status
        cp.keywords = f"{org.province}, {org.district}"
