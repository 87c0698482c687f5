"""Document service — render, convert and store registration documents.

Runs after the organization has been committed. A failure here never undoes
that write: callers either report it as a warning or, for the explicit
regenerate endpoint, as ``storage_unavailable``.
"""

from __future__ import annotations

import asyncio
from functools import lru_cache
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from orgportal.config import get_settings
from orgportal.documents import BlobStore, DocumentGenerator, LocalBlobStore, PdfConverter
from orgportal.exceptions import StorageUnavailableError
from orgportal.logging_config import get_logger
from orgportal.models import Organization

logger = get_logger(__name__)

DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PDF_CONTENT_TYPE = "application/pdf"


class DocumentService:
    """Attaches ``docx_url`` and ``pdf_url`` to a live organization."""

    def __init__(
        self,
        generator: DocumentGenerator,
        converter: PdfConverter,
        blob_store: BlobStore,
    ):
        self.generator = generator
        self.converter = converter
        self.blob_store = blob_store

    async def attach_documents(
        self,
        db: AsyncSession,
        org: Organization,
        services: list[Any] | None = None,
    ) -> Organization:
        """
        Generate both documents and persist their URLs.

        The DOCX URL is committed before PDF conversion starts, so a failed
        conversion still leaves a usable DOCX.

        Raises:
            StorageUnavailableError: on any generator, converter or store failure
        """
        if services is None:
            services = list(org.services)
        base_path = f"organizations/{org.id}"

        try:
            docx = await asyncio.to_thread(self.generator.render, org, services)
            docx_url = await asyncio.to_thread(
                self.blob_store.upload, f"{base_path}/registration.docx", docx, DOCX_CONTENT_TYPE
            )
        except Exception as e:
            raise StorageUnavailableError(f"DOCX generation failed: {e}", stage="docx") from e
        org.docx_url = docx_url
        await db.commit()

        try:
            pdf = await asyncio.to_thread(self.converter.to_pdf, docx)
            pdf_url = await asyncio.to_thread(
                self.blob_store.upload, f"{base_path}/registration.pdf", pdf, PDF_CONTENT_TYPE
            )
        except Exception as e:
            raise StorageUnavailableError(f"PDF conversion failed: {e}", stage="pdf") from e
        org.pdf_url = pdf_url
        await db.commit()

        logger.info(
            "documents_attached",
            organization_id=str(org.id),
            docx_url=docx_url,
            pdf_url=pdf_url,
        )
        return org

    async def attach_best_effort(
        self,
        db: AsyncSession,
        org: Organization,
        services: list[Any] | None = None,
    ) -> list[str]:
        """Like attach_documents(), but returns failures as warning strings."""
        try:
            await self.attach_documents(db, org, services)
        except StorageUnavailableError as e:
            logger.warning(
                "documents_unavailable",
                organization_id=str(org.id),
                stage=e.stage,
                error=e.message,
            )
            return [e.message]
        return []


@lru_cache
def _build_document_service() -> DocumentService:
    settings = get_settings()
    return DocumentService(
        generator=DocumentGenerator(),
        converter=PdfConverter(settings.soffice_path, settings.soffice_timeout_seconds),
        blob_store=LocalBlobStore(settings.generated_docs_dir, settings.generated_docs_base_url),
    )


def get_document_service() -> DocumentService | None:
    """FastAPI dependency: the document service, or None when disabled."""
    if not get_settings().documents_enabled:
        return None
    return _build_document_service()
