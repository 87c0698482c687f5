"""Registration document collaborators: DOCX rendering, PDF conversion and storage."""

from orgportal.documents.blob_store import BlobStore, LocalBlobStore
from orgportal.documents.generator import DocumentGenerator
from orgportal.documents.pdf import PdfConversionError, PdfConverter

__all__ = [
    "BlobStore",
    "DocumentGenerator",
    "LocalBlobStore",
    "PdfConversionError",
    "PdfConverter",
]
