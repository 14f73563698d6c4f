"""Test factories for creating test data."""

from tests.factories.backend import (
    BASE_URL,
    PDF_BYTES,
    FakeBackend,
    decode_data_url,
    make_client,
    make_controller,
    pdf_document,
)

__all__ = [
    "BASE_URL",
    "PDF_BYTES",
    "FakeBackend",
    "decode_data_url",
    "make_client",
    "make_controller",
    "pdf_document",
]
