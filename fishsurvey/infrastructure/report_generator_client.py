"""
Infrastructure layer: client for the external Word/PDF report generator.
"""
import logging
import re
from dataclasses import dataclass
from typing import Optional

from fishsurvey.config import settings
from fishsurvey.domain.report_models import ReportPayload
from fishsurvey.infrastructure.api_constants import APIConstants
from fishsurvey.infrastructure.http_client import ExternalServiceClient

logger = logging.getLogger(__name__)

MEDIA_TYPES = {
    "docx": APIConstants.CONTENT_TYPE_DOCX,
    "pdf": APIConstants.CONTENT_TYPE_PDF,
}


@dataclass
class GeneratedReport:
    """A rendered report document."""
    content: bytes
    media_type: str
    filename: str


def _filename_from_disposition(header: Optional[str]) -> Optional[str]:
    if not header:
        return None
    match = re.search(r'filename="?([^";]+)"?', header)
    return match.group(1) if match else None


class ReportGeneratorClient(ExternalServiceClient):
    """Sends report payloads to the generator and returns the rendered document."""

    service_name = "Report generator"

    def __init__(self):
        """Initialize the client with configuration."""
        super().__init__(
            base_url=settings.report_generator_url,
            api_key=settings.report_generator_api_key,
            timeout=APIConstants.REPORT_TIMEOUT,
        )

    async def generate(self, payload: ReportPayload) -> GeneratedReport:
        """
        Render a report.

        Args:
            payload: Report content; ``payload.format`` selects docx or pdf

        Returns:
            GeneratedReport with the document bytes

        Raises:
            ExternalServiceError: If the generator fails
        """
        logger.info(f"Requesting {payload.format} report for {payload.reservoir}")
        response = await self._request(
            "POST",
            self.base_url,
            params={"format": payload.format},
            json=payload.model_dump(mode="json", by_alias=True),
        )
        stem = re.sub(r"\s+", "_", payload.reservoir.strip())
        default_name = f"{stem}_Report.{payload.format}"
        return GeneratedReport(
            content=response.content,
            media_type=response.headers.get("content-type", MEDIA_TYPES[payload.format]),
            filename=_filename_from_disposition(response.headers.get("content-disposition"))
            or default_name,
        )


# Singleton instance
_report_client: Optional[ReportGeneratorClient] = None


def get_report_generator_client() -> ReportGeneratorClient:
    """
    Get or create the singleton report generator client.

    Returns:
        ReportGeneratorClient instance
    """
    global _report_client
    if _report_client is None:
        _report_client = ReportGeneratorClient()
    return _report_client
