"""
Collaborator endpoint constants and configuration.

This module contains the document store paths and related constants.
"""


class DocumentStoreEndpoints:
    """Document store endpoint paths."""

    COLLECTION = "/{collection}"
    DOCUMENT = "/{collection}/{document_id}"

    @classmethod
    def collection(cls, collection: str) -> str:
        """
        Path of a collection.

        Args:
            collection: Collection name

        Returns:
            Formatted endpoint path
        """
        return cls.COLLECTION.format(collection=collection)

    @classmethod
    def document(cls, collection: str, document_id: str) -> str:
        """
        Path of a single document.

        Args:
            collection: Collection name
            document_id: Generated document ID

        Returns:
            Formatted endpoint path
        """
        return cls.DOCUMENT.format(collection=collection, document_id=document_id)


class APIConstants:
    """General API configuration constants."""

    # HTTP Headers
    CONTENT_TYPE_JSON = "application/json"
    CONTENT_TYPE_DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    CONTENT_TYPE_PDF = "application/pdf"

    # Timeouts (in seconds)
    REPORT_TIMEOUT = 60.0
