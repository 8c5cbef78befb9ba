"""
app/connectors package marker.
"""

from app.connectors.base import BaseConnector, ConnectorRequestError
from app.connectors.google_translate import (
    BatchTranslationProvider,
    GoogleTranslateConnector,
    TranslationProvider,
    get_translation_provider,
)

__all__ = [
    "BaseConnector",
    "BatchTranslationProvider",
    "ConnectorRequestError",
    "GoogleTranslateConnector",
    "TranslationProvider",
    "get_translation_provider",
]
