"""
app/connectors package marker.
"""

from app.connectors.base import (
    BaseConnector,
    ConnectorFetchResult,
    ConnectorRequestError,
    RecordSource,
)
from app.connectors.supabase_connector import SupabaseRecordConnector

__all__ = [
    "BaseConnector",
    "ConnectorFetchResult",
    "ConnectorRequestError",
    "RecordSource",
    "SupabaseRecordConnector",
]
