"""
Data models for atlonaconnect.

This module contains the Pydantic models the client reads:

- MatrixConfig: connection and login settings
- Capabilities: ports supported by a PRO3 model
"""

from atlonaconnect.models.config import MODEL_CAPABILITIES, Capabilities, MatrixConfig

__all__ = [
    "MatrixConfig",
    "Capabilities",
    "MODEL_CAPABILITIES",
]
