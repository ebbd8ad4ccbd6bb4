"""Framework-neutral request layer for bizledger."""

from bizledger.api.auth import Identity
from bizledger.api.envelope import ApiResponse, FileResponse
from bizledger.api.handlers import ApiHandlers

__all__ = ["ApiHandlers", "ApiResponse", "FileResponse", "Identity"]
