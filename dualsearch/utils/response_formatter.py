"""
JSON Response Envelopes for the HTTP API

Every body carries ``success``, ``message`` and a ``timestamp``; failures
raised by the engine also name the pipeline ``stage`` that broke.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from flask import jsonify


def _envelope(success: bool, message: str, **fields: Any) -> Dict[str, Any]:
    body = {"success": success, "message": message}
    body.update({key: value for key, value in fields.items() if value is not None})
    body["timestamp"] = datetime.now().isoformat()
    return body


class ResponseFormatter:
    """Builds ``(response, status)`` tuples for Flask views"""

    @staticmethod
    def success(data: Any, message: str = "Success", status_code: int = 200) -> tuple:
        return jsonify(_envelope(True, message, data=data)), status_code

    @staticmethod
    def error(message: str, status_code: int = 400, stage: Optional[str] = None,
              details: Optional[Dict] = None) -> tuple:
        return jsonify(_envelope(False, message, stage=stage, details=details or None)), status_code

    @staticmethod
    def from_exception(error: Exception, status_code: int) -> tuple:
        """Envelope for an engine error, keeping its stage when it has one"""
        message = getattr(error, "message", str(error))
        return ResponseFormatter.error(message, status_code=status_code,
                                       stage=getattr(error, "stage", None))

    @staticmethod
    def validation_error(errors: List[str], message: str = "Validation failed") -> tuple:
        return ResponseFormatter.error(message, status_code=400, details={"errors": errors})


__all__ = ['ResponseFormatter']
