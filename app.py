import logging
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from flask import Flask, request
from flask_cors import CORS

load_dotenv()

from config import Config
from dualsearch.retrieval import (
    ConfigurationError,
    DualSearchError,
    DualVectorService,
    NotFound,
    ProviderError,
    StoreError,
)
from dualsearch.utils.config_manager import ConfigManager
from dualsearch.utils.response_formatter import ResponseFormatter


def setup_logging(level: str = 'INFO', log_file: Optional[str] = None):
    """Configure logging with structured format"""
    log_format = '%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s'

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='a'))

    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=log_format,
        handlers=handlers
    )

    # Reduce noise from third-party libraries
    logging.getLogger('werkzeug').setLevel(logging.WARNING)
    logging.getLogger('qdrant_client').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    return logging.getLogger(__name__)


logger = logging.getLogger(__name__)

ERROR_STATUS = (
    (NotFound, 404),
    (ProviderError, 502),
    (StoreError, 502),
    (ConfigurationError, 500),
)


def _error_status(error: DualSearchError) -> int:
    for error_type, status in ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 500


def _validate_document(data: Dict[str, Any]) -> List[str]:
    errors = []
    if not isinstance(data.get('path'), str) or not data.get('path').strip():
        errors.append('path is required')
    if not isinstance(data.get('content'), str):
        errors.append('content must be a string')
    if data.get('metadata') is not None and not isinstance(data.get('metadata'), dict):
        errors.append('metadata must be an object')
    return errors


def _json_body() -> Optional[Dict[str, Any]]:
    """Parsed JSON object, ``{}`` for an empty body, None for any other JSON"""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def _parse_limit(value: Any, default: int, maximum: int):
    """Return (limit, error_message)"""
    if value is None:
        return default, None
    if isinstance(value, bool) or not isinstance(value, int):
        return None, 'limit must be an integer'
    if not 1 <= value <= maximum:
        return None, f'limit must be between 1 and {maximum}'
    return value, None


def create_app(config: Any = Config, service: Optional[DualVectorService] = None):
    app = Flask(__name__)
    app.config.from_object(config)
    config_manager = ConfigManager(config)

    CORS(app, resources={
        r"/*": {
            "origins": config_manager.get('CORS_ORIGINS', '*'),
            "methods": ["GET", "POST", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"]
        }
    })

    if service is None:
        config.validate()
        service = DualVectorService(config)

    default_limit = config_manager.get_int('DEFAULT_SEARCH_LIMIT', 5)
    max_limit = config_manager.get_int('MAX_SEARCH_LIMIT', 50)

    @app.errorhandler(DualSearchError)
    def handle_engine_error(error: DualSearchError):
        status = _error_status(error)
        logger.error(f"{type(error).__name__} during {error.stage}: {error.message}")
        return ResponseFormatter.from_exception(error, status)

    @app.route('/health', methods=['GET'])
    def health():
        return ResponseFormatter.success({'status': 'ok', 'collection': service.collection_name})

    @app.route('/api/collection', methods=['GET'])
    def collection_info():
        info = service.ensure_collection()
        return ResponseFormatter.success(info.to_dict())

    @app.route('/api/collection', methods=['DELETE'])
    def drop_collection():
        deleted = service.delete_collection()
        return ResponseFormatter.success({'deleted': deleted}, message='Collection deleted')

    @app.route('/api/documents', methods=['POST'])
    def upsert_document():
        data = _json_body()
        if data is None:
            return ResponseFormatter.validation_error(['request body must be a JSON object'])
        errors = _validate_document(data)
        if errors:
            return ResponseFormatter.validation_error(errors)

        result = service.upsert(data['path'], data['content'], data.get('metadata'))
        logger.info(f"Document upserted: {data['path']} | points: {result.points_upserted}")
        return ResponseFormatter.success(result.to_dict(), message='Document indexed')

    @app.route('/api/documents', methods=['DELETE'])
    def delete_document():
        data = _json_body()
        if data is None:
            return ResponseFormatter.validation_error(['request body must be a JSON object'])
        path = data.get('path') or request.args.get('path')
        ids = data.get('ids')

        if ids is not None:
            if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
                return ResponseFormatter.validation_error(['ids must be a list of strings'])
            service.delete_points(ids)
            return ResponseFormatter.success({'ids': ids}, message='Points deleted')

        if not path:
            return ResponseFormatter.validation_error(['path or ids is required'])
        service.delete(path)
        return ResponseFormatter.success({'path': path}, message='Document deleted')

    @app.route('/api/search', methods=['POST'])
    def search():
        data = _json_body()
        if data is None:
            return ResponseFormatter.validation_error(['request body must be a JSON object'])
        query = data.get('query')
        if not isinstance(query, str) or not query.strip():
            return ResponseFormatter.validation_error(['query is required'])

        limit, limit_error = _parse_limit(data.get('limit'), default_limit, max_limit)
        if limit_error:
            return ResponseFormatter.validation_error([limit_error])

        chunk_type = data.get('chunkType')
        if chunk_type is not None and not isinstance(chunk_type, str):
            return ResponseFormatter.validation_error(['chunkType must be a string'])

        results = service.search(query, limit=limit, chunk_type=chunk_type)
        return ResponseFormatter.success({
            'query': query,
            'count': len(results),
            'results': [result.to_dict() for result in results]
        })

    return app
