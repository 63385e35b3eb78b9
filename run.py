# File: run.py
"""
Flask application runner for the dual-vector search API
"""
from app import create_app, setup_logging
from config import Config

logger = setup_logging(Config.LOG_LEVEL, Config.LOG_FILE)

# Create application
app = create_app()

if __name__ == '__main__':
    debug = Config.FLASK_ENV == 'development'

    logger.info(f"Starting dual-vector search API on {Config.HOST}:{Config.PORT} (debug={debug})")
    logger.info(f"Qdrant URL: {Config.QDRANT_URL or 'in-process'} | collection: {Config.COLLECTION_NAME}")
    logger.info(f"Embedding provider: {Config.EMBEDDING_PROVIDER} "
                f"(nlp={Config.NLP_EMBEDDING_MODEL}, code={Config.CODE_EMBEDDING_MODEL})")

    app.run(
        host=Config.HOST,
        port=Config.PORT,
        debug=debug
    )
