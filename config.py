# File: config.py
import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    # Qdrant Configuration
    QDRANT_URL = os.getenv('QDRANT_URL')  # unset -> in-process store
    QDRANT_API_KEY = os.getenv('QDRANT_API_KEY')
    QDRANT_TIMEOUT = int(os.getenv('QDRANT_TIMEOUT', 60))
    COLLECTION_NAME = os.getenv('COLLECTION_NAME', 'code_chunks')

    # Embedding Provider Configuration
    EMBEDDING_PROVIDER = os.getenv('EMBEDDING_PROVIDER', 'openai')
    OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')
    DEVICE = os.getenv('DEVICE', 'cpu')

    # Vector spaces: one model and dimension per named space
    NLP_EMBEDDING_MODEL = os.getenv('NLP_EMBEDDING_MODEL', 'text-embedding-3-small')
    CODE_EMBEDDING_MODEL = os.getenv('CODE_EMBEDDING_MODEL', 'text-embedding-ada-002')
    NLP_VECTOR_SIZE = int(os.getenv('NLP_VECTOR_SIZE', 1536))
    CODE_VECTOR_SIZE = int(os.getenv('CODE_VECTOR_SIZE', 1536))

    # Chunking
    CHUNK_SIZE = int(os.getenv('CHUNK_SIZE', 1000))
    EMBEDDING_MAX_WORKERS = int(os.getenv('EMBEDDING_MAX_WORKERS', 8))

    # Fusion Search
    NLP_WEIGHT = float(os.getenv('NLP_WEIGHT', 0.6))
    CODE_WEIGHT = float(os.getenv('CODE_WEIGHT', 0.4))
    OVERFETCH_MULTIPLIER = float(os.getenv('OVERFETCH_MULTIPLIER', 1.5))
    DEFAULT_SEARCH_LIMIT = int(os.getenv('DEFAULT_SEARCH_LIMIT', 5))
    MAX_SEARCH_LIMIT = int(os.getenv('MAX_SEARCH_LIMIT', 50))

    # Provider retry configuration
    MAX_RETRIES = int(os.getenv('MAX_RETRIES', 3))
    RETRY_BASE_DELAY = float(os.getenv('RETRY_BASE_DELAY', 1.0))
    RETRY_EXPONENTIAL_BASE = float(os.getenv('RETRY_EXPONENTIAL_BASE', 2.0))
    RETRY_MAX_DELAY = float(os.getenv('RETRY_MAX_DELAY', 60.0))

    # Flask Configuration
    HOST = os.getenv('HOST', '0.0.0.0')
    PORT = int(os.getenv('PORT', 5000))
    FLASK_ENV = os.getenv('FLASK_ENV', 'production')
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')

    # Logging Configuration
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE = os.getenv('LOG_FILE')

    @classmethod
    def validate(cls):
        if cls.EMBEDDING_PROVIDER.lower() == 'openai' and not cls.OPENAI_API_KEY:
            raise ValueError("Missing required environment variable: OPENAI_API_KEY")

        if cls.CHUNK_SIZE <= 0:
            raise ValueError("CHUNK_SIZE must be a positive integer")

        if cls.NLP_VECTOR_SIZE <= 0 or cls.CODE_VECTOR_SIZE <= 0:
            raise ValueError("NLP_VECTOR_SIZE and CODE_VECTOR_SIZE must be positive")

        if cls.NLP_WEIGHT < 0 or cls.CODE_WEIGHT < 0:
            raise ValueError("NLP_WEIGHT and CODE_WEIGHT must not be negative")

        if cls.OVERFETCH_MULTIPLIER < 1:
            raise ValueError("OVERFETCH_MULTIPLIER must be at least 1")

        if not 1 <= cls.DEFAULT_SEARCH_LIMIT <= cls.MAX_SEARCH_LIMIT:
            raise ValueError("DEFAULT_SEARCH_LIMIT must be between 1 and MAX_SEARCH_LIMIT")
