# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
MongoDB service layer with conditional writes and connection pooling.
"""

import os
import logging
from functools import wraps
from typing import List, Dict, Optional, Any
from pymongo import MongoClient, ASCENDING, DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import (
    AutoReconnect,
    ConnectionFailure,
    ServerSelectionTimeoutError
)
from bson import ObjectId
from bson.errors import InvalidId

from middleware.error_handler import TransientStoreException

logger = logging.getLogger(__name__)

COMPLAINTS = "complaints"
FEEDBACK = "feedback"

TRANSIENT_ERRORS = (AutoReconnect, ConnectionFailure, ServerSelectionTimeoutError)


def translate_transient_errors(func):
    """Surface driver connectivity failures as TransientStoreException."""

    @wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except TRANSIENT_ERRORS as e:
            logger.error(f"MongoDB unavailable during {func.__name__}: {e}")
            raise TransientStoreException("The data store is temporarily unavailable, please try again") from e

    return wrapper


class PaginationResult:
    """Result container for paginated queries."""

    def __init__(self, items: List[Dict], total: int, page: int, limit: int):
        self.items = items
        self.total = total
        self.page = page
        self.limit = limit
        self.total_pages = (total + limit - 1) // limit
        self.has_next = page < self.total_pages
        self.has_prev = page > 1


class MongoDBService:
    """MongoDB service with compare-and-set updates and connection pooling."""

    def __init__(self, connection_string: str = None, database_name: str = None,
                 client: MongoClient = None):
        """Initialize MongoDB service; an existing client may be injected."""
        self.connection_string = connection_string or os.getenv(
            'MONGODB_URI',
            'mongodb://localhost:27017/civic_complaints_dev'
        )
        self.database_name = database_name or os.getenv('MONGODB_DATABASE', 'civic_complaints_dev')
        self._client: Optional[MongoClient] = client
        self._database: Optional[Database] = None

        # Connection pool settings
        self.max_pool_size = int(os.getenv('MONGODB_MAX_POOL_SIZE', '10'))
        self.min_pool_size = int(os.getenv('MONGODB_MIN_POOL_SIZE', '1'))
        self.max_idle_time_ms = int(os.getenv('MONGODB_MAX_IDLE_TIME_MS', '30000'))
        self.server_selection_timeout_ms = int(os.getenv('MONGODB_SERVER_SELECTION_TIMEOUT_MS', '5000'))

        logger.info(f"MongoDB service initialized for database: {self.database_name}")

    @property
    def client(self) -> MongoClient:
        """Get MongoDB client with connection pooling."""
        if self._client is None:
            try:
                self._client = MongoClient(
                    self.connection_string,
                    maxPoolSize=self.max_pool_size,
                    minPoolSize=self.min_pool_size,
                    maxIdleTimeMS=self.max_idle_time_ms,
                    serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                    retryWrites=True,
                    retryReads=True
                )
                logger.info("MongoDB client created")
            except (ConnectionFailure, ServerSelectionTimeoutError) as e:
                logger.error(f"Failed to connect to MongoDB: {e}")
                raise TransientStoreException("The data store is temporarily unavailable, please try again") from e

        return self._client

    @property
    def database(self) -> Database:
        """Get MongoDB database."""
        if self._database is None:
            self._database = self.client[self.database_name]
        return self._database

    def get_collection(self, collection_name: str) -> Collection:
        """Get MongoDB collection."""
        return self.database[collection_name]

    def close_connection(self) -> None:
        """Close MongoDB connection."""
        if self._client:
            self._client.close()
            self._client = None
            self._database = None
            logger.info("MongoDB connection closed")

    def health_check(self) -> Dict[str, Any]:
        """Check MongoDB connection health."""
        try:
            result = self.client.admin.command('ping')
            return {
                'status': 'healthy',
                'ping': result.get('ok') == 1,
                'database': self.database_name,
                'connection_pool_size': self.max_pool_size
            }
        except Exception as e:
            logger.error(f"MongoDB health check failed: {e}")
            return {
                'status': 'unhealthy',
                'error': str(e),
                'database': self.database_name
            }

    @staticmethod
    def parse_object_id(doc_id: str) -> Optional[ObjectId]:
        """Convert a string ID to ObjectId; malformed IDs give None."""
        try:
            return ObjectId(doc_id)
        except (InvalidId, TypeError):
            return None

    # Document operations

    @translate_transient_errors
    def insert(self, collection: str, document: Dict) -> str:
        """
        Insert a document.

        DuplicateKeyError propagates so callers can react to unique index hits.
        """
        result = self.get_collection(collection).insert_one(document)
        logger.debug(f"Inserted document in {collection}: {result.inserted_id}")
        return str(result.inserted_id)

    @translate_transient_errors
    def find_by_id(self, collection: str, doc_id: str) -> Optional[Dict]:
        """Find a document by ID; malformed IDs are treated as missing."""
        object_id = self.parse_object_id(doc_id)
        if object_id is None:
            logger.debug(f"Invalid document ID {doc_id} for {collection}")
            return None
        return self.get_collection(collection).find_one({"_id": object_id})

    @translate_transient_errors
    def find_one(self, collection: str, query: Dict) -> Optional[Dict]:
        return self.get_collection(collection).find_one(query)

    @translate_transient_errors
    def find_many(self, collection: str, query: Dict) -> List[Dict]:
        return list(self.get_collection(collection).find(query))

    @translate_transient_errors
    def find_one_and_update(self, collection: str, query: Dict, update: Dict) -> Optional[Dict]:
        """
        Apply an update only if the query still matches.

        Args:
            collection: Collection name
            query: Match filter, including the expected current state
            update: Update document

        Returns:
            The updated document, or None when nothing matched
        """
        return self.get_collection(collection).find_one_and_update(
            query,
            update,
            return_document=ReturnDocument.AFTER
        )

    @translate_transient_errors
    def paginate(self, collection: str, query: Dict, page: int = 1, limit: int = 10,
                 sort_by: str = "createdAt", sort_order: int = DESCENDING) -> PaginationResult:
        """Paginate documents with sorting and filtering."""
        collection_obj = self.get_collection(collection)

        skip = (page - 1) * limit
        total = collection_obj.count_documents(query)
        cursor = collection_obj.find(query).sort([(sort_by, sort_order), ("_id", sort_order)]).skip(skip).limit(limit)
        documents = list(cursor)

        logger.debug(f"Paginated {len(documents)} documents from {collection} (page {page})")
        return PaginationResult(documents, total, page, limit)

    @translate_transient_errors
    def count(self, collection: str, query: Dict) -> int:
        return self.get_collection(collection).count_documents(query)

    @translate_transient_errors
    def aggregate(self, collection: str, pipeline: List[Dict]) -> List[Dict]:
        """Run an aggregation pipeline."""
        results = list(self.get_collection(collection).aggregate(pipeline))
        logger.debug(f"Aggregation returned {len(results)} results from {collection}")
        return results

    # Index Management

    @translate_transient_errors
    def create_indexes(self) -> None:
        """Create unique and performance indexes for all collections."""
        logger.info("Creating MongoDB indexes...")

        complaints = self.get_collection(COMPLAINTS)
        complaints.create_index("trackingId", unique=True)
        complaints.create_index([("ownerId", ASCENDING), ("createdAt", DESCENDING)])
        complaints.create_index([("status", ASCENDING), ("createdAt", DESCENDING)])
        complaints.create_index([("category", ASCENDING), ("createdAt", DESCENDING)])
        complaints.create_index([("isPublic", ASCENDING), ("createdAt", DESCENDING)])

        feedback = self.get_collection(FEEDBACK)
        feedback.create_index("complaintId", unique=True)

        logger.info("MongoDB indexes created successfully")


# Singleton instance for application use
_mongodb_service: Optional[MongoDBService] = None


def get_mongodb_service() -> MongoDBService:
    """Get singleton MongoDB service instance."""
    global _mongodb_service
    if _mongodb_service is None:
        _mongodb_service = MongoDBService()
    return _mongodb_service


def close_mongodb_connection() -> None:
    """Close MongoDB connection (for cleanup)."""
    global _mongodb_service
    if _mongodb_service:
        _mongodb_service.close_connection()
        _mongodb_service = None


__all__ = [
    "COMPLAINTS",
    "FEEDBACK",
    "MongoDBService",
    "PaginationResult",
    "get_mongodb_service",
    "close_mongodb_connection",
]
