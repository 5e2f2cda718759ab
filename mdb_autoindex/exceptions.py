"""
Custom exceptions for MDB_AUTOINDEX.

These exceptions provide more specific error types while maintaining
compatibility with RuntimeError.
"""

from typing import Any, Dict, Optional


class AutoIndexError(RuntimeError):
    """
    Base exception for MDB_AUTOINDEX errors.

    Attributes:
        message: Error message
        context: Optional dictionary with additional context (collection_name,
                 index_name, operation, etc.)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            context: Optional dictionary with additional context information
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class IndexStoreError(AutoIndexError):
    """
    Raised when an index operation against the store fails.

    Covers connectivity and authorization failures as well as rejected
    index creations or drops.

    Attributes:
        message: Error message
        operation: Store operation that failed (list_indexes, create_index, ...)
        collection_name: Collection the operation targeted (if available)
        index_name: Index the operation targeted (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        collection_name: Optional[str] = None,
        index_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if operation:
            context["operation"] = operation
        if collection_name:
            context["collection_name"] = collection_name
        if index_name:
            context["index_name"] = index_name
        super().__init__(message, context=context)
        self.operation = operation
        self.collection_name = collection_name
        self.index_name = index_name


class InitializationError(AutoIndexError):
    """
    Raised when connecting to MongoDB fails.

    Attributes:
        message: Error message
        mongo_uri: MongoDB connection URI (if available)
        db_name: Database name (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        mongo_uri: Optional[str] = None,
        db_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if mongo_uri:
            context["mongo_uri"] = mongo_uri
        if db_name:
            context["db_name"] = db_name
        super().__init__(message, context=context)
        self.mongo_uri = mongo_uri
        self.db_name = db_name


class ConfigurationError(AutoIndexError):
    """
    Raised when configuration is invalid or missing.

    Attributes:
        message: Error message
        config_key: Configuration key that caused the error (if available)
        config_value: Configuration value that caused the error (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize the configuration error.

        Args:
            message: Error message
            config_key: Configuration key that caused the error (if available)
            config_value: Configuration value that caused the error (if available)
            context: Additional context information
        """
        context = context or {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = config_value
        super().__init__(message, context=context)
        self.config_key = config_key
        self.config_value = config_value
