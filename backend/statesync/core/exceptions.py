class StateSyncError(Exception):
    """Base exception for the onboarding state sync service."""

    pass


class InvalidCollectionError(StateSyncError):
    """Raised when a collection name is not on the server allow-list.

    This is an access-control rejection, never a "not found" or a transport
    failure.
    """

    def __init__(self, collection: str):
        self.collection = collection
        super().__init__("Invalid server collection")


class InvalidPrincipalError(StateSyncError):
    """Raised when a principal id cannot be used as a document path segment."""

    def __init__(self, principal_id: str):
        self.principal_id = principal_id
        super().__init__("Invalid principal id")


class RemoteStoreError(StateSyncError):
    """Raised when the remote document store rejects a write or delete."""

    def __init__(self, operation: str, path: str):
        self.operation = operation
        self.path = path
        super().__init__(f"Remote store {operation} failed for '{path}'")


class StoreNotInitializedError(StateSyncError):
    """Raised when a store consumer runs without a bound store handle."""

    pass
