"""Request bodies for the temp collection actions."""

from pydantic import BaseModel


class CollectionRequest(BaseModel):
    """Body of the get/remove temp collection actions."""

    collection: str


class SetCollectionRequest(BaseModel):
    """Body of the set temp collection action."""

    collection: str
    value: str
