from typing import Any, Self
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.cursor import AsyncCursor


class MongoModel(BaseModel):
    id: UUID = Field(alias="_id", serialization_alias="id", default_factory=uuid4)

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        json_schema_serialization_defaults_required=True,
    )

    def to_mongo(self) -> dict[str, Any]:
        """Convert the model to a dictionary for MongoDB storage with _id field."""
        data = self.model_dump()
        if "id" in data:
            data["_id"] = data.pop("id")
        return data

    @classmethod
    async def list_cursor(cls, cursor: AsyncCursor[dict[str, Any]]) -> list[Self]:
        """Iterate over an AsyncCursor and return a list of model instances."""
        return [cls.model_validate(item) async for item in cursor]


class PaginationResult[T](BaseModel):
    """One page of an admin review list."""

    items: list[T] = Field(..., description="Items on this page, newest first")
    total: int = Field(..., description="Number of matching items across all pages", ge=0)
    limit: int = Field(..., description="Maximum items per page", ge=1)
    offset: int = Field(..., description="Number of items skipped", ge=0)

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total


async def paginate[M: MongoModel](
    collection: AsyncCollection[dict[str, Any]], model: type[M], query: dict[str, Any], limit: int, offset: int
) -> PaginationResult[M]:
    """Load one newest-first page of the documents matching ``query``."""
    total = await collection.count_documents(query)
    cursor = collection.find(query).sort("created_at", -1).skip(offset).limit(limit)
    items = await model.list_cursor(cursor)
    return PaginationResult(items=items, total=total, limit=limit, offset=offset)
