from pydantic import BaseModel, ConfigDict, Field


class ItemBase(BaseModel):
    name: str
    description: str = ""


class ItemRecord(ItemBase):
    """Stored form of an item, shared by both record store backends."""

    id: str
    photo: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ItemUpdate(BaseModel):
    name: str | None = Field(default=None, max_length=255)
    description: str | None = None


class ItemSummary(BaseModel):
    """Search projection: the photo reference reduced to a flag."""

    id: str
    name: str
    description: str
    has_photo: bool


class ItemOut(ItemBase):
    id: str
    photo_url: str | None = None


class SearchResult(ItemBase):
    id: str
    photo_url: str | None = None
