"""Read models for search index inspection."""

from pydantic import BaseModel, Field


class IndexAttribute(BaseModel):
    """One attribute of a search index schema."""

    identifier: str
    attribute: str
    type: str
    sortable: bool = False


class IndexInfo(BaseModel):
    """Parsed ``FT.INFO`` reply."""

    index_name: str
    key_type: str | None = None
    prefixes: list[str] = Field(default_factory=list)
    attributes: list[IndexAttribute] = Field(default_factory=list)
    num_docs: int = 0

    def attribute(self, alias: str) -> IndexAttribute | None:
        for item in self.attributes:
            if item.attribute == alias:
                return item
        return None
