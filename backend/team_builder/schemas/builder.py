"""Builder Schemas — request/response models for builder session lifecycle.

Invariants:
    - BuilderCreate.name: 1-200 chars, stripped, non-empty
"""

from pydantic import BaseModel, Field, field_validator


class BuilderCreate(BaseModel):
    name: str = Field("Untitled team", min_length=1, max_length=200)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class BuilderResponse(BaseModel):
    id: str
    name: str
    node_count: int
    edge_count: int


class LibraryEntry(BaseModel):
    kind: str
    name: str
    label: str
    description: str
    config: dict
