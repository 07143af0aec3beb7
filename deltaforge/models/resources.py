"""Resource, group, and group model definitions (immutable)."""

from __future__ import annotations

import posixpath
from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class ResourceType(str, Enum):
    """Kind of web resource a URI points at."""

    CSS = "css"
    JS = "js"
    OTHER = "other"

    @classmethod
    def from_uri(cls, uri: str) -> ResourceType:
        """Infer the type from the URI's extension (query strings ignored)."""
        path = uri.split("?", 1)[0].split("#", 1)[0]
        ext = posixpath.splitext(path)[1].lower()
        if ext == ".css":
            return cls.CSS
        if ext == ".js":
            return cls.JS
        return cls.OTHER


class Resource(BaseModel):
    """A single resource inside a group.

    Identity is the URI: two resources with the same URI are the same
    resource regardless of how they were discovered.
    """

    model_config = ConfigDict(frozen=True)

    uri: str
    type: ResourceType = ResourceType.OTHER

    @field_validator("uri")
    @classmethod
    def _uri_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Resource uri must not be empty")
        return value

    @classmethod
    def create(cls, uri: str, type: ResourceType | None = None) -> Resource:
        """Build a resource, inferring its type from the URI when omitted."""
        return cls(uri=uri, type=type or ResourceType.from_uri(uri))

    @classmethod
    def css(cls, uri: str) -> Resource:
        """Build a CSS resource (used for ``@import`` targets)."""
        return cls(uri=uri, type=ResourceType.CSS)

    def __hash__(self) -> int:
        return hash(self.uri)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Resource):
            return self.uri == other.uri
        return NotImplemented


class Group(BaseModel):
    """Named, ordered collection of resources processed together."""

    model_config = ConfigDict(frozen=True)

    name: str
    resources: list[Resource] = []

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Group name must not be empty")
        return value


class GroupModel(BaseModel):
    """The full set of groups a build knows about, in declaration order."""

    model_config = ConfigDict(frozen=True)

    groups: list[Group] = []

    @model_validator(mode="after")
    def _unique_names(self) -> GroupModel:
        seen: set[str] = set()
        for group in self.groups:
            if group.name in seen:
                raise ValueError(f"Duplicate group name: '{group.name}'")
            seen.add(group.name)
        return self

    @property
    def group_names(self) -> list[str]:
        """All group names in declaration order."""
        return [g.name for g in self.groups]

    def get_group(self, name: str) -> Group | None:
        """Return the group called *name*, or ``None``."""
        for group in self.groups:
            if group.name == name:
                return group
        return None
