"""Typed n8n workflow document produced by extraction."""

from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

Number = Union[int, float]


class NodeSpec(BaseModel):
    """A single n8n node.

    Keys n8n understands but this service does not interpret
    (``credentials``, ``notes``, ``webhookId`` ...) are kept as extras.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    parameters: dict[str, Any] = Field(default_factory=dict)
    position: tuple[Number, Number] = Field(...)
    type_version: Number = Field(1, alias="typeVersion")
    continue_on_fail: bool = Field(False, alias="continueOnFail")
    retry_on_fail: bool = Field(True, alias="retryOnFail")
    max_tries: int = Field(3, alias="maxTries")


class WorkflowDocument(BaseModel):
    """An extracted, normalized workflow. Never mutated after creation."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    nodes: list[NodeSpec] = Field(..., min_length=1)
    connections: dict[str, Any] = Field(default_factory=dict)
    active: bool = False
    settings: dict[str, Any] = Field(default_factory=dict)
    static_data: dict[str, Any] = Field(default_factory=dict, alias="staticData")
    tags: list[Any] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize using n8n's camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")

    @property
    def node_names(self) -> list[str]:
        return [node.name for node in self.nodes]
