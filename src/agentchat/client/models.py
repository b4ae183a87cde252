"""Wire models for the agent-serving API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..stream.models import Citation

DEFAULT_TOP_K = 8


class ChatRequest(BaseModel):
    """Body of a chat request to an agent."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    session_id: str = Field(
        default="",
        alias="sessionId",
        description="Session to continue, or empty to start a new one"
    )
    message: str = Field(description="The user's message")
    top_k: int = Field(default=DEFAULT_TOP_K, alias="topK", ge=1, description="Result-size hint")
    stream: bool = Field(default=True, description="Request a streaming response")

    def to_wire(self) -> dict:
        """Serialize with the camelCase field names the server expects."""
        return self.model_dump(by_alias=True)


class ChatResponse(BaseModel):
    """Non-streaming chat result."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    answer: str = ""
    citations: list[Citation] = Field(default_factory=list)


class AgentDetail(BaseModel):
    """Agent configuration as shown in the chat header."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    agent_id: str = Field(alias="agentId")
    name: str
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    skill_files: list[str] = Field(default_factory=list, alias="skillFiles")
    system_rule_files: list[str] = Field(default_factory=list, alias="systemRuleFiles")
    trigger_rule_files: list[str] = Field(default_factory=list, alias="triggerRuleFiles")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    @property
    def summary(self) -> str:
        """Short description of the bound skills and rules."""
        return (
            f"skills={len(self.skill_files)} · "
            f"systemRules={len(self.system_rule_files)} · "
            f"triggerRules={len(self.trigger_rule_files)}"
        )
