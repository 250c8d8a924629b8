from pydantic import BaseModel, Field
from typing import Optional, List, Literal

from content_agent.constants import MAX_PROMPT_LENGTH_CHARS


class MultimodalInputSchema(BaseModel):
    type: Literal["text", "image"] = Field(..., description="Input kind")
    content: str = Field(..., description="Text body, or image URL / data URI")
    metadata: dict = Field(default_factory=dict)


class GenerateRequest(BaseModel):
    prompt: str = Field(..., max_length=MAX_PROMPT_LENGTH_CHARS, description="What to write")
    title: Optional[str] = Field(None, max_length=255, description="Optional session title")
    session_id: Optional[str] = Field(
        None, max_length=64, description="Existing session to regenerate; a new one is created if omitted"
    )
    user_inputs: List[MultimodalInputSchema] = Field(default_factory=list)
    require_approval: bool = Field(default=False, description="Pause for human approval before generating")
