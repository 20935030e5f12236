"""
Pydantic models for the inbound Anthropic Messages request.

Only the shape is validated here; unknown fields and unknown content block
types are tolerated so newer CLI versions keep working.
"""

from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ContentBlock(_Lenient):
    """A single typed content block (text, tool_use, tool_result, ...)."""
    type: str
    text: Optional[str] = None
    # tool_use
    id: Optional[str] = None
    name: Optional[str] = None
    input: Any = None
    # tool_result
    tool_use_id: Optional[str] = None
    content: Any = None


class SystemBlock(_Lenient):
    type: str = "text"
    text: Optional[str] = None


class Message(_Lenient):
    role: str
    content: Union[str, List[ContentBlock]]


class ToolSpec(_Lenient):
    name: str
    description: Optional[str] = None
    input_schema: Any = None


class MessagesRequest(_Lenient):
    """Anthropic Messages API request body."""
    model: str = ""
    max_tokens: Optional[int] = None
    stream: bool = False
    system: Optional[Union[str, List[SystemBlock]]] = None
    messages: List[Message]
    tools: Optional[List[ToolSpec]] = None
    tool_choice: Optional[Any] = None
    temperature: Optional[float] = None

    def system_text(self) -> str:
        """Flatten the system prompt into a single string."""
        if self.system is None:
            return ""
        if isinstance(self.system, str):
            return self.system
        return "\n".join(block.text for block in self.system if block.text is not None)
