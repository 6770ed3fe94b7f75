"""API models for ChatFlow."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class CompileRequest(BaseModel):
    """Request to compile a natural-language description into a draft workflow."""

    description: str = Field(
        ..., min_length=1, description="Natural language description of the desired workflow"
    )
    save: bool = Field(
        True,
        description="Record the workflow and its review tasks on the planning board",
    )


class ToolCallRequest(BaseModel):
    """An MCP tool invocation."""

    tool_name: str = Field(..., description="Name of a tool from /mcp/tools/list")
    arguments: Optional[dict[str, Any]] = Field(None, description="Tool arguments")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str = "ChatFlow Backend"
