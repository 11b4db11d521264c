"""Argument schemas for the actions offered to the reasoning engine.

Each model doubles as the JSON schema the reasoning engine sees and as the
validator applied to its arguments before an action runs.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ActionArgs(BaseModel):
    """Base for action argument models; unknown keys from the model are dropped."""

    model_config = ConfigDict(extra="ignore")


class NewTaskArgs(ActionArgs):
    """Define a new task based on the user request and get confirmation."""

    task_description: str = Field(..., description="Clear description of what needs to be done")
    reasoning: str = Field(default="", description="Why this task was identified from the user's request")


class AskForClarificationArgs(ActionArgs):
    """Ask the user for clarification when the request is ambiguous."""

    question: str = Field(..., description="The specific question to ask the user")
    context: str = Field(default="", description="Why this clarification is needed")


class ConfirmActionArgs(ActionArgs):
    """Ask the user to confirm before a risky operation."""

    action: str = Field(..., description="The operation about to be performed")
    reason: str = Field(default="", description="Why the operation needs confirmation")


class ReadFileArgs(ActionArgs):
    """Read and examine the contents of a file."""

    filepath: str = Field(..., description="Path to the file to read")


class ListFilesArgs(ActionArgs):
    """List files in a directory to understand project structure."""

    directory: str = Field(default=".", description="Directory path to list")
    pattern: Optional[str] = Field(default=None, description="Optional file pattern to filter by")


class SearchFilesArgs(ActionArgs):
    """Search for text across files in the codebase."""

    query: str = Field(..., description="Text or pattern to search for")
    file_types: Optional[List[str]] = Field(
        default=None, description="File extensions to search in (e.g. ['py', 'toml'])"
    )


class WriteToFileArgs(ActionArgs):
    """Write or modify file contents."""

    filepath: str = Field(..., description="Path to the file to write")
    content: str = Field(..., description="Content to write to the file")
    mode: Literal["overwrite", "append"] = Field(
        default="overwrite", description="Whether to overwrite or append to the file"
    )


class AttemptCompletionArgs(ActionArgs):
    """Present final results and check whether the user is satisfied."""

    summary: str = Field(..., description="Brief summary of what was accomplished")
    details: str = Field(default="", description="Detailed explanation of the results")
    next_steps: Optional[str] = Field(default=None, description="Suggested next steps or follow-up actions")
