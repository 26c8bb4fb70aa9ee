"""Argument schemas for the workflow tools.

Field names are the camelCase names the model is bound against and must
stay stable. The same models serve as ``args_schema`` for the LangChain
tools and, through the ``ToolCallRequest`` tagged union, as the validator
the stage controller applies before folding a call into repository state.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


class GitCloneArgs(BaseModel):
    repoUrl: str = Field(description="URL of the git repository to clone")
    directory: str | None = Field(
        default=None,
        description="Optional directory to clone into. If not provided, the repo name will be used",
    )
    branch: str | None = Field(
        default=None, description="Optional branch to checkout after cloning"
    )


class GitCheckoutArgs(BaseModel):
    directory: str = Field(description="Path to the git repository")
    target: str = Field(description="Branch name, tag, or commit hash to checkout")
    createBranch: bool = Field(
        default=False, description="Whether to create a new branch. Default is false"
    )


class GitStatusArgs(BaseModel):
    directory: str = Field(description="Path to the git repository")


class GitCommitArgs(BaseModel):
    directory: str = Field(description="Path to the git repository")
    message: str = Field(description="Commit message")
    addAll: bool = Field(
        default=True,
        description="Whether to add all files before committing. Default is true",
    )


class GitPushArgs(BaseModel):
    directory: str = Field(description="Path to the git repository")
    remote: str = Field(default="origin", description="Remote name. Default is 'origin'")
    branch: str | None = Field(
        default=None,
        description="Branch name to push to. Default is the current branch",
    )
    setUpstream: bool = Field(
        default=False,
        description="Whether to set the upstream for the branch. Default is false",
    )


class ReadFileArgs(BaseModel):
    filePath: str = Field(description="Path to the file to read")


class WriteFileArgs(BaseModel):
    filePath: str = Field(description="Path to the file to write")
    content: str = Field(description="Content to write to the file")


class ListDirectoryArgs(BaseModel):
    directory: str = Field(description="Path to the directory to list")


TOOL_ARG_SCHEMAS: dict[str, type[BaseModel]] = {
    "git_clone": GitCloneArgs,
    "git_checkout": GitCheckoutArgs,
    "git_status": GitStatusArgs,
    "git_commit": GitCommitArgs,
    "git_push": GitPushArgs,
    "read_file": ReadFileArgs,
    "write_file": WriteFileArgs,
    "list_directory": ListDirectoryArgs,
}


# =============================================================================
# Tagged union of tool-call requests
# =============================================================================


class GitCloneCall(BaseModel):
    name: Literal["git_clone"]
    args: GitCloneArgs


class GitCheckoutCall(BaseModel):
    name: Literal["git_checkout"]
    args: GitCheckoutArgs


class GitStatusCall(BaseModel):
    name: Literal["git_status"]
    args: GitStatusArgs


class GitCommitCall(BaseModel):
    name: Literal["git_commit"]
    args: GitCommitArgs


class GitPushCall(BaseModel):
    name: Literal["git_push"]
    args: GitPushArgs


class ReadFileCall(BaseModel):
    name: Literal["read_file"]
    args: ReadFileArgs


class WriteFileCall(BaseModel):
    name: Literal["write_file"]
    args: WriteFileArgs


class ListDirectoryCall(BaseModel):
    name: Literal["list_directory"]
    args: ListDirectoryArgs


ToolCallRequest = Annotated[
    Union[
        GitCloneCall,
        GitCheckoutCall,
        GitStatusCall,
        GitCommitCall,
        GitPushCall,
        ReadFileCall,
        WriteFileCall,
        ListDirectoryCall,
    ],
    Field(discriminator="name"),
]

_request_adapter: TypeAdapter[Any] = TypeAdapter(ToolCallRequest)


def decode_arguments(raw: Any) -> dict[str, Any]:
    """Normalize tool-call arguments to a mapping.

    Providers hand back either an already-parsed mapping or a JSON string.

    Raises:
        ValueError: If the arguments are neither a mapping nor a JSON object.
    """
    if raw is None:
        return {}
    if isinstance(raw, str):
        parsed = json.loads(raw)  # JSONDecodeError is a ValueError
        if not isinstance(parsed, dict):
            raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")
        return parsed
    if isinstance(raw, dict):
        return raw
    raise ValueError(f"Unsupported argument payload: {type(raw).__name__}")


def parse_tool_call(name: str, raw_args: Any) -> BaseModel:
    """Validate a tool call against the tagged union.

    Raises:
        ValueError: If the arguments cannot be decoded, or the name/arguments
            do not match a known tool (``pydantic.ValidationError`` is a
            ``ValueError``).
    """
    return _request_adapter.validate_python({"name": name, "args": decode_arguments(raw_args)})
