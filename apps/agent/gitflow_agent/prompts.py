"""Prompts used by the GitFlow agent."""

from __future__ import annotations

from datetime import UTC, datetime

from gitflow_agent.workflow_state import RepositoryInfo, WorkflowStage

SYSTEM_PROMPT_TEMPLATE = """You are a helpful AI assistant specialized in Git operations.

You can perform git operations including cloning repositories, making changes to files,
checking repository status, committing changes, and pushing to remote repositories.

For any Git task, you should follow this workflow:
1. Clone or checkout the git repository
2. Explore the repository structure to understand the codebase
3. Make the necessary modifications to files
4. Verify your changes by checking file contents and git status
5. Commit your changes with a descriptive commit message
6. Push changes to the remote repository if requested

Be careful when modifying files and always confirm the changes before committing.
You have full access to git commands and file operations through specialized tools.

System time: {system_time}"""

STAGE_GUIDANCE: dict[WorkflowStage, str] = {
    WorkflowStage.INITIALIZE: (
        "You need to get the repository URL from the user and clone it. "
        "Ask for any necessary details."
    ),
    WorkflowStage.EXPLORE: (
        "You should explore the repository structure to understand the codebase "
        "before making changes."
    ),
    WorkflowStage.MODIFY: "Make the necessary modifications to files as required by the user.",
    WorkflowStage.VERIFY: "Verify your changes by checking file contents and git status.",
    WorkflowStage.COMMIT: "Commit your changes with a descriptive commit message.",
    WorkflowStage.PUSH: "Push changes to the remote repository if requested by the user.",
}

SYSTEM_TIME_TOKEN = "{system_time}"


def format_repository_context(repository: RepositoryInfo) -> str:
    """Summarize repository metadata for the prompt; empty until a clone is known."""
    if not repository.url:
        return ""
    lines = [f"Repository: {repository.url}"]
    if repository.directory:
        lines.append(f"Local directory: {repository.directory}")
    if repository.branch:
        lines.append(f"Branch: {repository.branch}")
    if repository.files_modified:
        lines.append(f"Modified files: {', '.join(repository.files_modified)}")
    return "\n".join(lines)


def build_system_prompt(
    template: str,
    stage: WorkflowStage,
    repository: RepositoryInfo,
    now: datetime | None = None,
) -> str:
    """Render the system prompt for the current stage and repository."""
    system_time = (now or datetime.now(UTC)).isoformat()
    if SYSTEM_TIME_TOKEN in template:
        prompt = template.replace(SYSTEM_TIME_TOKEN, system_time)
    else:
        prompt = f"{template}\nTime: {system_time}"

    prompt += f"\n\nCurrent workflow step: {stage.value}"

    repo_context = format_repository_context(repository)
    if repo_context:
        prompt += f"\n\n{repo_context}"

    prompt += f"\n\n{STAGE_GUIDANCE[stage]}"
    return prompt
