"""Turn loop of the git workflow agent.

The loop is a small LangGraph graph:

    START -> call_model --(tool calls?)--> tools -> process_results -> call_model
                       \\--(none)--> END

``call_model`` renders the stage-specific system prompt and invokes the
model bound to the workflow tools. ``tools`` executes the requested calls
one after another in request order. ``process_results`` lets the stage
controller advance the workflow stage and fold repository metadata.

The loop stops when a model turn requests no tools, or when the model-call
limit of the run is reached.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from langchain_core.messages import AIMessage, SystemMessage, ToolMessage
from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, START, StateGraph
from langgraph.graph.state import CompiledStateGraph

from gitflow_agent.configuration import Configuration
from gitflow_agent.errors import GitflowError, get_error_registry
from gitflow_agent.model_config import load_chat_model
from gitflow_agent.prompts import build_system_prompt
from gitflow_agent.stage_controller import ordered_tool_calls, process_tool_results
from gitflow_agent.tool_registry import get_tools_by_name, get_workflow_tools
from gitflow_agent.workflow_state import GitWorkflowState, read_repository, read_stage

logger = logging.getLogger("gitflow.graph")

# Graph steps consumed per model call (call_model, tools, process_results)
STEPS_PER_MODEL_CALL = 3


def limit_reached_message(max_model_calls: int) -> AIMessage:
    error = get_error_registry().create_error(
        "GF-LOOP-001", details={"max_model_calls": max_model_calls}
    )
    return AIMessage(
        content=(
            f"Stopping here: reached the limit of {max_model_calls} model calls for this "
            "turn. Send another message to continue."
        ),
        additional_kwargs={"error": error.to_dict()["error"]},
    )


def call_model(state: GitWorkflowState, config: RunnableConfig) -> dict[str, Any]:
    """Call the LLM powering the agent."""
    configuration = Configuration.from_runnable_config(config)
    model_calls = state.get("model_calls", 0)

    if model_calls >= configuration.max_model_calls:
        logger.warning(
            "Model call limit reached (%d); ending the turn", configuration.max_model_calls
        )
        return {"messages": [limit_reached_message(configuration.max_model_calls)]}

    model = load_chat_model(configuration.model).bind_tools(get_workflow_tools())
    system_prompt = build_system_prompt(
        configuration.system_prompt_template,
        read_stage(state),
        read_repository(state),
    )

    try:
        response = model.invoke([SystemMessage(content=system_prompt), *state["messages"]])
    except GitflowError:
        raise
    except Exception as e:
        logger.error("Model invocation failed: %s", e)
        raise get_error_registry().create_error(
            "GF-API-001", message=f"Model invocation failed: {e}"
        ) from e

    return {"messages": [response], "model_calls": model_calls + 1}


def route_model_output(state: GitWorkflowState) -> Literal["tools", "__end__"]:
    """Route to the tools if the latest model turn requested any, else finish."""
    last_message = state["messages"][-1]
    if isinstance(last_message, AIMessage) and (
        last_message.tool_calls or last_message.invalid_tool_calls
    ):
        return "tools"
    return END


def _error_message(code: str, text: str, tool_call_id: str, name: str | None) -> ToolMessage:
    error = get_error_registry().create_error(code, message=text)
    return ToolMessage(
        content=f"Error: {text}",
        tool_call_id=tool_call_id,
        name=name,
        status="error",
        artifact={"tool": name, "success": False, "error": text, "code": error.code},
    )


def _run_tool_call(call: dict[str, Any], tools_by_name: dict[str, Any]) -> ToolMessage:
    name = call["name"]
    call_id = call.get("id") or ""
    tool = tools_by_name.get(name)
    if tool is None:
        logger.warning("Model requested unknown tool %s", name)
        return _error_message("GF-TOOL-002", f"{name} is not a valid tool.", call_id, name)

    logger.info("Running tool %s", name)
    try:
        output = tool.invoke(
            {"name": name, "args": call["args"], "id": call_id, "type": "tool_call"}
        )
    except ValueError as e:
        # pydantic ValidationError is a ValueError
        logger.warning("Invalid arguments for %s: %s", name, e)
        return _error_message("GF-TOOL-005", f"Invalid arguments for {name}: {e}", call_id, name)
    except Exception as e:
        logger.exception("Tool %s raised", name)
        return _error_message("GF-TOOL-001", f"{name} failed: {e}", call_id, name)

    if isinstance(output, ToolMessage):
        return output
    return ToolMessage(content=str(output), tool_call_id=call_id, name=name)


def _reject_invalid_call(call: dict[str, Any]) -> ToolMessage:
    name = call.get("name")
    logger.warning("Could not parse arguments for %s: %s", name, call.get("error"))
    return _error_message(
        "GF-TOOL-005",
        f"Could not parse arguments for {name}: {call.get('args')}",
        call.get("id") or "",
        name,
    )


def execute_tools(state: GitWorkflowState) -> dict[str, Any]:
    """Run the requested tool calls sequentially, in request order.

    Every call yields exactly one ToolMessage. Unknown tools, arguments that
    fail to parse or validate, and unexpected tool exceptions become error
    messages the model can react to; none of them stops the loop.
    """
    last_message = state["messages"][-1]
    if not isinstance(last_message, AIMessage):
        return {}

    tools_by_name = get_tools_by_name()
    results = [
        _run_tool_call(call, tools_by_name) if valid else _reject_invalid_call(call)
        for call, valid in ordered_tool_calls(last_message)
    ]
    return {"messages": results}


def build_graph(checkpointer: Any | None = None) -> CompiledStateGraph:
    """Build and compile the git workflow graph."""
    workflow = StateGraph(GitWorkflowState)
    workflow.add_node("call_model", call_model)
    workflow.add_node("tools", execute_tools)
    workflow.add_node("process_results", process_tool_results)

    workflow.add_edge(START, "call_model")
    workflow.add_conditional_edges("call_model", route_model_output, ["tools", END])
    workflow.add_edge("tools", "process_results")
    workflow.add_edge("process_results", "call_model")

    return workflow.compile(checkpointer=checkpointer, name="gitflow")


def recursion_limit_for(max_model_calls: int) -> int:
    """LangGraph recursion limit that lets ``max_model_calls`` complete."""
    return (max_model_calls + 1) * STEPS_PER_MODEL_CALL + 1

