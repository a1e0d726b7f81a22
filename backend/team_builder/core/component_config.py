"""Component Configs — the kind-specific payload carried by every node.

Invariants:
    - ComponentConfig is a closed tagged union; `component_type` is the tag and
      always names a ComponentKind
    - Reference fields (model_client, participants, tools, termination_condition)
      hold node ids and are derived from the edge set, never stored on a node
    - validate_config is PURE: returns error dict on violation, None on success

Design Decisions:
    - Pydantic discriminated union: dispatch on the tag, never on isinstance chains
    - Configs are frozen; updates go through model_copy
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from team_builder.core.domain_types import (
    AgentType,
    ComponentKind,
    ModelType,
    NodeId,
    TeamType,
    TerminationType,
    ToolType,
)
from team_builder.core.errors import INVALID_CONFIG, KIND_MISMATCH, error_outcome


class _BaseConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class TeamConfig(_BaseConfig):
    component_type: Literal["team"] = "team"
    name: str = "team"
    team_type: TeamType = TeamType.ROUND_ROBIN
    model_client: NodeId | None = None
    participants: list[NodeId] = []
    selector_prompt: str | None = None
    termination_condition: NodeId | None = None


class AgentConfig(_BaseConfig):
    component_type: Literal["agent"] = "agent"
    name: str = "assistant"
    agent_type: AgentType = AgentType.ASSISTANT
    model_client: NodeId | None = None
    system_message: str | None = None
    tools: list[NodeId] = []


class ModelConfig(_BaseConfig):
    component_type: Literal["model"] = "model"
    model_type: ModelType = ModelType.OPENAI
    model: str
    base_url: str | None = None


class ToolConfig(_BaseConfig):
    component_type: Literal["tool"] = "tool"
    name: str = ""
    tool_type: ToolType = ToolType.PYTHON_FUNCTION
    description: str = ""
    content: str = ""


class TerminationConfig(_BaseConfig):
    component_type: Literal["termination"] = "termination"
    termination_type: TerminationType = TerminationType.MAX_MESSAGE
    max_messages: int | None = Field(None, ge=1)
    text: str | None = None
    # OrTerminationCondition: nested conditions, resolved inline (not graph nodes)
    conditions: list["TerminationConfig"] = []


TerminationConfig.model_rebuild()


ComponentConfig = Annotated[
    Union[TeamConfig, AgentConfig, ModelConfig, ToolConfig, TerminationConfig],
    Field(discriminator="component_type"),
]

component_config_adapter: TypeAdapter[ComponentConfig] = TypeAdapter(ComponentConfig)

REFERENCE_FIELDS: dict[ComponentKind, tuple[str, ...]] = {
    ComponentKind.TEAM: ("model_client", "participants", "termination_condition"),
    ComponentKind.AGENT: ("model_client", "tools"),
    ComponentKind.MODEL: (),
    ComponentKind.TOOL: (),
    ComponentKind.TERMINATION: (),
}


def kind_of(config: ComponentConfig) -> ComponentKind:
    """The variant tag of a config as a ComponentKind."""
    return ComponentKind(config.component_type)


def parse_config(data: dict) -> ComponentConfig:
    """Parse a tagged dict into its config variant. Raises pydantic ValidationError."""
    return component_config_adapter.validate_python(data)


def strip_references(config: ComponentConfig) -> ComponentConfig:
    """Copy of config with every reference field emptied."""
    fields = REFERENCE_FIELDS[kind_of(config)]
    if not fields:
        return config
    return config.model_copy(update={
        name: [] if isinstance(getattr(config, name), list) else None
        for name in fields
    })


def references_of(config: ComponentConfig) -> dict[str, list[NodeId]]:
    """Reference fields of a config as lists of node ids (single refs wrapped)."""
    refs: dict[str, list[NodeId]] = {}
    for name in REFERENCE_FIELDS[kind_of(config)]:
        value = getattr(config, name)
        if isinstance(value, list):
            refs[name] = list(value)
        else:
            refs[name] = [value] if value else []
    return refs


# ─── Validation ──────────────────────────────────────────────────

def check_kind_match(kind: ComponentKind, config: ComponentConfig) -> dict | None:
    """The config's variant tag must equal the node kind."""
    if config.component_type != ComponentKind(kind).value:
        return error_outcome(
            KIND_MISMATCH,
            f"Config of type '{config.component_type}' cannot back a "
            f"'{ComponentKind(kind).value}' node.",
            kind=ComponentKind(kind).value,
            config_type=config.component_type,
        )
    return None


def _missing(field_name: str, config: ComponentConfig) -> dict:
    return error_outcome(
        INVALID_CONFIG,
        f"{type(config).__name__}.{field_name} is required.",
        field=field_name,
    )


def _check_team(config: TeamConfig) -> dict | None:
    if config.team_type == TeamType.SELECTOR and not (config.selector_prompt or "").strip():
        return _missing("selector_prompt", config)
    return None


def _check_agent(config: AgentConfig) -> dict | None:
    if not config.name.strip():
        return _missing("name", config)
    return None


def _check_model(config: ModelConfig) -> dict | None:
    if not config.model.strip():
        return _missing("model", config)
    return None


def _check_tool(config: ToolConfig) -> dict | None:
    for field_name in ("tool_type", "name", "content"):
        value = getattr(config, field_name)
        if not (value.value if isinstance(value, ToolType) else value).strip():
            return _missing(field_name, config)
    return None


def _check_termination(config: TerminationConfig) -> dict | None:
    if config.termination_type == TerminationType.MAX_MESSAGE and not config.max_messages:
        return _missing("max_messages", config)
    if config.termination_type == TerminationType.TEXT_MENTION and not (config.text or "").strip():
        return _missing("text", config)
    if config.termination_type == TerminationType.OR_CONDITION:
        if len(config.conditions) < 2:
            return _missing("conditions", config)
        for condition in config.conditions:
            error = _check_termination(condition)
            if error:
                return error
    return None


_CHECKS = {
    ComponentKind.TEAM: _check_team,
    ComponentKind.AGENT: _check_agent,
    ComponentKind.MODEL: _check_model,
    ComponentKind.TOOL: _check_tool,
    ComponentKind.TERMINATION: _check_termination,
}


def validate_config(config: ComponentConfig) -> dict | None:
    """Check the fields the config's variant requires. First error wins."""
    return _CHECKS[kind_of(config)](config)
