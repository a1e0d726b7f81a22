"""Component Library — the catalogue of default components drags start from.

Invariants:
    - Every library entry's config validates (validate_config returns None)
    - Library configs never carry references; attachments happen on the canvas
    - Entries are keyed by (kind, name) and immutable
"""

from dataclasses import dataclass

from team_builder.core.component_config import (
    AgentConfig,
    ComponentConfig,
    ModelConfig,
    TeamConfig,
    TerminationConfig,
    ToolConfig,
    kind_of,
)
from team_builder.core.domain_types import (
    AgentType,
    ComponentKind,
    ModelType,
    TeamType,
    TerminationType,
)


@dataclass(frozen=True)
class LibraryItem:
    name: str
    label: str
    description: str
    config: ComponentConfig

    @property
    def kind(self) -> ComponentKind:
        return kind_of(self.config)


_CALCULATOR_SOURCE = '''def calculator(a: float, b: float, operator: str) -> str:
    try:
        if operator == "+":
            return str(a + b)
        elif operator == "-":
            return str(a - b)
        elif operator == "*":
            return str(a * b)
        elif operator == "/":
            if b == 0:
                return "Error: Division by zero"
            return str(a / b)
        else:
            return "Error: Invalid operator. Please use +, -, *, or /"
    except Exception as e:
        return f"Error: {str(e)}"
'''

LIBRARY: tuple[LibraryItem, ...] = (
    LibraryItem(
        "round_robin_team", "Round Robin Team",
        "Participants take turns in a fixed order.",
        TeamConfig(name="round_robin_team", team_type=TeamType.ROUND_ROBIN),
    ),
    LibraryItem(
        "selector_team", "Selector Team",
        "A model picks the next speaker from the participants.",
        TeamConfig(
            name="selector_team",
            team_type=TeamType.SELECTOR,
            selector_prompt=(
                "You are in a role play game. The following roles are "
                "available:\n{roles}.\nRead the following conversation. Then "
                "select the next role from {participants} to play. Only "
                "return the role."
            ),
        ),
    ),
    LibraryItem(
        "assistant_agent", "Assistant Agent",
        "An LLM-backed agent that can call tools.",
        AgentConfig(
            name="assistant_agent",
            agent_type=AgentType.ASSISTANT,
            system_message="You are a helpful assistant. Solve tasks carefully.",
        ),
    ),
    LibraryItem(
        "user_proxy", "User Proxy",
        "Relays input from a human participant.",
        AgentConfig(name="user_proxy", agent_type=AgentType.USER_PROXY),
    ),
    LibraryItem(
        "gpt-4o-mini", "GPT-4o Mini",
        "OpenAI chat completion client.",
        ModelConfig(model_type=ModelType.OPENAI, model="gpt-4o-mini"),
    ),
    LibraryItem(
        "azure-gpt-4o", "Azure GPT-4o",
        "Azure OpenAI chat completion client.",
        ModelConfig(
            model_type=ModelType.AZURE_OPENAI,
            model="gpt-4o",
            base_url="https://example.openai.azure.com/",
        ),
    ),
    LibraryItem(
        "calculator", "Calculator",
        "Basic arithmetic on two numbers.",
        ToolConfig(
            name="calculator",
            description="A simple calculator that performs basic arithmetic operations",
            content=_CALCULATOR_SOURCE,
        ),
    ),
    LibraryItem(
        "max_messages", "Max Messages",
        "Stop after a fixed number of messages.",
        TerminationConfig(
            termination_type=TerminationType.MAX_MESSAGE, max_messages=10,
        ),
    ),
    LibraryItem(
        "text_mention", "Text Mention",
        "Stop when a message mentions TERMINATE.",
        TerminationConfig(
            termination_type=TerminationType.TEXT_MENTION, text="TERMINATE",
        ),
    ),
)

_BY_KEY: dict[tuple[ComponentKind, str], LibraryItem] = {
    (item.kind, item.name): item for item in LIBRARY
}


def list_library(kind: ComponentKind | None = None) -> list[LibraryItem]:
    return [item for item in LIBRARY if kind is None or item.kind == kind]


def library_item(kind: ComponentKind, name: str) -> LibraryItem | None:
    return _BY_KEY.get((ComponentKind(kind), name))


def default_item(kind: ComponentKind) -> LibraryItem:
    """First catalogue entry of a kind."""
    return list_library(ComponentKind(kind))[0]
