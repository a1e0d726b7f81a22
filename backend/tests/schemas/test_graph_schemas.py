"""Request schemas — the shapes the renderer and API clients send.

Invariants:
    - NodeCreate.config is a discriminated union on component_type
    - Unknown config fields are rejected
    - Snapshot imports only accept version 1
    - Builder names are stripped and never blank
"""

import pytest
from pydantic import ValidationError

from team_builder.core.component_config import AgentConfig, TerminationConfig
from team_builder.schemas.builder import BuilderCreate
from team_builder.schemas.graph import NodeCreate, NodeUpdate, SnapshotImport


# --- NodeCreate ---------------------------------------------------------------

def test_node_create_picks_config_variant():
    body = NodeCreate(kind="agent", config={"component_type": "agent", "name": "w"})
    assert isinstance(body.config, AgentConfig)
    assert body.config.model_fields_set == {"component_type", "name"}


def test_node_create_nested_termination():
    body = NodeCreate(kind="termination", config={
        "component_type": "termination",
        "termination_type": "OrTerminationCondition",
        "conditions": [
            {"termination_type": "MaxMessageTermination", "max_messages": 3},
            {"termination_type": "TextMentionTermination", "text": "DONE"},
        ],
    })
    assert isinstance(body.config, TerminationConfig)
    assert body.config.conditions[1].text == "DONE"


def test_node_create_rejects_unknown_variant():
    with pytest.raises(ValidationError):
        NodeCreate(kind="agent", config={"component_type": "widget"})


def test_node_create_rejects_extra_field():
    with pytest.raises(ValidationError):
        NodeCreate(kind="model", config={
            "component_type": "model", "model": "gpt-x", "api_key": "secret",
        })


def test_node_update_all_optional():
    body = NodeUpdate()
    assert body.config is None and body.label is None and body.position is None


def test_node_update_rejects_empty_label():
    with pytest.raises(ValidationError):
        NodeUpdate(label="")


# --- SnapshotImport / BuilderCreate -------------------------------------------

def test_snapshot_import_version():
    assert SnapshotImport().version == 1
    with pytest.raises(ValidationError):
        SnapshotImport(version=3)


def test_builder_name_stripped():
    assert BuilderCreate(name="  crew ").name == "crew"
    with pytest.raises(ValidationError):
        BuilderCreate(name="   ")
