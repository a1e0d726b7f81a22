"""Root conftest — shared test configuration."""

import os

# Keep test runs independent of a developer's .env
os.environ.setdefault("TEAM_BUILDER_LOG_FORMAT", "text")
os.environ.setdefault("TEAM_BUILDER_MAX_NODES_PER_GRAPH", "50")
