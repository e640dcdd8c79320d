"""Graph workflow definition."""

from pydantic_graph import Graph

from baladocs.core.result import BuildResult
from baladocs.workflow.nodes import (
    AllocateWorkspace,
    FetchArtifact,
    ReadVersion,
    ResolveToolchain,
    RunDocBuild,
)
from baladocs.workflow.state import BuildState


def create_workflow() -> Graph:
    """Create the documentation build graph.

    Linear: allocate -> fetch -> read version -> resolve toolchain
    -> run doc build. No step loops back or retries.
    """
    return Graph(
        nodes=(
            AllocateWorkspace,
            FetchArtifact,
            ReadVersion,
            ResolveToolchain,
            RunDocBuild,
        ),
        name="docs_build",
        state_type=BuildState,
        run_end_type=BuildResult,
    )
