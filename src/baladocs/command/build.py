"""Build command - generate docs for one bala."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field
from pydantic_settings import CliPositionalArg

if TYPE_CHECKING:
    from baladocs.core.config import State


class BuildCommand(BaseModel):
    """Download a bala, find its toolchain and generate its docs.

    Prints the response body as JSON. Exit status is 0 on success
    and 1 on failure.
    """

    source: CliPositionalArg[str] = Field(
        description="URL of the bala (http, https or file)"
    )

    def run(self, state: State) -> int:
        from baladocs.workflow.pipeline import DocsPipeline

        pipeline = DocsPipeline.from_config(state.config)
        result = pipeline.build(self.source)
        print(json.dumps(result.to_response(), indent=2))
        return 0 if result.success else 1
