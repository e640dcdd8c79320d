"""Documentation build pipeline entry point."""

from __future__ import annotations

from pydantic import ValidationError

from baladocs.artifact.fetch import Fetcher
from baladocs.core.config import Config
from baladocs.core.errors import BaladocsError, SourceNotFoundError
from baladocs.core.log import logger
from baladocs.core.result import BuildRequest, BuildResult
from baladocs.core.workspace import WorkspaceManager
from baladocs.runner.doc import DocRunner
from baladocs.toolchain.resolver import ToolchainResolver
from baladocs.workflow.graph import create_workflow
from baladocs.workflow.nodes import AllocateWorkspace
from baladocs.workflow.state import BuildState, PipelineDeps


class DocsPipeline:
    """Turns a bala URL into generated documentation.

    build() is synchronous and returns exactly one BuildResult per
    call. It never raises: expected failures keep their category,
    anything else is reported as unclassified. The request's
    workspace is always released before build() returns.
    """

    def __init__(self, deps: PipelineDeps):
        self.deps = deps
        self.workflow = create_workflow()

    @classmethod
    def from_config(cls, config: Config) -> DocsPipeline:
        return cls(PipelineDeps(
            workspaces=WorkspaceManager(
                temp_root=config.workspace.temp_root,
                prefix=config.workspace.prefix,
            ),
            fetcher=Fetcher(
                timeout=config.fetch.timeout,
                follow_redirects=config.fetch.follow_redirects,
                chunk_size=config.fetch.chunk_size,
            ),
            resolver=ToolchainResolver(config.toolchain.installations_root),
            doc_runner=DocRunner(
                binary=config.toolchain.binary,
                subcommand=config.toolchain.subcommand,
                timeout=config.toolchain.timeout,
                fail_on_nonzero_exit=config.toolchain.fail_on_nonzero_exit,
            ),
        ))

    def build(self, source: str) -> BuildResult:
        """Fetch, inspect and document the bala at source."""
        with logger.span("Generating docs", source=source):
            try:
                request = BuildRequest(source=source)
            except ValidationError as e:
                error = SourceNotFoundError(
                    f"unable to locate bala file: {e.errors()[0]['msg']}",
                    url=source,
                )
                return self._failed(source, error)

            state = BuildState(source=request.source)
            try:
                with state:
                    run = self.workflow.run_sync(
                        AllocateWorkspace(), state=state, deps=self.deps
                    )
            except Exception as e:  # noqa: BLE001 - converted to a result
                return self._failed(source, e, state)

            logger.info("generated docs for: {source}", source=source)
            return run.output

    def _failed(
        self,
        source: str,
        error: Exception,
        state: BuildState | None = None,
    ) -> BuildResult:
        if isinstance(error, BaladocsError):
            logger.error(
                "error occurred generating docs: {source}",
                source=source,
                category=str(error.category),
                error=str(error),
            )
        else:
            logger.exception(
                "error occurred generating docs: {source}", source=source
            )
        details = state.details() if state is not None else {}
        return BuildResult.failure(source, error, **details)
