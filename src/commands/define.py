"""
「AI で定義を追加」コマンド

ノートのタイトルとフロントマターの tags から定義を生成し、ノートに差し込む。
エディタへの書き込みはプレースホルダー表示と最終結果の 2 回のみ。
"""

import time
from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from src.ai.definition import (
    DefinitionBackend,
    create_definition_backend,
    describe_failure,
    generate_definition,
)
from src.ai.models import DefinitionFailure, DefinitionRequest, DefinitionResult
from src.config import Settings, get_settings
from src.obsidian.editor import Editor, MetadataIndex
from src.obsidian.frontmatter import parse_frontmatter, reconcile_frontmatter
from src.obsidian.splicer import begin_update, complete_update
from src.utils.logger import log_api_usage
from src.utils.mixins import LoggerMixin

BackendFactory = Callable[[Settings, SecretStr], DefinitionBackend]


class InvocationState(Enum):
    """1 回のコマンド実行の状態"""

    IDLE = "idle"
    PARSING = "parsing"
    RECONCILING = "reconciling"
    AWAITING_GENERATION = "awaiting_generation"
    SPLICING = "splicing"
    DONE = "done"


class InvocationStatus(Enum):
    """コマンド実行の結果種別"""

    COMPLETED = "completed"
    SKIPPED_NO_TITLE = "skipped_no_title"
    REJECTED_IN_FLIGHT = "rejected_in_flight"
    WRITE_FAILED = "write_failed"


class InvocationOutcome(BaseModel):
    """コマンド実行結果"""

    status: InvocationStatus
    result: DefinitionResult | None = None
    final_text: str | None = None
    tags: list[str] = Field(default_factory=list)
    writes: int = 0
    processing_time_ms: int = 0

    model_config = ConfigDict(frozen=True)

    @property
    def succeeded(self) -> bool:
        return (
            self.status is InvocationStatus.COMPLETED
            and self.result is not None
            and self.result.kind == "success"
        )


class DefinitionInvocation(LoggerMixin):
    """One run of the command against one editor; owns its own state."""

    def __init__(
        self,
        editor: Editor,
        title: str,
        settings: Settings,
        backend_factory: BackendFactory,
        metadata_index: MetadataIndex | None = None,
    ):
        self.editor = editor
        self.title = title
        self.settings = settings
        self.backend_factory = backend_factory
        self.metadata_index = metadata_index
        self.state = InvocationState.IDLE
        self.writes = 0

    def _transition(self, state: InvocationState) -> None:
        self.logger.debug(
            "Invocation state changed",
            document=self.editor.document_id,
            previous=self.state.value,
            current=state.value,
        )
        self.state = state

    def _write(self, text: str) -> bool:
        try:
            self.editor.set_value(text)
        except OSError as e:
            self.logger.error(
                "Failed to write document",
                document=self.editor.document_id,
                write=self.writes + 1,
                error=str(e),
            )
            return False
        self.writes += 1
        return True

    def _write_failed(
        self, start_time: float, tags: list[str], result: DefinitionResult | None = None
    ) -> InvocationOutcome:
        self._transition(InvocationState.DONE)
        return InvocationOutcome(
            status=InvocationStatus.WRITE_FAILED,
            result=result,
            tags=tags,
            writes=self.writes,
            processing_time_ms=int((time.time() - start_time) * 1000),
        )

    def _resolve_tags(self, parsed_tags: list[str]) -> list[str]:
        if self.metadata_index is not None:
            indexed = self.metadata_index.tags_for(self.editor.document_id)
            if indexed is not None:
                return indexed
        return parsed_tags

    async def _generate(self, tags: list[str]) -> DefinitionResult:
        try:
            request = DefinitionRequest(
                title=self.title,
                tags_context=", ".join(tags),
                credential=self.settings.gemini_api_key,
            )
            backend = self.backend_factory(self.settings, request.credential)
        except Exception as e:
            self.logger.error(
                "Failed to prepare definition request",
                document=self.editor.document_id,
                error=str(e),
            )
            return DefinitionFailure(
                description=describe_failure(e), error_type=type(e).__name__
            )

        return await generate_definition(request, backend)

    async def run(self) -> InvocationOutcome:
        start_time = time.time()

        self._transition(InvocationState.PARSING)
        original_text = self.editor.get_value()
        block = parse_frontmatter(original_text)
        tags = self._resolve_tags(block.tags())

        self._transition(InvocationState.RECONCILING)
        metadata_text = reconcile_frontmatter(block, self.settings.definition_status)
        staged_text = begin_update(original_text, metadata_text)
        if not self._write(staged_text):
            return self._write_failed(start_time, tags)

        self._transition(InvocationState.AWAITING_GENERATION)
        try:
            result = await self._generate(tags)
        except Exception as e:
            # プレースホルダーは必ず結果で置き換える
            self.logger.error(
                "Unexpected error during definition generation",
                document=self.editor.document_id,
                error=str(e),
                exc_info=True,
            )
            result = DefinitionFailure(
                description=describe_failure(e), error_type=type(e).__name__
            )

        self._transition(InvocationState.SPLICING)
        final_text = complete_update(self.editor.get_value(), result)
        if not self._write(final_text):
            return self._write_failed(start_time, tags, result)

        self._transition(InvocationState.DONE)
        processing_time = int((time.time() - start_time) * 1000)

        log_api_usage(
            "definition",
            {
                "document": self.editor.document_id,
                "result": result.kind,
                "tag_count": len(tags),
                "processing_time_ms": processing_time,
            },
        )

        return InvocationOutcome(
            status=InvocationStatus.COMPLETED,
            result=result,
            final_text=final_text,
            tags=tags,
            writes=self.writes,
            processing_time_ms=processing_time,
        )


class DefinitionCommand(LoggerMixin):
    """
    コマンドのエントリポイント

    同一ドキュメントに対する実行中の呼び出しがある間は、2 回目の呼び出しを拒否する。
    """

    command_id = "add-ai-definition"
    command_name = "Add AI definition"

    def __init__(
        self,
        settings: Settings | None = None,
        backend_factory: BackendFactory | None = None,
        metadata_index: MetadataIndex | None = None,
    ):
        self.settings = settings or get_settings()
        self.backend_factory = backend_factory or create_definition_backend
        self.metadata_index = metadata_index
        self._in_flight: set[str] = set()

    def is_running(self, document_id: str) -> bool:
        return document_id in self._in_flight

    async def run(self, editor: Editor) -> InvocationOutcome:
        """Run the command against the currently open document."""
        title = (editor.title or "").strip()
        if not title:
            self.logger.info("No document title, skipping definition")
            return InvocationOutcome(status=InvocationStatus.SKIPPED_NO_TITLE)

        document_id = editor.document_id
        if document_id in self._in_flight:
            self.logger.warning(
                "Definition already in progress for document", document=document_id
            )
            return InvocationOutcome(status=InvocationStatus.REJECTED_IN_FLIGHT)

        self._in_flight.add(document_id)
        try:
            self.logger.info("Loading definition", title=title, document=document_id)
            invocation = DefinitionInvocation(
                editor,
                title,
                self.settings,
                self.backend_factory,
                self.metadata_index,
            )
            return await invocation.run()
        finally:
            self._in_flight.discard(document_id)
