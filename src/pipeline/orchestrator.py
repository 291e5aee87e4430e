# src/pipeline/orchestrator.py — v1
"""Screen analysis orchestrator.

Drives one run through its phases:
  RESOLVING   parse references (or accept pre-resolved artifacts)
  VALIDATING  per document: probe upstream, compare with the cache record
  FETCHING    node trees (skipped on a valid cache), expansion, comments,
              images for artifacts needing analysis
  ANALYZING   per-artifact generation, parallel or sequential
  DONE

Documents are processed one after another. A document's cache record is
written once, after all of its artifacts succeeded; any error aborts the
run before that write.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from designscan.analysis.screen_analyzer import (
    DEFAULT_SYSTEM_PROMPT,
    AnalysisOptions,
    analyze_artifact,
)
from designscan.annotations.associator import (
    associate_annotations,
    find_comment_invalidations,
)
from designscan.assets.image_fetcher import fetch_images
from designscan.cache.validator import CacheValidator
from designscan.core.geometry import assign_reading_order
from designscan.core.models import (
    AnalysisResult,
    BoundingBox,
    ExpandedNodes,
    VisualArtifact,
)
from designscan.expansion.container_expander import expand_nodes
from designscan.logging.context import (
    artifact_context,
    set_document_context,
    set_phase_context,
    set_run_context,
)
from designscan.pipeline.state import (
    ConcurrencyMode,
    DocumentOutcome,
    WorkflowPhase,
    WorkflowResult,
)
from designscan.references.resolver import build_node_url, resolve_references

if TYPE_CHECKING:
    from designscan.cache.base_cache_store import BaseCacheStore
    from designscan.cache.models import CacheValidation
    from designscan.config.settings import Settings
    from designscan.llm.base_client import BaseTextGenerator
    from designscan.upstream.base_services import (
        BaseCommentService,
        BaseContentService,
        BaseImageService,
    )
    from designscan.upstream.models import RenderedImage

logger = logging.getLogger(__name__)

Notifier = Callable[[str], Awaitable[None]]


class ScreenAnalysisOrchestrator:
    """Single entry point composing resolution, caching, association and analysis.

    Args:
        content_service: Metadata probe and node fetch.
        comment_service: Comment fetch.
        image_service: Batched image rendering.
        generator: Text generator; its parallel flag picks the concurrency mode.
        cache_store: Per-document cache.
        settings: Application settings.
        notifier: Optional async progress callback.
        system_prompt: Override for the analysis system prompt.
    """

    def __init__(
        self,
        content_service: BaseContentService,
        comment_service: BaseCommentService,
        image_service: BaseImageService,
        generator: BaseTextGenerator,
        cache_store: BaseCacheStore,
        settings: Settings,
        notifier: Notifier | None = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ) -> None:
        self._content = content_service
        self._comments = comment_service
        self._images = image_service
        self._generator = generator
        self._store = cache_store
        self._settings = settings
        self._notifier = notifier
        self._system_prompt = system_prompt
        self._validator = CacheValidator(content_service, cache_store)
        self.phase = WorkflowPhase.IDLE

    async def run(
        self,
        references: list[str] | None = None,
        artifacts: list[VisualArtifact] | None = None,
        context: str | None = None,
    ) -> WorkflowResult:
        """Analyze every artifact reachable from ``references`` or ``artifacts``.

        Args:
            references: Raw document references (URLs or ``KEY:NODE``).
            artifacts: Pre-resolved artifacts, used instead of references.
            context: Free-text context added to every analysis prompt.

        Returns:
            WorkflowResult with analyzed artifacts and per-document outcomes.

        Raises:
            ValueError: Neither or both of ``references``/``artifacts`` given.
            MalformedReferenceError: A reference could not be parsed.
            UpstreamError: A collaborator call failed.
            TextGenerationError: Analysis of an artifact failed.
        """
        if (references is None) == (artifacts is None):
            raise ValueError("Pass exactly one of references or artifacts")

        result = WorkflowResult(mode=ConcurrencyMode.for_generator(self._generator))
        set_run_context(result.run_id)
        start = time.monotonic()

        try:
            self._enter(WorkflowPhase.RESOLVING)
            if references is not None:
                work = {
                    doc: [ref.node_id for ref in refs]
                    for doc, refs in resolve_references(references).items()
                }
                preresolved: dict[str, list[VisualArtifact]] = {}
            else:
                preresolved = _group_artifacts(artifacts or [])
                work = {
                    doc: [a.artifact_id for a in items]
                    for doc, items in preresolved.items()
                }

            logger.info(
                "Run %s: %d documents, mode=%s",
                result.run_id, len(work), result.mode.value,
            )

            for document_id, node_ids in work.items():
                set_document_context(document_id)
                await self._process_document(
                    document_id,
                    node_ids,
                    preresolved.get(document_id),
                    context,
                    result,
                )
        except Exception:
            logger.exception("Run %s failed in phase %s", result.run_id, self.phase.value)
            raise
        finally:
            set_document_context(None)

        self._enter(WorkflowPhase.DONE)
        logger.info(
            "Run complete: %d artifacts (%d analyzed, %d cached) in %.1fs",
            len(result.artifacts), result.analyzed_count, result.cached_count,
            time.monotonic() - start,
        )
        return result

    # ------------------------------------------------------------------
    # Per document
    # ------------------------------------------------------------------

    async def _process_document(
        self,
        document_id: str,
        node_ids: list[str],
        preresolved: list[VisualArtifact] | None,
        context: str | None,
        result: WorkflowResult,
    ) -> None:
        outcome = DocumentOutcome(document_id=document_id)
        result.documents[document_id] = outcome

        # --- Validate ---
        self._enter(WorkflowPhase.VALIDATING)
        validation = await self._validator.validate(document_id)
        outcome.cache_valid = validation.valid
        outcome.was_invalidated = validation.was_invalidated
        outcome.upstream_timestamp = validation.metadata.upstream_timestamp
        if not validation.valid and not validation.had_record:
            # Leftovers of an unfinished run were never vouched for by a record
            await self._store.invalidate(document_id)

        # --- Fetch + expand ---
        self._enter(WorkflowPhase.FETCHING)
        nodes = await self._load_nodes(document_id, node_ids, validation)
        outcome.missing_node_ids = [n for n in node_ids if n not in nodes]
        if outcome.missing_node_ids:
            logger.warning(
                "Nodes not found in %s: %s",
                document_id, ", ".join(outcome.missing_node_ids),
            )

        if preresolved is None:
            expanded = expand_nodes(nodes, document_id, node_ids)
        else:
            expanded = _from_preresolved(preresolved, nodes)
        if not expanded.artifacts:
            logger.warning("No artifacts found in %s", document_id)

        ordered = assign_reading_order(expanded.artifacts, self._settings.row_tolerance)
        association = await associate_annotations(
            document_id,
            ordered,
            expanded.notes,
            self._comments,
            node_trees=expanded.node_trees,
            max_distance=self._settings.note_max_distance,
        )
        artifacts = association.artifacts
        result.unassociated_notes.extend(association.unassociated_notes)
        result.unassociated_comments.extend(association.unassociated_comments)

        invalidated: set[str] = set()
        if validation.valid and validation.record is not None:
            outcome.comment_invalidations = find_comment_invalidations(
                artifacts, validation.record.cached_at
            )
            invalidated = set(outcome.comment_invalidations)

        analyses: dict[str, AnalysisResult] = {}
        pending: list[VisualArtifact] = []
        for artifact in artifacts:
            cached_text = None
            if artifact.artifact_id not in invalidated:
                cached_text = await self._store.load_analysis(
                    document_id, artifact.filename_slug
                )
            if cached_text is None:
                pending.append(artifact)
            else:
                analyses[artifact.artifact_id] = AnalysisResult(
                    analysis_text=cached_text, cached=True
                )

        logger.info(
            "%s: %d artifacts, %d cached, %d to analyze",
            document_id, len(artifacts), len(analyses), len(pending),
        )

        images = await fetch_images(
            document_id,
            pending,
            self._images,
            self._store,
            fmt=self._settings.image_format,
            scale=self._settings.image_scale,
        )
        outcome.image_failures = list(images.failed)

        # --- Analyze ---
        self._enter(WorkflowPhase.ANALYZING)
        options = AnalysisOptions(
            system_prompt=self._system_prompt,
            max_tokens=self._settings.analysis_max_tokens,
            digest_max_bytes=self._settings.digest_max_bytes,
            context=context,
            total_artifacts=len(artifacts),
        )
        fresh = await self._analyze(
            pending, expanded.node_trees, images.images, options, result.mode
        )
        analyses.update(fresh)

        if not validation.valid or fresh:
            await self._validator.commit(validation)

        result.artifacts.extend(
            a.model_copy(update={"analysis": analyses.get(a.artifact_id)})
            for a in artifacts
        )
        outcome.stats = {
            "artifacts": len(artifacts),
            "analyzed": len(fresh),
            "cached": len(artifacts) - len(fresh),
            **association.stats.model_dump(),
        }

    async def _load_nodes(
        self, document_id: str, node_ids: list[str], validation: CacheValidation
    ) -> dict[str, dict[str, Any]]:
        """Node trees for ``node_ids``; a valid cache avoids the content fetch.

        Ids the content service could not resolve are cached as ``None`` so an
        unchanged document is not fetched again for them.
        """
        cached = await self._store.load_nodes(document_id) or {}
        if validation.valid and all(n in cached for n in node_ids):
            logger.info("Node trees for %s served from cache", document_id)
            return {n: cached[n] for n in node_ids if cached[n] is not None}

        to_fetch = [n for n in node_ids if n not in cached] if validation.valid else node_ids
        fetched = await self._content.fetch_nodes(document_id, to_fetch)
        resolved = {**dict.fromkeys(to_fetch), **fetched}
        merged = {**cached, **resolved} if validation.valid else resolved
        await self._store.save_nodes(document_id, merged)
        return {n: merged[n] for n in node_ids if merged.get(n) is not None}

    # ------------------------------------------------------------------
    # Analysis dispatch
    # ------------------------------------------------------------------

    async def _analyze(
        self,
        pending: list[VisualArtifact],
        node_trees: dict[str, dict[str, Any]],
        images: dict[str, RenderedImage],
        options: AnalysisOptions,
        mode: ConcurrencyMode,
    ) -> dict[str, AnalysisResult]:
        if not pending:
            return {}
        if mode is ConcurrencyMode.PARALLEL:
            return await self._analyze_parallel(pending, node_trees, images, options)
        return await self._analyze_sequential(pending, node_trees, images, options)

    async def _analyze_parallel(
        self,
        pending: list[VisualArtifact],
        node_trees: dict[str, dict[str, Any]],
        images: dict[str, RenderedImage],
        options: AnalysisOptions,
    ) -> dict[str, AnalysisResult]:
        total = len(pending)
        completed = 0

        async def run_one(artifact: VisualArtifact) -> AnalysisResult:
            nonlocal completed
            analysis = await self._analyze_one(artifact, node_trees, images, options)
            completed += 1
            await self._notify(f"Analyzed {artifact.display_name} ({completed}/{total})")
            return analysis

        tasks = [asyncio.create_task(run_one(a)) for a in pending]
        done, not_done = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)

        if not_done:
            for task in not_done:
                task.cancel()
            await asyncio.gather(*not_done, return_exceptions=True)

        for task in tasks:
            if task in done and task.exception() is not None:
                raise task.exception()

        return {a.artifact_id: t.result() for a, t in zip(pending, tasks)}

    async def _analyze_sequential(
        self,
        pending: list[VisualArtifact],
        node_trees: dict[str, dict[str, Any]],
        images: dict[str, RenderedImage],
        options: AnalysisOptions,
    ) -> dict[str, AnalysisResult]:
        results: dict[str, AnalysisResult] = {}
        for index, artifact in enumerate(pending, start=1):
            await self._notify(f"Analyzing {artifact.display_name} ({index}/{len(pending)})")
            results[artifact.artifact_id] = await self._analyze_one(
                artifact, node_trees, images, options
            )
        return results

    async def _analyze_one(
        self,
        artifact: VisualArtifact,
        node_trees: dict[str, dict[str, Any]],
        images: dict[str, RenderedImage],
        options: AnalysisOptions,
    ) -> AnalysisResult:
        with artifact_context(artifact.artifact_id):
            analysis = await analyze_artifact(
                artifact,
                node_trees.get(artifact.artifact_id),
                images.get(artifact.artifact_id),
                self._generator,
                options,
            )
            await self._store.save_analysis(
                artifact.document_id, artifact.filename_slug, analysis.analysis_text
            )
        return analysis

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _enter(self, phase: WorkflowPhase) -> None:
        self.phase = phase
        set_phase_context(phase.value)
        logger.debug("Entering phase %s", phase.value)

    async def _notify(self, message: str) -> None:
        if self._notifier is None:
            return
        try:
            await self._notifier(message)
        except Exception as e:
            logger.warning("Progress notifier failed: %s", e)


def _group_artifacts(artifacts: list[VisualArtifact]) -> dict[str, list[VisualArtifact]]:
    """Group by document, dropping duplicate (document, artifact) keys."""
    grouped: dict[str, list[VisualArtifact]] = {}
    seen: set[tuple[str, str]] = set()
    for artifact in artifacts:
        if artifact.key in seen:
            continue
        seen.add(artifact.key)
        grouped.setdefault(artifact.document_id, []).append(artifact)
    return grouped


def _from_preresolved(
    artifacts: list[VisualArtifact], nodes: dict[str, dict[str, Any]]
) -> ExpandedNodes:
    """Wrap caller-supplied artifacts with their fetched subtrees."""
    expanded = ExpandedNodes()
    for artifact in artifacts:
        node = nodes.get(artifact.artifact_id)
        update: dict[str, Any] = {"annotations": [], "analysis": None}
        if artifact.url is None:
            update["url"] = build_node_url(artifact.document_id, artifact.artifact_id)
        if node is not None:
            expanded.node_trees[artifact.artifact_id] = node
            if artifact.bounding_box is None:
                update["bounding_box"] = BoundingBox.from_node(node)
        expanded.artifacts.append(artifact.model_copy(update=update))
    return expanded
