# src/analysis/screen_analyzer.py — v1
"""Per-artifact analysis: digest + image + annotations -> generated text.

A failing digest only drops the structure section from the prompt; a failing
generator fails the artifact.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from designscan.analysis.digest import DEFAULT_DIGEST_MAX_BYTES, generate_digest
from designscan.core.errors import TextGenerationError
from designscan.core.geometry import format_position
from designscan.core.models import AnalysisResult, VisualArtifact
from designscan.llm.models import ImageInput, TextGenerationRequest

if TYPE_CHECKING:
    from designscan.llm.base_client import BaseTextGenerator
    from designscan.upstream.models import RenderedImage

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 2000

DEFAULT_SYSTEM_PROMPT = """You are a UI/UX documentation expert. Analyze the provided Figma screen and generate clear, developer-friendly documentation.

Focus on:
1. **Purpose**: What is this screen's main function in the application?
2. **Key Components**: List the main UI elements (buttons, forms, navigation, etc.)
3. **User Interactions**: What actions can users take on this screen?
4. **States**: Any visible states (loading, error, empty, etc.)
5. **Data Display**: What information is shown to the user?

Keep the analysis concise but comprehensive. Use markdown formatting.
If annotations or notes are provided, incorporate their context into your analysis."""

_REQUEST_LINE = (
    "Please analyze this screen and provide documentation following the "
    "format in your instructions."
)


class AnalysisOptions(BaseModel):
    """Knobs for one analysis call."""

    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    max_tokens: int = DEFAULT_MAX_TOKENS
    include_image: bool = True
    digest_max_bytes: int = DEFAULT_DIGEST_MAX_BYTES
    context: str | None = None
    total_artifacts: int | None = None


def build_analysis_prompt(
    artifact: VisualArtifact,
    digest: str | None,
    context: str | None = None,
    total: int | None = None,
) -> str:
    """Compose the user prompt for one artifact."""
    parts = [f"## Screen: {artifact.display_name}"]

    if total and artifact.order_index:
        parts.append(f"**Position**: {format_position(artifact, total)}")

    if artifact.url:
        parts.append(f"**Link**: {artifact.url}")

    if artifact.container_name:
        parts.append(f"\n**Section**: {artifact.container_name}")

    if context:
        parts.append("\n### Context")
        parts.append(context)

    if artifact.annotations:
        parts.append("\n### Designer Notes")
        for annotation in artifact.annotations:
            if annotation.kind == "comment":
                prefix = f"Comment ({annotation.author})" if annotation.author else "Comment"
            else:
                prefix = "Note"
            parts.append(f"- **{prefix}**: {annotation.text_content}")

    if digest:
        parts.append("\n### UI Structure (Semantic XML)")
        parts.append("```xml")
        parts.append(digest)
        parts.append("```")

    parts.append("\n### Request")
    parts.append(_REQUEST_LINE)
    return "\n".join(parts)


def safe_digest(
    artifact: VisualArtifact, node_tree: dict[str, Any] | None, max_bytes: int
) -> str | None:
    """Digest of ``node_tree``, or None when missing or not renderable."""
    if node_tree is None:
        logger.debug("No node tree for %s, skipping digest", artifact.artifact_id)
        return None
    try:
        return generate_digest(node_tree, max_bytes=max_bytes)
    except Exception as e:
        logger.warning(
            "Digest failed for %s, continuing without it: %s", artifact.artifact_id, e
        )
        return None


async def analyze_artifact(
    artifact: VisualArtifact,
    node_tree: dict[str, Any] | None,
    image: RenderedImage | None,
    generator: BaseTextGenerator,
    options: AnalysisOptions | None = None,
) -> AnalysisResult:
    """Run one generation call for ``artifact``.

    Args:
        artifact: Artifact with annotations already attached.
        node_tree: Raw subtree used for the digest (optional).
        image: Rendered image (optional).
        generator: Text generator.
        options: Prompt and size options.

    Returns:
        Fresh AnalysisResult (``cached=False``).

    Raises:
        TextGenerationError: The generator failed.
    """
    options = options or AnalysisOptions()
    digest = safe_digest(artifact, node_tree, options.digest_max_bytes)
    prompt = build_analysis_prompt(
        artifact, digest, context=options.context, total=options.total_artifacts
    )

    images: list[ImageInput] = []
    if image is not None and options.include_image:
        images.append(
            ImageInput(
                data=image.data,
                media_type=image.media_type,
                source_id=artifact.artifact_id,
            )
        )

    request = TextGenerationRequest(
        prompt=prompt,
        system=options.system_prompt,
        images=images,
        max_tokens=options.max_tokens,
    )

    try:
        response = await generator.generate(request)
    except TextGenerationError:
        raise
    except Exception as e:
        raise TextGenerationError(artifact.artifact_id, e) from e

    logger.info(
        "Analyzed %s (%d chars)", artifact.artifact_id, len(response.text)
    )
    return AnalysisResult(analysis_text=response.text, cached=False)
