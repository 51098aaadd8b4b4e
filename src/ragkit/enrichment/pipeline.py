"""Batched, best-effort metadata enrichment over a vector store.

Every pass follows the same loop:

1. Iterate the store in batches; each batch is fully processed before
   the next one is requested.
2. Compute zero or one metadata delta per record. Each record counts as
   processed and as exactly one of updated / skipped.
3. Write the batch's deltas with a single update_metadata() call.

Data-level failures never escape a pass. A record whose strategy fails
is skipped and the failure is appended to ``stats.errors``; a rejected
batch write is recorded, its updates count as skipped, and the next
batch proceeds. Only misconfiguration (an invalid filter, a vertical
config naming no strategy or several) raises to the caller.

Usage:
    pipeline = EnrichmentPipeline(store)
    stats = await pipeline.enrich_all(
        "docs",
        EnrichAllConfig(
            vertical=FieldMappingConfig(mapping={"tech": "technology"}),
            themes=ThemeEnrichmentConfig(themes=themes, classifier=classifier),
            sections=SectionEnrichmentConfig(auto_detect=True),
        ),
    )
"""

from __future__ import annotations

import inspect
import time
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import structlog

from src.ragkit.config import RagkitSettings
from src.ragkit.enrichment.classifiers.base import ThemeClassification
from src.ragkit.enrichment.sections import (
    SectionInfo,
    detect_section,
    extract_section_from_path,
)
from src.ragkit.enrichment.types import (
    AutomaticExtraction,
    EnrichAllConfig,
    EnrichmentStats,
    ExtractorConfig,
    FieldMappingConfig,
    SectionEnrichmentConfig,
    ThemeEnrichmentConfig,
    VerticalEnrichmentConfig,
    parse_vertical_config,
)
from src.ragkit.exceptions import ConfigurationError, ExtractionError, StoreWriteError
from src.ragkit.filters import UniversalFilter, normalize_filter
from src.ragkit.metadata import VERTICAL_LABEL_FIELD, HorizontalFields
from src.ragkit.models import MetadataUpdate, VectorRecord
from src.ragkit.stores.base import VectorStore

logger = structlog.get_logger(__name__)

DEFAULT_VERTICAL_PROMPT = (
    "Classify the following text into one of these categories: {fields}\n\n"
    "Text: {text}\n\nCategory:"
)

RecordDelta = Callable[[VectorRecord], Awaitable[dict[str, Any] | None]]


class EnrichmentPipeline:
    """Applies vertical, theme, and section enrichment to a collection.

    Writes only metadata deltas; vectors are never re-embedded or
    re-uploaded.

    Args:
        store: Vector store collaborator providing iterate() and
            update_metadata().
        settings: Supplies default batch sizes and confidence threshold.
    """

    def __init__(self, store: VectorStore, settings: RagkitSettings | None = None) -> None:
        self._store = store
        self._settings = settings or RagkitSettings()

    # ── Vertical ────────────────────────────────────────────────────────────

    async def enrich_vertical(
        self,
        collection: str,
        config: VerticalEnrichmentConfig | Mapping[str, Any],
    ) -> EnrichmentStats:
        """Label each record with a coarse category under ``vertical``.

        Args:
            collection: Collection to enrich.
            config: Exactly one strategy: field mapping, custom
                extractor, or automatic LLM labeling. Plain mappings are
                parsed with parse_vertical_config().

        Returns:
            Pass statistics.

        Raises:
            ConfigurationError: If the config names zero or several
                strategies, or its filter is invalid.
        """
        config = parse_vertical_config(config)

        if isinstance(config, FieldMappingConfig):
            strategy = "mapping"
            delta = self._mapping_delta(config)
            error_template = "Error mapping record {id}: {error}"
            default_batch = self._settings.enrichment_batch_size
        elif isinstance(config, ExtractorConfig):
            strategy = "extractor"
            delta = self._extractor_delta(config)
            error_template = "{error}"
            default_batch = self._settings.enrichment_batch_size
        else:
            strategy = "automatic"
            delta = self._llm_delta(config.automatic)
            error_template = "LLM extraction error for record {id}: {error}"
            default_batch = self._settings.llm_enrichment_batch_size

        return await self._run_pass(
            "vertical",
            collection,
            config,
            default_batch,
            lambda batch, stats: self._per_record(batch, stats, delta, error_template),
            strategy=strategy,
        )

    def _mapping_delta(self, config: FieldMappingConfig) -> RecordDelta:
        async def delta(record: VectorRecord) -> dict[str, Any] | None:
            value = record.metadata.get(config.field)
            if isinstance(value, str) and value in config.mapping:
                return _vertical_delta(config.mapping[value])
            return None

        return delta

    def _extractor_delta(self, config: ExtractorConfig) -> RecordDelta:
        async def delta(record: VectorRecord) -> dict[str, Any] | None:
            try:
                label = config.extractor(record)
                if inspect.isawaitable(label):
                    label = await label
            except Exception as exc:
                raise ExtractionError(record.id, str(exc)) from exc
            return _vertical_delta(label)

        return delta

    def _llm_delta(self, automatic: AutomaticExtraction) -> RecordDelta:
        fields = ", ".join(automatic.fields)

        async def delta(record: VectorRecord) -> dict[str, Any] | None:
            text = record.metadata.get(automatic.text_field)
            if not text or not isinstance(text, str):
                raise ValueError(f"No text found in field '{automatic.text_field}'")

            template = automatic.prompt_template or DEFAULT_VERTICAL_PROMPT
            prompt = template.replace("{fields}", fields).replace("{text}", text)
            label = await automatic.llm.generate(prompt)
            return _vertical_delta(label.strip())

        return delta

    # ── Themes ──────────────────────────────────────────────────────────────

    async def enrich_themes(
        self,
        collection: str,
        config: ThemeEnrichmentConfig | Mapping[str, Any],
    ) -> EnrichmentStats:
        """Classify each record's text and write its theme.

        Writes ``__h_theme`` and ``__h_theme_confidence``, plus
        ``__h_themes`` in multi-theme mode. Records without text or
        below the confidence threshold are skipped and left untouched.
        """
        if not isinstance(config, ThemeEnrichmentConfig):
            config = ThemeEnrichmentConfig.model_validate(dict(config))

        async def process(
            batch: list[VectorRecord], stats: EnrichmentStats
        ) -> list[MetadataUpdate]:
            return await self._classify_batch(batch, stats, config)

        return await self._run_pass(
            "themes",
            collection,
            config,
            self._settings.enrichment_batch_size,
            process,
            on_progress=config.on_progress,
        )

    async def _classify_batch(
        self,
        batch: list[VectorRecord],
        stats: EnrichmentStats,
        config: ThemeEnrichmentConfig,
    ) -> list[MetadataUpdate]:
        texts: list[str] = []
        records: list[VectorRecord] = []

        for record in batch:
            stats.records_processed += 1
            text = record.text or record.metadata.get(config.text_field)
            if not isinstance(text, str) or not text.strip():
                stats.records_skipped += 1
                continue
            texts.append(text)
            records.append(record)

        if not texts:
            return []

        threshold = (
            config.confidence_threshold
            if config.confidence_threshold is not None
            else self._settings.confidence_threshold
        )
        classifications = await self._classify_texts(texts, records, stats, config)

        updates: list[MetadataUpdate] = []
        for record, classification in zip(records, classifications, strict=True):
            if not isinstance(classification, ThemeClassification):
                stats.records_skipped += 1
                stats.errors.append(f"Invalid classification for record {record.id}")
                continue

            if classification.confidence < threshold:
                stats.records_skipped += 1
                continue

            metadata: dict[str, Any] = {
                HorizontalFields.THEME: classification.theme,
                HorizontalFields.THEME_CONFIDENCE: classification.confidence,
            }
            if config.multi_theme and classification.all_scores:
                ranked = sorted(
                    (
                        (theme, score)
                        for theme, score in classification.all_scores.items()
                        if score >= threshold
                    ),
                    key=lambda item: item[1],
                    reverse=True,
                )
                if ranked:
                    metadata[HorizontalFields.THEMES] = [theme for theme, _ in ranked]

            updates.append(MetadataUpdate(id=record.id, metadata=metadata))

        return updates

    async def _classify_texts(
        self,
        texts: list[str],
        records: list[VectorRecord],
        stats: EnrichmentStats,
        config: ThemeEnrichmentConfig,
    ) -> list[ThemeClassification | None]:
        """Batch-classify, falling back to one-by-one when the batch call fails."""
        try:
            results = await config.classifier.classify_batch(texts)
            if len(results) != len(texts):
                raise ValueError(
                    f"classifier returned {len(results)} results for {len(texts)} texts"
                )
            return list(results)
        except Exception as exc:
            logger.warning(
                "theme_batch_classification_failed", error=str(exc), batch_size=len(texts)
            )
            stats.errors.append(
                f"Batch classification error, falling back to individual classification: {exc}"
            )

        results: list[ThemeClassification | None] = []
        for text, record in zip(texts, records, strict=True):
            try:
                results.append(await config.classifier.classify(text))
            except Exception as exc:
                logger.warning("theme_classification_failed", record_id=record.id, error=str(exc))
                results.append(None)
                stats.errors.append(f"Classification error for record {record.id}: {exc}")
        return results

    # ── Sections ────────────────────────────────────────────────────────────

    async def enrich_sections(
        self,
        collection: str,
        config: SectionEnrichmentConfig | Mapping[str, Any],
    ) -> EnrichmentStats:
        """Write section level, title, and (for path fields) path."""
        if not isinstance(config, SectionEnrichmentConfig):
            config = SectionEnrichmentConfig.model_validate(dict(config))

        async def delta(record: VectorRecord) -> dict[str, Any] | None:
            section: SectionInfo | None = None
            if config.existing_field:
                section = extract_section_from_path(record.metadata.get(config.existing_field))
            elif config.auto_detect:
                text = record.text or record.metadata.get("content") or ""
                if isinstance(text, str):
                    section = detect_section(text)
            return section.to_metadata() if section is not None else None

        return await self._run_pass(
            "sections",
            collection,
            config,
            self._settings.enrichment_batch_size,
            lambda batch, stats: self._per_record(
                batch, stats, delta, "Error processing record {id}: {error}"
            ),
        )

    # ── Run all ─────────────────────────────────────────────────────────────

    async def enrich_all(
        self,
        collection: str,
        config: EnrichAllConfig | Mapping[str, Any],
    ) -> EnrichmentStats:
        """Run vertical, theme, and section passes in that order.

        Only configured passes run. The returned stats sum the per-pass
        counters, so records_processed counts a record once per pass.
        """
        if not isinstance(config, EnrichAllConfig):
            data = dict(config)
            # Resolve the vertical variant first so a bad strategy surfaces
            # as ConfigurationError rather than a pydantic ValidationError
            if data.get("vertical") is not None:
                data["vertical"] = parse_vertical_config(data["vertical"])
            config = EnrichAllConfig.model_validate(data)

        start = time.monotonic()
        aggregate = EnrichmentStats()

        passes: list[tuple[Any, Callable[..., Awaitable[EnrichmentStats]]]] = [
            (config.vertical, self.enrich_vertical),
            (config.themes, self.enrich_themes),
            (config.sections, self.enrich_sections),
        ]
        for sub_config, run in passes:
            if sub_config is None:
                continue
            stats = await run(collection, _inherit_global(sub_config, config))
            aggregate.merge(stats)
            if config.on_progress is not None:
                config.on_progress(aggregate.model_copy(deep=True))

        aggregate.time_ms = _elapsed_ms(start)
        logger.info(
            "enrichment_all_complete",
            collection=collection,
            records_processed=aggregate.records_processed,
            records_updated=aggregate.records_updated,
            records_skipped=aggregate.records_skipped,
            errors=len(aggregate.errors),
            time_ms=aggregate.time_ms,
        )
        return aggregate

    # ── Shared batch loop ───────────────────────────────────────────────────

    async def _run_pass(
        self,
        name: str,
        collection: str,
        config: Any,
        default_batch_size: int,
        process: Callable[[list[VectorRecord], EnrichmentStats], Awaitable[list[MetadataUpdate]]],
        on_progress: Callable[[EnrichmentStats], None] | None = None,
        **log_context: Any,
    ) -> EnrichmentStats:
        filter_: UniversalFilter | None = normalize_filter(config.filter)
        batch_size = config.batch_size or default_batch_size

        start = time.monotonic()
        stats = EnrichmentStats()
        log = logger.bind(
            enrichment=name, collection=collection, batch_size=batch_size, **log_context
        )

        try:
            async for batch in self._store.iterate(
                collection, filter=filter_, batch_size=batch_size
            ):
                updates = await process(batch, stats)
                await self._write_batch(collection, updates, stats)
                if on_progress is not None:
                    on_progress(stats.model_copy(deep=True))
        except ConfigurationError:
            raise
        except Exception as exc:
            log.error("enrichment_pass_failed", error=str(exc))
            stats.errors.append(f"Pipeline error: {exc}")

        stats.time_ms = _elapsed_ms(start)
        log.info(
            "enrichment_pass_complete",
            records_processed=stats.records_processed,
            records_updated=stats.records_updated,
            records_skipped=stats.records_skipped,
            errors=len(stats.errors),
            time_ms=stats.time_ms,
        )
        return stats

    async def _per_record(
        self,
        batch: list[VectorRecord],
        stats: EnrichmentStats,
        delta: RecordDelta,
        error_template: str,
    ) -> list[MetadataUpdate]:
        updates: list[MetadataUpdate] = []
        for record in batch:
            stats.records_processed += 1
            try:
                metadata = await delta(record)
            except Exception as exc:
                stats.records_skipped += 1
                stats.errors.append(error_template.format(id=record.id, error=exc))
                logger.warning("enrichment_record_failed", record_id=record.id, error=str(exc))
                continue

            if metadata:
                updates.append(MetadataUpdate(id=record.id, metadata=metadata))
            else:
                stats.records_skipped += 1
        return updates

    async def _write_batch(
        self,
        collection: str,
        updates: list[MetadataUpdate],
        stats: EnrichmentStats,
    ) -> None:
        if not updates:
            return
        try:
            await self._store.update_metadata(collection, updates)
        except Exception as exc:
            error = StoreWriteError(collection, len(updates), str(exc))
            error.__cause__ = exc
            logger.error(
                "metadata_batch_write_failed",
                collection=collection,
                update_count=len(updates),
                error=str(exc),
            )
            stats.records_skipped += len(updates)
            stats.errors.append(str(error))
            return
        stats.records_updated += len(updates)


def _vertical_delta(label: Any) -> dict[str, Any] | None:
    if not label:
        return None
    return {VERTICAL_LABEL_FIELD: label}


def _inherit_global(sub_config: Any, global_config: EnrichAllConfig) -> Any:
    """Copy a sub-pass config, filling unset filter/batch_size from the global config."""
    update: dict[str, Any] = {}
    if sub_config.filter is None and global_config.filter is not None:
        update["filter"] = global_config.filter
    if sub_config.batch_size is None and global_config.batch_size is not None:
        update["batch_size"] = global_config.batch_size
    return sub_config.model_copy(update=update) if update else sub_config


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
