"""Fetch orchestrator wiring manifest → fetch → parse → merge."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Sequence

import structlog

from .config import CatalogConfig, ManifestEntry, ManifestError, parse_manifest
from .engine import DocumentParser, DocumentType, Fetcher, Preset, PresetBuilder, compact, merge
from .logging_conf import configure_logging


@dataclass(slots=True)
class DocumentJob:
    """One retrieval scheduled for a manifest position."""

    index: int
    document_type: DocumentType
    reference: str


@dataclass(slots=True)
class DocumentOutcome:
    job: DocumentJob
    text: str | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Orchestrator:
    """Central coordinator for one catalog load cycle.

    All document retrievals run concurrently; a failed document is logged and
    dropped without affecting the others.
    """

    def __init__(
        self,
        config: CatalogConfig,
        fetcher: Fetcher,
        parser: DocumentParser | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.fetcher = fetcher
        self.logger = logger or configure_logging().bind(component="orchestrator")
        self.parser = parser or DocumentParser(logger=self.logger)
        self.summary: dict[str, int] = {"success": 0, "failed": 0}

    # ------------------------------------------------------------------
    async def load_catalog(self) -> list[Preset | None]:
        manifest = await self.fetch_manifest()
        return await self.ingest(manifest)

    async def fetch_manifest(self) -> list[ManifestEntry]:
        try:
            text = await self.fetcher.fetch_text(self.config.manifest_name)
        except RuntimeError as exc:
            raise ManifestError(f"Could not retrieve manifest {self.config.manifest_name}: {exc}") from exc
        return parse_manifest(text)

    async def ingest(self, manifest: Sequence[ManifestEntry]) -> list[Preset | None]:
        """Retrieve every referenced document and merge them per manifest index.

        Returns once every retrieval has settled. Indices whose documents all
        failed (or that reference none) are dropped unless ``keep_gaps`` is set.
        """

        jobs = [
            DocumentJob(index=index, document_type=document_type, reference=reference)
            for index, entry in enumerate(manifest)
            for document_type, reference in entry.documents()
        ]
        summary = {"success": 0, "failed": 0}
        builders: dict[int, PresetBuilder] = {}

        tasks = [asyncio.ensure_future(self._retrieve(job)) for job in jobs]
        for next_done in asyncio.as_completed(tasks):
            outcome = await next_done
            job = outcome.job
            if not outcome.ok:
                summary["failed"] += 1
                self.logger.error(
                    "document_failed",
                    index=job.index,
                    document_type=job.document_type,
                    reference=job.reference,
                    error=str(outcome.error),
                    cause=repr(outcome.error.__cause__) if outcome.error.__cause__ is not None else None,
                )
                continue
            summary["success"] += 1
            merge(job.index, job.document_type, job.reference, self.parser.parse(outcome.text or ""), builders)
            self.logger.debug(
                "document_merged",
                index=job.index,
                document_type=job.document_type,
                reference=job.reference,
            )

        self.summary = summary
        presets = compact(builders, len(manifest), keep_gaps=self.config.keep_gaps)
        self.logger.info(
            "ingest_complete",
            documents=len(jobs),
            succeeded=summary["success"],
            failed=summary["failed"],
            presets=sum(1 for preset in presets if preset is not None),
        )
        return presets

    async def _retrieve(self, job: DocumentJob) -> DocumentOutcome:
        try:
            text = await self.fetcher.fetch_text(job.reference)
        except Exception as exc:  # noqa: BLE001
            return DocumentOutcome(job=job, error=exc)
        return DocumentOutcome(job=job, text=text)

    async def last_updated(self) -> str | None:
        """Return the catalog's latest commit time as ``YYYY-MM-DD HH:MM:SS``."""

        url = self.config.commits_api_url
        if not url:
            return None
        try:
            response = await self.fetcher.fetch_text(url)
            commits = json.loads(response)
            stamp = commits[0]["commit"]["committer"]["date"]
        except (RuntimeError, ValueError, LookupError, TypeError) as exc:
            self.logger.warning("last_updated_failed", url=url, error=str(exc))
            return None
        return str(stamp)[:19].replace("T", " ")


__all__ = ["DocumentJob", "DocumentOutcome", "Orchestrator"]
