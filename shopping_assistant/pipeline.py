"""Aggregation pipeline from a shopping message to a compact product list.

Role:
    Owns the PipelineContext contract and the ordered steps run for each chat request.

Step contracts:
    Term Extraction:
        Sends the fixed system instruction plus the user message to the LLM and parses
        the answer into search_terms (never empty) and an optional assistant_reply.
    Catalog Fan-out:
        Searches every term concurrently; term_results keeps term order, not completion
        order. A failing term contributes an empty result.
    Best Candidate / Flatten:
        Exactly one of the two runs, chosen by Settings.selection_mode. "best" keeps at
        most one in-stock record per term; "flatten" keeps every record.
    Normalization:
        Maps records to Product, dropping records without items.
    Deduplication:
        Unique by product id, first position and last values.
    Reply:
        Uses the model's reply, or the configured template listing the terms.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from .candidate_selector import select_best
from .catalog_client import CatalogSearchResult
from .catalog_records import CatalogRecord
from .config import SELECTION_MODE_FLATTEN, Settings
from .deduplicator import dedupe
from .errors import InvalidRequestError, UpstreamLLMError
from .product_normalizer import Product, ProductNormalizer
from .response_parser import ExtractionResult, parse_extraction
from .step_runner import PipelineStep, StepRunner

logger = logging.getLogger("shopping_assistant.pipeline")


class CompletionClient(Protocol):
    def complete(self, system_instruction: str, message: str) -> str: ...


class CatalogSearcher(Protocol):
    async def search(
        self, term: str, account: Optional[str] = None, limit: Optional[int] = None
    ) -> CatalogSearchResult: ...


@dataclass(frozen=True)
class PipelineResponse:
    """Terminal result of one run: reply text plus products unique by id."""
    reply: str
    products: List[Product]


@dataclass
class PipelineContext:
    """Mutable context passed through each pipeline step."""
    request_id: str
    message: str
    extraction: Optional[ExtractionResult] = None
    term_results: List[CatalogSearchResult] = field(default_factory=list)
    records: List[CatalogRecord] = field(default_factory=list)
    products: List[Product] = field(default_factory=list)
    reply: str = ""

    @property
    def terms(self) -> List[str]:
        return list(self.extraction.search_terms) if self.extraction else []


class AggregationPipeline:
    def __init__(
        self,
        llm: CompletionClient,
        catalog: CatalogSearcher,
        normalizer: ProductNormalizer,
        settings: Settings,
        system_instruction: str,
    ) -> None:
        """Purpose: Wire collaborators and build the ordered step runner.
        Inputs/Outputs: Inputs are the LLM client, catalog client, normalizer, settings
            and the rendered system instruction; no return value.
        Side Effects / State: Constructs a StepRunner with the pipeline steps.
        Dependencies: StepRunner/PipelineStep and the step methods on this class.
        Failure Modes: None at init; runtime errors surface from run().
        If Removed: The chat endpoint has nothing to execute.
        Testing Notes: Instantiate with fakes and verify the step order.
        """
        # Store collaborators; selection and flattening are mutually exclusive steps.
        self._llm = llm
        self._catalog = catalog
        self._normalizer = normalizer
        self._settings = settings
        self._system_instruction = system_instruction
        flatten = settings.selection_mode == SELECTION_MODE_FLATTEN
        self._runner: StepRunner[PipelineContext] = StepRunner(
            [
                PipelineStep("term_extraction", self._step_term_extraction),
                PipelineStep("catalog_fan_out", self._step_catalog_fan_out),
                PipelineStep("best_candidate", self._step_best_candidate, skip_if=lambda _: flatten),
                PipelineStep("flatten_results", self._step_flatten_results, skip_if=lambda _: not flatten),
                PipelineStep("normalization", self._step_normalization),
                PipelineStep("deduplication", self._step_deduplication),
                PipelineStep("reply", self._step_reply),
            ]
        )

    @property
    def step_names(self) -> List[str]:
        return self._runner.step_names

    async def run(self, message: str) -> PipelineResponse:
        """Purpose: Run the full pipeline for one user message.
        Inputs/Outputs: Input is the raw message; output is a PipelineResponse.
        Side Effects / State: One LLM call and one catalog request per term; logging.
        Dependencies: StepRunner.run and the steps registered in __init__.
        Failure Modes: InvalidRequestError for a blank message (no backend calls);
            UpstreamLLMError when the completion fails. Search and record failures
            only shrink the product list.
        If Removed: The chat endpoint cannot produce products.
        Testing Notes: Fake the LLM and catalog; check partial results on term failure.
        """
        # Reject blank input before touching any backend.
        if not message or not message.strip():
            raise InvalidRequestError("message must not be empty")
        context = PipelineContext(request_id=uuid.uuid4().hex[:12], message=message.strip())
        logger.info("request=%s message=%r", context.request_id, context.message)
        await self._runner.run(context, request_id=context.request_id)
        logger.info(
            "request=%s terms=%s products=%s",
            context.request_id,
            context.terms,
            len(context.products),
        )
        return PipelineResponse(reply=context.reply, products=context.products)

    async def _step_term_extraction(self, context: PipelineContext) -> None:
        """Purpose: Ask the LLM for search terms and parse its answer.
        Inputs/Outputs: Input is PipelineContext; sets context.extraction.
        Side Effects / State: One blocking SDK call moved to a worker thread.
        Dependencies: CompletionClient.complete, parse_extraction.
        Failure Modes: Any completion failure is raised as UpstreamLLMError.
        If Removed: No terms are available for the catalog fan-out.
        Testing Notes: A raising fake LLM must fail the whole run.
        """
        # The SDK is synchronous, so keep the event loop free while it runs.
        try:
            raw = await asyncio.to_thread(self._llm.complete, self._system_instruction, context.message)
        except UpstreamLLMError:
            raise
        except Exception as exc:
            raise UpstreamLLMError(f"LLM completion failed: {exc.__class__.__name__}") from exc
        logger.debug("request=%s llm_raw=%r", context.request_id, raw)
        context.extraction = parse_extraction(raw, context.message)
        logger.info(
            "request=%s step=term_extraction terms=%s has_reply=%s",
            context.request_id,
            context.terms,
            bool(context.extraction.assistant_reply),
        )

    async def _step_catalog_fan_out(self, context: PipelineContext) -> None:
        # gather returns results in argument order regardless of completion order.
        searches = [
            self._catalog.search(term, limit=self._settings.results_per_term) for term in context.terms
        ]
        context.term_results = list(await asyncio.gather(*searches))
        failed = [result.term for result in context.term_results if not result.ok]
        logger.info(
            "request=%s step=catalog_fan_out searched=%s failed=%s",
            context.request_id,
            len(context.term_results),
            failed,
        )

    async def _step_best_candidate(self, context: PipelineContext) -> None:
        records: List[CatalogRecord] = []
        for result in context.term_results:
            best = select_best(result.records, self._settings.preferred_brand)
            if best is None:
                logger.debug("request=%s term=%r no_in_stock_candidate", context.request_id, result.term)
                continue
            records.append(best)
        context.records = records

    async def _step_flatten_results(self, context: PipelineContext) -> None:
        context.records = [record for result in context.term_results for record in result.records]

    async def _step_normalization(self, context: PipelineContext) -> None:
        products = [self._normalizer.normalize(record) for record in context.records]
        context.products = [product for product in products if product is not None]

    async def _step_deduplication(self, context: PipelineContext) -> None:
        context.products = dedupe(context.products)

    async def _step_reply(self, context: PipelineContext) -> None:
        reply = context.extraction.assistant_reply if context.extraction else None
        if reply:
            context.reply = reply
            return
        context.reply = self._settings.reply_template.format(terms=", ".join(context.terms))
