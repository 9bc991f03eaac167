"""
Sweep Agent: one sequential harvesting pass from query dispatch to persistence.
Failures are isolated per candidate and recorded in the debug trace.
"""

from datetime import datetime
from typing import List, Optional

import httpx
from openai import AsyncOpenAI

from gov_job_agent.agents.extractor_agent import get_llm_client, run_extractor_agent
from gov_job_agent.agents.search_agent import SearchFn, run_search_agent
from gov_job_agent.config import (
    CREATED_BY_AGENT,
    HTTP_TIMEOUT_SECONDS,
    JOB_DB_PATH,
    MAX_CANDIDATES_PER_SWEEP,
    RECENT_RECORDS_WINDOW,
    SIMILARITY_THRESHOLD,
    USER_AGENT,
)
from gov_job_agent.schemas.job_record import JobRecord
from gov_job_agent.schemas.search_result import SearchResult
from gov_job_agent.schemas.sweep_summary import SweepDebug, SweepSummary
from gov_job_agent.services.deep_extractor import build_extraction_context
from gov_job_agent.services.filter_service import filter_by_policy, filter_known
from gov_job_agent.services.job_store import JobStore
from gov_job_agent.services.merge_service import merge_into
from gov_job_agent.services.quality_gate import check_clarity, quality_score
from gov_job_agent.services.recent_cache import RecentRecordCache
from gov_job_agent.services.source_policy import prioritize
from gov_job_agent.services.stage_classifier import classify_stage, is_expired
from gov_job_agent.utils.helpers import host_of
from gov_job_agent.utils.logger import get_logger

logger = get_logger(__name__)

OUTCOME_INSERTED = "inserted"
OUTCOME_MERGED = "merged"
OUTCOME_SKIPPED = "skipped"


def _bump(debug: SweepDebug, key: str, n: int = 1) -> None:
    debug.counts[key] = debug.counts.get(key, 0) + n


async def _process_candidate(
    result: SearchResult,
    tier: int,
    store: JobStore,
    cache: RecentRecordCache,
    http_client: httpx.AsyncClient,
    llm_client: Optional[AsyncOpenAI],
    now: datetime,
    debug: SweepDebug,
    similarity_threshold: float,
) -> str:
    """Deep extract, extract fields, gate, classify, then merge or insert one candidate."""
    ctx = await build_extraction_context(result, client=http_client)
    for reason in ctx.skipped:
        logger.info("%s", reason)

    extraction = await run_extractor_agent(result, ctx, client=llm_client)
    if extraction.job is None:
        debug.skipped.append(f"{result.link}: {extraction.reason}")
        return OUTCOME_SKIPPED
    _bump(debug, f"extracted_{extraction.method}")
    job = extraction.job

    verdict = check_clarity(job)
    if not verdict.ok:
        debug.skipped.append(f"{result.link}: unclear ({verdict.reason})")
        return OUTCOME_SKIPPED
    _bump(debug, "passed_gate")

    stage = classify_stage(job, result.link)
    if is_expired(job, stage, today=now.date()):
        debug.skipped.append(f"{result.link}: expired {stage} notice")
        _bump(debug, "expired")
        return OUTCOME_SKIPPED

    # Extracted title, not the display title
    existing, score = cache.find_similar(job.title, threshold=similarity_threshold)
    if existing is not None:
        merged = merge_into(existing, job, stage)
        store.update_record(merged)
        store.insert_raw_post(result, job_id=merged.id)
        cache.put(merged)
        debug.merged.append(merged.id)
        logger.info("Merged %s into %s (similarity=%.2f)", result.link, merged.id, score)
        return OUTCOME_MERGED

    record = JobRecord(
        **job.model_dump(exclude={"title", "category"}),
        title=verdict.normalized_title,
        match_title=job.title,
        category=stage,
        board=job.category,
        id=store.new_record_id(verdict.normalized_title, result.link),
        post_date=now.date().isoformat(),
        is_active=False,
        source_url=result.link,
        source_domain=host_of(result.link),
        created_by=CREATED_BY_AGENT,
        quality_score=quality_score(job, result.link),
    )
    outcome = store.insert_record(record)
    if outcome.partial:
        logger.warning("Record %s stored without metadata: %s", record.id, outcome.metadata_error)
    store.insert_raw_post(result, job_id=record.id)
    cache.put(record)
    debug.inserted.append(record.id)
    logger.info("Inserted %s (tier=%s, stage=%s, via %s)", record.id, tier, stage, extraction.method)
    return OUTCOME_INSERTED


async def run_sweep(
    store: Optional[JobStore] = None,
    search_fn: Optional[SearchFn] = None,
    llm_client: Optional[AsyncOpenAI] = None,
    now: Optional[datetime] = None,
    queries: Optional[List[str]] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    max_candidates: int = MAX_CANDIDATES_PER_SWEEP,
    similarity_threshold: float = SIMILARITY_THRESHOLD,
) -> SweepSummary:
    """
    Run one sweep. Collaborators default to the configured store, SerpAPI search,
    OpenAI client and a shared httpx client; each can be injected.
    Returns success=False only when an exception escapes the sweep loop itself.
    """
    now = now or datetime.now()
    debug = SweepDebug()
    owns_store = store is None
    owns_http = http_client is None
    added = merged = 0
    try:
        if store is None:
            store = JobStore(JOB_DB_PATH)
        if llm_client is None:
            llm_client = get_llm_client()
        if http_client is None:
            http_client = httpx.AsyncClient(
                timeout=HTTP_TIMEOUT_SECONDS,
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT},
            )

        results = await run_search_agent(queries=queries, search_fn=search_fn, issued=debug.queries)
        debug.counts["searched"] = len(results)

        fresh, reasons = filter_known(results, store)
        debug.skipped.extend(reasons)
        debug.counts["new"] = len(fresh)

        ordered = prioritize(fresh)
        tiers = {id(r): tier for r, tier in ordered}
        allowed, reasons = filter_by_policy([r for r, _ in ordered])
        debug.skipped.extend(reasons)
        debug.counts["allowed"] = len(allowed)

        candidates = allowed[:max_candidates]
        for r in allowed[max_candidates:]:
            debug.skipped.append(f"{r.link}: over per-sweep candidate budget")
        debug.counts["candidates"] = len(candidates)

        cache = RecentRecordCache.load(store, RECENT_RECORDS_WINDOW)
        for result in candidates:
            try:
                outcome = await _process_candidate(
                    result,
                    tiers.get(id(result), 3),
                    store,
                    cache,
                    http_client,
                    llm_client,
                    now,
                    debug,
                    similarity_threshold,
                )
            except Exception as e:
                logger.exception("Candidate %s failed: %s", result.link, e)
                debug.skipped.append(f"{result.link}: error {type(e).__name__}: {e}")
                continue
            if outcome == OUTCOME_INSERTED:
                added += 1
            elif outcome == OUTCOME_MERGED:
                merged += 1

        debug.counts["inserted"] = added
        debug.counts["merged"] = merged
        message = f"Sweep complete: {added} added, {merged} merged, {len(debug.skipped)} skipped"
        logger.info(message)
        return SweepSummary(success=True, message=message, jobs_added=added, jobs_merged=merged, debug=debug)
    except Exception as e:
        logger.exception("Sweep aborted: %s", e)
        return SweepSummary(
            success=False,
            message=f"Sweep failed: {e}",
            jobs_added=added,
            jobs_merged=merged,
            debug=debug,
        )
    finally:
        if owns_http and http_client is not None:
            await http_client.aclose()
        if owns_store and store is not None:
            store.close()
