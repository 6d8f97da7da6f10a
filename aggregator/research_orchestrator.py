"""
Multi-Source Orchestrator
Fan out every source resolver concurrently and merge the results into one
research result with coverage, gaps and totals
"""
import asyncio
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from config.settings import ResearchSettings
from models import LearningRequest, Level, ResearchResult, SourceResult, SourceType
from resolvers.base import SourceResolver
from utils.exceptions import SourceExhausted

from .coverage import compute_coverage, compute_totals, identify_gaps
from .learning_path import rank_and_order_videos


logger = logging.getLogger(__name__)
console = Console()


class MultiSourceOrchestrator:
    """
    Research orchestrator.

    One resolver failing (timeout, upstream error, exhausted video chain)
    yields an empty source plus an entry in ``source_errors``; ``research``
    itself does not raise for resolver failures.
    """

    def __init__(
        self,
        resolvers: Sequence[SourceResolver],
        settings: Optional[ResearchSettings] = None,
        verifier: Optional[Any] = None,
    ):
        self.resolvers = list(resolvers)
        self.settings = settings or ResearchSettings()
        self.source_timeout_sec = max(1.0, float(self.settings.source_timeout_sec))
        self.verifier = verifier if self.settings.verify_resources else None

    def timeout_for(self, resolver: SourceResolver) -> float:
        """Per-source timeout, widened to the resolver's own budget when it declares one"""
        return max(self.source_timeout_sec, resolver.time_budget_sec or 0.0)

    async def _run_source_task(self, resolver: SourceResolver, request: LearningRequest):
        timeout = self.timeout_for(resolver)
        try:
            return await asyncio.wait_for(resolver.resolve(request), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[{resolver.name}] timed out after {timeout}s")
            return asyncio.TimeoutError(f"timed out after {timeout}s")
        except Exception as exc:
            return exc

    async def _gather(self, request: LearningRequest) -> List[Any]:
        tasks = [self._run_source_task(resolver, request) for resolver in self.resolvers]
        if not self.settings.show_progress:
            return await asyncio.gather(*tasks)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task(f"[cyan]Researching {len(tasks)} sources...", total=None)
            results = await asyncio.gather(*tasks)
            progress.update(task, completed=True)
        return results

    def _merge(self, results: List[Any]) -> Tuple[Dict[SourceType, SourceResult], Dict[str, str]]:
        sources: Dict[SourceType, SourceResult] = {
            source_type: SourceResult(source_type=source_type) for source_type in SourceType
        }
        errors: Dict[str, str] = {}

        for resolver, res in zip(self.resolvers, results):
            if isinstance(res, SourceExhausted):
                logger.warning(f"[{resolver.name}] exhausted: {res.message} (tiers: {', '.join(res.tiers_tried)})")
                errors[resolver.name] = res.message
            elif isinstance(res, BaseException):
                logger.error(f"Error fetching from {resolver.name}: {res}")
                errors[resolver.name] = str(res) or type(res).__name__
            else:
                sources[res.source_type] = res
        return sources, errors

    async def _verify(self, sources: Dict[SourceType, SourceResult]) -> Dict[SourceType, SourceResult]:
        if self.verifier is None:
            return sources
        try:
            return await self.verifier.verify_result(sources)
        except Exception as exc:
            logger.error(f"Resource verification failed, keeping unverified results: {exc}")
            return sources

    def _order_videos(self, sources: Dict[SourceType, SourceResult], level: Level) -> Dict[SourceType, SourceResult]:
        current = sources.get(SourceType.VIDEO)
        videos = current.candidates if current else []
        if not videos:
            return sources
        ordered = dict(sources)
        ordered[SourceType.VIDEO] = SourceResult(
            source_type=SourceType.VIDEO,
            candidates=rank_and_order_videos(videos, level),
        )
        return ordered

    async def research(self, request: LearningRequest) -> ResearchResult:
        """
        Run all resolvers for the request.

        Args:
            request: a request that already passed safety screening

        Returns:
            ResearchResult with every source type present (possibly empty)
        """
        logger.info(f"Researching '{request.topic}' ({request.level.value}) across {len(self.resolvers)} sources")

        results = await self._gather(request)
        sources, errors = self._merge(results)
        sources = await self._verify(sources)
        if self.settings.order_videos:
            sources = self._order_videos(sources, request.level)

        coverage = compute_coverage(sources)
        gaps = identify_gaps(sources, coverage, request.topic)
        total_cost, estimated_hours = compute_totals(sources)

        result = ResearchResult(
            request=request,
            sources=sources,
            coverage=coverage,
            gaps=gaps,
            source_errors=errors,
            total_cost=total_cost,
            estimated_hours=estimated_hours,
        )
        logger.info(
            f"Research complete: {result.total_count} resources, "
            f"coverage {coverage.overall}%, {len(gaps)} gaps, {len(errors)} failed sources"
        )
        if self.settings.show_progress:
            print_summary(result)
        return result

    async def close(self):
        for resolver in self.resolvers:
            await resolver.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


def print_summary(result: ResearchResult, target: Optional[Console] = None):
    """Render per-source counts, coverage and failures as a Rich table."""
    out = target or console
    out.print()

    table = Table(title="📊 Research Summary", show_header=True)
    table.add_column("Source", style="cyan")
    table.add_column("Count", justify="right", style="green")
    table.add_column("Status", style="magenta")

    for source_type in SourceType:
        count = len(result.candidates(source_type))
        error = result.source_errors.get(source_type.value)
        table.add_row(source_type.value, str(count), f"[red]{error}[/red]" if error else "ok")

    table.add_row("", "", "")
    table.add_row("[bold]Total[/bold]", f"[bold]{result.total_count}[/bold]", "")
    table.add_row("Coverage", f"{result.coverage.overall}%", f"{len(result.gaps)} gaps")

    out.print(table)
    out.print()
