"""Fan-out of partition engines and aggregation of their logs."""

from __future__ import annotations

import asyncio
import logging
from time import perf_counter

from ..core.config import ExtractionConfig
from ..models import PartitionLog, RunSummary
from .pagination import PageSink, PaginationEngine, RangePlanner
from .pagination.telemetry import log_run_complete
from .rest.transport import TableTransport

logger = logging.getLogger(__name__)


class Orchestrator:
    """Runs one PaginationEngine task per partition and joins them.

    Each task owns its partition state; nothing mutable is shared between
    tasks. Aggregation starts only after every task has settled. If any
    partition fails the other tasks are cancelled and the error propagates,
    there is no partial result.
    """

    def __init__(self, transport: TableTransport) -> None:
        self._transport = transport

    async def run(self, config: ExtractionConfig, sink: PageSink) -> RunSummary:
        """Extract every partition of ``config`` concurrently.

        Args:
            config: Validated run configuration
            sink: Page sink shared by all partitions; called once per
                non-empty page, pages of different partitions interleave

        Returns:
            RunSummary with partition logs in partition order
        """
        partitions = RangePlanner(config.sys_id_field).plan(config.threads)
        engine = PaginationEngine(config, self._transport)

        logger.debug(
            "Starting extraction run",
            extra={"table": config.table, "partitions": len(partitions), "query": config.query},
        )
        started = perf_counter()
        tasks = [
            asyncio.create_task(
                engine.run(partition, sink),
                name=f"{config.table}-partition-{partition.index}",
            )
            for partition in partitions
        ]
        try:
            logs: list[PartitionLog] = list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        summary = RunSummary.from_partitions(logs)
        log_run_complete(
            table=config.table,
            partitions=len(summary.partitions),
            total_rows=summary.total_rows,
            total_pages=summary.total_pages,
            total_latency_ms=(perf_counter() - started) * 1000.0,
        )
        return summary
