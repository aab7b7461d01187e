"""Running a task across many nodes in parallel."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

from xops.models import Node

Task = Callable[[Node], None]


@dataclass
class Result:
    """Outcome of running a task on one node; ``error`` is None on success."""

    host: Node
    error: BaseException | None = None


def _run_one(task: Task, host: Node) -> Result:
    try:
        task(host)
    except Exception as exc:
        return Result(host=host, error=exc)
    return Result(host=host)


def run_parallel(hosts: Iterable[Node], concurrency: int, task: Task) -> Iterator[Result]:
    """Start ``task`` on every host with at most ``concurrency`` running at once.

    Work begins immediately; results are yielded in completion order.
    A concurrency of 0 runs all hosts at once.
    """
    hosts = list(hosts)
    if not hosts:
        return iter(())
    workers = concurrency if concurrency > 0 else len(hosts)
    pool = ThreadPoolExecutor(max_workers=min(workers, len(hosts)))
    futures = [pool.submit(_run_one, task, host) for host in hosts]
    pool.shutdown(wait=False)
    return (future.result() for future in as_completed(futures))