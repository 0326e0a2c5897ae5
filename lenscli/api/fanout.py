"""
Cluster Fan-out.

Issues the same call against every member of a previously fetched cluster
list, one at a time, in list order. Listing is best-effort: a failing
member is reported and skipped, the others still contribute. Only when
every member fails is the first failure raised.

Point lookups never go through here; they abort on the first error.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from lenscli.core.exceptions import PartialFanoutError, RemoteError
from lenscli.core.logging import get_logger

logger = get_logger(__name__)

ALL_CLUSTERS = "*"

MemberT = TypeVar("MemberT")
ResultT = TypeVar("ResultT")


@dataclass
class FanoutResult(Generic[ResultT]):
    """Per-member results in iteration order plus the members that failed."""

    results: list[tuple[str, ResultT]] = field(default_factory=list)
    failures: list[tuple[str, RemoteError]] = field(default_factory=list)

    @property
    def error(self) -> PartialFanoutError | None:
        if not self.failures:
            return None
        return PartialFanoutError([value for _, value in self.results], self.failures)

    def values(self) -> list[ResultT]:
        return [value for _, value in self.results]


def fan_out(
    members: Iterable[MemberT],
    call: Callable[[MemberT], ResultT],
    key: Callable[[MemberT], str],
    on_failure: Callable[[str, RemoteError], None] | None = None,
) -> FanoutResult[ResultT]:
    """
    Call `call` for each member sequentially, accumulating results.

    Args:
        members: Cluster list, already fetched.
        call: The per-member remote call.
        key: Member identifier used in results and failure reports.
        on_failure: Reporter invoked once per failing member (e.g. print to stderr).

    Returns:
        FanoutResult with the successes in member order.

    Raises:
        RemoteError: The first failure, if every member failed.
    """
    outcome: FanoutResult[ResultT] = FanoutResult()

    for member in members:
        member_key = key(member)
        try:
            outcome.results.append((member_key, call(member)))
        except RemoteError as e:
            logger.debug("Fan-out member failed", member=member_key, error=str(e))
            outcome.failures.append((member_key, e))
            if on_failure is not None:
                on_failure(member_key, e)

    if outcome.failures and not outcome.results:
        raise outcome.failures[0][1]

    return outcome
