"""
Optimistic read-compute-write loop over the license store.

Every write to an existing license goes through ``OptimisticMutationRunner``:
read the record, let a pure decision function compute the outcome, then
write conditionally on the revision that was read. A lost race re-reads
and decides again, so concurrent duplicates collapse into one state change.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from core.domain.exceptions import ConcurrencyRetryExhaustedError, LicenseStorageError
from core.metrics import license_cas_conflicts_total, license_storage_errors_total
from licenses.domain.license import License
from licenses.domain.state_machine import Transition
from licenses.ports.license_store import LicenseStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5

Decision = Callable[[License], Transition]


@dataclass(frozen=True)
class MutationResult:
    """What the runner read and what it left in the store."""

    before: Optional[License]
    transition: Optional[Transition]

    @property
    def found(self) -> bool:
        """Whether the key existed."""
        return self.before is not None

    @property
    def after(self) -> Optional[License]:
        """Record as stored once the runner returns."""
        if self.transition is None:
            return None
        return self.transition.license

    @property
    def revision_changed(self) -> bool:
        """Whether an accepted mutation bumped the revision."""
        if not self.found:
            return False
        return self.after.server_revision != self.before.server_revision


class OptimisticMutationRunner:
    """Applies state machine decisions with compare-and-swap and bounded retries."""

    def __init__(self, store: LicenseStore, max_attempts: int = DEFAULT_MAX_ATTEMPTS):
        """
        Initialize the runner.

        Args:
            store: License store offering compare_and_swap
            max_attempts: Read-decide-write attempts before giving up
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.store = store
        self.max_attempts = max_attempts

    async def run(self, key: str, decide: Decision, operation: str) -> MutationResult:
        """
        Read ``key``, decide, and write conditionally until the write sticks.

        Args:
            key: License key
            decide: Pure function from the current record to a Transition
            operation: Operation name for logs and metrics

        Returns:
            MutationResult; ``found`` is False when the key does not exist

        Raises:
            ConcurrencyRetryExhaustedError: If every attempt lost a race
            LicenseStorageError: If the store kept failing
        """
        last_error: Optional[LicenseStorageError] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                current = await self.store.find_by_key(key)
                if current is None:
                    return MutationResult(before=None, transition=None)

                transition = decide(current)
                if not transition.write:
                    return MutationResult(before=current, transition=transition)

                swapped = await self.store.compare_and_swap(
                    transition.license, expected_revision=current.server_revision
                )
            except ConcurrencyRetryExhaustedError:
                raise
            except LicenseStorageError as e:
                last_error = e
                license_storage_errors_total.labels(operation=operation).inc()
                logger.warning(
                    f"Storage error during {operation} of {key} "
                    f"(attempt {attempt}/{self.max_attempts}): {e.message}"
                )
                continue

            if swapped:
                if attempt > 1:
                    logger.info(f"{operation} of {key} succeeded after {attempt} attempts")
                return MutationResult(before=current, transition=transition)

            license_cas_conflicts_total.labels(operation=operation).inc()
            logger.info(
                f"Revision conflict during {operation} of {key} at revision "
                f"{current.server_revision} (attempt {attempt}/{self.max_attempts})"
            )

        if last_error is not None:
            logger.error(f"{operation} of {key} failed after {self.max_attempts} attempts: {last_error.message}")
            raise last_error
        raise ConcurrencyRetryExhaustedError(
            f"{operation} of {key} lost {self.max_attempts} consecutive revision races"
        )
