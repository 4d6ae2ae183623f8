# foodieai/idempotency.py
# ---------------------------------------------------------
# At-most-once execution of draft mutations.
#
# A caller may send a key (clientRequestId) with a mutation.
# The result of the first successful run is stored under
# (operation, key, entity_id); any later call with the same
# triple gets that stored result back and nothing is re-run.
#
# Flow inside ONE transaction:
#   1) look up the record         -> found: replay it
#   2) run the mutation
#   3) insert the record + commit -> unique violation: another
#      caller committed the same triple first
#
# On a unique violation the whole transaction is rolled back
# (our side effects are discarded) and the winning record is
# read again in a fresh transaction.
# ---------------------------------------------------------

from typing import Any, Callable, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from foodieai.logger import get_logger
from foodieai.models import IdempotencyRecord

logger = get_logger(__name__)


def find_record(db: Session, operation: str, key: str, entity_id: str) -> Optional[IdempotencyRecord]:
    stmt = select(IdempotencyRecord).where(
        IdempotencyRecord.operation == operation,
        IdempotencyRecord.key == key,
        IdempotencyRecord.entity_id == entity_id,
    )
    return db.execute(stmt).scalars().first()


def run_in_transaction(db: Session, mutate: Callable[[], Any]) -> Any:
    """Run mutate() and commit, or roll everything back."""
    try:
        result = mutate()
        db.commit()
    except Exception:
        db.rollback()
        raise
    return result


def run_idempotent(
    db: Session,
    *,
    operation: str,
    key: Optional[str],
    entity_id: str,
    mutate: Callable[[], Any],
) -> Any:
    """
    Run `mutate` at most once per (operation, key, entity_id).

    `mutate` must return a JSON-serializable result: it is stored
    as-is and replayed verbatim to later callers.

    No key -> plain transactional run, nothing is recorded.
    """
    if not key:
        return run_in_transaction(db, mutate)

    existing = find_record(db, operation, key, entity_id)
    if existing is not None:
        logger.info(f"Idempotent replay: {operation} key={key} entity={entity_id}")
        result = existing.result
        db.rollback()  # close the read-only transaction
        return result

    try:
        result = mutate()
        db.add(
            IdempotencyRecord(
                operation=operation,
                key=key,
                entity_id=entity_id,
                result=result,
            )
        )
        db.flush()
        db.commit()
        return result
    except IntegrityError:
        db.rollback()
        winner = find_record(db, operation, key, entity_id)
        if winner is None:
            # Conflict was not on the idempotency record
            raise
        logger.info(f"Idempotency race resolved: {operation} key={key} entity={entity_id}, returning stored result")
        result = winner.result
        db.rollback()
        return result
    except Exception:
        db.rollback()
        raise
