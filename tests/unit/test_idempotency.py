"""Unit tests for at-most-once mutations."""

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker

from foodieai import drafts
from foodieai.db import Base
from foodieai.idempotency import find_record, run_idempotent
from foodieai.models import IdempotencyRecord, RecipeDraft, RecipeDraftIngredient
from foodieai.schemas import AddIngredientIn, RecipeDraftCreateIn


@pytest.fixture
def file_sessions(tmp_path):
    """Two independent connections to one SQLite file."""
    engine = create_engine(f"sqlite:///{tmp_path / 'race.db'}")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False)
    yield factory
    engine.dispose()


class Counter:
    def __init__(self, result):
        self.calls = 0
        self.result = result

    def __call__(self):
        self.calls += 1
        return self.result


class TestRunIdempotent:
    """Replay semantics."""

    def test_same_key_replays_stored_result(self, db):
        """Test the second call returns the first result without running."""
        first = Counter({"value": 1})
        second = Counter({"value": 2})

        a = run_idempotent(db, operation="op", key="k1", entity_id="e1", mutate=first)
        b = run_idempotent(db, operation="op", key="k1", entity_id="e1", mutate=second)

        assert a == b == {"value": 1}
        assert (first.calls, second.calls) == (1, 0)

    def test_key_is_scoped_by_operation_and_entity(self, db):
        """Test the same key on another entity or operation runs again."""
        run_idempotent(db, operation="op", key="k1", entity_id="e1", mutate=Counter(1))
        other_entity = Counter(2)
        other_operation = Counter(3)

        assert run_idempotent(db, operation="op", key="k1", entity_id="e2", mutate=other_entity) == 2
        assert run_idempotent(db, operation="op2", key="k1", entity_id="e1", mutate=other_operation) == 3
        assert db.execute(select(func.count()).select_from(IdempotencyRecord)).scalar() == 3

    def test_without_key_nothing_is_recorded(self, db):
        """Test keyless calls always run."""
        counter = Counter("ok")

        run_idempotent(db, operation="op", key=None, entity_id="e1", mutate=counter)
        run_idempotent(db, operation="op", key="", entity_id="e1", mutate=counter)

        assert counter.calls == 2
        assert db.execute(select(func.count()).select_from(IdempotencyRecord)).scalar() == 0

    def test_failed_mutation_is_not_recorded(self, db):
        """Test a failure rolls back and a retry with the same key runs."""

        def boom():
            db.add(RecipeDraft(title="half-written", status="DRAFT"))
            db.flush()
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            run_idempotent(db, operation="op", key="k1", entity_id="e1", mutate=boom)

        assert find_record(db, "op", "k1", "e1") is None
        assert db.query(RecipeDraft).count() == 0
        assert run_idempotent(db, operation="op", key="k1", entity_id="e1", mutate=Counter("retry")) == "retry"

    def test_concurrent_winner_is_returned(self, file_sessions):
        """Test a loser's unique violation resolves to the winner's stored result."""
        loser = file_sessions()
        winner = file_sessions()

        def mutate():
            # Another caller commits the same triple while we are mid-flight
            winner.add(IdempotencyRecord(operation="op", key="k1", entity_id="e1", result={"who": "winner"}))
            winner.commit()
            loser.add(RecipeDraft(title="loser side effect", status="DRAFT"))
            return {"who": "loser"}

        try:
            result = run_idempotent(loser, operation="op", key="k1", entity_id="e1", mutate=mutate)

            assert result == {"who": "winner"}
            assert loser.query(RecipeDraft).count() == 0
            assert loser.query(IdempotencyRecord).count() == 1
        finally:
            loser.close()
            winner.close()


class TestDraftMutationReplay:
    """Draft mutations with clientRequestId."""

    def test_add_ingredient_retry_adds_once(self, db):
        """Test a retried add does not duplicate the ingredient."""
        draft = drafts.create_draft(db, RecipeDraftCreateIn(title="Soup"))
        payload = AddIngredientIn.model_validate(
            {"draftId": draft["id"], "ingredient": {"name": "Water", "amount": 1, "unit": "l"}, "clientRequestId": "r1"}
        )

        first = drafts.add_ingredient(db, payload)
        second = drafts.add_ingredient(db, payload)

        assert first == second
        assert db.query(RecipeDraftIngredient).count() == 1

    def test_create_retry_returns_same_draft(self, db):
        """Test recipeDraft.create is replayed per caller."""
        data = RecipeDraftCreateIn(title="Soup", client_request_id="c1")

        first = drafts.create_draft(db, data, owner_user_id="u1")
        second = drafts.create_draft(db, data, owner_user_id="u1")
        other_caller = drafts.create_draft(db, data, owner_user_id="u2")

        assert first["id"] == second["id"]
        assert other_caller["id"] != first["id"]

    def test_publish_retry_returns_same_recipe(self, db):
        """Test a retried publish replays instead of failing on the frozen draft."""
        draft = drafts.create_draft(db, RecipeDraftCreateIn(title="Tea", servings=1))
        drafts.add_ingredient(
            db,
            AddIngredientIn.model_validate(
                {
                    "draftId": draft["id"],
                    "ingredient": {
                        "name": "Tea",
                        "amount": 250,
                        "unit": "ml",
                        "macrosPer100": {"kcal100": 1, "protein100": 0, "fat100": 0, "carbs100": 0.2},
                    },
                }
            ),
        )
        drafts.set_steps(db, draft["id"], ["Brew"])

        first = drafts.publish_draft(db, draft["id"], "p1")
        second = drafts.publish_draft(db, draft["id"], "p1")

        assert first["id"] == second["id"]

    def test_anonymous_create_shares_one_scope(self, db):
        """Test anonymous creates with the same key replay one draft."""
        data = RecipeDraftCreateIn(title="Soup", client_request_id="shared-key")

        first = drafts.create_draft(db, data)
        second = drafts.create_draft(db, RecipeDraftCreateIn(title="Stew", client_request_id="shared-key"))

        assert second["id"] == first["id"]
        assert second["title"] == "Soup"
