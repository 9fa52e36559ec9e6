"""Unit tests for PlanMutationRunner (compare-and-swap with one retry)."""

from uuid import uuid4

import pytest

from dinepick.application.services.plan_mutation import PlanMutation, PlanMutationRunner
from dinepick.domain.errors import (
    ConcurrentModificationError,
    OwnerCannotLeaveError,
    PlanNotFoundError,
)
from dinepick.domain.models.plan import Plan
from dinepick.infrastructure.stubs.plan_repository_stub import PlanRepositoryStub
from tests.helpers.plan_builders import CREATED_AT, make_plan
from tests.helpers.repositories import RacingWriterRepository


def retitle(title: str):
    seen: list[int] = []

    def mutate(plan: Plan) -> PlanMutation[list[int]]:
        seen.append(plan.version)
        return PlanMutation(plan=plan.with_changes(CREATED_AT, title=title), result=seen)

    return mutate


class TestPlanMutationRunner:
    async def test_saves_on_first_attempt(self) -> None:
        repository = PlanRepositoryStub()
        plan = make_plan()
        repository.put(plan)

        applied = await PlanMutationRunner(repository).run(plan.id, "retitle", retitle("New"))

        assert applied.saved
        assert applied.attempts == 1
        assert applied.plan.title == "New"
        assert applied.plan.version == 1
        assert applied.previous.title == "Friday dinner"

    async def test_retries_once_against_fresh_state(self) -> None:
        repository = RacingWriterRepository(conflicts=1)
        plan = make_plan()
        repository.put(plan)

        applied = await PlanMutationRunner(repository).run(plan.id, "retitle", retitle("New"))

        assert applied.attempts == 2
        # second attempt re-ran the mutation on the version the other writer stored
        assert applied.result == [0, 1]
        assert applied.plan.version == 2
        assert repository.save_attempts == 2

    async def test_second_conflict_gives_up(self) -> None:
        repository = RacingWriterRepository(conflicts=2)
        plan = make_plan()
        repository.put(plan)

        with pytest.raises(ConcurrentModificationError) as exc_info:
            await PlanMutationRunner(repository).run(plan.id, "retitle", retitle("New"))

        assert exc_info.value.operation == "retitle"
        assert (await repository.get_plan(plan.id)).title == "Friday dinner"

    async def test_unchanged_mutation_skips_save(self) -> None:
        repository = PlanRepositoryStub()
        plan = make_plan()
        repository.put(plan)

        applied = await PlanMutationRunner(repository).run(
            plan.id,
            "noop",
            lambda p: PlanMutation(plan=p, result="nothing", changed=False),
        )

        assert not applied.saved
        assert applied.result == "nothing"
        assert repository.save_count == 0

    async def test_uses_caller_loaded_plan_first(self) -> None:
        repository = PlanRepositoryStub()
        plan = make_plan()
        repository.put(plan)
        loaded = await repository.get_plan(plan.id)

        applied = await PlanMutationRunner(repository).run(
            plan.id, "retitle", retitle("New"), loaded=loaded
        )

        assert applied.previous is loaded
        assert applied.saved

    async def test_domain_errors_propagate_without_save(self) -> None:
        repository = PlanRepositoryStub()
        plan = make_plan()
        repository.put(plan)

        def mutate(current: Plan) -> PlanMutation[None]:
            raise OwnerCannotLeaveError(current.id)

        with pytest.raises(OwnerCannotLeaveError):
            await PlanMutationRunner(repository).run(plan.id, "leave", mutate)

        assert repository.save_count == 0

    async def test_missing_plan(self) -> None:
        with pytest.raises(PlanNotFoundError):
            await PlanMutationRunner(PlanRepositoryStub()).run(uuid4(), "retitle", retitle("x"))
