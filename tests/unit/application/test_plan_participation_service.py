"""Unit tests for PlanParticipationService."""

from uuid import uuid4

import pytest

from dinepick.bootstrap.planning import PlanningContainer
from dinepick.domain.errors import (
    AlreadyRespondedError,
    AlreadySwipedError,
    InvalidCandidateError,
    NotEligibleError,
    PlanNotFoundError,
    VotingNotOpenError,
)
from dinepick.domain.models.notification import NotificationKind, NotificationRequest
from dinepick.domain.models.plan import InviteStatus, Plan, PlanStatus
from dinepick.infrastructure.adapters.messaging.in_memory_notification_queue import (
    InMemoryNotificationQueue,
)
from dinepick.infrastructure.stubs.plan_repository_stub import PlanRepositoryStub
from dinepick.infrastructure.stubs.user_directory_stub import UserDirectoryStub
from tests.helpers.fake_time_authority import FakeTimeAuthority
from tests.helpers.metrics import sample_total
from tests.helpers.plan_builders import (
    AFTER_DEADLINE,
    BEFORE_DEADLINE,
    CREATED_AT,
    invite,
    make_plan,
    make_scheduled_plan,
)


async def drain(queue: InMemoryNotificationQueue) -> list[NotificationRequest]:
    return await queue.dequeue_batch(1000)


def of_kind(requests: list[NotificationRequest], kind: NotificationKind) -> list[NotificationRequest]:
    return [r for r in requests if r.kind is kind]


class TestRespondToInvite:
    async def test_accept_saves_and_tells_owner(
        self,
        planning: PlanningContainer,
        plan_repository: PlanRepositoryStub,
        notification_queue: InMemoryNotificationQueue,
    ) -> None:
        plan = make_scheduled_plan()
        plan_repository.put(plan)
        ana = plan.invites[0]

        saved = await planning.participation.respond_to_invite(plan.id, ana.user_id, True)

        assert saved.version == 1
        assert saved.find_invite(ana.user_id).status is InviteStatus.ACCEPTED
        requests = await drain(notification_queue)
        assert len(requests) == 1
        assert requests[0].kind is NotificationKind.RSVP_RESPONSE
        assert requests[0].user_ids == (plan.owner_id,)
        assert requests[0].title == "RSVP Accepted"
        assert requests[0].body == 'Ana accepted your invite to "Birthday dinner"'
        assert requests[0].data == {"plan_id": str(plan.id), "status": "accepted"}

    async def test_directory_name_wins_over_snapshot(
        self,
        planning: PlanningContainer,
        plan_repository: PlanRepositoryStub,
        notification_queue: InMemoryNotificationQueue,
        user_directory: UserDirectoryStub,
    ) -> None:
        plan = make_scheduled_plan()
        plan_repository.put(plan)
        user_directory.add_user(plan.invites[0].user_id, "Ana Lopez")

        await planning.participation.respond_to_invite(plan.id, plan.invites[0].user_id, False)

        (request,) = await drain(notification_queue)
        assert request.title == "RSVP Declined"
        assert request.body.startswith("Ana Lopez declined")

    async def test_decline_completing_group_swipe_confirms(
        self,
        planning: PlanningContainer,
        plan_repository: PlanRepositoryStub,
        notification_queue: InMemoryNotificationQueue,
    ) -> None:
        plan = make_plan()
        plan_repository.put(plan)
        ana, ben = plan.invites
        await planning.participation.submit_swipe(plan.id, plan.owner_id, ["r3"])
        await planning.participation.submit_swipe(plan.id, ana.user_id, ["r3", "r1"])
        await drain(notification_queue)

        saved = await planning.participation.respond_to_invite(plan.id, ben.user_id, False)

        assert saved.status is PlanStatus.CONFIRMED
        assert saved.resolved_restaurant.id == "r3"
        requests = await drain(notification_queue)
        (result,) = of_kind(requests, NotificationKind.GROUP_SWIPE_RESULT)
        assert set(result.user_ids) == {plan.owner_id, ana.user_id}
        assert result.data["restaurant_id"] == "r3"
        assert (
            sample_total(
                planning.metrics.get_registry(),
                "plan_status_transitions_total",
                to_status="confirmed",
                trigger="quorum",
            )
            == 1.0
        )

    async def test_second_response_keeps_the_first(
        self,
        planning: PlanningContainer,
        plan_repository: PlanRepositoryStub,
        notification_queue: InMemoryNotificationQueue,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        plan = make_scheduled_plan()
        plan_repository.put(plan)
        ana = plan.invites[0].user_id
        await planning.participation.respond_to_invite(plan.id, ana, True)
        fake_time_authority.set_time(BEFORE_DEADLINE)

        with pytest.raises(AlreadyRespondedError) as exc_info:
            await planning.participation.respond_to_invite(plan.id, ana, False)

        assert exc_info.value.responded_at == CREATED_AT
        stored = await plan_repository.get_plan(plan.id)
        assert stored.version == 1
        assert stored.find_invite(ana).status is InviteStatus.ACCEPTED
        assert stored.find_invite(ana).responded_at == CREATED_AT
        assert [r.data["status"] for r in await drain(notification_queue)] == ["accepted"]

    async def test_missing_plan(self, planning: PlanningContainer) -> None:
        with pytest.raises(PlanNotFoundError):
            await planning.participation.respond_to_invite(uuid4(), uuid4(), True)


class TestSubmitSwipe:
    async def test_records_votes_and_notifies_others(
        self,
        planning: PlanningContainer,
        plan_repository: PlanRepositoryStub,
        notification_queue: InMemoryNotificationQueue,
    ) -> None:
        plan = make_plan()
        plan_repository.put(plan)
        ana, ben = plan.invites

        saved = await planning.participation.submit_swipe(plan.id, ana.user_id, ["r1", "r2"])

        assert saved.votes[ana.user_id] == frozenset({"r1", "r2"})
        assert saved.find_invite(ana.user_id).status is InviteStatus.ACCEPTED
        (request,) = await drain(notification_queue)
        assert request.kind is NotificationKind.SWIPE_COMPLETED
        assert request.user_ids == (plan.owner_id, ben.user_id)
        assert request.is_batch

    async def test_final_swipe_confirms_and_skips_swiper(
        self,
        planning: PlanningContainer,
        plan_repository: PlanRepositoryStub,
        notification_queue: InMemoryNotificationQueue,
    ) -> None:
        plan = make_plan()
        plan_repository.put(plan)
        ana, ben = plan.invites
        await planning.participation.submit_swipe(plan.id, plan.owner_id, ["r1"])
        await planning.participation.submit_swipe(plan.id, ana.user_id, ["r2"])
        await drain(notification_queue)

        saved = await planning.participation.submit_swipe(plan.id, ben.user_id, ["r2"])

        assert saved.status is PlanStatus.CONFIRMED
        assert saved.resolved_restaurant.id == "r2"
        requests = await drain(notification_queue)
        (result,) = of_kind(requests, NotificationKind.GROUP_SWIPE_RESULT)
        assert result.title == "Group Pick Decided!"
        assert ben.user_id not in result.user_ids
        assert set(result.user_ids) == {plan.owner_id, ana.user_id}

    async def test_rejected_swipe_changes_nothing(
        self,
        planning: PlanningContainer,
        plan_repository: PlanRepositoryStub,
        notification_queue: InMemoryNotificationQueue,
    ) -> None:
        plan = make_plan()
        plan_repository.put(plan)

        with pytest.raises(InvalidCandidateError):
            await planning.participation.submit_swipe(plan.id, plan.owner_id, ["r1", "bogus"])

        assert plan_repository.save_count == 0
        assert await notification_queue.pending_count() == 0
        assert (await plan_repository.get_plan(plan.id)).votes == {}

    async def test_double_swipe_rejected(
        self,
        planning: PlanningContainer,
        plan_repository: PlanRepositoryStub,
    ) -> None:
        plan = make_plan()
        plan_repository.put(plan)
        await planning.participation.submit_swipe(plan.id, plan.owner_id, [])

        with pytest.raises(AlreadySwipedError):
            await planning.participation.submit_swipe(plan.id, plan.owner_id, ["r1"])

        assert plan_repository.save_count == 1

    async def test_scheduled_plan_waits_for_deadline(
        self,
        planning: PlanningContainer,
        plan_repository: PlanRepositoryStub,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        plan = make_scheduled_plan()
        plan_repository.put(plan)

        with pytest.raises(VotingNotOpenError):
            await planning.participation.submit_swipe(plan.id, plan.owner_id, ["r1"])

        fake_time_authority.set_time(AFTER_DEADLINE)
        saved = await planning.participation.submit_swipe(plan.id, plan.owner_id, ["r1"])
        assert plan.owner_id in saved.completed_voters


class TestLeavePlan:
    async def test_leave_notifies_remaining_members(
        self,
        planning: PlanningContainer,
        plan_repository: PlanRepositoryStub,
        notification_queue: InMemoryNotificationQueue,
    ) -> None:
        plan = make_plan()
        plan_repository.put(plan)
        ana, ben = plan.invites

        saved = await planning.participation.leave_plan(plan.id, ana.user_id)

        assert not saved.involves(ana.user_id)
        (request,) = await drain(notification_queue)
        assert request.kind is NotificationKind.PARTICIPANT_LEFT
        assert request.user_ids == (plan.owner_id, ben.user_id)
        assert request.body == 'Ana has left "Friday dinner"'

    async def test_last_accepted_invitee_cancels_plan(
        self,
        planning: PlanningContainer,
        plan_repository: PlanRepositoryStub,
        notification_queue: InMemoryNotificationQueue,
    ) -> None:
        accepted = invite(name="Ana", status=InviteStatus.ACCEPTED)
        plan = make_plan(invites=(accepted,))
        plan_repository.put(plan)

        saved = await planning.participation.leave_plan(plan.id, accepted.user_id)

        assert saved.status is PlanStatus.CANCELLED
        (request,) = await drain(notification_queue)
        assert request.kind is NotificationKind.PLAN_AUTO_CANCELLED
        assert request.user_ids == (plan.owner_id,)
        assert (
            sample_total(
                planning.metrics.get_registry(),
                "plan_status_transitions_total",
                to_status="cancelled",
                trigger="leave",
            )
            == 1.0
        )


class TestDelegateOrganizer:
    def _plan(self) -> Plan:
        return make_plan(
            invites=(
                invite(name="Ana", status=InviteStatus.ACCEPTED),
                invite(name="Ben", status=InviteStatus.ACCEPTED),
            )
        )

    async def test_hands_over_and_notifies_both_sides(
        self,
        planning: PlanningContainer,
        plan_repository: PlanRepositoryStub,
        notification_queue: InMemoryNotificationQueue,
        user_directory: UserDirectoryStub,
    ) -> None:
        plan = self._plan()
        plan_repository.put(plan)
        ana, ben = plan.invites
        user_directory.add_user(plan.owner_id, "Olivia")

        saved = await planning.participation.delegate_organizer(
            plan.id, plan.owner_id, ana.user_id
        )

        assert saved.owner_id == ana.user_id
        assert [i.user_id for i in saved.invites] == [ben.user_id]
        requests = await drain(notification_queue)
        (delegated,) = of_kind(requests, NotificationKind.ORGANIZER_DELEGATED)
        assert delegated.user_ids == (ana.user_id,)
        assert delegated.body == 'Olivia made you the organizer of "Friday dinner"'
        (changed,) = of_kind(requests, NotificationKind.ORGANIZER_CHANGED)
        assert changed.user_ids == (ben.user_id,)
        assert changed.data["owner_id"] == str(ana.user_id)

    async def test_pending_target_rejected(
        self,
        planning: PlanningContainer,
        plan_repository: PlanRepositoryStub,
        notification_queue: InMemoryNotificationQueue,
    ) -> None:
        plan = make_plan(
            invites=(invite(status=InviteStatus.ACCEPTED), invite(), invite())
        )
        plan_repository.put(plan)

        with pytest.raises(NotEligibleError):
            await planning.participation.delegate_organizer(
                plan.id, plan.owner_id, plan.invites[1].user_id
            )

        assert await notification_queue.pending_count() == 0
