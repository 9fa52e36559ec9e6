"""End-to-end plan flows over the in-memory adapters.

Each test drives the services the way the API and the scheduler would,
then drains the notification queue through the dispatch worker and
checks what users actually received.
"""

from uuid import uuid4

import pytest

from dinepick.bootstrap.planning import PlanningContainer
from dinepick.domain.models.plan import InviteStatus, PlanStatus
from dinepick.infrastructure.stubs.notification_dispatcher_stub import (
    NotificationDispatcherStub,
)
from dinepick.infrastructure.stubs.user_directory_stub import UserDirectoryStub
from tests.helpers.fake_time_authority import FakeTimeAuthority
from tests.helpers.plan_builders import AFTER_DEADLINE, AFTER_EVENT, create_payload

pytestmark = pytest.mark.integration


async def test_scheduled_plan_from_invite_to_completion(
    planning: PlanningContainer,
    dispatcher: NotificationDispatcherStub,
    user_directory: UserDirectoryStub,
    fake_time_authority: FakeTimeAuthority,
) -> None:
    owner, ana, ben, cal = uuid4(), uuid4(), uuid4(), uuid4()
    for user, name in ((owner, "Olivia"), (ana, "Ana"), (ben, "Ben"), (cal, "Cal")):
        user_directory.add_user(user, name)

    plan = await planning.lifecycle.create_plan(owner, create_payload([ana, ben, cal]))
    await planning.participation.respond_to_invite(plan.id, ana, True)
    await planning.participation.respond_to_invite(plan.id, ben, False)

    fake_time_authority.set_time(AFTER_DEADLINE)
    sweep = await planning.deadlines.run_sweep()

    assert sweep.declined_invites == 1
    assert sweep.voting_opened == 1

    await planning.participation.submit_swipe(plan.id, owner, ["r1", "r2"])
    confirmed = await planning.participation.submit_swipe(plan.id, ana, ["r2"])

    assert confirmed.status is PlanStatus.CONFIRMED
    assert confirmed.resolved_restaurant.name == "Sushi Den"

    completed = await planning.lifecycle.change_status(plan.id, owner, PlanStatus.COMPLETED)
    await planning.dispatch_worker.drain()

    assert completed.status is PlanStatus.COMPLETED
    (invitation,) = dispatcher.of_kind("plan_invite")
    assert invitation.batched
    assert set(invitation.user_ids) == {ana, ben, cal}
    assert invitation.body == 'Olivia invited you to "Birthday dinner"'
    assert dispatcher.recipients_of("rsvp_response") == [owner, owner]
    assert dispatcher.recipients_of("rsvp_deadline_passed") == [cal]
    assert dispatcher.recipients_of("rsvp_deadline_missed_organizer") == [owner]
    assert dispatcher.recipients_of("voting_open") == [owner, ana]
    assert dispatcher.recipients_of("group_swipe_result") == [owner]
    assert all(n.data["plan_id"] == str(plan.id) for n in dispatcher.sent)


async def test_group_swipe_decided_by_last_decline(
    planning: PlanningContainer,
    dispatcher: NotificationDispatcherStub,
) -> None:
    owner, ana, ben = uuid4(), uuid4(), uuid4()
    plan = await planning.lifecycle.create_plan(
        owner, create_payload([ana, ben], kind="group-swipe")
    )

    await planning.participation.submit_swipe(plan.id, owner, ["r1"])
    swiped = await planning.participation.submit_swipe(plan.id, ana, ["r1", "r3"])
    assert swiped.status is PlanStatus.VOTING
    assert swiped.find_invite(ana).status is InviteStatus.ACCEPTED

    decided = await planning.participation.respond_to_invite(plan.id, ben, False)
    await planning.dispatch_worker.drain()

    assert decided.status is PlanStatus.CONFIRMED
    assert decided.resolved_restaurant.id == "r1"
    (result,) = dispatcher.of_kind("group_swipe_result")
    assert set(result.user_ids) == {owner, ana}
    assert result.data["restaurant_id"] == "r1"


async def test_reading_an_overdue_plan_applies_the_deadline(
    planning: PlanningContainer,
    fake_time_authority: FakeTimeAuthority,
) -> None:
    owner, ana = uuid4(), uuid4()
    plan = await planning.lifecycle.create_plan(owner, create_payload([ana]))

    fake_time_authority.set_time(AFTER_DEADLINE)
    read = await planning.lifecycle.get_plan(plan.id)

    assert read.find_invite(ana).status is InviteStatus.DECLINED
    assert read.voting_opened_at == AFTER_DEADLINE
    assert read.version == 1


async def test_event_time_confirms_without_votes(
    planning: PlanningContainer,
    dispatcher: NotificationDispatcherStub,
    fake_time_authority: FakeTimeAuthority,
) -> None:
    owner, ana = uuid4(), uuid4()
    plan = await planning.lifecycle.create_plan(owner, create_payload([ana]))
    await planning.participation.respond_to_invite(plan.id, ana, True)

    fake_time_authority.set_time(AFTER_EVENT)
    sweep = await planning.deadlines.run_sweep()
    await planning.dispatch_worker.drain()

    assert sweep.confirmed == 1
    stored = await planning.lifecycle.get_plan(plan.id)
    assert stored.status is PlanStatus.CONFIRMED
    # no approvals anywhere, so the best-rated candidate wins
    assert stored.resolved_restaurant.id == "r2"
    (picked,) = dispatcher.of_kind("group_swipe_result")
    assert picked.title == "Restaurant Picked!"
    assert set(picked.user_ids) == {owner, ana}
