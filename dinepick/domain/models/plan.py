"""Plan domain model.

This module defines the shared dining plan and its sub-entities:
- Plan: the decision being coordinated
- PlanInvite: one invitee's membership and RSVP record
- RestaurantOption: one candidate in the plan's voting pool
- Participant: owner-or-invitee view used for quorum checks

State Machine:
    VOTING -> CONFIRMED (owner confirms, everyone voted, or event time arrived)
    VOTING -> CANCELLED (owner cancels, or last accepted invitee leaves)
    CONFIRMED -> COMPLETED (owner marks the meal as done)
    CONFIRMED -> CANCELLED

Invariants:
- Status never regresses; COMPLETED and CANCELLED are terminal.
- resolved_restaurant is unset while VOTING and set once CONFIRMED. It is
  never cleared, so COMPLETED plans and plans cancelled after confirmation
  still carry it; a plan cancelled from VOTING has none.
- Every vote references a candidate id of the plan.
- completed_voters is a subset of the required participants.
- The owner is never an invite; owner participation is implicit.

All models are frozen. Mutations return new instances so a failed
validation can never leave a half-applied change behind.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from uuid import UUID

from dinepick.domain.errors.state_transition import InvalidTransitionError


class PlanKind(Enum):
    """How a plan reaches its decision.

    Kinds:
        SCHEDULED: Fixed date/time with an RSVP deadline. Voting opens once
            the deadline passes; the event time arriving forces a decision.
        GROUP_SWIPE: No date or deadline. The decision is made as soon as
            every required participant has finished swiping.
    """

    SCHEDULED = "scheduled"
    GROUP_SWIPE = "group-swipe"


class PlanStatus(Enum):
    """Status in the plan lifecycle."""

    VOTING = "voting"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    def is_terminal(self) -> bool:
        """Check if this status is terminal (no further transitions)."""
        return self in TERMINAL_STATUSES

    def valid_transitions(self) -> frozenset[PlanStatus]:
        """Get valid target statuses from this status.

        Returns:
            Frozenset of statuses this status can transition to.
            Empty set for terminal statuses.
        """
        return STATUS_TRANSITION_MATRIX.get(self, frozenset())


TERMINAL_STATUSES: frozenset[PlanStatus] = frozenset(
    {PlanStatus.COMPLETED, PlanStatus.CANCELLED}
)

STATUS_TRANSITION_MATRIX: dict[PlanStatus, frozenset[PlanStatus]] = {
    PlanStatus.VOTING: frozenset({PlanStatus.CONFIRMED, PlanStatus.CANCELLED}),
    PlanStatus.CONFIRMED: frozenset({PlanStatus.COMPLETED, PlanStatus.CANCELLED}),
    PlanStatus.COMPLETED: frozenset(),
    PlanStatus.CANCELLED: frozenset(),
}

# Statuses that carry a resolved restaurant
RESOLVED_STATUSES: frozenset[PlanStatus] = frozenset(
    {PlanStatus.CONFIRMED, PlanStatus.COMPLETED}
)


class InviteStatus(Enum):
    """RSVP status of a single invite."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class ParticipantRole(Enum):
    """Standing of a participant on a plan."""

    OWNER = "owner"
    INVITEE = "invitee"


@dataclass(frozen=True, eq=True)
class RestaurantOption:
    """A restaurant candidate attached to a plan at creation.

    Attributes:
        id: Provider identifier, unique within the plan.
        name: Display name.
        rating: Numeric quality score used to break tally ties.
        image_url: Optional hero image.
        address: Optional street address.
        cuisine: Optional cuisine label.
        price_level: Optional price bucket (1-4).
    """

    id: str
    name: str
    rating: float
    image_url: str = ""
    address: str = ""
    cuisine: str = ""
    price_level: int | None = None


@dataclass(frozen=True, eq=True)
class PlanInvite:
    """An invitee's membership and response record.

    Attributes:
        user_id: The invited user. Unique within a plan.
        name: Display name captured when the invite was sent.
        status: RSVP status.
        responded_at: When the invitee (or the deadline sweep) responded.
    """

    user_id: UUID
    name: str
    status: InviteStatus = field(default=InviteStatus.PENDING)
    responded_at: datetime | None = field(default=None)

    def with_response(self, status: InviteStatus, responded_at: datetime) -> PlanInvite:
        """Return a copy of this invite with a recorded response."""
        return replace(self, status=status, responded_at=responded_at)


@dataclass(frozen=True, eq=True)
class Participant:
    """A member of the required participant set.

    The owner never appears as an invite, so quorum checks work on this
    union of {owner, non-declined invitees} instead.
    """

    user_id: UUID
    role: ParticipantRole

    @property
    def is_owner(self) -> bool:
        return self.role is ParticipantRole.OWNER


@dataclass(frozen=True, eq=True)
class Plan:
    """A shared dining plan.

    Attributes:
        id: Unique plan identifier.
        kind: SCHEDULED or GROUP_SWIPE.
        title: Human-readable title.
        owner_id: The organizer.
        status: Current lifecycle status.
        invites: Ordered invite records (owner excluded).
        candidates: Restaurant options, fixed at creation.
        votes: Participant id -> liked candidate ids.
        completed_voters: Participants who finished swiping.
        rsvp_deadline: RSVP cutoff (scheduled plans only).
        voting_opened_at: When voting opened for a scheduled plan (set once).
        resolved_restaurant: The winner, once decided.
        restaurant_override: Owner-picked candidate applied on confirmation.
        date: Event date as YYYY-MM-DD (scheduled plans).
        time: Event time as "h:mm AM/PM" (scheduled plans).
        cancelled_at: When the plan was cancelled.
        cuisine: Cuisine preference label.
        budget: Budget label.
        options: Free-form option tags chosen by the organizer.
        restaurant_count: Requested size of the candidate pool.
        allow_curveball: Whether a wildcard candidate may be suggested.
        created_at: Creation time.
        updated_at: Last modification time.
        version: Optimistic concurrency version, bumped on every save.
    """

    id: UUID
    kind: PlanKind
    title: str
    owner_id: UUID
    created_at: datetime
    updated_at: datetime
    status: PlanStatus = field(default=PlanStatus.VOTING)
    invites: tuple[PlanInvite, ...] = field(default_factory=tuple)
    candidates: tuple[RestaurantOption, ...] = field(default_factory=tuple)
    votes: Mapping[UUID, frozenset[str]] = field(default_factory=dict)
    completed_voters: frozenset[UUID] = field(default_factory=frozenset)
    rsvp_deadline: datetime | None = field(default=None)
    voting_opened_at: datetime | None = field(default=None)
    resolved_restaurant: RestaurantOption | None = field(default=None)
    restaurant_override: RestaurantOption | None = field(default=None)
    date: str | None = field(default=None)
    time: str | None = field(default=None)
    cancelled_at: datetime | None = field(default=None)
    cuisine: str = field(default="Any")
    budget: str = field(default="$$")
    options: tuple[str, ...] = field(default_factory=tuple)
    restaurant_count: int | None = field(default=None)
    allow_curveball: bool = field(default=False)
    version: int = field(default=0)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal()

    @property
    def candidate_ids(self) -> frozenset[str]:
        return frozenset(c.id for c in self.candidates)

    @property
    def pending_invites(self) -> tuple[PlanInvite, ...]:
        return tuple(i for i in self.invites if i.status is InviteStatus.PENDING)

    @property
    def accepted_invites(self) -> tuple[PlanInvite, ...]:
        return tuple(i for i in self.invites if i.status is InviteStatus.ACCEPTED)

    def is_owner(self, user_id: UUID) -> bool:
        return self.owner_id == user_id

    def find_invite(self, user_id: UUID) -> PlanInvite | None:
        """Return the invite for a user, or None if they are not invited."""
        for invite in self.invites:
            if invite.user_id == user_id:
                return invite
        return None

    def involves(self, user_id: UUID) -> bool:
        """Check if a user owns the plan or holds any invite on it."""
        return self.is_owner(user_id) or self.find_invite(user_id) is not None

    def required_participants(self) -> tuple[Participant, ...]:
        """Return the owner plus every invitee who has not declined.

        Recomputed on every call so invite changes, leaves and delegations
        are always reflected.
        """
        owner = Participant(user_id=self.owner_id, role=ParticipantRole.OWNER)
        invitees = tuple(
            Participant(user_id=i.user_id, role=ParticipantRole.INVITEE)
            for i in self.invites
            if i.status is not InviteStatus.DECLINED
        )
        return (owner,) + invitees

    def required_participant_ids(self) -> tuple[UUID, ...]:
        return tuple(p.user_id for p in self.required_participants())

    def all_required_done(self) -> bool:
        """Check if every required participant has finished swiping."""
        required = self.required_participants()
        return len(required) > 0 and all(
            p.user_id in self.completed_voters for p in required
        )

    # -------------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------------

    def with_status(self, new_status: PlanStatus, at: datetime) -> Plan:
        """Create new plan with updated status.

        Enforces the transition matrix. Cancelling stamps cancelled_at.

        Args:
            new_status: The status to transition to.
            at: Timestamp of the transition.

        Returns:
            New Plan instance in the requested status.

        Raises:
            InvalidTransitionError: If the transition is not in the matrix,
                or the target status requires a restaurant that is not set.
        """
        allowed = self.status.valid_transitions()
        if new_status not in allowed:
            raise InvalidTransitionError(
                current_status=self.status,
                requested_status=new_status,
                allowed_transitions=sorted(allowed, key=lambda s: s.value),
            )

        if new_status in RESOLVED_STATUSES and self.resolved_restaurant is None:
            raise InvalidTransitionError(
                current_status=self.status,
                requested_status=new_status,
                reason="no restaurant has been resolved",
            )

        return replace(
            self,
            status=new_status,
            cancelled_at=at if new_status is PlanStatus.CANCELLED else self.cancelled_at,
            updated_at=at,
        )

    def with_resolution(self, winner: RestaurantOption, at: datetime) -> Plan:
        """Store the winning restaurant and confirm the plan.

        Args:
            winner: The candidate chosen by the tally.
            at: Timestamp of the confirmation.

        Returns:
            New Plan instance in CONFIRMED status.

        Raises:
            InvalidTransitionError: If the plan is not in VOTING.
        """
        if self.status is not PlanStatus.VOTING:
            raise InvalidTransitionError(
                current_status=self.status,
                requested_status=PlanStatus.CONFIRMED,
                allowed_transitions=sorted(
                    self.status.valid_transitions(), key=lambda s: s.value
                ),
            )
        return replace(self, resolved_restaurant=winner).with_status(
            PlanStatus.CONFIRMED, at
        )

    def with_restaurant_override(
        self, restaurant: RestaurantOption | None, at: datetime
    ) -> Plan:
        """Set or clear the owner's pick while still voting.

        The pick becomes resolved_restaurant only when the owner confirms.
        """
        return replace(self, restaurant_override=restaurant, updated_at=at)

    def with_changes(self, at: datetime, **changes: object) -> Plan:
        """Return a copy with plain field changes and a fresh updated_at."""
        return replace(self, updated_at=at, **changes)  # type: ignore[arg-type]

    def with_version(self, version: int) -> Plan:
        return replace(self, version=version)
