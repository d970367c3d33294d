"""
Trade offers between the two players.
"""

from __future__ import annotations

import dataclasses
import uuid
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

from fore.enums import TradeStatus
from fore.exceptions import InvalidActionError
from fore.money import Money


@dataclass(frozen=True)
class TradeOffer:
    """
    A proposed two-way exchange of properties and currency.

    Offers are immutable; status transitions return a new offer. Only a
    PENDING offer can move, and never back to PENDING.
    """

    offering_player_id: uuid.UUID
    receiving_player_id: uuid.UUID
    offered_property_ids: FrozenSet[uuid.UUID] = frozenset()
    requested_property_ids: FrozenSet[uuid.UUID] = frozenset()
    offered_currency: Money = Money.zero()
    requested_currency: Money = Money.zero()
    status: TradeStatus = TradeStatus.PENDING
    offer_id: uuid.UUID = field(default_factory=uuid.uuid4)

    @classmethod
    def propose(
        cls,
        offering_player_id: uuid.UUID,
        receiving_player_id: uuid.UUID,
        *,
        offered_property_ids: Iterable[uuid.UUID] = (),
        requested_property_ids: Iterable[uuid.UUID] = (),
        offered_currency: Optional[Money] = None,
        requested_currency: Optional[Money] = None,
    ) -> "TradeOffer":
        return cls(
            offering_player_id=offering_player_id,
            receiving_player_id=receiving_player_id,
            offered_property_ids=frozenset(offered_property_ids),
            requested_property_ids=frozenset(requested_property_ids),
            offered_currency=offered_currency or Money.zero(),
            requested_currency=requested_currency or Money.zero(),
        )

    def is_pending(self) -> bool:
        return self.status is TradeStatus.PENDING

    def is_empty(self) -> bool:
        return (
            not self.offered_property_ids
            and not self.requested_property_ids
            and self.offered_currency.is_zero()
            and self.requested_currency.is_zero()
        )

    def accept(self) -> "TradeOffer":
        return self._transition(TradeStatus.ACCEPTED, "accept")

    def reject(self) -> "TradeOffer":
        return self._transition(TradeStatus.REJECTED, "reject")

    def cancel(self) -> "TradeOffer":
        return self._transition(TradeStatus.CANCELLED, "cancel")

    def expire(self) -> "TradeOffer":
        return self._transition(TradeStatus.EXPIRED, "expire")

    def _transition(self, target: TradeStatus, verb: str) -> "TradeOffer":
        if not self.is_pending():
            raise InvalidActionError(f"Can only {verb} pending trades (status: {self.status.name})")
        return dataclasses.replace(self, status=target)

    def __str__(self) -> str:
        def side(props: FrozenSet[uuid.UUID], cash: Money) -> str:
            items = []
            if cash.is_positive():
                items.append(str(cash))
            if props:
                items.append(f"{len(props)} properties")
            return " + ".join(items) if items else "nothing"

        return (
            f"Trade {self.offer_id} [{self.status.name}]: "
            f"{side(self.offered_property_ids, self.offered_currency)} for "
            f"{side(self.requested_property_ids, self.requested_currency)}"
        )
