"""
Transfer View Resolver

A transfer is stored once. What a member sees depends on who they are:

- the sender sees an OUTGOING debit titled "→ <recipient>"
- the recipient sees an INCOMING credit titled "← <sender>"
- anyone else sees nothing

Income and expense entries pass through unchanged, signed by kind.
"""

from typing import Mapping, Optional
from uuid import UUID

from homeledger.models.home import HomeMember
from homeledger.models.ledger import EntryKind, EntryView, LedgerEntry, TransferDirection


UNKNOWN_MEMBER = "?"


class TransferViewResolver:
    """Turns stored entries into what one member sees."""

    def resolve(
        self,
        entry: LedgerEntry,
        viewer_id: UUID,
        members_by_id: Mapping[UUID, HomeMember],
    ) -> Optional[EntryView]:
        """
        Resolve an entry for a viewer.

        Returns:
            The view, or None if the viewer may not see the entry
        """
        if not entry.is_transfer:
            signed = entry.amount if entry.kind == EntryKind.INCOME else -entry.amount
            return EntryView(
                entry=entry,
                display_title=entry.title,
                signed_amount=signed,
            )

        if viewer_id == entry.from_user_id:
            direction = TransferDirection.OUTGOING
            counterparty_id = entry.to_user_id
            arrow = "→"
            signed = -entry.amount
        elif viewer_id == entry.to_user_id:
            direction = TransferDirection.INCOMING
            counterparty_id = entry.from_user_id
            arrow = "←"
            signed = entry.amount
        else:
            return None

        counterparty = members_by_id.get(counterparty_id)
        name = counterparty.name if counterparty else UNKNOWN_MEMBER

        title = f"{arrow} {name}"
        if entry.title:
            title = f"{title}: {entry.title}"

        return EntryView(
            entry=entry,
            direction=direction,
            counterparty_id=counterparty_id,
            counterparty_name=name,
            display_title=title,
            signed_amount=signed,
        )

    def resolve_many(
        self,
        entries: list[LedgerEntry],
        viewer_id: UUID,
        members_by_id: Mapping[UUID, HomeMember],
    ) -> list[EntryView]:
        views = (self.resolve(e, viewer_id, members_by_id) for e in entries)
        return [v for v in views if v is not None]
