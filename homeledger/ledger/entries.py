"""
Ledger Service

Writes and reads of income, expense and transfer entries.

Every write is:
1. Schema-validated (pydantic, converted to ValidationError)
2. Semantically validated against the home (LedgerValidator)
3. Stored
4. Audited

Reads go through the TransferViewResolver, so a member only ever sees
transfers they took part in, oriented from their side.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Union
from uuid import UUID

from homeledger.audit import AuditLogger
from homeledger.categories import CategoryService
from homeledger.config import LedgerSettings, get_ledger_settings
from homeledger.errors import ConflictError, NotFoundError, ValidationError
from homeledger.models.audit import AuditEventBuilder
from homeledger.models.category import SystemCategory
from homeledger.models.common import Page, ValidationIssue
from homeledger.models.ledger import (
    EntryCreate,
    EntryFilter,
    EntryKind,
    EntryUpdate,
    EntryView,
    LedgerEntry,
    TransferCreate,
)
from homeledger.ledger.transfers import TransferViewResolver
from homeledger.services.storage import LedgerStorageInterface
from homeledger.validation import (
    LedgerValidator,
    build_model,
    ensure_member_of,
    positive_count,
)


# Fields a transfer may change after creation
TRANSFER_MUTABLE_FIELDS = frozenset({"amount", "occurred_at", "title"})


class LedgerService:
    """Entry and transfer operations of one store."""

    def __init__(
        self,
        storage: LedgerStorageInterface,
        category_service: CategoryService,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        self._storage = storage
        self._categories = category_service
        self._audit = audit_logger or AuditLogger()
        self._settings = get_ledger_settings(settings)
        self._validator = LedgerValidator(storage)
        self._resolver = TransferViewResolver()

    async def _get_owned(self, entry_id: UUID, home_id: UUID) -> LedgerEntry:
        entry = await self._storage.get_entry(entry_id)
        if entry is None or entry.home_id != home_id:
            raise NotFoundError("Entry not found")
        return entry

    async def _members_by_id(self, home_id: UUID) -> dict:
        return {m.id: m for m in await self._storage.list_members(home_id)}

    # -------------------------------------------------------------------------
    # Income and expenses
    # -------------------------------------------------------------------------

    async def create_entry(
        self,
        home_id: UUID,
        user_id: UUID,
        data: Union[EntryCreate, dict[str, Any]],
    ) -> LedgerEntry:
        """
        Record an income or expense.

        Raises:
            ValidationError: Malformed input, a TRANSFER kind, or a
                category that doesn't accept the kind
            NotFoundError: Unknown user, category or card
        """
        data = build_model(EntryCreate, data)
        if data.kind == EntryKind.TRANSFER:
            raise ValidationError(
                "Transfers are created with create_transfer",
                [ValidationIssue(
                    field="kind",
                    issue_type="not_allowed",
                    message="Use create_transfer for transfers",
                    suggested_fix="create_transfer",
                )],
            )

        ensure_member_of(await self._storage.get_member(user_id), home_id)

        entry = build_model(LedgerEntry, {
            **data.model_dump(),
            "home_id": home_id,
            "created_by_id": user_id,
        })
        await self._validator.validate_entry(entry)

        entry = await self._storage.save_entry(entry)
        await self._audit.log(AuditEventBuilder.entry_created(
            entry_id=entry.id,
            home_id=home_id,
            actor_id=user_id,
            kind=entry.kind.value,
            amount=str(entry.amount),
        ))
        return entry

    async def update_entry(
        self,
        entry_id: UUID,
        home_id: UUID,
        data: Union[EntryUpdate, dict[str, Any]],
    ) -> LedgerEntry:
        """
        Partially update an entry.

        kind, owner and transfer participants never change. Transfers
        accept only amount, occurred_at and title.
        """
        data = build_model(EntryUpdate, data)
        entry = await self._get_owned(entry_id, home_id)
        changes = data.changes()

        if entry.is_transfer:
            rejected = sorted(set(changes) - TRANSFER_MUTABLE_FIELDS)
            if rejected:
                raise ValidationError.from_issues([
                    ValidationIssue(
                        field=field,
                        issue_type="not_allowed",
                        message="Transfers only allow amount, occurred_at and title changes",
                    )
                    for field in rejected
                ])

        updated = build_model(LedgerEntry, {
            **entry.model_dump(),
            **changes,
            "updated_at": datetime.utcnow(),
        })
        await self._validator.validate_entry(updated)

        updated = await self._storage.update_entry(updated)
        await self._audit.log(AuditEventBuilder.entry_updated(
            entry_id=entry_id,
            home_id=home_id,
            changed_fields=sorted(changes),
        ))
        return updated

    async def delete_entry(self, entry_id: UUID, home_id: UUID) -> None:
        """Hard delete."""
        await self._get_owned(entry_id, home_id)
        await self._storage.delete_entry(entry_id)
        await self._audit.log(AuditEventBuilder.entry_deleted(entry_id, home_id))

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_entry(self, entry_id: UUID, home_id: UUID, viewer_id: UUID) -> EntryView:
        """An entry as the viewer sees it; hidden transfers are not found."""
        entry = await self._get_owned(entry_id, home_id)
        view = self._resolver.resolve(entry, viewer_id, await self._members_by_id(home_id))
        if view is None:
            raise NotFoundError("Entry not found")
        return view

    async def list_entries(
        self,
        viewer_id: UUID,
        entry_filter: Union[EntryFilter, dict[str, Any]],
        page: int = 1,
        limit: Optional[int] = None,
    ) -> Page[EntryView]:
        """
        One page of entries visible to the viewer, newest first.

        limit defaults to the configured page size and is capped at the
        configured maximum.
        """
        entry_filter = build_model(EntryFilter, entry_filter)
        viewer = await self._storage.get_member(viewer_id)
        ensure_member_of(viewer, entry_filter.home_id)

        page = positive_count(page, "page")
        limit = positive_count(limit or self._settings.default_page_size, "limit")
        limit = min(limit, self._settings.max_page_size)

        entry_filter = entry_filter.model_copy(update={"visible_to": viewer_id})
        total = await self._storage.count_entries(entry_filter)
        entries = await self._storage.list_entries(
            entry_filter,
            offset=(page - 1) * limit,
            limit=limit,
        )

        members = await self._members_by_id(entry_filter.home_id)
        items = self._resolver.resolve_many(entries, viewer_id, members)
        return Page[EntryView].build(items, page=page, limit=limit, total=total)

    # -------------------------------------------------------------------------
    # Transfers
    # -------------------------------------------------------------------------

    async def create_transfer(
        self,
        home_id: UUID,
        from_user_id: UUID,
        to_user_id: UUID,
        amount: Decimal,
        occurred_at: datetime,
        title: Optional[str] = None,
    ) -> LedgerEntry:
        """
        Move money from one member to another.

        Stored once, under the home's Transfer category.

        Raises:
            ValidationError: Malformed amount or date
            NotFoundError: The sender is not a member of the home
            ConflictError: Self-transfer, or recipient outside the home
        """
        data = build_model(TransferCreate, {
            "to_user_id": to_user_id,
            "amount": amount,
            "occurred_at": occurred_at,
            "title": title,
        })

        ensure_member_of(await self._storage.get_member(from_user_id), home_id)
        if from_user_id == data.to_user_id:
            raise ConflictError("Cannot transfer to yourself")

        recipient = await self._storage.get_member(data.to_user_id)
        if recipient is None or recipient.home_id != home_id:
            raise ConflictError("Recipient is not a member of this home")

        async with self._storage.transaction():
            category = await self._categories.get_or_create_system_category(
                home_id, SystemCategory.TRANSFER
            )
            entry = build_model(LedgerEntry, {
                "home_id": home_id,
                "created_by_id": from_user_id,
                "kind": EntryKind.TRANSFER,
                "amount": data.amount,
                "occurred_at": data.occurred_at,
                "title": data.title,
                "category_id": category.id,
                "from_user_id": from_user_id,
                "to_user_id": data.to_user_id,
            })
            entry = await self._storage.save_entry(entry)

        await self._audit.log(AuditEventBuilder.transfer_created(
            entry_id=entry.id,
            home_id=home_id,
            from_user_id=from_user_id,
            to_user_id=data.to_user_id,
            amount=str(entry.amount),
        ))
        return entry
