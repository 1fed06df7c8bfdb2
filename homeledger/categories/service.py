"""
Category Service

Bilingual categories of a home.

A member types a name in one language; the other language comes from the
injected Translator. When translation fails the typed name is stored for
both languages and the fallback is audited. A failed translation never
fails the write.

Default categories (seeded with the home, or reserved system ones) cannot
be deleted.
"""

from typing import Any, Optional, Union
from uuid import UUID

import structlog

from homeledger.audit import AuditLogger
from homeledger.config import LedgerSettings, get_ledger_settings
from homeledger.errors import ConflictError, NotFoundError, ValidationError
from homeledger.models.audit import AuditEventBuilder, AuditEventType
from homeledger.models.category import (
    Category,
    CategoryCreate,
    CategoryKind,
    CategoryUpdate,
    Language,
    SystemCategory,
)
from homeledger.models.common import ValidationIssue
from homeledger.services.storage import LedgerStorageInterface
from homeledger.services.translation import (
    TranslatedName,
    Translator,
    translate_category_name,
)
from homeledger.validation import build_model


logger = structlog.get_logger(__name__)


class CategoryService:
    """Create, rename, delete and list a home's categories."""

    def __init__(
        self,
        storage: LedgerStorageInterface,
        translator: Optional[Translator] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        self._storage = storage
        self._translator = translator
        self._audit = audit_logger or AuditLogger()
        self._settings = get_ledger_settings(settings)

    async def _require_home(self, home_id: UUID) -> None:
        if await self._storage.get_home(home_id) is None:
            raise NotFoundError("Home not found")

    async def _get_owned(self, category_id: UUID, home_id: UUID) -> Category:
        category = await self._storage.get_category(category_id)
        if category is None or category.home_id != home_id:
            raise NotFoundError("Category not found")
        return category

    async def _ensure_unique(
        self,
        home_id: UUID,
        name: str,
        exclude_id: Optional[UUID] = None,
    ) -> None:
        """Names are unique per home, case-insensitively, across both languages."""
        for existing in await self._storage.list_categories(home_id):
            if existing.id != exclude_id and existing.has_name(name):
                raise ConflictError(f"A category named '{name}' already exists")

    async def _translate(self, name: str, lang: Language) -> TranslatedName:
        names = await translate_category_name(self._translator, name, lang)
        if names.used_fallback:
            await self._audit.log_translation_fallback(
                text=name,
                from_lang=lang.value,
                to_lang=lang.other.value,
                error_message=names.fallback_error,
            )
        return names

    async def create_category(
        self,
        home_id: UUID,
        data: Union[CategoryCreate, dict[str, Any]],
    ) -> Category:
        """
        Create a category from a name typed in one language.

        Raises:
            ValidationError: If the input is malformed
            NotFoundError: If the home doesn't exist
            ConflictError: If the name is already used in this home
        """
        data = build_model(CategoryCreate, data)
        await self._require_home(home_id)
        await self._ensure_unique(home_id, data.name)

        names = await self._translate(data.name, data.lang)
        category = build_model(Category, {
            "home_id": home_id,
            "name_tr": names.name_tr,
            "name_en": names.name_en,
            "icon": data.icon,
            "color": data.color,
            "kind": data.kind,
        })

        # Checked again: another write may have taken the name while translating
        async with self._storage.transaction():
            await self._ensure_unique(home_id, data.name)
            category = await self._storage.save_category(category)

        await self._audit.log(AuditEventBuilder.category_changed(
            event_type=AuditEventType.CATEGORY_CREATED,
            category_id=category.id,
            home_id=home_id,
            name=category.name(data.lang),
        ))
        return category

    async def update_category(
        self,
        category_id: UUID,
        home_id: UUID,
        data: Union[CategoryUpdate, dict[str, Any]],
    ) -> Category:
        """Partial update. A new name is translated again."""
        data = build_model(CategoryUpdate, data)
        category = await self._get_owned(category_id, home_id)
        changes = data.model_dump(exclude_unset=True, exclude={"lang"})

        if category.system_key is not None and (
            "name" in changes or "kind" in changes
        ):
            raise ValidationError(
                "Reserved categories cannot be renamed or re-kinded",
                [ValidationIssue(
                    field="name" if "name" in changes else "kind",
                    issue_type="not_allowed",
                    message="Reserved category",
                )],
            )

        updated = category.model_dump()
        if data.name is not None:
            await self._ensure_unique(home_id, data.name, exclude_id=category.id)
            names = await self._translate(data.name, data.lang)
            updated["name_tr"] = names.name_tr
            updated["name_en"] = names.name_en
        for field in ("icon", "color", "kind"):
            if changes.get(field) is not None:
                updated[field] = changes[field]
        updated = build_model(Category, updated)

        async with self._storage.transaction():
            if data.name is not None:
                await self._ensure_unique(home_id, data.name, exclude_id=category.id)
            category = await self._storage.update_category(updated)

        await self._audit.log(AuditEventBuilder.category_changed(
            event_type=AuditEventType.CATEGORY_UPDATED,
            category_id=category.id,
            home_id=home_id,
            name=category.name(data.lang),
        ))
        return category

    async def delete_category(self, category_id: UUID, home_id: UUID) -> None:
        """
        Delete a user-defined category.

        Entries keep pointing at the deleted id; reports show them under
        the unknown bucket.
        """
        category = await self._get_owned(category_id, home_id)
        if category.is_default:
            raise ValidationError(
                "Default categories cannot be deleted",
                [ValidationIssue(
                    field="category_id",
                    issue_type="not_allowed",
                    message="Default categories cannot be deleted",
                )],
            )

        await self._storage.delete_category(category_id)
        await self._audit.log(AuditEventBuilder.category_changed(
            event_type=AuditEventType.CATEGORY_DELETED,
            category_id=category_id,
            home_id=home_id,
            name=category.name_en,
        ))

    async def list_categories(
        self,
        home_id: UUID,
        kind: Optional[CategoryKind] = None,
        lang: Language = Language.TR,
    ) -> list[Category]:
        """
        A home's categories, defaults first, then by name in `lang`.

        A kind filter also matches BOTH categories, and hides the reserved
        Transfer category, which only transfers may use.
        """
        categories = await self._storage.list_categories(home_id)
        if kind is not None:
            categories = [
                c for c in categories
                if c.kind in (kind, CategoryKind.BOTH)
                and c.system_key != SystemCategory.TRANSFER
            ]
        categories.sort(key=lambda c: (not c.is_default, c.name(lang).casefold()))
        return categories

    def _system_category(self, home_id: UUID, key: SystemCategory) -> Category:
        s = self._settings
        if key == SystemCategory.TRANSFER:
            return Category(
                home_id=home_id,
                name_tr=s.transfer_category_name_tr,
                name_en=s.transfer_category_name_en,
                icon=s.transfer_category_icon,
                color=s.transfer_category_color,
                kind=CategoryKind.BOTH,
                is_default=True,
                system_key=key,
            )
        return Category(
            home_id=home_id,
            name_tr=s.loan_payment_category_name_tr,
            name_en=s.loan_payment_category_name_en,
            icon=s.loan_payment_category_icon,
            color=s.loan_payment_category_color,
            kind=CategoryKind.EXPENSE,
            is_default=True,
            system_key=key,
        )

    async def get_or_create_system_category(
        self,
        home_id: UUID,
        key: SystemCategory,
    ) -> Category:
        """Find a reserved category by key, creating it the first time."""
        async with self._storage.transaction():
            existing = await self._storage.find_system_category(home_id, key)
            if existing is not None:
                return existing

            category = await self._storage.save_category(
                self._system_category(home_id, key)
            )

        logger.info(
            "system_category_created",
            home_id=str(home_id),
            system_key=key.value,
            category_id=str(category.id),
        )
        return category
