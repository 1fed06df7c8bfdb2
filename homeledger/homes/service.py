"""
Home Service

Registration flow: creating a home with its owner, joining one by code,
and the roster the rest of the engine reads.

CRITICAL: create_home is ONE unit of work. The home, its seeded
categories, the owner, the owner's card and the owner assignment are all
stored, or none are. join_home is likewise atomic for member + card.
"""

import secrets
from typing import Optional, Union
from uuid import UUID

import structlog

from homeledger.audit import AuditLogger
from homeledger.config import LedgerSettings, get_ledger_settings
from homeledger.config.categories import DEFAULT_CATEGORIES
from homeledger.errors import ConflictError, ConsistencyError, LedgerError, NotFoundError
from homeledger.models.audit import AuditEventBuilder
from homeledger.models.category import Category, DefaultCategory
from homeledger.models.home import CreditCard, Currency, Home, HomeMember
from homeledger.services.storage import DuplicateError, LedgerStorageInterface
from homeledger.validation import build_model


logger = structlog.get_logger(__name__)

# Attempts at drawing an unused join code before giving up
MAX_CODE_ATTEMPTS = 20


class HomeService:
    """Homes, members and cards."""

    def __init__(
        self,
        storage: LedgerStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        self._storage = storage
        self._audit = audit_logger or AuditLogger()
        self._settings = get_ledger_settings(settings)

    def _draw_code(self) -> str:
        chars = self._settings.home_code_chars
        return "".join(secrets.choice(chars) for _ in range(self._settings.home_code_length))

    async def _unique_code(self) -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = self._draw_code()
            if await self._storage.get_home_by_code(code) is None:
                return code
        message = f"No unused home code after {MAX_CODE_ATTEMPTS} attempts"
        await self._audit.log_error(
            error_type="home_code_exhausted",
            error_message=message,
            details={
                "code_length": self._settings.home_code_length,
                "alphabet_size": len(self._settings.home_code_chars),
            },
        )
        raise ConsistencyError(message)

    async def _ensure_email_free(self, email: str) -> None:
        if await self._storage.get_member_by_email(email) is not None:
            raise ConflictError("Email already registered")

    def _member_card(self, member: HomeMember) -> CreditCard:
        return CreditCard(
            user_id=member.id,
            name=f"{member.name} {self._settings.default_card_suffix}",
        )

    async def create_home(
        self,
        owner_name: str,
        owner_email: str,
        home_name: str,
        currency: Union[Currency, str, None] = None,
        default_categories: Optional[list[DefaultCategory]] = None,
    ) -> tuple[Home, HomeMember]:
        """
        Register a new home and its owner.

        Args:
            default_categories: Table seeded into the home; DEFAULT_CATEGORIES if None

        Returns:
            The home (with owner_id set) and the owner member

        Raises:
            ValidationError: Malformed names, e-mail or currency
            ConflictError: The e-mail is already registered
            ConsistencyError: The unit failed part way and was rolled back
        """
        table = DEFAULT_CATEGORIES if default_categories is None else default_categories
        currency = currency or self._settings.default_currency

        try:
            async with self._storage.transaction():
                await self._ensure_email_free(owner_email)

                home = build_model(Home, {
                    "code": await self._unique_code(),
                    "name": home_name,
                    "currency": currency,
                })
                owner = build_model(HomeMember, {
                    "home_id": home.id,
                    "name": owner_name,
                    "email": owner_email,
                })

                home = await self._storage.save_home(home)
                for row in table:
                    await self._storage.save_category(Category(
                        home_id=home.id,
                        is_default=True,
                        **row.model_dump(),
                    ))
                owner = await self._storage.save_member(owner)
                await self._storage.save_card(self._member_card(owner))
                home = await self._storage.update_home(
                    home.model_copy(update={"owner_id": owner.id})
                )
        except LedgerError:
            raise
        except DuplicateError as e:
            raise ConflictError(str(e)) from e
        except Exception as e:
            await self._audit.log_consistency_failure(
                operation="create_home",
                error_message=str(e),
            )
            raise ConsistencyError(f"Home registration failed: {e}") from e

        await self._audit.log(AuditEventBuilder.home_created(home.id, owner.id, len(table)))
        return home, owner

    async def join_home(self, code: str, name: str, email: str) -> HomeMember:
        """
        Join an existing home with its code.

        Raises:
            NotFoundError: Unknown code
            ConflictError: The e-mail is already registered
        """
        home = await self._storage.get_home_by_code(code)
        if home is None:
            raise NotFoundError("Home not found")

        try:
            async with self._storage.transaction():
                await self._ensure_email_free(email)
                member = await self._storage.save_member(build_model(HomeMember, {
                    "home_id": home.id,
                    "name": name,
                    "email": email,
                }))
                await self._storage.save_card(self._member_card(member))
        except LedgerError:
            raise
        except DuplicateError as e:
            raise ConflictError(str(e)) from e
        except Exception as e:
            await self._audit.log_consistency_failure(
                operation="join_home",
                error_message=str(e),
                entity_id=home.id,
            )
            raise ConsistencyError(f"Joining home failed: {e}") from e

        await self._audit.log(AuditEventBuilder.member_joined(home.id, member.id))
        return member

    async def get_home(self, home_id: UUID) -> Home:
        home = await self._storage.get_home(home_id)
        if home is None:
            raise NotFoundError("Home not found")
        return home

    async def list_members(self, home_id: UUID) -> list[HomeMember]:
        """Members in joining order."""
        await self.get_home(home_id)
        return await self._storage.list_members(home_id)

    async def get_member(self, user_id: UUID) -> HomeMember:
        member = await self._storage.get_member(user_id)
        if member is None:
            raise NotFoundError("User not found")
        return member

    async def list_cards(self, user_id: UUID) -> list[CreditCard]:
        await self.get_member(user_id)
        return await self._storage.list_cards([user_id])

    async def add_card(self, user_id: UUID, name: str) -> CreditCard:
        """Give a member another card."""
        await self.get_member(user_id)
        card = build_model(CreditCard, {"user_id": user_id, "name": name})
        card = await self._storage.save_card(card)
        logger.info("card_added", user_id=str(user_id), card_id=str(card.id))
        return card
