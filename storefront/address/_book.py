"""
Address book — shipment addresses plus the checkout's address selection.

The list is never patched locally: every create/delete is followed by a
refetch. Selection is client state only, it is not sent anywhere until an
order is created.
"""

from __future__ import annotations

import logging

from kungfu import Error, Ok, Result
from pydantic import TypeAdapter

from storefront._errors import Errors, StorefrontError
from storefront._models import Address, AddressFields
from storefront._notify import Level, LoggingNotifier, Notice, Notifier
from storefront._types import AddressId
from storefront.api import (
    CREATE_ADDRESS,
    DELETE_ADDRESS,
    LIST_ADDRESSES,
    ApiClient,
    decode_as,
)

logger = logging.getLogger(__name__)

_ADDRESSES = TypeAdapter(list[Address])


class AddressBook:
    """
    Shipment addresses of the signed-in customer.

    Example:
        book = AddressBook(api, notifier)
        await book.fetch_addresses()
        book.selected_id          # first address unless the user picked one
        book.select(other.id)
    """

    def __init__(self, api: ApiClient, notifier: Notifier | None = None) -> None:
        self._api = api
        self._notifier = notifier or LoggingNotifier()
        self._addresses: list[Address] = []
        self._selected: AddressId | None = None

    @property
    def addresses(self) -> tuple[Address, ...]:
        return tuple(self._addresses)

    @property
    def selected_id(self) -> AddressId | None:
        return self._selected

    @property
    def selected(self) -> Address | None:
        return next((a for a in self._addresses if a.id == self._selected), None)

    async def fetch_addresses(self) -> Result[list[Address], StorefrontError]:
        result = await self._api.call(
            LIST_ADDRESSES, default_message="Unable to fetch addresses"
        ).then(decode_as(_ADDRESSES))

        match result:
            case Ok(addresses):
                self._addresses = list(addresses)
                self._default_selection()
            case Error(err):
                self._report(err)
        return result

    async def add_address(self, fields: AddressFields) -> Result[None, StorefrontError]:
        """
        Create an address from raw form input.

        Refused before any request when a field is blank or the pincode
        is not a number.
        """
        if missing := fields.missing():
            logger.info("address refused, blank fields: %s", ", ".join(missing))
            return self._refuse("All fields are required")

        pincode = fields.pincode.strip()
        if not pincode.isdigit():
            return self._refuse("Pincode must be numeric")

        body = {**fields.model_dump(), "pincode": int(pincode)}
        result = await self._api.call(
            CREATE_ADDRESS, json=body, default_message="Failed to add address"
        ).map(lambda _: None)

        match result:
            case Ok(_):
                self._notifier.notify(Notice("Success", "Address added successfully"))
                await self.fetch_addresses()
            case Error(err):
                self._report(err)
        return result

    async def delete_address(self, address_id: AddressId) -> Result[None, StorefrontError]:
        result = await self._api.call(
            DELETE_ADDRESS,
            default_message="Failed to delete address",
            address_id=address_id,
        ).map(lambda _: None)

        match result:
            case Ok(_):
                self._notifier.notify(Notice("Success", "Address deleted"))
            case Error(err):
                self._report(err)
        await self.fetch_addresses()
        return result

    def select(self, address_id: AddressId) -> Result[AddressId, StorefrontError]:
        if not any(a.id == address_id for a in self._addresses):
            return Error(Errors.validation(f"Unknown address: {address_id}"))
        self._selected = address_id
        return Ok(address_id)

    def _default_selection(self) -> None:
        # First address wins when nothing valid is selected.
        if self.selected is not None:
            return
        self._selected = self._addresses[0].id if self._addresses else None

    def _refuse(self, message: str) -> Result[None, StorefrontError]:
        self._notifier.notify(Notice("Validation", message, Level.WARNING))
        return Error(Errors.validation(message))

    def _report(self, err: StorefrontError) -> None:
        logger.warning("address operation failed: %s (%s)", err.message, err.kind.name)
        self._notifier.notify(Notice("Error", err.message, Level.ERROR))


__all__ = ("AddressBook",)
