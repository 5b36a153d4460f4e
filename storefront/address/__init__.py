"""
Address — shipment addresses and the selected delivery address.
"""

from storefront.address._book import AddressBook

__all__ = ("AddressBook",)
