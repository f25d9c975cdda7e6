"""Errors raised by the catalog reconciliation services."""

from __future__ import annotations


class CatalogError(RuntimeError):
    """Base class for catalog reconciliation failures."""


class CatalogValidationError(CatalogError):
    """An upstream item cannot be written to the local catalog."""


class NotConnectedError(CatalogError):
    """The business has no link to the upstream platform."""


class UnknownProductError(CatalogError):
    """A variant event references a product that was never synced."""


class InvalidShopDomainError(CatalogError, ValueError):
    """The shop identifier is not a valid storefront domain."""


class WebhookVerificationError(CatalogError):
    """An inbound webhook failed signature verification."""
