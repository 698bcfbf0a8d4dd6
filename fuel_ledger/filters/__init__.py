"""Declarative filter classes for API query parameter filtering."""

from .transaction import TransactionFilter

__all__ = ["TransactionFilter"]
