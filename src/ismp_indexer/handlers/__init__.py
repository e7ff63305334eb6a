"""
Entry points invoked by the indexing framework for matched handler transactions.
"""

from .transactions import TransactionHandler

__all__ = ['TransactionHandler']
