"""
Service layer — business rules over the flat-file store.
"""

from backend_wallettracker.services.wallet_service import WalletService

__all__ = ["WalletService"]
