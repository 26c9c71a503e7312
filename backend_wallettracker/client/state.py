"""
Client application state.

AppStore holds UI-level selection and mode flags and exposes one method per
mutation. reconcile_selection() keeps the selected wallet consistent with the
latest wallet list and is called whenever that list changes.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable

from backend_wallettracker.tracker_logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AppState:
    selected_wallet: str | None = None
    is_edit_mode: bool = False
    show_add_form: bool = False
    is_syncing: bool = False
    syncing_wallets: frozenset[str] = field(default_factory=frozenset)
    newly_added_wallets: frozenset[str] = field(default_factory=frozenset)
    pending_wallet_selection: str | None = None
    """Wallet to select once it shows up in the wallet list (e.g. right after creation)."""


Listener = Callable[[AppState], None]


class AppStore:
    """Immutable-snapshot state store; listeners get every new snapshot."""

    def __init__(self, initial: AppState | None = None) -> None:
        self._state = initial or AppState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, **changes: Any) -> AppState:
        new_state = replace(self._state, **changes)
        if new_state != self._state:
            self._state = new_state
            for listener in list(self._listeners):
                listener(new_state)
        return self._state

    # Selection

    def select_wallet(self, wallet_id: str | None) -> AppState:
        return self._set(selected_wallet=wallet_id)

    def set_pending_selection(self, wallet_id: str) -> AppState:
        return self._set(pending_wallet_selection=wallet_id)

    def clear_pending_selection(self) -> AppState:
        return self._set(pending_wallet_selection=None)

    # Modes

    def toggle_edit_mode(self) -> AppState:
        return self._set(is_edit_mode=not self._state.is_edit_mode)

    def set_edit_mode(self, is_edit_mode: bool) -> AppState:
        return self._set(is_edit_mode=is_edit_mode)

    def set_show_add_form(self, show: bool) -> AppState:
        return self._set(show_add_form=show)

    def set_is_syncing(self, is_syncing: bool) -> AppState:
        return self._set(is_syncing=is_syncing)

    # Wallet sets

    def add_syncing_wallet(self, wallet_id: str) -> AppState:
        return self._set(syncing_wallets=self._state.syncing_wallets | {wallet_id})

    def remove_syncing_wallet(self, wallet_id: str) -> AppState:
        return self._set(syncing_wallets=self._state.syncing_wallets - {wallet_id})

    def add_newly_added_wallet(self, wallet_id: str) -> AppState:
        return self._set(newly_added_wallets=self._state.newly_added_wallets | {wallet_id})

    def remove_newly_added_wallet(self, wallet_id: str) -> AppState:
        return self._set(newly_added_wallets=self._state.newly_added_wallets - {wallet_id})

    def reconcile_selection(self, wallets: list[dict[str, Any]], wallets_loading: bool = False) -> AppState:
        """
        Bring the selection in line with the wallet list:
        1. a pending selection is applied (and cleared) once that wallet is listed;
        2. with nothing selected or pending, the first wallet is selected;
        3. a selected wallet that is no longer listed falls back to the first one.
        An empty list leaves the selection untouched.
        """
        if not wallets:
            return self._state
        ids = [w.get("id") for w in wallets]
        state = self._state
        if state.pending_wallet_selection and state.pending_wallet_selection in ids:
            logger.debug("selection_pending_applied", wallet_id=state.pending_wallet_selection)
            return self._set(selected_wallet=state.pending_wallet_selection, pending_wallet_selection=None)
        if not wallets_loading and state.selected_wallet is None and state.pending_wallet_selection is None:
            return self._set(selected_wallet=ids[0])
        if state.selected_wallet is not None and state.selected_wallet not in ids:
            logger.debug("selection_fallback", missing=state.selected_wallet, wallet_id=ids[0])
            return self._set(selected_wallet=ids[0])
        return state
