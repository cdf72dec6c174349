"""
familyvault/services/auth_service.py

Purpose: Auth token holder

- Subscribes to identity-provider auth-state changes
- Owns the live user handle and the cached bearer token
- Persists the token for code paths without a live handle
- get_token() prefers a freshly minted token from the live handle
"""

import logging
from typing import Optional, List, Callable

from familyvault.core.exceptions import NotAuthenticatedError, TransportError, IdentityError
from familyvault.services.identity import IdentityProvider, IdentityUser, AuthStateCallback
from familyvault.services.token_store import TokenStore


class AuthTokenHolder:
    """
    Single owner of the current user handle and bearer token.

    The cached token and the persisted entry are only written on auth
    transitions (sign-in / sign-out / clear).
    """

    def __init__(self, provider: IdentityProvider, store: TokenStore, store_key: str, logger: logging.Logger):
        self.provider = provider
        self.store = store
        self.store_key = store_key
        self.logger = logger
        self.user: Optional[IdentityUser] = None
        self._token: Optional[str] = None
        self._listeners: List[AuthStateCallback] = []
        self._unsubscribe: Optional[Callable[[], None]] = None

    def start(self):
        """Subscribes to the identity provider. Idempotent."""
        if self._unsubscribe is None:
            self._unsubscribe = self.provider.on_auth_state_changed(self._handle_auth_state)

    def stop(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def subscribe(self, callback: AuthStateCallback) -> Callable[[], None]:
        """
        Registers a callback fired after the holder has processed a transition.
        """
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def _handle_auth_state(self, user: Optional[IdentityUser]):
        if user is not None:
            self.user = user
            try:
                token = await user.get_id_token()
            except (TransportError, IdentityError) as e:
                self.logger.warning(f"Could not mint token on sign-in: {e}")
                token = None
            if token:
                self._token = token
                self.store.set(self.store_key, token)
            self.logger.info("User authenticated", extra={"uid": user.uid})
        else:
            self.clear()
            self.logger.info("User signed out")

        for callback in list(self._listeners):
            await callback(user)

    async def get_token(self) -> str:
        """
        Returns a bearer token for an outgoing request.

        Prefers a fresh token from the live user handle, falls back to the
        cached/persisted token.

        Raises:
            NotAuthenticatedError: No live user and no persisted token
        """
        if self.user is not None:
            try:
                return await self.user.get_id_token()
            except (TransportError, IdentityError) as e:
                self.logger.warning(f"Token refresh failed, using cached token: {e}")
                if self._token:
                    return self._token

        token = self.store.get(self.store_key)
        if token:
            return token

        raise NotAuthenticatedError()

    def clear(self):
        """Forgets the user and removes the persisted token."""
        self.user = None
        self._token = None
        self.store.remove(self.store_key)
