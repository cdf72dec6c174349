"""
familyvault/services/identity.py

Purpose: Identity provider integration (Firebase Auth REST)

- Email/password sign-in and sign-up
- Display-name update and verification e-mail
- ID-token refresh through the secure-token endpoint
- Auth-state callbacks on sign-in / sign-out
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, Callable, Awaitable, List, Protocol

import httpx

from familyvault.core.config import Settings
from familyvault.core.exceptions import IdentityError, TransportError

# Refresh the ID token when it is this close to expiry
TOKEN_REFRESH_MARGIN = timedelta(minutes=5)


class IdentityUser(Protocol):
    """
    The live user handle exposed by an identity provider.
    """
    uid: str
    email: Optional[str]
    display_name: Optional[str]
    email_verified: bool
    photo_url: Optional[str]
    phone_number: Optional[str]

    async def get_id_token(self, force_refresh: bool = False) -> str:
        ...


AuthStateCallback = Callable[[Optional[IdentityUser]], Awaitable[None]]


class IdentityProvider(Protocol):
    def on_auth_state_changed(self, callback: AuthStateCallback) -> Callable[[], None]:
        ...

    async def sign_in(self, email: str, password: str) -> IdentityUser:
        ...

    async def sign_up(self, email: str, password: str, display_name: Optional[str] = None) -> IdentityUser:
        ...

    async def send_email_verification(self, user: IdentityUser):
        ...

    async def sign_out(self):
        ...


class FirebaseUser:
    """
    User handle backed by a Firebase ID token / refresh token pair.
    """

    def __init__(
        self,
        provider: "FirebaseIdentityProvider",
        uid: str,
        id_token: str,
        refresh_token: str,
        expires_in: int,
        email: Optional[str] = None,
        display_name: Optional[str] = None,
        email_verified: bool = False,
        photo_url: Optional[str] = None,
        phone_number: Optional[str] = None,
    ):
        self._provider = provider
        self.uid = uid
        self.email = email
        self.display_name = display_name
        self.email_verified = email_verified
        self.photo_url = photo_url
        self.phone_number = phone_number
        self._id_token = id_token
        self._refresh_token = refresh_token
        self._expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)

    @property
    def token_expiring(self) -> bool:
        return datetime.now(timezone.utc) + TOKEN_REFRESH_MARGIN >= self._expires_at

    async def get_id_token(self, force_refresh: bool = False) -> str:
        """
        Returns a valid ID token, refreshing it first when forced or close to expiry.
        """
        if force_refresh or self.token_expiring:
            data = await self._provider.refresh_tokens(self._refresh_token)
            self._id_token = data["id_token"]
            self._refresh_token = data.get("refresh_token", self._refresh_token)
            self._expires_at = datetime.now(timezone.utc) + timedelta(seconds=int(data.get("expires_in", 3600)))
        return self._id_token

    def apply_profile(self, record: Dict[str, Any]):
        """Copies fields from an accounts:lookup record."""
        self.email = record.get("email", self.email)
        self.display_name = record.get("displayName", self.display_name)
        self.email_verified = bool(record.get("emailVerified", self.email_verified))
        self.photo_url = record.get("photoUrl", self.photo_url)
        self.phone_number = record.get("phoneNumber", self.phone_number)


class FirebaseIdentityProvider:
    """
    Firebase Authentication over its REST API.
    """

    def __init__(self, config: Settings, logger: logging.Logger, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = config.FIREBASE_API_KEY
        self.identity_url = config.IDENTITY_BASE_URL.rstrip("/")
        self.token_url = config.SECURE_TOKEN_BASE_URL.rstrip("/")
        self.logger = logger
        self._timeout = config.HTTP_TIMEOUT_SECONDS
        self._transport = transport
        self._listeners: List[AuthStateCallback] = []
        self.current_user: Optional[FirebaseUser] = None

    def on_auth_state_changed(self, callback: AuthStateCallback) -> Callable[[], None]:
        """
        Registers an auth-state callback.

        Returns:
            Callable that removes the callback
        """
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def _notify(self, user: Optional[FirebaseUser]):
        for callback in list(self._listeners):
            await callback(user)

    async def _post(self, url: str, *, json: Optional[Dict] = None, data: Optional[Dict] = None) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, params={"key": self.api_key}, json=json, data=data)
        except httpx.TimeoutException:
            self.logger.error("Identity provider timeout")
            raise TransportError("The sign-in service is taking too long to respond. Please try again.")
        except httpx.RequestError as e:
            self.logger.error(f"Network error contacting identity provider: {e}")
            raise TransportError("Unable to connect to the sign-in service.")

        if response.status_code != 200:
            raise self._identity_error(response)

        return response.json()

    def _identity_error(self, response: httpx.Response) -> IdentityError:
        """
        Firebase errors look like {"error": {"message": "CODE : detail"}}.
        """
        try:
            message = response.json().get("error", {}).get("message", "")
        except ValueError:
            message = ""
        code = message.split(":")[0].strip() or f"HTTP_{response.status_code}"
        self.logger.warning(f"Identity provider rejected request: {code}")
        return IdentityError(code, message or "Authentication failed")

    async def _lookup(self, id_token: str) -> Dict[str, Any]:
        data = await self._post(f"{self.identity_url}/accounts:lookup", json={"idToken": id_token})
        users = data.get("users") or [{}]
        return users[0]

    def _user_from_auth(self, data: Dict[str, Any]) -> FirebaseUser:
        return FirebaseUser(
            provider=self,
            uid=data["localId"],
            id_token=data["idToken"],
            refresh_token=data["refreshToken"],
            expires_in=int(data.get("expiresIn", 3600)),
            email=data.get("email"),
            display_name=data.get("displayName") or None,
        )

    async def sign_in(self, email: str, password: str) -> FirebaseUser:
        """
        Signs in with e-mail and password and fires the auth-state callbacks.

        Raises:
            IdentityError: Provider rejected the credentials
            TransportError: Provider unreachable
        """
        data = await self._post(
            f"{self.identity_url}/accounts:signInWithPassword",
            json={"email": email, "password": password, "returnSecureToken": True},
        )
        user = self._user_from_auth(data)
        user.apply_profile(await self._lookup(user._id_token))

        self.current_user = user
        self.logger.info(f"Identity sign-in for uid {user.uid}")
        await self._notify(user)
        return user

    async def sign_up(self, email: str, password: str, display_name: Optional[str] = None) -> FirebaseUser:
        """
        Creates an account. Does not start a session: the caller sends the
        verification e-mail and returns the user to the login screen.
        """
        data = await self._post(
            f"{self.identity_url}/accounts:signUp",
            json={"email": email, "password": password, "returnSecureToken": True},
        )
        user = self._user_from_auth(data)

        if display_name:
            await self._post(
                f"{self.identity_url}/accounts:update",
                json={"idToken": user._id_token, "displayName": display_name, "returnSecureToken": False},
            )
            user.display_name = display_name

        self.logger.info(f"Identity account created for uid {user.uid}")
        return user

    async def send_email_verification(self, user: FirebaseUser):
        token = await user.get_id_token()
        await self._post(
            f"{self.identity_url}/accounts:sendOobCode",
            json={"requestType": "VERIFY_EMAIL", "idToken": token},
        )

    async def refresh_tokens(self, refresh_token: str) -> Dict[str, Any]:
        return await self._post(
            f"{self.token_url}/token",
            data={"grant_type": "refresh_token", "refresh_token": refresh_token},
        )

    async def sign_out(self):
        self.current_user = None
        await self._notify(None)
