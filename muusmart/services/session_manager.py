from __future__ import annotations

import asyncio
import time
from typing import Callable

from muusmart.clients.navigator import Navigator
from muusmart.clients.token_store import TokenStore
from muusmart.core.exceptions import (
    AuthError,
    AuthServiceUnavailableError,
    RegistrationFailedError,
    SessionChangedError,
    TokenAlreadyExpiredError,
    TokenDecodeError,
)
from muusmart.core.logging import get_logger
from muusmart.core.signals import (
    FocusEvent,
    SessionEvents,
    Signal,
    Subscription,
    UnauthorizedEvent,
)
from muusmart.schemas.enums import LogoutReason, Route, SessionExpiredReason
from muusmart.schemas.requests import LoginRequest, RegisterRequest
from muusmart.schemas.responses import SessionState
from muusmart.services.auth_client import AuthClient
from muusmart.services.token_codec import TokenClaims, decode_token, expires_in, is_expired

logger = get_logger(__name__)

DEFAULT_CHECK_INTERVAL = 30.0


class SessionManager:
    """Owns the bearer token: restores it, verifies its expiry and exposes session state.

    Runs on a single asyncio loop. Only ``login`` and ``register`` suspend (on the
    network round trip); everything else, store access included, is synchronous, so
    each trigger performs a full read-decode-decide-write cycle without interleaving.

    Background verification (periodic task + focus subscription) exists only while
    a token is held and the manager is started. The unauthorized subscription lives
    from ``start()`` to ``dispose()``.
    """

    def __init__(
        self,
        store: TokenStore,
        auth_client: AuthClient,
        navigator: Navigator,
        events: SessionEvents,
        *,
        storage_key: str = "token",
        check_interval: float = DEFAULT_CHECK_INTERVAL,
        leeway: float = 0.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._auth = auth_client
        self._navigator = navigator
        self._events = events
        self._key = storage_key
        self._check_interval = check_interval
        self._leeway = leeway
        self._clock = clock

        self._token: str | None = None
        self._claims: TokenClaims | None = None
        self._is_loading = True
        self._expired_reason: SessionExpiredReason | None = None
        self._show_welcome = False
        self._is_new_user = False

        # Bumped by logout; a login/register that started under an older value is stale
        self._generation = 0

        self._changes: Signal[SessionState] = Signal("session_state")
        self._watch_task: asyncio.Task | None = None
        self._focus_sub: Subscription | None = None
        self._unauthorized_sub: Subscription | None = None
        self._started = False
        self._disposed = False

    # -- state ---------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        claims = self._claims
        return SessionState(
            token=self._token,
            is_loading=self._is_loading,
            session_expired_reason=self._expired_reason,
            show_welcome_notification=self._show_welcome,
            is_new_user=self._is_new_user,
            username=claims.subject if claims else None,
            expires_in=expires_in(claims, self._clock()) if claims else None,
        )

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    @property
    def watchers_active(self) -> bool:
        return self._watch_task is not None or self._focus_sub is not None

    def subscribe(self, callback: Callable[[SessionState], None]) -> Subscription:
        return self._changes.connect(callback)

    # -- lifecycle -----------------------------------------------------------

    def initialize(self) -> SessionState:
        """Restore a persisted token. Expired or unreadable tokens are purged silently."""
        stored = self._store.get(self._key)
        if stored is None:
            logger.info("no_stored_token")
        else:
            try:
                claims = decode_token(stored)
            except TokenDecodeError as exc:
                logger.warning("stored_token_invalid", error=str(exc))
                self._store.delete(self._key)
            else:
                if is_expired(claims, self._clock(), self._leeway):
                    logger.info("stored_token_expired", exp=claims.exp)
                    self._store.delete(self._key)
                else:
                    logger.info("stored_token_restored", username=claims.subject, exp=claims.exp)
                    self._adopt(stored, claims)

        self._is_loading = False
        self._notify()
        return self.state

    def start(self) -> None:
        """Subscribe to the unauthorized signal and arm the watchers. Needs a running loop."""
        if self._started or self._disposed:
            return
        self._started = True
        self._unauthorized_sub = self._events.on_unauthorized(self._on_unauthorized)
        self._sync_watchers()
        logger.debug("session_manager_started")

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._teardown_watchers()
        if self._unauthorized_sub is not None:
            self._unauthorized_sub.cancel()
            self._unauthorized_sub = None
        logger.debug("session_manager_disposed")

    # -- operations ----------------------------------------------------------

    async def login(self, credentials: LoginRequest) -> SessionState:
        generation = self._generation
        logger.info("login_started", username=credentials.username)
        response = await self._auth.login(credentials)

        self._ensure_current(generation, "login")
        claims = self._check_issued(response.token, AuthServiceUnavailableError)

        self._store.set(self._key, response.token)
        self._adopt(response.token, claims)
        self._show_welcome = True
        logger.info("login_success", username=claims.subject or credentials.username, exp=claims.exp)
        self._navigator.go_to(Route.DASHBOARD)
        self._notify()
        return self.state

    async def register(self, payload: RegisterRequest) -> SessionState:
        generation = self._generation
        logger.info("register_started", username=payload.username)
        response = await self._auth.register(payload)

        self._ensure_current(generation, "register")
        claims = self._check_issued(response.token, RegistrationFailedError)

        self._store.set(self._key, response.token)
        self._adopt(response.token, claims)
        self._is_new_user = True
        logger.info("register_success", username=claims.subject or payload.username, exp=claims.exp)
        self._navigator.go_to(Route.DASHBOARD)
        self._notify()
        return self.state

    def logout(self, reason: LogoutReason | str = LogoutReason.MANUAL) -> SessionState:
        reason = LogoutReason(reason)
        had_session = self._token is not None

        # A failed delete propagates before any in-memory state changes
        self._store.delete(self._key)
        self._generation += 1
        self._token = None
        self._claims = None
        self._sync_watchers()
        if reason is LogoutReason.EXPIRED:
            self._expired_reason = SessionExpiredReason.EXPIRED

        logger.info("logout", reason=reason.value, had_session=had_session)
        self._navigator.go_to(Route.LOGIN)
        self._notify()
        return self.state

    def check_expiry(self) -> bool:
        """Re-read the persisted token and log out if it expired or vanished.

        Returns True when the check ended the session.
        """
        if self._token is None:
            return False

        stored = self._store.get(self._key)
        if stored is None:
            logger.info("stored_token_missing")
            self.logout(LogoutReason.EXPIRED)
            return True

        try:
            claims = decode_token(stored)
        except TokenDecodeError as exc:
            logger.warning("stored_token_invalid", error=str(exc))
            self.logout(LogoutReason.EXPIRED)
            return True

        if is_expired(claims, self._clock(), self._leeway):
            logger.info("session_expired", exp=claims.exp)
            self.logout(LogoutReason.EXPIRED)
            return True

        if stored != self._token:
            # Another process replaced the token
            logger.info("stored_token_changed", username=claims.subject)
            self._adopt(stored, claims)
            self._notify()
        return False

    def clear_session_expired_reason(self) -> None:
        self._expired_reason = None
        self._notify()

    def clear_welcome_notification(self) -> None:
        self._show_welcome = False
        self._notify()

    def clear_new_user(self) -> None:
        self._is_new_user = False
        self._notify()

    # -- internals -----------------------------------------------------------

    def _check_issued(self, token: str, unreadable_error: type[AuthError]) -> TokenClaims:
        try:
            claims = decode_token(token)
        except TokenDecodeError as exc:
            logger.warning("issued_token_invalid", error=str(exc))
            raise unreadable_error(
                message="Backend issued an unreadable token", detail=str(exc)
            ) from exc
        if is_expired(claims, self._clock(), self._leeway):
            logger.warning("issued_token_expired", exp=claims.exp, now=self._clock())
            raise TokenAlreadyExpiredError(
                message="Backend issued an already expired token",
                detail=f"exp={claims.exp}",
            )
        return claims

    def _ensure_current(self, generation: int, operation: str) -> None:
        if generation != self._generation:
            logger.info("stale_auth_response_discarded", operation=operation)
            raise SessionChangedError(
                message="Session changed while the request was in flight",
                detail=f"operation={operation}",
            )

    def _adopt(self, token: str, claims: TokenClaims) -> None:
        self._token = token
        self._claims = claims
        self._sync_watchers()

    def _sync_watchers(self) -> None:
        if self._token is not None and self._started and not self._disposed:
            self._install_watchers()
        else:
            self._teardown_watchers()

    def _install_watchers(self) -> None:
        if self._watch_task is None:
            self._watch_task = asyncio.get_running_loop().create_task(self._watch_expiry())
        if self._focus_sub is None:
            self._focus_sub = self._events.on_focus(self._on_focus)

    def _teardown_watchers(self) -> None:
        if self._watch_task is not None:
            self._watch_task.cancel()
            self._watch_task = None
        if self._focus_sub is not None:
            self._focus_sub.cancel()
            self._focus_sub = None

    async def _watch_expiry(self) -> None:
        while True:
            await asyncio.sleep(self._check_interval)
            try:
                if self.check_expiry():
                    return
            except Exception:
                logger.exception("expiry_check_failed")

    def _on_focus(self, event: FocusEvent) -> None:
        logger.debug("focus_regained", source=event.source)
        self.check_expiry()

    def _on_unauthorized(self, event: UnauthorizedEvent) -> None:
        logger.warning("unauthorized_signal", status=event.status, url=event.url)
        self.logout(LogoutReason.EXPIRED)

    def _notify(self) -> None:
        self._changes.emit(self.state)
