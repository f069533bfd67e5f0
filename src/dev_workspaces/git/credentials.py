"""Credential negotiation for git clones.

A transport calls back for credentials, declaring which kinds it currently
accepts. ``decide`` answers one such request from an explicit
``NegotiationState``; ``negotiate`` runs the whole attempt and, when the
server wanted a username we did not have, retries with candidate usernames.

The username retry is a heuristic for telling "the server asks for a
username first" apart from "the server already knows who we are". A
candidate is abandoned only when it got as far as being offered a key or
password; it is not guaranteed to pick the right identity.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

import pygit2
from pygit2.enums import CredentialType

from dev_workspaces.config.settings import DEFAULT_SSH_USER
from dev_workspaces.errors import AuthExhausted, TransportError
from dev_workspaces.paths import env_username, fallback_username

logger = logging.getLogger(__name__)

CredentialCallback = Callable[[str, str | None, CredentialType], Any]
UrlBuilder = Callable[[str | None], str]


class Transport(Protocol):
    def attempt(self, url: str, credentials: CredentialCallback) -> Any:
        """Run one clone attempt against ``url``, calling back for credentials."""


# ── Signals raised from inside the credential callback ──────────────


class NegotiationError(Exception):
    """Raised from a credential callback to fail the current attempt."""


class UsernameRequested(NegotiationError):
    """The transport wants a bare username; retry with candidates."""


class NoAuthenticationMethods(NegotiationError):
    pass


class CredentialHelperError(NegotiationError):
    pass


# ── Credential helper ───────────────────────────────────────────────


class CredentialHelper:
    """Ask git's configured credential helpers for a username/password."""

    def __init__(self, git: str = "git"):
        self.git = git

    def fill(self, url: str, username: str | None = None) -> pygit2.UserPass:
        request = f"url={url}\n"
        if username:
            request += f"username={username}\n"
        try:
            result = subprocess.run(
                [self.git, "credential", "fill"],
                input=request + "\n",
                capture_output=True,
                text=True,
                env=_no_prompt_env(),
            )
        except OSError as exc:
            raise CredentialHelperError(f"Could not run git credential: {exc}") from exc

        if result.returncode != 0:
            raise CredentialHelperError(
                f"git credential fill failed for {url}: {result.stderr.strip()}"
            )

        fields = dict(
            line.split("=", 1) for line in result.stdout.splitlines() if "=" in line
        )
        if "password" not in fields:
            raise CredentialHelperError(f"No credentials stored for {url}")
        return pygit2.UserPass(fields.get("username", username or ""), fields["password"])


def _no_prompt_env() -> dict[str, str]:
    env = dict(os.environ)
    env["GIT_TERMINAL_PROMPT"] = "0"
    return env


# ── Single-attempt decision ─────────────────────────────────────────


@dataclass
class NegotiationState:
    """What has already been tried during one attempt."""

    username_requested: bool = False
    tried_ssh_key: bool = False
    helper_failed: bool = False


def decide(
    state: NegotiationState,
    helper: CredentialHelper,
    url: str,
    username: str | None,
    allowed: CredentialType,
):
    """Pick the credential to offer for one callback, in fixed priority order."""
    if allowed & CredentialType.USERNAME and not state.username_requested:
        state.username_requested = True
        logger.debug("%s asked for a username; will retry with candidates", url)
        raise UsernameRequested(f"{url} requires a username")

    if allowed & CredentialType.SSH_KEY and not state.tried_ssh_key:
        state.tried_ssh_key = True
        logger.debug("Offering ssh-agent key for %s", username or DEFAULT_SSH_USER)
        return pygit2.KeypairFromAgent(username or DEFAULT_SSH_USER)

    if allowed & CredentialType.USERPASS_PLAINTEXT and not state.helper_failed:
        try:
            return helper.fill(url, username)
        except CredentialHelperError:
            state.helper_failed = True
            raise

    if allowed & CredentialType.DEFAULT:
        # Let the transport fall back to its own default credentials.
        raise pygit2.Passthrough

    raise NoAuthenticationMethods("no authentication methods succeeded")


# ── Username retry ──────────────────────────────────────────────────


def candidate_usernames() -> list[str]:
    """``git``, the fallback identity, then the environment user; no repeats."""
    names = [DEFAULT_SSH_USER, fallback_username()]
    user = env_username()
    if user:
        names.append(user)
    return list(dict.fromkeys(names))


class _UsernameAttempt:
    """Callback for one candidate: answer the username, then offer one credential."""

    def __init__(self, username: str, helper: CredentialHelper):
        self.username = username
        self.helper = helper
        self.offered = False

    def __call__(self, url: str, username: str | None, allowed: CredentialType):
        if allowed & CredentialType.USERNAME:
            return pygit2.Username(self.username)
        if not self.offered:
            if allowed & CredentialType.SSH_KEY:
                self.offered = True
                return pygit2.KeypairFromAgent(self.username)
            if allowed & CredentialType.USERPASS_PLAINTEXT:
                credential = self.helper.fill(url, self.username)
                self.offered = True
                return credential
        raise NoAuthenticationMethods("no authentication available")


def negotiate(
    transport: Transport,
    url_for: UrlBuilder,
    helper: CredentialHelper | None = None,
    candidates: list[str] | None = None,
):
    """Run a clone attempt, supplying credentials until one is accepted.

    Args:
        transport: Runs attempts and calls back for credentials.
        url_for: Builds the remote URL, optionally for a given username.
        helper: Source of username/password pairs.
        candidates: Usernames for the retry loop. Defaults to
            ``candidate_usernames()``.

    Returns:
        Whatever the successful ``transport.attempt`` returned.

    Raises:
        AuthExhausted: If no credential source was accepted.
        TransportError: Forwarded unchanged from the transport.
    """
    helper = helper or CredentialHelper()
    state = NegotiationState()
    url = url_for(None)

    try:
        return transport.attempt(url, lambda u, name, allowed: decide(state, helper, u, name, allowed))
    except (NegotiationError, TransportError) as exc:
        if not state.username_requested:
            if isinstance(exc, TransportError):
                raise
            raise AuthExhausted(f"Could not authenticate to {url}") from exc
        last_error: Exception = exc

    tried = []
    for name in candidates if candidates is not None else candidate_usernames():
        tried.append(name)
        callback = _UsernameAttempt(name, helper)
        candidate_url = url_for(name)
        logger.debug("Retrying %s as %r", candidate_url, name)
        try:
            return transport.attempt(candidate_url, callback)
        except (NegotiationError, TransportError) as exc:
            last_error = exc
            if not callback.offered:
                # Failed before this username was ever put to the test.
                if isinstance(exc, TransportError):
                    raise
                break

    raise AuthExhausted(
        f"Could not authenticate to {url} (tried usernames: {', '.join(tried) or 'none'})"
    ) from last_error
