"""Tests for the identity cell state machine."""

from concurrent.futures import Future

import pytest

from icagent.errors import IdentityExpiredError
from icagent.identity import AnonymousIdentity, Ed25519KeyIdentity
from icagent.identity_holder import IdentityHolder, IdentityState


class TestIdentityHolder:
    def test_defaults_to_anonymous(self):
        assert isinstance(IdentityHolder().current(), AnonymousIdentity)

    def test_initial_state_active(self):
        ident = Ed25519KeyIdentity.generate()
        holder = IdentityHolder(ident)
        assert holder.state is IdentityState.ACTIVE
        assert holder.current() is ident

    def test_invalidate_fails_fast(self):
        holder = IdentityHolder(AnonymousIdentity())
        holder.invalidate()
        assert holder.state is IdentityState.INVALIDATED
        with pytest.raises(IdentityExpiredError, match="identity has expired"):
            holder.current()

    def test_invalidate_twice_is_noop(self):
        holder = IdentityHolder()
        holder.invalidate()
        holder.invalidate()
        assert holder.state is IdentityState.INVALIDATED

    def test_replace_reactivates(self):
        holder = IdentityHolder()
        holder.invalidate()
        ident = Ed25519KeyIdentity.generate()
        holder.replace(ident)
        assert holder.state is IdentityState.ACTIVE
        assert holder.current() is ident

    def test_replace_while_active(self):
        a, b = Ed25519KeyIdentity.generate(), Ed25519KeyIdentity.generate()
        holder = IdentityHolder(a)
        holder.replace(b)
        assert holder.current() is b


class TestFutureIdentity:
    def test_resolved_future(self):
        ident = Ed25519KeyIdentity.generate()
        future = Future()
        future.set_result(ident)
        assert IdentityHolder(future).current() is ident

    def test_future_resolving_to_none_is_anonymous(self):
        future = Future()
        future.set_result(None)
        assert isinstance(IdentityHolder(future).current(), AnonymousIdentity)

    def test_failed_future_propagates(self):
        future = Future()
        future.set_exception(RuntimeError("login failed"))
        with pytest.raises(RuntimeError, match="login failed"):
            IdentityHolder(future).current()
