"""
Blog API — Authorization Guard Unit Tests
===========================================
"""

import pytest

from app.exceptions import AuthorizationError
from app.services.auth_service import Identity
from app.services.authorization import Action, Decision, authorize, ensure_allowed

ALICE = Identity(id=1, username="alice", email="a@x.com")
BOB = Identity(id=2, username="bob", email="b@x.com")


class TestAuthorize:
    @pytest.mark.parametrize("identity", [ALICE, BOB])
    def test_anyone_can_read(self, identity):
        assert authorize(identity, ALICE.id, Action.READ) is Decision.ALLOW

    @pytest.mark.parametrize("action", [Action.UPDATE, Action.DELETE])
    def test_owner_can_mutate(self, action):
        assert authorize(ALICE, ALICE.id, action) is Decision.ALLOW

    @pytest.mark.parametrize("action", [Action.UPDATE, Action.DELETE])
    def test_non_owner_cannot_mutate(self, action):
        assert authorize(BOB, ALICE.id, action) is Decision.DENY


class TestEnsureAllowed:
    def test_allowed_returns_none(self):
        assert ensure_allowed(ALICE, ALICE.id, Action.DELETE, resource="post") is None

    def test_denied_raises_forbidden(self):
        with pytest.raises(AuthorizationError) as exc:
            ensure_allowed(BOB, ALICE.id, Action.UPDATE, resource="post")
        assert exc.value.status_code == 403
        assert exc.value.message == "You are not allowed to update this post"
        assert exc.value.context["owner_id"] == ALICE.id
