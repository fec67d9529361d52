from datetime import timedelta

import jwt
import pytest

from app.core.exceptions import AccountNotVerified, AuthenticationFailed, ValidationError
from app.services.account_service import AccountService


def test_register_creates_unverified_account_and_sends_code(account_service, email):
    account, issue = account_service.register("alice", "alice@example.com", "secret1")

    assert account.is_verified is False
    assert issue.email_sent is True
    assert email.sent == [("alice@example.com", "alice", issue.code)]


@pytest.mark.parametrize("username", ["a", "has space", "way_too_long_username_here", "bad-dash"])
def test_register_rejects_bad_usernames(account_service, username):
    with pytest.raises(ValidationError):
        account_service.register(username, "x@example.com", "secret1")


def test_register_rejects_short_password(account_service):
    with pytest.raises(ValidationError):
        account_service.register("alice", "alice@example.com", "123")


def test_register_taken_username(account_service, make_account):
    make_account("alice", verified=True)
    with pytest.raises(ValidationError, match="Username is already taken"):
        account_service.register("alice", "new@example.com", "secret1")


def test_register_pending_username_with_other_email(account_service, persistence, make_account):
    stale = make_account("alice", email="old@example.com", verified=False)

    account, _ = account_service.register("alice", "new@example.com", "secret1")

    assert account.id != stale.id
    assert account.email == "new@example.com"
    assert persistence.get_account_by_email("old@example.com") is None


def test_register_existing_verified_email(account_service, make_account):
    make_account("alice", email="alice@example.com", verified=True)
    with pytest.raises(ValidationError, match="already exists"):
        account_service.register("alice2", "alice@example.com", "secret1")


def test_register_again_while_pending_refreshes_password_and_code(
    account_service, verification_service, email
):
    first, first_issue = account_service.register("alice", "alice@example.com", "secret1")
    second, second_issue = account_service.register("alice", "alice@example.com", "secret2")

    assert second.id == first.id
    assert len(email.sent) == 2
    verification_service.verify("alice", second_issue.code)
    assert account_service.authenticate("alice", "secret2").id == first.id
    with pytest.raises(AuthenticationFailed):
        account_service.authenticate("alice", "secret1")


def test_register_pending_email_under_new_username(account_service, persistence, make_account, email):
    pending = make_account("alice", email="a@example.com", verified=False)

    account, issue = account_service.register("alice2", "a@example.com", "secret1")

    assert account.id == pending.id
    assert account.username == "alice2"
    assert persistence.get_account_by_username("alice") is None
    assert email.sent[-1] == ("a@example.com", "alice2", issue.code)


def test_register_pending_email_takes_username_of_other_pending_account(
    account_service, persistence, make_account
):
    mine = make_account("alice", email="a@example.com", verified=False)
    make_account("bob", email="b@example.com", verified=False)

    account, _ = account_service.register("bob", "a@example.com", "secret1")

    assert account.id == mine.id
    assert account.username == "bob"
    assert persistence.get_account_by_email("b@example.com") is None


def test_username_availability(account_service, make_account):
    make_account("alice")
    make_account("carol", verified=False)
    assert account_service.is_username_available("alice") is False
    assert account_service.is_username_available("bob") is True
    assert account_service.is_username_available("carol") is True


def test_authenticate_by_username_or_email(account_service, verification_service):
    _, issue = account_service.register("alice", "alice@example.com", "secret1")
    verification_service.verify("alice", issue.code)

    assert account_service.authenticate("alice", "secret1").username == "alice"
    assert account_service.authenticate("ALICE@example.com", "secret1").username == "alice"


def test_authenticate_failures(account_service):
    account_service.register("alice", "alice@example.com", "secret1")

    with pytest.raises(AccountNotVerified):
        account_service.authenticate("alice", "secret1")
    with pytest.raises(AuthenticationFailed):
        account_service.authenticate("alice", "wrong-password")
    with pytest.raises(AuthenticationFailed):
        account_service.authenticate("nobody", "secret1")


def test_token_round_trip(account_service, make_account):
    account = make_account()
    token = account_service.create_token(account)

    assert account_service.resolve_token(token).id == account.id


def test_expired_or_forged_tokens_are_rejected(persistence, verification_service, make_account):
    account = make_account()
    short_lived = AccountService(
        persistence, verification_service, jwt_secret="test-secret", jwt_expiration_hours=-1
    )
    with pytest.raises(AuthenticationFailed, match="expired"):
        short_lived.resolve_token(short_lived.create_token(account))

    forged = jwt.encode({"sub": str(account.id)}, "other-secret", algorithm="HS256")
    with pytest.raises(AuthenticationFailed):
        short_lived.resolve_token(forged)


def test_token_for_missing_account(account_service, make_account):
    account = make_account()
    token = account_service.create_token(account)
    stray = jwt.encode(
        {"sub": "999", "exp": account.created_at + timedelta(days=365)},
        "test-secret",
        algorithm="HS256",
    )
    assert account_service.resolve_token(token).username == "alice"
    with pytest.raises(AuthenticationFailed, match="User not found"):
        account_service.resolve_token(stray)
