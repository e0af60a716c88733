import pytest

from storefront.core.errors import DuplicateEmail, Forbidden, InvalidCredentials, InvalidToken, ValidationError
from storefront.db.models import Role
from storefront.security.tokens import TokenService
from storefront.services.auth_gateway import AuthGateway
from storefront.services.users import UserStore


@pytest.fixture
def gateway(database):
    with database.session() as s:
        yield AuthGateway(UserStore(s), TokenService('a', 'r'), bcrypt_rounds=4)


def test_register_normalizes_email_and_activates(gateway):
    result = gateway.register('  Ann ', ' Ann@Example.COM ', 'secret123')
    assert result.user.email == 'ann@example.com'
    assert result.user.user_name == 'Ann'
    assert result.user.status == 'active'
    assert result.user.role == 'user'
    assert gateway.tokens.verify_access(result.tokens.access_token).user_id == result.user.id


def test_register_requires_fields(gateway):
    with pytest.raises(ValidationError):
        gateway.register('', 'a@example.com', 'secret123')
    with pytest.raises(ValidationError):
        gateway.register('A', 'a@example.com', '')


def test_duplicate_registration(gateway):
    gateway.register('A', 'a@example.com', 'secret123')
    with pytest.raises(DuplicateEmail):
        gateway.register('B', 'A@example.com', 'other-pass')


def test_login_is_case_insensitive_on_email(gateway):
    registered = gateway.register('A', 'a@example.com', 'secret123')
    assert gateway.login('A@EXAMPLE.com', 'secret123').user.id == registered.user.id
    with pytest.raises(InvalidCredentials):
        gateway.login('a@example.com', 'Secret123')


def test_refresh_only_honours_latest_token(gateway):
    first = gateway.register('A', 'a@example.com', 'secret123').tokens
    second = gateway.login('a@example.com', 'secret123').tokens
    with pytest.raises(InvalidToken):
        gateway.refresh(first.refresh_token)
    third = gateway.refresh(second.refresh_token).tokens
    with pytest.raises(InvalidToken):
        gateway.refresh(second.refresh_token)
    assert gateway.refresh(third.refresh_token).user.email == 'a@example.com'


def test_logout_is_unconditional(gateway):
    tokens = gateway.register('A', 'a@example.com', 'secret123')
    gateway.logout(tokens.user.id)
    gateway.logout(tokens.user.id)
    gateway.logout(9999)
    with pytest.raises(InvalidToken):
        gateway.refresh(tokens.tokens.refresh_token)


def test_authorize_reads_role_from_store(gateway):
    user = gateway.register('A', 'a@example.com', 'secret123').user
    with pytest.raises(Forbidden):
        gateway.authorize(user.id, [Role.ADMIN])
    assert gateway.authorize(user.id, [Role.USER, Role.ADMIN]).id == user.id
    assert gateway.authorize(user.id, ['user']).id == user.id
    with pytest.raises(InvalidToken):
        gateway.authorize(9999, [Role.USER])
