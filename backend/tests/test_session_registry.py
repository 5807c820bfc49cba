import pytest

from relaydrop.core.errors import InvalidInput, UnknownIdentifier
from relaydrop.core.identifiers import SHORT_CODE_RE


def test_create_session_registers_alias(registry):
    session = registry.create_session()
    assert SHORT_CODE_RE.match(session.short_code)
    assert len(session.token) == 32
    assert session.expires_in_seconds == 1800

    resolved = registry.resolve(session.short_code)
    assert resolved.token == session.token
    assert resolved.short_code == session.short_code


def test_short_code_lookup_is_case_insensitive(registry):
    session = registry.create_session()
    resolved = registry.resolve(f"  {session.short_code.lower()}\t")
    assert resolved.token == session.token


def test_raw_token_passes_through_without_lookup(registry):
    resolved = registry.resolve("  0123456789abcdef0123456789abcdef ")
    assert resolved.token == "0123456789abcdef0123456789abcdef"
    assert resolved.short_code is None


def test_unknown_short_code(registry):
    with pytest.raises(UnknownIdentifier):
        registry.resolve("ABCDEFGH")


def test_alias_expires(registry, clock):
    session = registry.create_session()
    clock.advance(1800)
    with pytest.raises(UnknownIdentifier):
        registry.resolve(session.short_code)


def test_invalidate(registry):
    session = registry.create_session()
    assert registry.invalidate(session.short_code) is True
    with pytest.raises(UnknownIdentifier):
        registry.resolve(session.short_code)


@pytest.mark.parametrize("identifier", [None, 42, "", "   ", "x" * 129])
def test_malformed_identifier(registry, identifier):
    with pytest.raises(InvalidInput):
        registry.resolve(identifier)
