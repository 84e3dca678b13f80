"""Unit tests for API key generation and verification."""

import pytest

from copilot_auth.infrastructure.auth import APIKeyService


@pytest.fixture
def api_key_service(settings):
    return APIKeyService(settings)


def test_generated_key_format(api_key_service):
    generated = api_key_service.generate_api_key()

    assert generated.key.startswith("lsc_test_")
    assert len(generated.key.split("_", 2)[2]) == 43
    assert APIKeyService.validate_api_key_format(generated.key)


def test_prefix_is_environment_plus_first_eight(api_key_service):
    generated = api_key_service.generate_api_key()
    random_part = generated.key[len("lsc_test_"):]

    assert generated.prefix == f"lsc_test_{random_part[:8]}"


def test_live_environment(settings):
    service = APIKeyService(settings.model_copy(update={"api_key_env": "live"}))

    generated = service.generate_api_key()

    assert generated.key.startswith("lsc_live_")
    assert APIKeyService.get_api_key_environment(generated.key) == "live"


def test_keys_are_unique(api_key_service):
    keys = {api_key_service.generate_api_key().key for _ in range(10)}

    assert len(keys) == 10


def test_verify_against_stored_hash(api_key_service):
    generated = api_key_service.generate_api_key()

    assert APIKeyService.verify_api_key(generated.key, generated.key_hash) is True
    assert APIKeyService.verify_api_key(generated.key + "x", generated.key_hash) is False


def test_hash_is_sha256_hex(api_key_service):
    generated = api_key_service.generate_api_key()

    assert len(generated.key_hash) == 64
    assert generated.key_hash == APIKeyService.hash_key(generated.key)


@pytest.mark.parametrize(
    "key",
    [
        "lsc_prod_" + "a" * 43,
        "lsc_test_" + "a" * 42,
        "lsc_test_" + "a" * 44,
        "sk_test_" + "a" * 43,
        "lsc_test_" + "a" * 42 + "!",
        "",
    ],
)
def test_invalid_formats(key):
    assert APIKeyService.validate_api_key_format(key) is False
    assert APIKeyService.get_api_key_environment(key) is None


def test_mask_key(api_key_service):
    generated = api_key_service.generate_api_key()

    masked = APIKeyService.mask_key(generated.key)

    assert masked.startswith(generated.prefix)
    assert masked.endswith(generated.key[-4:])
    assert generated.key not in masked
