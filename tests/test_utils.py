"""Tests for identifiers, masking, sanitizing and the rate-limit window."""

from datetime import timedelta

from src.pusher.utils import (
    check_rate_limit,
    generate_send_key,
    isoformat,
    is_valid_send_key,
    mask_credential,
    mask_credentials,
    parse_datetime,
    sanitize_input,
    utcnow,
)

# -- SendKeys ----------------------------------------------------------------


def test_send_keys_are_distinct_and_url_safe() -> None:
    keys = {generate_send_key() for _ in range(1000)}
    assert len(keys) == 1000
    assert all(len(k) == 32 and is_valid_send_key(k) for k in keys)


def test_short_or_malformed_keys_are_invalid() -> None:
    assert not is_valid_send_key(None)
    assert not is_valid_send_key("")
    assert not is_valid_send_key("abc")
    assert not is_valid_send_key("a" * 31 + "!")


# -- Masking -----------------------------------------------------------------


def test_mask_short_values_fully() -> None:
    assert mask_credential("secret") == "******"
    assert mask_credential("12345678") == "********"


def test_mask_long_values_keeps_edges() -> None:
    assert mask_credential("abcdefghijkl") == "abcd****ijkl"


def test_mask_credentials_only_touches_sensitive_fields() -> None:
    masked = mask_credentials(
        {"app_id": "wx1234567890", "app_secret": "0123456789abcdef", "url": ""},
        ["app_secret", "url"],
    )
    assert masked == {"app_id": "wx1234567890", "app_secret": "0123********cdef", "url": ""}


# -- Sanitizing --------------------------------------------------------------


def test_sanitize_strips_angle_brackets_and_whitespace() -> None:
    assert sanitize_input("  <b>Hello</b>  ") == "bHello/b"


def test_sanitize_empty_values() -> None:
    assert sanitize_input(None) == ""
    assert sanitize_input("   ") == ""


def test_sanitize_caps_length() -> None:
    assert len(sanitize_input("x" * 20000)) == 10000


# -- Timestamps --------------------------------------------------------------


def test_isoformat_uses_z_suffix_and_parses_back() -> None:
    now = utcnow().replace(microsecond=123000)
    text = isoformat(now)
    assert text.endswith("Z")
    assert parse_datetime(text) == now


# -- Rate limit window -------------------------------------------------------


def test_requests_up_to_limit_are_allowed() -> None:
    now = utcnow()
    reset_at = isoformat(now + timedelta(seconds=60))
    count = 0
    for expected_remaining in (2, 1, 0):
        result = check_rate_limit(count, reset_at, limit=3, current=now)
        assert result.allowed
        assert result.remaining == expected_remaining
        count += 1

    denied = check_rate_limit(count, reset_at, limit=3, current=now)
    assert not denied.allowed
    assert denied.remaining == 0
    assert denied.reset_at == reset_at


def test_window_resets_after_expiry() -> None:
    now = utcnow()
    reset_at = isoformat(now - timedelta(seconds=1))
    result = check_rate_limit(3, reset_at, limit=3, window_seconds=60, current=now)
    assert result.allowed
    assert result.remaining == 2
    assert parse_datetime(result.reset_at) > now


def test_rate_limit_headers() -> None:
    now = utcnow()
    reset_at = isoformat(now + timedelta(seconds=60))
    headers = check_rate_limit(0, reset_at, limit=60, current=now).headers(60)
    assert headers == {
        "X-RateLimit-Limit": "60",
        "X-RateLimit-Remaining": "59",
        "X-RateLimit-Reset": reset_at,
    }


def test_mask_sixteen_chars() -> None:
    masked = mask_credential("abcdefghijklmnop")
    assert masked == "abcd********mnop"


def test_sanitize_script_tag() -> None:
    assert sanitize_input("<script>x</script>") == "scriptx/script"
