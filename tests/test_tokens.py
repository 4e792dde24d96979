"""Tests for signed unsubscribe tokens."""

import base64

import pytest

from mediatrack.domain.conflicts.tokens import (
    REASON_EXPIRED,
    REASON_INVALID,
    UnsubscribeTokenCodec,
)
from mediatrack.shared.exceptions import TokenExpired, TokenInvalid

SECRET = "unit-test-secret"
ISSUED_AT = 1_700_000_000_000
TTL = 7 * 24 * 60 * 60 * 1000
B64_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"


@pytest.fixture
def codec():
    return UnsubscribeTokenCodec(secret=SECRET)


class TestIssue:
    def test_round_trip(self, codec):
        token = codec.issue("task-42", ttl_ms=TTL, now_ms=ISSUED_AT)

        assert codec.decode(token, now_ms=ISSUED_AT + 1000) == "task-42"
        assert codec.verify(token, now_ms=ISSUED_AT).task_id == "task-42"

    def test_wire_format(self, codec):
        token = codec.issue("task-42", ttl_ms=TTL, now_ms=ISSUED_AT)

        assert "=" not in token
        raw = base64.urlsafe_b64decode(token + "=" * (-len(token) % 4)).decode()
        task_id, expires_at, signature = raw.split(":")
        assert task_id == "task-42"
        assert int(expires_at) == ISSUED_AT + TTL
        assert len(signature) == 64

    def test_no_secret_issues_nothing(self):
        assert UnsubscribeTokenCodec(secret=None).issue("task-42") is None
        assert UnsubscribeTokenCodec(secret="").issue("task-42") is None


class TestVerify:
    def test_valid_until_expiry_instant(self, codec):
        token = codec.issue("task-42", ttl_ms=TTL, now_ms=ISSUED_AT)

        assert codec.verify(token, now_ms=ISSUED_AT + TTL).valid is True

    def test_expired(self, codec):
        token = codec.issue("task-42", ttl_ms=TTL, now_ms=ISSUED_AT)

        result = codec.verify(token, now_ms=ISSUED_AT + TTL + 1)

        assert result.valid is False
        assert result.reason == REASON_EXPIRED
        with pytest.raises(TokenExpired):
            codec.decode(token, now_ms=ISSUED_AT + TTL + 1)

    def test_tampered_token(self, codec):
        token = codec.issue("task-42", ttl_ms=TTL, now_ms=ISSUED_AT)
        tampered = ("B" if token[0] == "A" else "A") + token[1:]

        result = codec.verify(tampered, now_ms=ISSUED_AT)

        assert result.valid is False
        assert result.reason == REASON_INVALID

    @pytest.mark.parametrize("task_id", ["a", "task-42", "9f86d081884c7d659a2feaa0c55ad015"])
    def test_any_single_character_change_is_rejected(self, codec, task_id):
        token = codec.issue(task_id, ttl_ms=TTL, now_ms=ISSUED_AT)

        for position, original in enumerate(token):
            for replacement in B64_ALPHABET:
                if replacement == original:
                    continue
                tampered = token[:position] + replacement + token[position + 1 :]
                result = codec.verify(tampered, now_ms=ISSUED_AT)
                assert result.valid is False, (position, original, replacement)
                assert result.reason == REASON_INVALID

    def test_non_canonical_trailing_bits_rejected(self, codec):
        token = codec.issue("a", ttl_ms=TTL, now_ms=ISSUED_AT)
        raw = base64.urlsafe_b64decode(token + "=" * (-len(token) % 4))
        assert len(raw) % 3 != 0

        # Flipping the lowest bit of the last character only touches unused padding bits
        index = B64_ALPHABET.index(token[-1])
        sibling = token[:-1] + B64_ALPHABET[index ^ 1]
        assert base64.urlsafe_b64decode(sibling + "=" * (-len(sibling) % 4)) == raw

        assert codec.verify(sibling, now_ms=ISSUED_AT).valid is False

    def test_task_id_with_colon_round_trips(self, codec):
        token = codec.issue("property:BH-1:task-7", ttl_ms=TTL, now_ms=ISSUED_AT)

        assert codec.decode(token, now_ms=ISSUED_AT) == "property:BH-1:task-7"

    def test_other_secret_rejected(self, codec):
        token = UnsubscribeTokenCodec(secret="someone-else").issue(
            "task-42", ttl_ms=TTL, now_ms=ISSUED_AT
        )

        with pytest.raises(TokenInvalid):
            codec.decode(token, now_ms=ISSUED_AT)

    def test_extended_expiry_breaks_signature(self, codec):
        token = codec.issue("task-42", ttl_ms=TTL, now_ms=ISSUED_AT)
        raw = base64.urlsafe_b64decode(token + "=" * (-len(token) % 4)).decode()
        task_id, expires_at, signature = raw.split(":")
        forged = base64.urlsafe_b64encode(
            f"{task_id}:{int(expires_at) * 2}:{signature}".encode()
        ).decode().rstrip("=")

        assert codec.verify(forged, now_ms=ISSUED_AT).reason == REASON_INVALID

    @pytest.mark.parametrize("token", ["", "not base64 !!", "Zm9v", "YTpi", "8J-Ygg"])
    def test_garbage(self, codec, token):
        result = codec.verify(token, now_ms=ISSUED_AT)

        assert result.valid is False
        assert result.reason == REASON_INVALID

    def test_no_secret_rejects_everything(self, codec):
        token = codec.issue("task-42", ttl_ms=TTL, now_ms=ISSUED_AT)

        assert UnsubscribeTokenCodec(secret=None).verify(token, now_ms=ISSUED_AT).valid is False
