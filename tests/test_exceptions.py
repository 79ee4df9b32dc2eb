#!/usr/bin/env python3
"""Tests for the structured form of errors."""

from rcon_client.exceptions import ConnectionClosedError, EventDecodeError, LoginError
from rcon_common.exceptions import ValidationError, EventStreamEnded


class TestToDict:
    """Error dictionaries used in structured logs"""
    
    def test_code_and_details(self):
        error = ValidationError("'h\\xe9' is not an ASCII string", details={"position": 1})
        assert error.to_dict() == {
            "message": "'h\\xe9' is not an ASCII string",
            "code": "VALIDATION_ERROR",
            "details": {"position": 1},
        }
    
    def test_empty_details_omitted(self):
        assert ConnectionClosedError().to_dict() == {
            "message": "Connection closed",
            "code": "CONNECTION_CLOSED",
        }
    
    def test_stream_end_carries_count(self):
        assert EventStreamEnded(details={"emitted": 3}).to_dict()["details"] == {"emitted": 3}
    
    def test_login_error_code(self):
        assert LoginError("Login rejected").to_dict()["code"] == "AUTH_ERROR"
    
    def test_decode_error_words(self):
        error = EventDecodeError("bad", ["player.onKill"])
        assert error.to_dict()["details"] == {"words": ["player.onKill"]}
