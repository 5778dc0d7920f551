"""
NotaryPro Backend — Identity Verification Tests
=================================================

What we test:
    ✅ RUT normalization, check digit and formatting
    ✅ Simulated verifier: invalid RUT, mismatch with the RUT on file, success
"""

from types import SimpleNamespace

import pytest

from app.services.identity_service import (
    SimulatedIdentityVerifier,
    format_rut,
    is_valid_rut,
    normalize_rut,
    rut_check_digit,
)


class TestRutHelpers:
    def test_normalize_strips_dots_and_dash(self):
        assert normalize_rut("12.345.678-k") == "12345678K"

    @pytest.mark.parametrize(
        "body, digit",
        [("12345678", "5"), ("11111111", "1"), ("1000005", "K")],
    )
    def test_check_digit(self, body, digit):
        assert rut_check_digit(body) == digit

    @pytest.mark.parametrize(
        "rut", ["12345678-5", "12.345.678-5", "123456785", "11111111-1", "1000005-k"]
    )
    def test_valid(self, rut):
        assert is_valid_rut(rut)

    @pytest.mark.parametrize(
        "rut", ["12345678-6", "1234-5", "abcdefgh-1", "", "123456789012-3", "12345678-X"]
    )
    def test_invalid(self, rut):
        assert not is_valid_rut(rut)

    def test_format(self):
        assert format_rut("12.345.678-5") == "12345678-5"
        assert format_rut("1000005k") == "1000005-K"


class TestSimulatedVerifier:
    def _submitter(self, rut=None):
        return SimpleNamespace(id="usr_1", first_name="Ana", last_name="Rojas", rut=rut)

    @pytest.mark.asyncio
    async def test_invalid_rut_is_not_verified(self):
        verifier = SimulatedIdentityVerifier(require_rut_match=True)
        result = await verifier.verify(self._submitter(), "12345678-6")
        assert result.verified is False
        assert "RUT" in result.reason
        assert result.data == {}

    @pytest.mark.asyncio
    async def test_valid_rut_is_verified(self):
        verifier = SimulatedIdentityVerifier(require_rut_match=True)
        result = await verifier.verify(self._submitter(), "12.345.678-5")
        assert result.verified is True
        assert result.data["rut"] == "12345678-5"
        assert result.data["provider"] == "simulated"
        assert result.data["first_name"] == "Ana"

    @pytest.mark.asyncio
    async def test_rut_must_match_registered(self):
        verifier = SimulatedIdentityVerifier(require_rut_match=True)
        result = await verifier.verify(self._submitter(rut="11111111-1"), "12345678-5")
        assert result.verified is False
        assert "does not match" in result.reason

    @pytest.mark.asyncio
    async def test_match_check_can_be_disabled(self):
        verifier = SimulatedIdentityVerifier(require_rut_match=False)
        result = await verifier.verify(self._submitter(rut="11111111-1"), "12345678-5")
        assert result.verified is True
