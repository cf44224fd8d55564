"""Tests for keyline/signals.py — code classification."""

from __future__ import annotations

import pytest

from keyline.signals import END_OF_INPUT, INTERRUPT, ByteSignal, Control, classify


class TestClassify:
    def test_end_of_stream_is_end_of_input(self) -> None:
        assert classify(-1) is END_OF_INPUT

    def test_ctrl_d_is_end_of_input(self) -> None:
        assert classify(4) is END_OF_INPUT

    def test_ctrl_c_is_interrupt(self) -> None:
        assert classify(3) is INTERRUPT

    def test_every_other_byte_is_literal(self) -> None:
        for code in range(256):
            if code in (3, 4):
                continue
            signal = classify(code)
            assert isinstance(signal, ByteSignal)
            assert signal.value == code

    @pytest.mark.parametrize("code", [-2, 256, 1000])
    def test_out_of_range_rejected(self, code: int) -> None:
        with pytest.raises(ValueError):
            classify(code)


class TestSignalCodes:
    def test_control_codes(self) -> None:
        assert Control.INTERRUPT.code == 3
        assert Control.END_OF_INPUT.code == 4

    def test_byte_signal_code(self) -> None:
        assert ByteSignal(65).code == 65

    def test_byte_signal_range_checked(self) -> None:
        with pytest.raises(ValueError):
            ByteSignal(300)

    def test_byte_signals_compare_by_value(self) -> None:
        assert ByteSignal(7) == ByteSignal(7)
        assert ByteSignal(7) != ByteSignal(8)
