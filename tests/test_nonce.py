"""Tests for nonce generation and the two packing strategies."""

import itertools

import pytest

from icagent import nonce as nonce_module
from icagent.nonce import (
    NONCE_LENGTH,
    NarrowWriteStrategy,
    NonceGenerator,
    WideWriteStrategy,
    make_nonce,
)


def fixed_words():
    return itertools.cycle([0x01020304, 0xA0B0C0D0]).__next__


class TestMakeNonce:
    def test_length(self):
        assert len(make_nonce()) == NONCE_LENGTH

    def test_creates_unique_values(self):
        nonces = {make_nonce().hex() for _ in range(100)}
        assert len(nonces) == 100


class TestPackingStrategies:
    def test_big_endian_layout(self):
        packed = WideWriteStrategy().pack(0x01020304, 0xA0B0C0D0)
        assert packed == bytes.fromhex("01020304a0b0c0d0")

    @pytest.mark.parametrize(
        "high,low",
        [(0, 0), (0xFFFFFFFF, 0xFFFFFFFF), (1, 0), (0, 1), (0xDEADBEEF, 0x12345678)],
    )
    def test_strategies_agree(self, high, low):
        assert WideWriteStrategy().pack(high, low) == NarrowWriteStrategy().pack(high, low)


class TestStrategySelection:
    def test_wide_write_selected_when_supported(self):
        assert isinstance(NonceGenerator().strategy, WideWriteStrategy)

    def test_fallback_produces_same_nonce(self, monkeypatch):
        wide = NonceGenerator(random_word=fixed_words())
        original = wide()

        narrow_writes = []
        real_pack = NarrowWriteStrategy.pack

        def spy_pack(self, high, low):
            narrow_writes.append((high, low))
            return real_pack(self, high, low)

        monkeypatch.setattr(nonce_module, "_supports_wide_write", lambda: False)
        monkeypatch.setattr(NarrowWriteStrategy, "pack", spy_pack)
        narrow = NonceGenerator(random_word=fixed_words())
        assert isinstance(narrow.strategy, NarrowWriteStrategy)

        assert narrow() == original
        assert narrow_writes == [(0x01020304, 0xA0B0C0D0)]

    def test_strategy_chosen_once_at_construction(self, monkeypatch):
        generator = NonceGenerator(random_word=fixed_words())
        monkeypatch.setattr(nonce_module, "_supports_wide_write", lambda: False)
        generator()
        assert isinstance(generator.strategy, WideWriteStrategy)
