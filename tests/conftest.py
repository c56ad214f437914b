import random

import pytest

from chip8.cpu import CPU


def encode(*operands):
    rom = bytearray()
    for operand in operands:
        rom += operand.to_bytes(2, 'big')
    return bytes(rom)


@pytest.fixture
def cpu():
    """A CPU with an empty program and a seeded random source."""
    return CPU(b'', rng=random.Random(1234))


@pytest.fixture
def make_cpu():
    """Build a CPU whose program is the given 16-bit operands."""
    def _make_cpu(*operands, rng=None):
        return CPU(encode(*operands), rng=rng or random.Random(1234))
    return _make_cpu
