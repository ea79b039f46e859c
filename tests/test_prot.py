import pytest

from hivekit.prot import UNIT_GIB, UNIT_MIB, Prot, align_down, align_up


@pytest.mark.parametrize(
    "raw, flag",
    [(0, Prot.READ), (1, Prot.WRITE), (2, Prot.EXEC), (4, Prot.USER)],
)
def test_prot_flag_values(raw, flag):
    assert Prot(raw) == flag


def test_prot_read_adds_no_bits():
    assert Prot(1) == Prot.READ | Prot.WRITE


def test_prot_combination_membership():
    prot = Prot(5)
    assert Prot.WRITE in prot
    assert Prot.USER in prot
    assert Prot.EXEC not in prot


def test_units_align_with_each_other():
    assert align_up(UNIT_MIB + 1, UNIT_MIB) == 2 * UNIT_MIB
    assert align_down(UNIT_GIB - 1, UNIT_MIB) == UNIT_GIB - UNIT_MIB
    assert align_up(3 * UNIT_MIB, UNIT_GIB) == UNIT_GIB
    assert align_down(UNIT_GIB, UNIT_MIB) == UNIT_GIB


@pytest.mark.parametrize("value", [0, 1, 7, 8, 4095, 4096, 4097, 123456789])
@pytest.mark.parametrize("align", [1, 8, 4096, 1 << 21])
def test_align_up_invariants(value, align):
    result = align_up(value, align)
    assert result % align == 0
    assert value <= result < value + align


@pytest.mark.parametrize("value", [0, 1, 7, 8, 4095, 4096, 4097, 123456789])
@pytest.mark.parametrize("align", [1, 8, 4096, 1 << 21])
def test_align_down_invariants(value, align):
    result = align_down(value, align)
    assert result % align == 0
    assert value - align < result <= value


@pytest.mark.parametrize("value", [0, 4096, 8192, 1 << 30])
def test_aligned_values_unchanged(value):
    assert align_up(value, 4096) == value
    assert align_down(value, 4096) == value


def test_align_up_and_down_differ_by_align_when_misaligned():
    assert align_up(4097, 4096) - align_down(4097, 4096) == 4096


@pytest.mark.parametrize("align", [0, -8, 3, 12])
def test_bad_alignment_rejected(align):
    with pytest.raises(ValueError):
        align_up(10, align)
    with pytest.raises(ValueError):
        align_down(10, align)