"""Tests for the standard library table."""

from cfactory.project.stdlib_names import StandardLibrary, iter_mask, parse_stdlib_name


def test_table_order_defines_bits():
    assert StandardLibrary.THREADS.bit == 0b001
    assert StandardLibrary.MATH.bit == 0b010
    assert StandardLibrary.SOCKETS.bit == 0b100


def test_parse_known_names():
    assert parse_stdlib_name("threads") is StandardLibrary.THREADS
    assert parse_stdlib_name("math") is StandardLibrary.MATH
    assert parse_stdlib_name("sockets") is StandardLibrary.SOCKETS


def test_parse_unknown_name():
    assert parse_stdlib_name("opengl") is None
    assert parse_stdlib_name("Math") is None


def test_iter_mask_in_table_order():
    assert list(iter_mask(0b101)) == [StandardLibrary.THREADS, StandardLibrary.SOCKETS]
    assert list(iter_mask(0)) == []
