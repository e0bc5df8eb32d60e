"""Shared utility helpers."""

import argparse


def positive_int(value: str) -> int:
    """argparse type validator: integer >= 1."""
    try:
        ivalue = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if ivalue < 1:
        raise argparse.ArgumentTypeError(f"value must be >= 1, got {value}")
    return ivalue
