"""Constant-product pricing and swap direction."""

from cpamm.amm.direction import SwapDirection
from cpamm.amm.pricing import (
    constant_product,
    input_given_output,
    output_given_input,
    quote,
)

__all__ = [
    "SwapDirection",
    "constant_product",
    "input_given_output",
    "output_given_input",
    "quote",
]
