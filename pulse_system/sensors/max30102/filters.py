"""
Fixed-point DC removal
Single-pole adaptive high-pass filter shared by the HR and SpO2 estimators
"""

from typing import Tuple

HEART_RATE_ALPHA = (31, 32)  # slower response, heavier smoothing
SPO2_ALPHA = (15, 16)


def fixed_div(numerator: int, denominator: int) -> int:
    """Integer division truncating toward zero, as fixed-point hardware does."""
    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        return -quotient
    return quotient


class BaselineRemover:
    """
    Strips the slow-moving DC offset from a magnitude stream.

    w_new = x + alpha * w_old, output = w_new - w_old. All arithmetic is
    integer so the same input sequence always produces the same output.
    """

    def __init__(self, alpha: Tuple[int, int] = HEART_RATE_ALPHA):
        num, den = alpha
        if den <= 0 or num < 0 or num >= den:
            raise ValueError(f"Filter coefficient must satisfy 0 <= num < den, got {num}/{den}")

        self.alpha_num = num
        self.alpha_den = den
        self.w = 0

    def step(self, x: int) -> int:
        w_new = x + fixed_div(self.alpha_num * self.w, self.alpha_den)
        result = w_new - self.w
        self.w = w_new
        return result

    def reset(self):
        self.w = 0

    def __repr__(self):
        return f"<BaselineRemover(alpha={self.alpha_num}/{self.alpha_den}, w={self.w})>"
