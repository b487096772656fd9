"""
Utility functions for dividing a candidate space between workers.
"""


def split_range(start: int, end: int, parts: int) -> list[tuple[int, int]]:
    """
    Divide [start..end] into `parts` contiguous slices.
    Handles remainders so that early slices get one extra item when needed.
    Slices past the end of a short range are empty (end == start - 1).
    """
    if start > end + 1:
        raise ValueError("start must not be past end + 1")
    if parts <= 0:
        raise ValueError("parts must be greater than 0")

    total = end - start + 1
    base, rem = divmod(total, parts)

    slices = []
    current = start
    for i in range(parts):
        # give the first `rem` slices an extra element
        inc = base + (1 if i < rem else 0)
        s = current
        e = current + inc - 1
        slices.append((s, e))
        current = e + 1

    return slices
