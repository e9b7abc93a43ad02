import pytest

from chunkdup.utils import average, format_size


@pytest.mark.parametrize(
    "num_bytes, expected",
    [
        (0, "0B"),
        (1023, "1023B"),
        (1024, "1.0K"),
        (1536, "1.5K"),
        (5 * 1024 * 1024, "5.0M"),
        (3 * 1024**3, "3.0G"),
        (2 * 1024**5, "2048.0T"),
    ],
)
def test_format_size(num_bytes: int, expected: str) -> None:
    assert format_size(num_bytes) == expected


def test_average() -> None:
    assert average([10, 20, 30]) == 20.0
    assert average(iter([1, 2])) == 1.5
    assert average([]) is None
