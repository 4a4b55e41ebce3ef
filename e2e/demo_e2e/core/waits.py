import time
from typing import Callable, Optional, Tuple, TypeVar

T = TypeVar("T")


def poll(
    sample: Callable[[], T],
    accept: Callable[[T], bool],
    timeout_sec: float,
    interval_sec: float = 0.2,
) -> Tuple[bool, Optional[T]]:
    """
    sample() を accept されるまで繰り返す。最後に読んだ値も返す（失敗時の actual 用）。
    sample が例外を出したら「まだ」とみなして続ける。
    """
    end = time.monotonic() + timeout_sec
    last: Optional[T] = None
    while True:
        try:
            last = sample()
            if accept(last):
                return True, last
        except Exception:
            pass
        if time.monotonic() >= end:
            return False, last
        time.sleep(interval_sec)


def close_to(a: float, b: float, tolerance: float = 1.0) -> bool:
    return abs(float(a) - float(b)) <= tolerance
