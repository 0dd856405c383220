"""처리 시간 측정 유틸리티"""

import time
from contextlib import contextmanager
from typing import Generator


@contextmanager
def measure_time() -> Generator[dict[str, float], None, None]:
    """블록 실행 시간(ms)을 측정하는 컨텍스트 매니저

    Usage:
        with measure_time() as timer:
            await orchestrator.reconcile(external_ids)
        logger.info("done", extra={"elapsed_ms": timer["elapsed_ms"]})
    """
    timer = {"elapsed_ms": 0.0}
    start = time.perf_counter()
    try:
        yield timer
    finally:
        timer["elapsed_ms"] = round((time.perf_counter() - start) * 1000, 2)
