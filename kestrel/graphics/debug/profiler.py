# kestrel/graphics/debug/profiler.py
from __future__ import annotations

import cProfile
import functools
import io
import logging
import pstats
from pathlib import Path
from typing import Callable, ParamSpec, TypeVar

P = ParamSpec("P")
R = TypeVar("R")

# Function names counted as one frame each in the stats.
FRAME_FUNCTIONS = ("render",)
FRAME_MODULE = "renderer.py"


def count_frames(stats: pstats.Stats) -> int:
    frame_count = 0
    for (filename, _, name), (_, nc, _, _, _) in stats.stats.items():  # type: ignore[attr-defined]
        if name in FRAME_FUNCTIONS and filename.endswith(FRAME_MODULE):
            frame_count += nc
    return frame_count


def profile(
    *,
    out_dir: Path,
    enabled: bool = True,
    logger: logging.Logger | None = None,
):
    """
    Run the decorated function under cProfile and dump the results to
    out_dir: <name>.prof plus text reports sorted by tottime, cumtime and
    calls.
    """
    log = logger or logging.getLogger("kestrel.profile")

    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        if not enabled:
            return fn

        @functools.wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            profiler = cProfile.Profile()
            profiler.enable()
            try:
                return fn(*args, **kwargs)
            finally:
                profiler.disable()

                out_dir.mkdir(parents=True, exist_ok=True)
                base = fn.__name__
                prof_path = out_dir / f"{base}.prof"

                profiler.dump_stats(prof_path)
                log.info("[profile] wrote %s", prof_path)

                for cmd in ("tottime", "cumtime", "calls"):
                    path = out_dir / f"{base}.{cmd}.txt"
                    buf = io.StringIO()
                    pstats.Stats(profiler, stream=buf).sort_stats(
                        cmd
                    ).print_stats(30)
                    path.write_text(buf.getvalue())
                    log.info("[profile] wrote %s", path)

                stats = pstats.Stats(profiler)
                frame_count = count_frames(stats)
                total_time = stats.total_tt  # type: ignore[attr-defined]
                fps = frame_count / total_time if total_time > 0 else 0

                log.info("[profile] Total Time: %.4fs", total_time)
                log.info("[profile] Frames: %d (%.2f FPS)", frame_count, fps)

        return wrapper

    return decorator
