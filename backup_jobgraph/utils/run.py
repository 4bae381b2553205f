"""Subprocess helper that streams output while capturing it."""

from __future__ import annotations

import logging
import signal
import subprocess
import sys
import threading
from collections.abc import Sequence

LOGGER = logging.getLogger(__name__)


def run_with_tee(
    args: str | Sequence[str],
    *,
    check: bool = False,
    timeout: float | None = None,
    text: bool = True,
    env=None,
    cwd=None,
    shell: bool = False,
) -> subprocess.CompletedProcess:
    """Run a command like subprocess.run but:

      - streams stdout/stderr live to this process' stdout/stderr (tee)
      - returns a CompletedProcess with captured stdout/stderr
      - kills the child on timeout and re-raises with the partial output
    """

    LOGGER.debug("Running: %s", args if isinstance(args, str) else " ".join(args))

    proc = subprocess.Popen(
        args,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env=env,
        cwd=cwd,
        shell=shell,
        text=text,
    )

    out_buf: list = []
    err_buf: list = []

    def _forward(src, sink, buf) -> None:
        if src is None:
            return
        if text:
            for line in iter(src.readline, ""):
                buf.append(line)
                sink.write(line)
                sink.flush()
        else:
            bsink = sink.buffer if hasattr(sink, "buffer") else sink
            for chunk in iter(lambda: src.read(8192), b""):
                buf.append(chunk)
                bsink.write(chunk)
                bsink.flush()
        src.close()

    t_out = threading.Thread(target=_forward, args=(proc.stdout, sys.stdout, out_buf))
    t_err = threading.Thread(target=_forward, args=(proc.stderr, sys.stderr, err_buf))
    t_out.start()
    t_err.start()

    def _collect() -> tuple:
        t_out.join()
        t_err.join()
        joiner = "" if text else b""
        return joiner.join(out_buf), joiner.join(err_buf)

    try:
        retcode = proc.wait(timeout=timeout)
    except subprocess.TimeoutExpired as e:
        proc.kill()
        proc.wait()
        e.output, e.stderr = _collect()
        raise
    except KeyboardInterrupt:
        # Propagate SIGINT to the child so it can clean up.
        try:
            proc.send_signal(signal.SIGINT)
        except ProcessLookupError:
            pass
        try:
            proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()
        _collect()
        raise

    captured_stdout, captured_stderr = _collect()

    if check and retcode != 0:
        raise subprocess.CalledProcessError(
            retcode, args, output=captured_stdout, stderr=captured_stderr
        )

    return subprocess.CompletedProcess(
        args=args,
        returncode=retcode,
        stdout=captured_stdout,
        stderr=captured_stderr,
    )


__all__ = ["run_with_tee"]
