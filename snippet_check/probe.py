"""Sandboxed dynamic execution probe for JavaScript snippets."""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from subprocess import CompletedProcess, TimeoutExpired, run
from typing import Protocol

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 1.0
HOST_GRACE_SECONDS = 0.5
DEFAULT_NODE_ARGS = ("--max-old-space-size=64",)

_ERROR_LINE = re.compile(r"^[A-Za-z_$][\w$]*Error\b.*:")

# The snippet runs in a fresh V8 context whose global object has a null
# prototype: no require, process, Buffer, timers or host objects are reachable.
# Rejections surface after evaluation, so the verdict is written on the next
# turn of the event loop and only once.
_HARNESS = r"""
const vm = require("vm");
const chunks = [];
let reported = false;
function report(result) {
  if (reported) return;
  reported = true;
  process.stdout.write(JSON.stringify(result));
}
function failure(err) {
  const name = err && err.name ? String(err.name) : "Error";
  const message = err && err.message !== undefined ? String(err.message) : String(err);
  return { ok: false, name, message };
}
process.on("unhandledRejection", (err) => report(failure(err)));
process.on("uncaughtException", (err) => report(failure(err)));
process.stdin.on("data", (chunk) => chunks.push(chunk));
process.stdin.on("end", () => {
  const source = Buffer.concat(chunks).toString("utf8");
  const context = vm.createContext(Object.create(null), {
    codeGeneration: { strings: true, wasm: false },
    microtaskMode: "afterEvaluate",
  });
  try {
    vm.runInContext(
      "var console = { log() {}, info() {}, warn() {}, error() {}, debug() {} };",
      context,
    );
    vm.runInContext(source, context, { timeout: __TIMEOUT_MS__, filename: "snippet.js" });
  } catch (err) {
    report(failure(err));
    return;
  }
  setImmediate(() => report({ ok: true }));
});
"""


class ProbeUnavailableError(RuntimeError):
    """Raised when the sandbox runtime cannot be started at all."""


@dataclass(frozen=True, slots=True)
class ProbeOutcome:
    """Result of one sandboxed execution."""

    ok: bool
    message: str = ""


class Probe(Protocol):
    """Capability that executes a snippet and reports runtime failures."""

    def run(self, source: str) -> ProbeOutcome:
        """Execute ``source`` and return its outcome."""


class NodeProbe:
    """Runs JavaScript in an isolated ``node`` subprocess with a hard deadline.

    Two limits apply: the VM-level ``timeout`` interrupts long synchronous
    execution inside the child, and the host kills the child process if it
    has not exited by ``timeout_seconds + HOST_GRACE_SECONDS``. The probed
    code has no handle on either.
    """

    def __init__(
        self,
        *,
        node_binary: str = "node",
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        node_args: tuple[str, ...] = DEFAULT_NODE_ARGS,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        self.node_binary = node_binary
        self.timeout_seconds = timeout_seconds
        self.node_args = node_args

    def run(self, source: str) -> ProbeOutcome:
        timeout_ms = max(1, int(self.timeout_seconds * 1000))
        script = _HARNESS.replace("__TIMEOUT_MS__", str(timeout_ms))
        try:
            completed = run(
                [self.node_binary, *self.node_args, "-e", script],
                input=source,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout_seconds + HOST_GRACE_SECONDS,
                env=_sandbox_env(),
            )
        except OSError as exc:
            raise ProbeUnavailableError(f"cannot start {self.node_binary}: {exc}") from exc
        except TimeoutExpired:
            logger.info("Probe killed after %.2fs deadline", self.timeout_seconds)
            return ProbeOutcome(
                ok=False,
                message=f"Execution timed out after {self.timeout_seconds:g}s",
            )
        return _parse_outcome(completed)


def _sandbox_env() -> dict[str, str]:
    return {"PATH": os.environ.get("PATH", "")}


def _parse_outcome(completed: CompletedProcess[str]) -> ProbeOutcome:
    if completed.returncode != 0:
        detail = _diagnostic_line(completed.stderr) or "no diagnostic output"
        logger.info("Probe process exited with code %s", completed.returncode)
        return ProbeOutcome(
            ok=False,
            message=f"Sandbox process exited with code {completed.returncode}: {detail}",
        )

    try:
        payload = json.loads(completed.stdout)
    except json.JSONDecodeError:
        return ProbeOutcome(ok=False, message="Sandbox produced no usable result")
    if not isinstance(payload, dict):
        return ProbeOutcome(ok=False, message="Sandbox produced no usable result")

    if payload.get("ok") is True:
        return ProbeOutcome(ok=True)
    name = str(payload.get("name") or "Error")
    message = str(payload.get("message") or "")
    return ProbeOutcome(ok=False, message=f"{name}: {message}" if message else name)


def _diagnostic_line(text: str) -> str:
    """Prefer the first `SomeError: ...` line over node's trailing version banner."""
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    for line in lines:
        if _ERROR_LINE.match(line):
            return line
    return lines[-1] if lines else ""
