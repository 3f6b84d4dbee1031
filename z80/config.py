"""Decoder switches, read from ``Z80DASM_*`` environment variables."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping, Optional

_OFF_WORDS = frozenset({"0", "false", "off", "no", ""})


def _env_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    return raw.strip().casefold() not in _OFF_WORDS


@dataclass(frozen=True)
class DasmConfig:
    """
    `trace` logs every decoded instruction at DEBUG.
    `log_undefined` logs each undefined encoding at DEBUG, with the page,
    opcode byte and prefix depth where decoding stopped.
    """

    trace: bool = False
    log_undefined: bool = True


def load_dasm_config(env: Optional[Mapping[str, str]] = None) -> DasmConfig:
    source = os.environ if env is None else env
    return DasmConfig(
        trace=_env_flag(source, "Z80DASM_TRACE", default=False),
        log_undefined=_env_flag(source, "Z80DASM_LOG_UNDEFINED", default=True),
    )


__all__ = ["DasmConfig", "load_dasm_config"]
