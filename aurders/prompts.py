#!/usr/bin/env python3
"""Interactive prompts used to collect package metadata."""

from __future__ import annotations

import logging
from typing import Optional

from .utils import AbortRequested, InputError, escape_arch

AFFIRMATIVE = {"y", "Y", "yes", "definitely"}

ARCH_CHOICES = {
    1: "x86_64",
    2: "i686",
    3: "any",
}

logger = logging.getLogger("aurders.prompts")


def _read(prompt: str) -> str:
    try:
        return input(prompt)
    except EOFError as exc:
        raise InputError("Unable to take input: end of input stream") from exc
    except OSError as exc:
        raise InputError(f"Unable to take input: {exc}") from exc


def input_string(prompt: str, default: str = "") -> str:
    """Ask for a value, returning ``default`` on empty input."""
    print(f"\n{prompt}")
    value = _read("> ").strip()
    return value or default


def input_string_strict(prompt: str) -> str:
    """Ask for a value until a non-empty one is given."""
    while True:
        print(f"\n{prompt}")
        value = _read("> ").strip()
        if value:
            return value
        logger.error("This field is not optional. Try again.")


def input_bool(prompt: str) -> bool:
    print(f"\n{prompt}")
    return _read("> ").strip() in AFFIRMATIVE


def select_arch(default: str = "x86_64") -> str:
    """Let the maintainer pick the target architecture from a short menu.

    Anything that is not a number selects ``default``. The manual choice may
    list several architectures separated by spaces.
    """
    print("\nSelect the target architecture for your package:")
    labels = "    ".join(
        f"[{number}] {arch}{'(Default)' if arch == default else ''}"
        for number, arch in ARCH_CHOICES.items()
    )

    while True:
        print(f"  {labels}    [4] Enter manually")
        raw = _read("> ").strip()
        try:
            choice = int(raw)
        except ValueError:
            return default

        if choice in ARCH_CHOICES:
            return ARCH_CHOICES[choice]

        if choice == 4:
            manual = _read("Enter target architecture: ").strip()
            return escape_arch(manual) or default

        logger.error("Invalid input. Try again")


def get_source() -> Optional[str]:
    """Return a manually specified source, or None to build one."""
    if not input_bool("Do you want to specify source(s) manually?(y/N)"):
        return None
    source = _read("\nSource > ").strip()
    return source or None


def confirm_continue() -> None:
    """Ask whether to stop; an affirmative answer raises AbortRequested."""
    if input_bool("Do you want to abort?(y/N)"):
        raise AbortRequested("Aborted by operator")
