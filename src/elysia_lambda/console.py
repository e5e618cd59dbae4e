"""
Colored console output for user-facing messages.
"""
import os
import sys

import click

UNICODE_SYMBOLS = {"info": "ℹ", "success": "✔", "warning": "⚠", "error": "✖"}
ASCII_SYMBOLS = {"info": "i", "success": "√", "warning": "‼", "error": "×"}


def is_unicode_supported() -> bool:
    """Best guess whether the terminal can render unicode symbols."""
    env = os.environ
    if sys.platform != "win32":
        return env.get("TERM") != "linux"

    return (
        bool(env.get("CI"))
        or bool(env.get("WT_SESSION"))
        or bool(env.get("TERMINUS_SUBLIME"))
        or env.get("ConEmuTask") == "{cmd::Cmder}"
        or env.get("TERM_PROGRAM") in ("Terminus-Sublime", "vscode")
        or env.get("TERM") in ("xterm-256color", "alacritty")
        or env.get("TERMINAL_EMULATOR") == "JetBrains-JediTerm"
    )


def symbol(kind: str) -> str:
    symbols = UNICODE_SYMBOLS if is_unicode_supported() else ASCII_SYMBOLS
    return symbols[kind]


def success(message: str) -> None:
    click.echo(f"{click.style(symbol('success'), fg='green')} {click.style(message, fg='green')}")


def error(message: str) -> None:
    click.secho(message, fg="red", err=True)


def info(message: str) -> None:
    click.secho(message, fg="blue")
