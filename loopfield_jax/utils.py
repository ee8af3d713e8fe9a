from __future__ import annotations
import os
import re
from typing import Any, Dict

_TRUE = (".t.", "t", ".true.", "true")
_FALSE = (".f.", "f", ".false.", "false")


def fortran_float(s: str) -> float:
    # Namelists may use a 'd' exponent (1.0d-3).
    return float(s.replace("D", "E").replace("d", "e"))


def parse_fortran_bool(s: str) -> bool:
    s = s.strip().lower()
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    raise ValueError(f"Not a Fortran boolean: {s}")


def strip_comment(line: str) -> str:
    # '!' starts a comment unless it sits inside a quoted string.
    quote = None
    for i, ch in enumerate(line):
        if quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == "!":
            return line[:i]
    return line


def split_assignments(block: str) -> list[str]:
    """Split a namelist body into `key = value` statements.

    Statements may be separated by newlines or commas; a value may continue onto the next line
    after a trailing comma (arrays).
    """
    out: list[str] = []
    for raw in block.splitlines():
        s = strip_comment(raw).strip()
        if not s:
            continue
        # Several assignments on one line: a, b = 1, c = 2
        parts = re.split(r",\s*(?=[A-Za-z_][A-Za-z0-9_]*\s*=)", s)
        for p in parts:
            p = p.strip()
            if not p:
                continue
            if "=" not in p and out:
                out[-1] = out[-1] + " " + p
            else:
                out.append(p)
    return out


def parse_value(raw: str) -> Any:
    raw = raw.strip()
    if raw.endswith(","):
        raw = raw[:-1].strip()
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in ("'", '"'):
        return raw[1:-1]
    if raw.lower() in _TRUE + _FALSE:
        return parse_fortran_bool(raw)
    if raw.startswith("(/") and raw.endswith("/)"):
        inner = raw[2:-2].strip()
        return [parse_value(p) for p in inner.split(",") if p.strip()]
    if re.match(r"^[+-]?\d+$", raw):
        return int(raw)
    try:
        return fortran_float(raw)
    except ValueError as e:
        raise ValueError(f"Could not parse value: {raw}") from e


def resolve_existing_path(path: str) -> str:
    """Return `path`, or a file with the same basename under the repository's examples/ tree."""
    if os.path.exists(path):
        return path
    base = os.path.basename(path)
    roots = [
        "examples",
        os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "examples"),
    ]
    for root in roots:
        if not os.path.isdir(root):
            continue
        for dirpath, _dirnames, filenames in os.walk(root):
            if base in filenames:
                return os.path.join(dirpath, base)
    return path


def parse_namelist(path: str, namelist_name: str = "loopfield_nml") -> Dict[str, Any]:
    """Read the `&namelist_name ... /` block of a namelist file into a lowercase-keyed dict."""
    path = resolve_existing_path(path)
    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        lines = f.read().splitlines()

    start_re = re.compile(r"^\s*&\s*" + re.escape(namelist_name) + r"\b", re.IGNORECASE)
    end_re = re.compile(r"^\s*(/|&\s*end)\s*$", re.IGNORECASE)

    block_lines: list[str] = []
    in_nml = False
    for raw in lines:
        if not in_nml:
            in_nml = bool(start_re.search(raw))
            continue
        if end_re.match(strip_comment(raw).strip()):
            break
        block_lines.append(raw)
    if not in_nml:
        raise ValueError(f"Did not find namelist &{namelist_name} in {path}")

    out: Dict[str, Any] = {}
    for a in split_assignments("\n".join(block_lines)):
        if "=" not in a:
            continue
        k, v = a.split("=", 1)
        out[k.strip().lower()] = parse_value(v)
    return out
