from __future__ import annotations

from dataclasses import dataclass

from .loop import Loop, format_field_strength


def _fmt_time_s(sec: float) -> str:
    return f"{float(sec):.3f} sec."


@dataclass
class RunLog:
    """Verbose run transcript printed to stdout (silent unless `enabled`)."""

    enabled: bool = False
    prefix: str = "[loopfield_jax]"

    def p(self, msg: str = "") -> None:
        if self.enabled:
            print(f"{self.prefix} {msg}" if msg else self.prefix)

    def header(self, input_path: str) -> None:
        self.p("circular current loop field solver")
        self.p(f"input: {input_path}")

    def loop_block(self, loop: Loop, *, line_count: int, n_segments: int, integrator: str) -> None:
        self.p(f"  current        = {loop.current:.4g} A")
        self.p(f"  loop radius    = {loop.radius * 100.0:.4g} cm")
        self.p(f"  field lines    = {line_count:5d}")
        self.p(f"  segments       = {n_segments:5d}")
        self.p(f"  integrator     = {integrator}")

    def center_field(self, b: float) -> None:
        self.p(f"B(center) = {format_field_strength(b)}")

    def phase(self, msg: str) -> None:
        self.p(msg)

    def phase_done(self, sec: float) -> None:
        self.p(f"  done. Took {_fmt_time_s(sec)}")

    def lines_summary(self, n_kept: int, n_seeds: int, npoints: list[int]) -> None:
        self.p(f"  kept {n_kept} of {n_seeds} traced lines")
        if npoints:
            self.p(f"  points per line: min={min(npoints)} max={max(npoints)}")

    def complete(self, *, sec: float, out_nc_basename: str) -> None:
        self.p(f"complete. Total time= {_fmt_time_s(sec)}")
        self.p(f"results in {out_nc_basename} (netCDF).")
