from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List

import matplotlib.pyplot as plt

logger = logging.getLogger(__name__)


def _short_name(name: str) -> str:
    return Path(name).name or name


def plot_source_matches(
    *,
    sources: List[Dict[str, Any]],
    primary_records: int,
    out_png: str | Path,
    title: str = "Annotated primary records per source",
) -> None:
    out_png = Path(out_png)
    out_png.parent.mkdir(parents=True, exist_ok=True)

    labels = [_short_name(str(s["name"])) for s in sources]
    values = [int(s["matched"]) for s in sources]

    plt.figure()
    plt.bar(labels, values)
    if primary_records > 0:
        plt.axhline(primary_records, linestyle="--", color="grey", label="primary records")
        plt.legend()
    plt.ylabel("Record count")
    plt.title(title)
    plt.xticks(rotation=15, ha="right")
    plt.tight_layout()
    plt.savefig(out_png, dpi=160)
    plt.close()


def plot_source_progress(
    *,
    sources: List[Dict[str, Any]],
    out_png: str | Path,
    title: str = "Annotation source consumption",
) -> None:
    """Stacked bars: records consumed by a match vs. by catch-up, per source."""
    out_png = Path(out_png)
    out_png.parent.mkdir(parents=True, exist_ok=True)

    labels = [_short_name(str(s["name"])) for s in sources]
    matched = [int(s["matched"]) for s in sources]
    caught_up = [int(s["caught_up"]) for s in sources]

    plt.figure()
    plt.bar(labels, matched, label="matched")
    plt.bar(labels, caught_up, bottom=matched, label="skipped (catch-up)")
    plt.ylabel("Annotation records")
    plt.title(title)
    plt.legend()
    plt.xticks(rotation=15, ha="right")
    plt.tight_layout()
    plt.savefig(out_png, dpi=160)
    plt.close()
