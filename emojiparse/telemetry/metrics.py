from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Protocol, TypeVar, cast

from prometheus_client import REGISTRY as PROM_REGISTRY, Counter, Histogram

from emojiparse.settings import METRICS_ENABLED

# ---- Protocols (surface we rely on) ------------------------------------------


class CounterLike(Protocol):
    def labels(self, *label_values: Any) -> "CounterLike": ...
    def inc(self, amount: float = 1.0) -> None: ...


class HistogramLike(Protocol):
    def observe(self, value: float) -> None: ...


# ---- Minimal helpers for registry access -------------------------------------


def _registry_map() -> Dict[str, Any]:
    mapping = getattr(PROM_REGISTRY, "_names_to_collectors", {})
    return mapping if isinstance(mapping, dict) else {}


T = TypeVar("T")


def _get_or_create(name: str, factory: Callable[[], T]) -> T:
    # Module reloads in tests must not register the same collector twice.
    existing = _registry_map().get(name)
    if existing is not None:
        return cast(T, existing)
    return factory()


def _mk_counter(name: str, doc: str, labels: Iterable[str]) -> CounterLike:
    return cast(CounterLike, _get_or_create(name, lambda: Counter(name, doc, list(labels))))


def _mk_histogram(name: str, doc: str) -> HistogramLike:
    return cast(HistogramLike, _get_or_create(name, lambda: Histogram(name, doc)))


# ---- Collectors ----------------------------------------------------------------

emoji_pattern_compiles_total: CounterLike = _mk_counter(
    "emoji_pattern_compiles_total", "Emoji pattern compilations by outcome.", ["outcome"]
)
emoji_pattern_compile_seconds: HistogramLike = _mk_histogram(
    "emoji_pattern_compile_seconds", "Emoji pattern compilation time in seconds."
)
emoji_scanner_matches_total: CounterLike = _mk_counter(
    "emoji_scanner_matches_total",
    "Emoji matches seen by the decorator, by resolution outcome.",
    ["outcome"],
)


def record_compile(outcome: str, seconds: float) -> None:
    if not METRICS_ENABLED:
        return
    try:
        emoji_pattern_compiles_total.labels(outcome).inc()
        emoji_pattern_compile_seconds.observe(max(0.0, float(seconds)))
    except Exception:
        # metrics must never break compilation
        pass


def record_match(outcome: str) -> None:
    if not METRICS_ENABLED:
        return
    try:
        emoji_scanner_matches_total.labels(outcome).inc()
    except Exception:
        pass


__all__ = [
    "emoji_pattern_compiles_total",
    "emoji_pattern_compile_seconds",
    "emoji_scanner_matches_total",
    "record_compile",
    "record_match",
]
