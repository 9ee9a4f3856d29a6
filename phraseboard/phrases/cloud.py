"""Word cloud sizing, rotation and hover behaviour.

Layout (packing words into the box) belongs to whatever draws the cloud.
This module decides *what* each word looks like: font size from its count,
a fixed rotation from its rank, and the visual state it moves to on hover.
The hover effect is a small capability interface so a renderer (CSS, SVG,
canvas) can realise it however suits; :class:`CssHoverBackend` is the one
the HTML results page uses.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

from phraseboard.phrases.models import Polarity

MIN_FONT_SIZE = 14
MAX_FONT_SIZE = 64

HOVER_SCALE = 1.4
HOVER_DURATION_MS = 200
HOVER_SHADOW = "drop-shadow(2px 4px 6px rgba(0,0,0,0.15))"

#: Theme-aware hover colours (CSS custom properties defined by the page).
HOVER_FILLS: dict[Polarity | None, str] = {
    Polarity.POSITIVE: "var(--positive-hover)",
    Polarity.NEGATIVE: "var(--negative-hover)",
    None: "var(--positive)",
}

BASE_FILLS: dict[Polarity, str] = {
    Polarity.POSITIVE: "var(--positive)",
    Polarity.NEGATIVE: "var(--negative)",
}


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def font_size_for(
    count: int,
    min_count: int,
    max_count: int,
    min_size: int = MIN_FONT_SIZE,
    max_size: int = MAX_FONT_SIZE,
) -> int:
    """Linear map of *count* onto [min_size, max_size].

    When every count is the same there's nothing to interpolate, so the
    midpoint size is used.
    """
    if max_count == min_count:
        return _round_half_up((min_size + max_size) / 2)
    t = (count - min_count) / (max_count - min_count)
    return _round_half_up(min_size + t * (max_size - min_size))


def rotation_for(index: int) -> int:
    """Rotation in degrees for the word at *index*, stable across renders."""
    if index % 6 == 0:
        return -45
    if index % 3 == 0:
        return 0
    return -15


@dataclass(frozen=True)
class CloudWord:
    """One positioned-by-the-renderer word in a cloud."""

    text: str
    count: int
    font_size: int
    rotate: int
    fill: str
    polarity: Polarity | None = None


@dataclass(frozen=True)
class VisualState:
    """What a word should look like at a given moment."""

    rotate: int
    scale: float
    fill: str
    z_index: int
    transition: str = ""
    shadow: str = ""
    cursor: str = ""


def rest_state(word: CloudWord) -> VisualState:
    """A word's untouched appearance."""
    return VisualState(rotate=word.rotate, scale=1.0, fill=word.fill, z_index=0)


class HoverEffect(Protocol):
    """Hover capability a cloud renderer implements."""

    def on_hover_enter(self, word: CloudWord) -> VisualState: ...

    def on_hover_exit(self, word: CloudWord) -> VisualState: ...


@dataclass(frozen=True)
class ScaleHover:
    """Grow the word, lift it above its neighbours, and recolour it.

    Exit always returns the word's rest state, so nothing the enter
    transition changed survives it.
    """

    scale: float = HOVER_SCALE
    duration_ms: int = HOVER_DURATION_MS

    def on_hover_enter(self, word: CloudWord) -> VisualState:
        return VisualState(
            rotate=word.rotate,
            scale=self.scale,
            fill=HOVER_FILLS.get(word.polarity, HOVER_FILLS[None]),
            z_index=1,
            transition=f"all {self.duration_ms}ms ease",
            shadow=HOVER_SHADOW,
            cursor="pointer",
        )

    def on_hover_exit(self, word: CloudWord) -> VisualState:
        return rest_state(word)


def layout_cloud(
    ranked: Mapping[str, int],
    polarity: Polarity | None = None,
    fill: str | None = None,
    min_size: int = MIN_FONT_SIZE,
    max_size: int = MAX_FONT_SIZE,
) -> list[CloudWord]:
    """Turn a ranked term set into sized, rotated cloud words (rank order)."""
    if not ranked:
        return []
    counts = list(ranked.values())
    lo, hi = min(counts), max(counts)
    base_fill = fill or (BASE_FILLS[polarity] if polarity is not None else "currentColor")
    return [
        CloudWord(
            text=text,
            count=count,
            font_size=font_size_for(count, lo, hi, min_size, max_size),
            rotate=rotation_for(i),
            fill=base_fill,
            polarity=polarity,
        )
        for i, (text, count) in enumerate(ranked.items())
    ]


class CssHoverBackend:
    """Realises a :class:`HoverEffect` as CSS rules.

    Each word carries its rotation in a ``--wc-rotate`` custom property, so
    one rule per cloud covers every word.  Leaving the hover drops the
    ``:hover`` rule and the rest rule applies again.
    """

    def __init__(self, effect: HoverEffect) -> None:
        self.effect = effect

    @staticmethod
    def _declarations(state: VisualState) -> str:
        decls = [
            f"transform: rotate(var(--wc-rotate)) scale({state.scale:g})",
            f"color: {state.fill}",
            f"z-index: {state.z_index}",
        ]
        if state.transition:
            decls.append(f"transition: {state.transition}")
        if state.shadow:
            decls.append(f"filter: {state.shadow}")
        if state.cursor:
            decls.append(f"cursor: {state.cursor}")
        return "; ".join(decls)

    def stylesheet(self, polarity: Polarity, fill: str | None = None) -> str:
        template = CloudWord(
            text="",
            count=0,
            font_size=0,
            rotate=0,
            fill=fill or BASE_FILLS[polarity],
            polarity=polarity,
        )
        selector = f".wc-cloud--{polarity.value} .wc-word"
        rest = self._declarations(self.effect.on_hover_exit(template))
        hover = self._declarations(self.effect.on_hover_enter(template))
        return f"{selector} {{ {rest}; }}\n{selector}:hover {{ {hover}; }}\n"

    @staticmethod
    def word_style(word: CloudWord) -> str:
        """Inline style for one word element."""
        return f"font-size: {word.font_size}px; --wc-rotate: {word.rotate}deg"
