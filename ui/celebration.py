"""Confetti shown once when the athlete finishes the last exercise."""

from __future__ import annotations

import random

from kivy.animation import Animation
from kivy.core.window import Window
from kivy.graphics import Color, Rectangle
from kivy.uix.widget import Widget

CONFETTI_COLORS = (
    (0.13, 0.77, 0.37, 1),
    (0.23, 0.51, 0.96, 1),
    (0.98, 0.45, 0.09, 1),
    (0.88, 0.11, 0.28, 1),
    (0.66, 0.33, 0.97, 1),
)
CONFETTI_COUNT = 120


class _Piece(Widget):
    def __init__(self, color, **kwargs):
        super().__init__(**kwargs)
        with self.canvas:
            Color(*color)
            self._rect = Rectangle(pos=self.pos, size=self.size)
        self.bind(pos=self._sync, size=self._sync)

    def _sync(self, *_):
        self._rect.pos = self.pos
        self._rect.size = self.size


def launch_confetti(count: int = CONFETTI_COUNT) -> None:
    """Drop ``count`` coloured pieces from the top of the window."""

    for index in range(count):
        size = random.uniform(6, 12)
        piece = _Piece(
            CONFETTI_COLORS[index % len(CONFETTI_COLORS)],
            size_hint=(None, None),
            size=(size, size * 0.6),
            pos=(random.uniform(0, Window.width), Window.height + 10),
        )
        Window.add_widget(piece)
        drift = random.uniform(-100, 100)
        anim = Animation(
            x=piece.x + drift,
            y=-20,
            opacity=0,
            duration=random.uniform(1.2, 2.0),
            t="out_quad",
        )
        anim.bind(on_complete=lambda _anim, widget: Window.remove_widget(widget))
        anim.start(piece)
