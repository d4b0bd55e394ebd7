from kivy.metrics import dp
from kivy.properties import StringProperty
from kivymd.app import MDApp
from kivymd.uix.boxlayout import MDBoxLayout
from kivymd.uix.button import MDFlatButton, MDRaisedButton
from kivymd.uix.label import MDLabel
from kivymd.uix.progressbar import MDProgressBar
from kivymd.uix.screen import MDScreen

from backend import REST_ADJUST_STEPS
from ui.formatting import format_clock


class RestScreen(MDScreen):
    """Rest countdown shown between sets.

    The countdown itself lives on the run's :class:`~backend.rest_timer.RestTimer`
    and is ticked by the app; this screen only renders it and forwards the
    athlete's adjustments.  Once the timer is idle the app routes back to the
    active exercise.
    """

    timer_label = StringProperty("0:00")
    next_exercise_name = StringProperty("")

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        layout = MDBoxLayout(orientation="vertical", padding=dp(24), spacing=dp(12))
        layout.add_widget(MDLabel(text="Repos", halign="center", font_style="H6"))
        self._timer = MDLabel(text=self.timer_label, halign="center", font_style="H2")
        layout.add_widget(self._timer)
        self.progress_bar = MDProgressBar(value=0, size_hint_y=None, height=dp(6))
        layout.add_widget(self.progress_bar)
        self._next = MDLabel(text="", halign="center", theme_text_color="Secondary")
        layout.add_widget(self._next)
        self.bind(timer_label=self._timer.setter("text"))
        self.bind(next_exercise_name=self._on_next_name)

        adjust = MDBoxLayout(spacing=dp(8), size_hint_y=None, height=dp(48))
        for step in REST_ADJUST_STEPS:
            adjust.add_widget(
                MDFlatButton(
                    text=f"{step:+d}s",
                    on_release=lambda _btn, s=step: self.adjust(s),
                )
            )
        adjust.add_widget(MDFlatButton(text="Reset", on_release=lambda *_: self.reset()))
        layout.add_widget(adjust)

        controls = MDBoxLayout(spacing=dp(8), size_hint_y=None, height=dp(48))
        self.pause_button = MDFlatButton(
            text="Pause", on_release=lambda *_: self.toggle_pause()
        )
        controls.add_widget(self.pause_button)
        controls.add_widget(MDFlatButton(text="Passer", on_release=lambda *_: self.skip()))
        controls.add_widget(MDFlatButton(text="Fermer", on_release=lambda *_: self.close()))
        layout.add_widget(controls)

        layout.add_widget(
            MDRaisedButton(
                text="Valider la série",
                pos_hint={"center_x": 0.5},
                on_release=lambda *_: self.validate_set(),
            )
        )
        self.add_widget(layout)

    def _on_next_name(self, _screen, value):
        self._next.text = f"Ensuite : {value}" if value else ""

    def _run(self):
        app = MDApp.get_running_app()
        return app.strength_run if app else None

    def on_pre_enter(self, *args):
        self.refresh()
        return super().on_pre_enter(*args)

    def refresh(self):
        run = self._run()
        if not run:
            return
        timer = run.rest
        if not timer.is_resting:
            MDApp.get_running_app().show_run_screen()
            return
        self.timer_label = format_clock(timer.remaining)
        self.progress_bar.value = timer.fraction_remaining * 100
        self.pause_button.text = "Reprendre" if timer.is_paused else "Pause"
        block = run.current_block or run.next_block
        self.next_exercise_name = (block or {}).get("name") or ""

    def adjust(self, seconds: int):
        run = self._run()
        if run:
            run.rest.adjust(seconds)
            self.refresh()

    def reset(self):
        run = self._run()
        if run:
            run.rest.reset()
            self.refresh()

    def toggle_pause(self):
        run = self._run()
        if run:
            run.rest.toggle_pause()
            self.refresh()

    def skip(self):
        run = self._run()
        if run:
            run.rest.skip()
            self.refresh()

    def close(self):
        run = self._run()
        if run:
            run.rest.dismiss()
            self.refresh()

    def validate_set(self):
        """Validate the next set without waiting for the rest to end."""
        run = self._run()
        if run and run.validate_set():
            self.refresh()
