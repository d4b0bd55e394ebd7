import asyncio
import logging

from kivy.metrics import dp
from kivymd.app import MDApp
from kivymd.uix.boxlayout import MDBoxLayout
from kivymd.uix.button import MDRaisedButton
from kivymd.uix.label import MDLabel
from kivymd.uix.screen import MDScreen
from kivymd.uix.slider import MDSlider
from kivymd.uix.textfield import MDTextField

from backend import RATING_MAX, RATING_MIN
from backend.utils import compact_number
from ui.dialogs import show_error
from ui.formatting import format_duration


class WorkoutSummaryScreen(MDScreen):
    """Screen shown once the last exercise is done."""

    _finish_task = None

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        layout = MDBoxLayout(orientation="vertical", padding=dp(24), spacing=dp(12))
        layout.add_widget(MDLabel(text="Séance terminée", halign="center", font_style="H5"))
        self.stats_label = MDLabel(text="", halign="center")
        layout.add_widget(self.stats_label)

        self.sliders = {}
        for name, label in (("difficulty", "Difficulté"), ("fatigue", "Fatigue")):
            layout.add_widget(MDLabel(text=label, size_hint_y=None, height=dp(24)))
            slider = MDSlider(min=RATING_MIN, max=RATING_MAX, step=1, hint=True)
            slider.bind(value=lambda _slider, value, n=name: self._set_rating(n, value))
            self.sliders[name] = slider
            layout.add_widget(slider)

        self.comments_field = MDTextField(hint_text="Commentaires", multiline=True)
        self.comments_field.bind(text=self._on_comments)
        layout.add_widget(self.comments_field)

        self.finish_button = MDRaisedButton(
            text="Terminer la séance",
            pos_hint={"center_x": 0.5},
            on_release=lambda *_: self.finish(),
        )
        layout.add_widget(self.finish_button)
        self.add_widget(layout)

    def _run(self):
        app = MDApp.get_running_app()
        return app.strength_run if app else None

    def on_pre_enter(self, *args):
        run = self._run()
        if run:
            for name, slider in self.sliders.items():
                slider.value = getattr(run, name)
            self.comments_field.text = run.comments
        self.refresh()
        return super().on_pre_enter(*args)

    def refresh(self):
        run = self._run()
        if not run:
            return
        self.stats_label.text = (
            f"Durée : {format_duration(run.elapsed_seconds)}\n"
            f"Volume : {compact_number(float(run.total_volume))} kg\n"
            f"Séries : {len(run.logs)}"
        )
        self.finish_button.disabled = not run.can_finish

    def _set_rating(self, name, value):
        run = self._run()
        if run:
            run.set_rating(name, int(value))

    def _on_comments(self, _field, text):
        run = self._run()
        if run:
            run.comments = text

    def finish(self):
        if self._finish_task is not None:
            return
        run = self._run()
        if not run or not run.can_finish:
            return
        self.finish_button.disabled = True
        # the loop only keeps a weak reference to running tasks
        self._finish_task = asyncio.ensure_future(self._finish(run))
        self._finish_task.add_done_callback(
            lambda _task: setattr(self, "_finish_task", None)
        )

    async def _finish(self, run):
        try:
            payload = await run.finish()
        except Exception as exc:
            logging.exception("Failed to finish strength run")
            show_error("Erreur", f"Impossible de terminer la séance : {exc}")
            self.refresh()
            return
        if payload is not None:
            MDApp.get_running_app().on_run_finished()
