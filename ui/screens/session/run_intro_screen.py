from kivy.metrics import dp
from kivymd.app import MDApp
from kivymd.uix.boxlayout import MDBoxLayout
from kivymd.uix.button import MDFlatButton, MDRaisedButton
from kivymd.uix.label import MDLabel
from kivymd.uix.screen import MDScreen


class RunIntroScreen(MDScreen):
    """First screen of a run: session overview and the start button."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        layout = MDBoxLayout(orientation="vertical", padding=dp(24), spacing=dp(16))
        self._title = MDLabel(text="", halign="center", font_style="H5")
        self._info = MDLabel(text="", halign="center")
        layout.add_widget(self._title)
        layout.add_widget(self._info)
        layout.add_widget(
            MDRaisedButton(
                text="COMMENCER SÉANCE",
                pos_hint={"center_x": 0.5},
                on_release=lambda *_: self.start_run(),
            )
        )
        layout.add_widget(
            MDFlatButton(
                text="Retour",
                pos_hint={"center_x": 0.5},
                on_release=lambda *_: MDApp.get_running_app().exit_focus(),
            )
        )
        self.add_widget(layout)

    def on_pre_enter(self, *args):
        self.refresh()
        return super().on_pre_enter(*args)

    def refresh(self):
        app = MDApp.get_running_app()
        run = app.strength_run if app else None
        if not run:
            return
        self._title.text = app.session_title or "Séance de musculation"
        self._info.text = f"{app.cycle} · {run.block_count} exercices"

    def start_run(self):
        app = MDApp.get_running_app()
        run = app.strength_run if app else None
        if run and run.start():
            app.show_run_screen()
