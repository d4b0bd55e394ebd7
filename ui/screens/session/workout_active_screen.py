from kivy.metrics import dp
from kivymd.app import MDApp
from kivymd.toast import toast
from kivymd.uix.boxlayout import MDBoxLayout
from kivymd.uix.button import MDFlatButton, MDRaisedButton
from kivymd.uix.dialog import MDDialog
from kivymd.uix.label import MDLabel
from kivymd.uix.progressbar import MDProgressBar
from kivymd.uix.screen import MDScreen
from kivymd.uix.selectioncontrol import MDCheckbox

from backend import settings
from ui.dialogs import DraftEntryDialog
from ui.formatting import format_clock, format_value


class WorkoutActiveScreen(MDScreen):
    """Screen for the current exercise and set of a strength run."""

    _skip_dialog = None

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        layout = MDBoxLayout(orientation="vertical", padding=dp(16), spacing=dp(8))

        header = MDBoxLayout(size_hint_y=None, height=dp(32))
        self.position_label = MDLabel(text="")
        self.elapsed_label = MDLabel(text="0:00", halign="right")
        header.add_widget(self.position_label)
        header.add_widget(self.elapsed_label)
        layout.add_widget(header)

        self.progress_bar = MDProgressBar(value=0, size_hint_y=None, height=dp(4))
        layout.add_widget(self.progress_bar)

        self.exercise_label = MDLabel(text="", font_style="H5")
        self.target_label = MDLabel(text="")
        layout.add_widget(self.exercise_label)
        layout.add_widget(self.target_label)

        inputs = MDBoxLayout(spacing=dp(8), size_hint_y=None, height=dp(64))
        self.weight_button = MDRaisedButton(
            text="", on_release=lambda *_: self.open_entry("weight")
        )
        self.reps_button = MDRaisedButton(
            text="", on_release=lambda *_: self.open_entry("reps")
        )
        inputs.add_widget(self.weight_button)
        inputs.add_widget(self.reps_button)
        layout.add_widget(inputs)

        self.notes_label = MDLabel(text="", theme_text_color="Secondary")
        layout.add_widget(self.notes_label)

        auto_rest_row = MDBoxLayout(size_hint_y=None, height=dp(40))
        self.auto_rest_box = MDCheckbox(size_hint=(None, None), size=(dp(40), dp(40)))
        self.auto_rest_box.bind(active=self._on_auto_rest)
        auto_rest_row.add_widget(self.auto_rest_box)
        auto_rest_row.add_widget(MDLabel(text="Auto repos"))
        layout.add_widget(auto_rest_row)

        actions = MDBoxLayout(spacing=dp(8), size_hint_y=None, height=dp(56))
        actions.add_widget(
            MDRaisedButton(text="Valider la série", on_release=lambda *_: self.validate_set())
        )
        actions.add_widget(MDFlatButton(text="Repos", on_release=lambda *_: self.start_rest()))
        actions.add_widget(
            MDFlatButton(text="Exercice suivant", on_release=lambda *_: self.show_skip_confirmation())
        )
        layout.add_widget(actions)
        layout.add_widget(
            MDFlatButton(
                text="Quitter le focus",
                on_release=lambda *_: MDApp.get_running_app().exit_focus(),
            )
        )
        self.add_widget(layout)

    def _run(self):
        app = MDApp.get_running_app()
        return app.strength_run if app else None

    def on_pre_enter(self, *args):
        run = self._run()
        if run:
            self.auto_rest_box.active = run.auto_rest
        self.refresh()
        return super().on_pre_enter(*args)

    def refresh(self):
        """Update every label from the engine state."""
        run = self._run()
        if not run:
            return
        self.elapsed_label.text = format_clock(run.elapsed_seconds)
        block = run.current_block
        if block is None:
            return
        self.position_label.text = (
            f"Ex {run.current_step}/{run.block_count} · "
            f"S {run.current_set_index}/{format_value(block['sets'])}"
        )
        self.progress_bar.value = run.display_progress
        self.exercise_label.text = block.get("name") or f"Exercice {block['exercise_id']}"
        self.target_label.text = (
            f"Série {run.current_set_index}/{format_value(block['sets'])} · "
            f"Objectif {format_value(block['reps'])} reps"
        )
        done = " ✓" if run.is_current_set_logged else ""
        self.weight_button.text = f"{format_value(run.active_weight, ' kg')}{done}"
        self.reps_button.text = f"{format_value(run.active_reps)} reps{done}"
        self.notes_label.text = block.get("notes") or "Aucune note spécifique."

    def _on_auto_rest(self, _checkbox, value):
        run = self._run()
        if run and run.auto_rest != value:
            run.auto_rest = value
            settings.set_value("auto_rest", value)

    def open_entry(self, field: str):
        run = self._run()
        if not run or run.current_block is None:
            return
        DraftEntryDialog(run, field, on_commit=self.refresh).open()

    def validate_set(self):
        run = self._run()
        if run and run.validate_set():
            MDApp.get_running_app().show_run_screen()

    def start_rest(self):
        run = self._run()
        if run and run.start_rest():
            MDApp.get_running_app().show_run_screen()
        else:
            toast("Pas de repos prévu")

    def show_skip_confirmation(self):
        if not self._skip_dialog:
            self._skip_dialog = MDDialog(
                text="Passer à l'exercice suivant ?",
                buttons=[
                    MDFlatButton(text="Annuler", on_release=lambda *_: self._skip_dialog.dismiss()),
                    MDFlatButton(text="Confirmer", on_release=self._perform_skip),
                ],
            )
        self._skip_dialog.open()

    def _perform_skip(self, *args):
        if self._skip_dialog:
            self._skip_dialog.dismiss()
        run = self._run()
        if run and run.skip_exercise():
            MDApp.get_running_app().show_run_screen()
