import asyncio
import logging
import os
import sys
from pathlib import Path

from kivy.clock import Clock
from kivy.core.window import Window
from kivy.uix.screenmanager import NoTransition
from kivymd.app import MDApp
from kivymd.toast import toast
from kivymd.uix.screenmanager import MDScreenManager

from assets.sounds import SoundSystem
from backend import settings
from core import (
    DEFAULT_CYCLE,
    DEFAULT_DB_PATH,
    DEFAULT_SESSION_PATH,
    StrengthRun,
    StrengthRunRecorder,
    get_in_progress_run,
    get_one_rms,
    init_db,
    load_session_file,
)
from backend.strength_session import COMPLETE, INTRO
from ui.celebration import launch_confetti
from ui.screens.session import (
    RestScreen,
    RunIntroScreen,
    WorkoutActiveScreen,
    WorkoutSummaryScreen,
)

if os.name == "nt" or sys.platform.startswith("win"):
    Window.size = (280, 280 * (20 / 9))


class StrengthRunnerApp(MDApp):
    strength_run: StrengthRun | None = None
    recorder: StrengthRunRecorder | None = None
    session_title = ""
    cycle = DEFAULT_CYCLE

    def __init__(
        self,
        session_path: Path = DEFAULT_SESSION_PATH,
        db_path: Path = DEFAULT_DB_PATH,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.session_path = Path(session_path)
        self.db_path = Path(db_path)
        self.sound = None
        self._tick_event = None

    def build(self):
        init_db(self.db_path)
        self.sound = SoundSystem(enabled=bool(settings.get_value("sound_on")))
        manager = MDScreenManager(transition=NoTransition())
        manager.add_widget(RunIntroScreen(name="run_intro"))
        manager.add_widget(WorkoutActiveScreen(name="workout_active"))
        manager.add_widget(RestScreen(name="rest"))
        manager.add_widget(WorkoutSummaryScreen(name="workout_summary"))
        self.root = manager
        self.load_run()
        self._tick_event = Clock.schedule_interval(self._tick, 1)
        self.show_run_screen()
        return manager

    def on_stop(self):
        if self._tick_event:
            self._tick_event.cancel()
            self._tick_event = None

    def load_run(self):
        """Create the run for the assigned session, resuming unfinished work."""

        session = load_session_file(self.session_path)
        athlete_id = settings.get_value("athlete_id")
        self.session_title = session["title"]
        self.cycle = session["cycle"]

        existing = get_in_progress_run(athlete_id, self.db_path)
        if existing and existing.get("session_id") != session["session_id"]:
            existing = None
        self.recorder = StrengthRunRecorder(
            athlete_id,
            session_id=session["session_id"],
            assignment_id=session["assignment_id"],
            cycle=self.cycle,
            db_path=self.db_path,
            run_id=existing["id"] if existing else None,
        )
        self.strength_run = StrengthRun(
            session["blocks"],
            one_rms=get_one_rms(athlete_id, self.db_path),
            collaborator=self.recorder,
            auto_rest=bool(settings.get_value("auto_rest")),
            on_celebrate=self.celebrate,
            on_failure=self.on_sync_failure,
        )
        if existing:
            self.strength_run.load_history(existing["logs"], existing.get("progress_pct"))
            self.strength_run.started_at = existing["started_at"]
            logging.info(
                "Resumed run %s at exercise %s set %s",
                existing["id"],
                self.strength_run.current_step,
                self.strength_run.current_set_index,
            )

    def show_run_screen(self):
        """Switch to the screen matching the state of the run."""

        run = self.strength_run
        if not self.root or not run:
            return
        if run.phase == INTRO:
            name = "run_intro"
        elif run.rest.is_resting:
            name = "rest"
        elif run.phase == COMPLETE:
            name = "workout_summary"
        else:
            name = "workout_active"
        if self.root.current != name:
            self.root.current = name

    def _tick(self, _dt):
        run = self.strength_run
        if not run:
            return
        was_resting = run.rest.is_resting
        run.rest.tick()
        if was_resting and not run.rest.is_resting:
            self.sound.rest_over()
        screen = self.root.current_screen
        if hasattr(screen, "refresh"):
            screen.refresh()

    def celebrate(self):
        launch_confetti()
        if self.sound:
            self.sound.celebrate()

    def on_sync_failure(self, operation, exc):
        toast("Synchronisation impossible, la séance continue")

    def on_run_finished(self):
        toast("Séance enregistrée")
        self.exit_focus()

    def exit_focus(self):
        self.stop()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(StrengthRunnerApp().async_run(async_lib="asyncio"))
