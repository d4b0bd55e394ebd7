from pathlib import Path

from kivy.core.audio import SoundLoader


class SoundSystem:
    """Play the short cues of a strength run.

    Sounds are loaded lazily from the ``assets/sounds`` directory and cached.
    A missing file is skipped silently so the run never depends on audio.
    """

    def __init__(self, enabled: bool = True):
        self._base = Path(__file__).resolve().parent
        self._cache: dict[str, object] = {}
        self.enabled = enabled

    def _load(self, name: str):
        if name not in self._cache:
            path = self._base / f"{name}.wav"
            self._cache[name] = SoundLoader.load(str(path)) if path.exists() else None
        return self._cache[name]

    def play(self, name: str) -> None:
        """Play a named sound if enabled and available."""
        if not self.enabled:
            return
        snd = self._load(name)
        if snd:
            snd.stop()
            snd.play()

    def rest_over(self) -> None:
        self.play("rest_end")

    def celebrate(self) -> None:
        self.play("finish")
