"""Dialogs shared by the strength runner screens."""

from __future__ import annotations

from kivy.metrics import dp
from kivymd.uix.boxlayout import MDBoxLayout
from kivymd.uix.button import MDFlatButton, MDRaisedButton
from kivymd.uix.dialog import MDDialog
from kivymd.uix.gridlayout import MDGridLayout
from kivymd.uix.label import MDLabel

from ui.formatting import PLACEHOLDER

KEYPAD_KEYS = ("1", "2", "3", "4", "5", "6", "7", "8", "9", ".", "0", "<")


def show_error(title: str, message: str) -> MDDialog:
    """Open a blocking error dialog with a single OK button."""

    dialog = None

    def close(*_):
        dialog.dismiss()

    dialog = MDDialog(
        title=title,
        text=message,
        buttons=[MDRaisedButton(text="OK", on_release=close)],
    )
    dialog.open()
    return dialog


class DraftEntryDialog(MDDialog):
    """Numeric keypad to enter the weight or reps of the current set.

    The dialog edits the entry surface of a
    :class:`~backend.strength_session.StrengthRun`.  Pressing *OK* commits the
    value; text that is not a number keeps the dialog open unchanged.
    """

    def __init__(self, run, field: str, on_commit=None, **kwargs):
        self.run = run
        self.on_commit = on_commit
        run.open_entry(field)

        content = MDBoxLayout(
            orientation="vertical",
            spacing=dp(8),
            size_hint_y=None,
            height=dp(280),
        )
        tabs = MDBoxLayout(size_hint_y=None, height=dp(40), spacing=dp(8))
        for name, label in (("weight", "Charge (kg)"), ("reps", "Reps")):
            tabs.add_widget(
                MDFlatButton(
                    text=label,
                    on_release=lambda _btn, n=name: self._select(n),
                )
            )
        content.add_widget(tabs)
        self.value_label = MDLabel(
            text="", halign="center", font_style="H4", size_hint_y=None, height=dp(56)
        )
        content.add_widget(self.value_label)
        keypad = MDGridLayout(cols=3, spacing=dp(4))
        for key in KEYPAD_KEYS:
            keypad.add_widget(
                MDRaisedButton(text=key, on_release=lambda _btn, k=key: self._press(k))
            )
        content.add_widget(keypad)

        super().__init__(
            type="custom",
            content_cls=content,
            buttons=[
                MDFlatButton(text="Annuler", on_release=self._cancel),
                MDRaisedButton(text="OK", on_release=self._commit),
            ],
            **kwargs,
        )
        self._refresh()

    def _refresh(self) -> None:
        self.title = "Charge" if self.run.entry_field == "weight" else "Répétitions"
        self.value_label.text = self.run.entry_text or PLACEHOLDER

    def _select(self, field: str) -> None:
        self.run.select_entry_field(field)
        self._refresh()

    def _press(self, key: str) -> None:
        if key == "<":
            self.run.backspace_entry()
        else:
            self.run.append_entry(key)
        self._refresh()

    def _cancel(self, *_):
        self.run.close_entry()
        self.dismiss()

    def _commit(self, *_):
        if not self.run.commit_entry():
            return
        self.dismiss()
        if self.on_commit:
            self.on_commit()
