"""Operator dialogs: yad confirmations and the click-to-stop affordances."""

from __future__ import annotations

import logging
import subprocess

TITLE = "screencaster"
STOP_TEXT = "Click to stop recording"


def confirm(message: str, enabled: bool = True, logger: logging.Logger | None = None) -> bool:
    """Ask the operator to confirm *message* in a yad dialog.

    Returns True on OK. When *enabled* is False no dialog is shown and the
    answer is an implicit yes.
    """
    if not enabled:
        return True
    if logger is not None:
        logger.debug("Confirm: %s", message)
    result = subprocess.run(
        ["yad", "--title", TITLE, "--text-align", "center", "--text", f"\n {message} \n"],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        check=False,
    )
    return result.returncode == 0


class YadStopNotifier:
    """Blocks until the operator clicks a yad notification-area icon."""

    name = "yad"

    def __init__(self, image: str = "media-playback-stop", text: str = STOP_TEXT):
        self.image = image
        self.text = text

    def command(self) -> list[str]:
        return ["yad", "--notification", "--image", self.image, "--text", self.text]

    def wait(self) -> None:
        # yad exits when its icon is clicked
        subprocess.run(
            self.command(),
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )


def _create_stop_icon():
    """Create a red circle stop-recording tray icon."""
    from PIL import Image, ImageDraw

    img = Image.new("RGBA", (64, 64), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    draw.ellipse([4, 4, 60, 60], fill=(220, 30, 30, 255))
    draw.rectangle([20, 20, 44, 44], fill=(255, 255, 255, 255))
    return img


class TrayStopNotifier:
    """Blocks until the operator activates a pystray stop icon."""

    name = "tray"

    def __init__(self, text: str = STOP_TEXT):
        self.text = text

    def _on_stop(self, icon, item) -> None:
        icon.stop()

    def build_icon(self):
        import pystray
        from pystray import MenuItem

        menu = pystray.Menu(MenuItem("Stop recording", self._on_stop, default=True))
        return pystray.Icon("screencaster", _create_stop_icon(), self.text, menu)

    def wait(self) -> None:
        # Icon.run() blocks the calling thread until icon.stop()
        self.build_icon().run()


NOTIFIERS = {
    YadStopNotifier.name: YadStopNotifier,
    TrayStopNotifier.name: TrayStopNotifier,
}


def make_stop_notifier(kind: str):
    """Return a stop notifier by name ("yad" or "tray")."""
    try:
        return NOTIFIERS[kind]()
    except KeyError:
        raise ValueError(
            f"Unknown stop notifier {kind!r}; choose one of: {', '.join(sorted(NOTIFIERS))}"
        ) from None
