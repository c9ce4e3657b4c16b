"""Per-page background images chosen by the user, kept in the data directory."""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Callable, Mapping, Optional, Union

DEFAULT_IMAGES = {
    "PortPage": ":/images/portPageImg.png",
    "NamePage": ":/images/namePageImg.png",
}
_SETTINGS_FILE = "image_settings.json"

PathLike = Union[str, Path]


def _key(page_name: str) -> str:
    return f"imagePath{page_name}"


class ImageSettings:
    """Stores which image each page shows and copies chosen images in place."""

    def __init__(
        self,
        data_dir: PathLike,
        *,
        colors: Optional[Mapping[str, str]] = None,
        on_image_updated: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.data_dir = Path(data_dir)
        self.colors = colors if colors is not None else {}
        self.listeners: list[Callable[[str], None]] = []
        if on_image_updated is not None:
            self.listeners.append(on_image_updated)

    @property
    def settings_path(self) -> Path:
        return self.data_dir / _SETTINGS_FILE

    def _read(self) -> dict[str, str]:
        try:
            with self.settings_path.open(encoding="utf-8") as handle:
                data = json.load(handle)
        except (FileNotFoundError, ValueError):
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, str]) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with self.settings_path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, ensure_ascii=False, indent=2)

    def _notify(self, page_name: str) -> None:
        for listener in self.listeners:
            listener(page_name)

    def load_image(self, page_name: str) -> Optional[str]:
        """Return the image for a page.

        A stored image that exists wins; with nothing stored the default is
        used; a stored image that has gone missing gives None.
        """
        stored = self._read().get(_key(page_name), "")
        if stored:
            return stored if Path(stored).exists() else None
        return self.default_image_path(page_name)

    def save_image(self, source_path: PathLike, page_name: str) -> Path:
        """Copy an image into the data directory as the page's image."""
        source = Path(source_path) if source_path else None
        if source is None or not source.is_file():
            raise FileNotFoundError(f"source image not found: {source_path!r}")

        self.data_dir.mkdir(parents=True, exist_ok=True)
        for old in self.data_dir.glob(f"image{page_name}.*"):
            if old.is_file():
                old.unlink()

        extension = source.suffix.lstrip(".")
        destination = self.data_dir / f"image{page_name}.{extension}"
        shutil.copyfile(source, destination)

        data = self._read()
        data[_key(page_name)] = str(destination)
        self._write(data)
        self._notify(page_name)
        return destination

    def reset_image(self, page_name: str) -> None:
        """Forget the page's stored image and delete its copy."""
        data = self._read()
        key = _key(page_name)
        if key not in data:
            return
        stored = data.pop(key)
        if stored and Path(stored).exists():
            Path(stored).unlink()
        self._write(data)

    def default_image_path(self, page_name: str) -> Optional[str]:
        """Return the built-in image of a page; the chat page uses its colour."""
        if page_name in DEFAULT_IMAGES:
            return DEFAULT_IMAGES[page_name]
        if page_name == "ChatPage":
            return self.colors.get("chat", "")
        return None

    def is_image_available(self, page_name: str) -> bool:
        """Whether a user image is stored for the page and still exists."""
        stored = self._read().get(_key(page_name), "")
        return bool(stored) and Path(stored).exists()