from pathlib import Path

import pytest

from chatbye.image_settings import ImageSettings


@pytest.fixture
def image(tmp_path):
    source = tmp_path / "pictures" / "sunset.png"
    source.parent.mkdir()
    source.write_bytes(b"\x89PNG fake image data")
    return source


@pytest.fixture
def settings(tmp_path):
    return ImageSettings(tmp_path / "data", colors={"chat": "#ABCDEF"})


def test_defaults(settings):
    assert settings.load_image("PortPage") == ":/images/portPageImg.png"
    assert settings.load_image("NamePage") == ":/images/namePageImg.png"
    assert settings.load_image("ChatPage") == "#ABCDEF"
    assert settings.load_image("Unknown") is None


def test_chat_default_without_colors(tmp_path):
    assert ImageSettings(tmp_path).default_image_path("ChatPage") == ""


def test_save_copies_image(settings, image):
    destination = settings.save_image(image, "ChatPage")
    assert destination.name == "imageChatPage.png"
    assert destination.read_bytes() == image.read_bytes()
    assert settings.load_image("ChatPage") == str(destination)
    assert settings.is_image_available("ChatPage")


def test_save_replaces_previous_file(settings, image, tmp_path):
    first = settings.save_image(image, "PortPage")
    other = tmp_path / "pictures" / "photo.jpg"
    other.write_bytes(b"jpeg bytes")
    second = settings.save_image(other, "PortPage")
    assert not first.exists()
    assert second.read_bytes() == b"jpeg bytes"
    assert settings.load_image("PortPage") == str(second)


def test_save_notifies_listeners(tmp_path, image):
    seen = []
    settings = ImageSettings(tmp_path / "data", on_image_updated=seen.append)
    settings.save_image(image, "NamePage")
    assert seen == ["NamePage"]


@pytest.mark.parametrize("source", ["", "missing.png"])
def test_save_missing_source_raises(settings, source, tmp_path):
    path = str(tmp_path / source) if source else source
    with pytest.raises(FileNotFoundError):
        settings.save_image(path, "PortPage")


def test_reset_restores_default(settings, image):
    destination = settings.save_image(image, "PortPage")
    settings.reset_image("PortPage")
    assert not destination.exists()
    assert not settings.is_image_available("PortPage")
    assert settings.load_image("PortPage") == ":/images/portPageImg.png"


def test_reset_without_stored_image_leaves_nothing(settings):
    settings.reset_image("NamePage")
    assert not settings.settings_path.exists()
    assert settings.load_image("NamePage") == ":/images/namePageImg.png"


def test_vanished_stored_image_gives_none(settings, image):
    destination = settings.save_image(image, "NamePage")
    Path(destination).unlink()
    assert settings.load_image("NamePage") is None
    assert not settings.is_image_available("NamePage")


def test_settings_persist_between_instances(tmp_path, image):
    destination = ImageSettings(tmp_path / "data").save_image(image, "ChatPage")
    reopened = ImageSettings(tmp_path / "data")
    assert reopened.load_image("ChatPage") == str(destination)
    assert reopened.is_image_available("ChatPage")