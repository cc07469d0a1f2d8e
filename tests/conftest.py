"""Shared fixtures: sandboxed storage roots, an app client, image bytes."""

import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from gallery.config import Settings
from main import create_app


def make_image(size=(400, 300), fmt="PNG", color=(200, 30, 30)) -> bytes:
    img = Image.new("RGB", size, color=color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def photo_root(tmp_path):
    root = tmp_path / "uploads"
    root.mkdir()
    return root


@pytest.fixture
def music_root(tmp_path):
    root = tmp_path / "uploads-music"
    root.mkdir()
    return root


@pytest.fixture
def settings(photo_root, music_root):
    return Settings(storage_path=photo_root.resolve(), music_storage_path=music_root.resolve())


@pytest.fixture
def client(settings):
    return TestClient(create_app(settings))


@pytest.fixture
def png_bytes():
    return make_image()
