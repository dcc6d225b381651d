import io

import pytest
from PIL import Image
from PyPDF2 import PdfReader

from app import app as flask_app


def make_image(size=(640, 480), color=(120, 90, 60), fmt="JPEG", mode="RGB"):
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format=fmt)
    return buf.getvalue()


def read_pdf(data):
    return PdfReader(io.BytesIO(data))


def page_texts(data):
    return [page.extract_text() or "" for page in read_pdf(data).pages]


@pytest.fixture
def photo():
    return make_image()


@pytest.fixture
def photos():
    return [
        make_image((800, 600), (200, 30, 30)),
        make_image((600, 900), (30, 200, 30)),
        make_image((1200, 400), (30, 30, 200), fmt="PNG"),
    ]


@pytest.fixture
def logo_png():
    return make_image((200, 200), (255, 255, 255, 255), fmt="PNG", mode="RGBA")


@pytest.fixture
def app(monkeypatch):
    monkeypatch.setitem(flask_app.config, "TESTING", True)
    monkeypatch.setitem(flask_app.config, "RASTER_WIDTH", 320)
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()
