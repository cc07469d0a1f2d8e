# create_dummy_data.py
"""Provision the weather collections with generated sample images.

Usage: python create_dummy_data.py [STORAGE_PATH]

Writes a few solid-colour JPEGs into "Sunny Day", "Cloudy Day",
"Rainy Day" and "Snow Day" under the storage root so a fresh deployment
has something to list and resize.
"""
import io
import sys
from pathlib import Path

from PIL import Image, ImageDraw

from gallery.conditions import CONDITION_COLLECTIONS, Condition
from gallery.config import Settings
from gallery.uploads import UploadedFile, ingest, normalize_files

PALETTES = {
    Condition.SUN: [(250, 200, 40), (255, 150, 0)],
    Condition.CLOUD: [(170, 170, 180), (120, 125, 140)],
    Condition.RAIN: [(60, 90, 140), (30, 50, 90)],
    Condition.SNOW: [(235, 240, 250), (200, 215, 235)],
}
SIZES = [(640, 480), (480, 640)]


def _sample_image(color, size, label: str) -> bytes:
    img = Image.new("RGB", size, color=color)
    ImageDraw.Draw(img).text((10, 10), label, fill=(0, 0, 0))
    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=85)
    return buf.getvalue()


def create_all_collections(root: Path):
    created = {}
    for condition, collection in CONDITION_COLLECTIONS.items():
        files = []
        for i, (color, size) in enumerate(zip(PALETTES[condition], SIZES), start=1):
            name = f"{condition.value}_{i}.jpg"
            files.append(UploadedFile.from_bytes(name, _sample_image(color, size, collection), "image/jpeg"))
        summary = ingest(root, collection, normalize_files(files))
        created[collection] = [item.name for item in summary if item.ok]
    return created


if __name__ == "__main__":
    root = Path(sys.argv[1]).resolve() if len(sys.argv) > 1 else Settings.from_env().storage_path
    for collection, names in create_all_collections(root).items():
        print(f"{collection}: {', '.join(names)}")
