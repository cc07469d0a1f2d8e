from create_dummy_data import create_all_collections
from gallery import storage
from gallery.conditions import resolve_condition


def test_seeds_every_weather_collection(photo_root):
    created = create_all_collections(photo_root)
    assert sorted(created) == ["Cloudy Day", "Rainy Day", "Snow Day", "Sunny Day"]

    collection = resolve_condition("snow")
    names = sorted(e.name for e in storage.list_entries(photo_root, collection))
    assert names == ["snow_1.jpg", "snow_2.jpg"]


def test_seeding_twice_replaces_files(photo_root):
    create_all_collections(photo_root)
    create_all_collections(photo_root)
    assert len(storage.list_entries(photo_root, "Sunny Day")) == 2
