from datetime import datetime

from encora_provider.services.models import PersonKind
from encora_provider.services.nfo import find_nfo_path, read_local_metadata

FULL_NFO = """<?xml version="1.0" encoding="utf-8"?>
<movie>
  <title>Wicked (NFO)</title>
  <plot>Two witches.</plot>
  <originaltitle>Wicked</originaltitle>
  <sorttitle>Wicked 2024</sorttitle>
  <premiered>2024-12-31</premiered>
  <releasedate>2025-01-05</releasedate>
  <year>2024</year>
  <studio>Gershwin Theatre</studio>
  <genre>Video</genre>
  <genre> </genre>
  <genre>Full Show</genre>
  <certification>US:PG</certification>
  <thumb aspect="landscape">https://img/fanart.jpg</thumb>
  <thumb aspect="poster">https://img/poster.jpg</thumb>
  <actor>
    <name>Cynthia Erivo</name>
    <role>Elphaba</role>
    <thumb>https://img/cynthia.jpg</thumb>
    <type>Actor</type>
  </actor>
  <actor>
    <role>Nobody</role>
  </actor>
</movie>
"""


def _media(tmp_path, name="movie.mkv"):
    media = tmp_path / name
    media.write_bytes(b"")
    return str(media)


def test_reads_full_descriptor(tmp_path):
    (tmp_path / "movie.nfo").write_text(FULL_NFO, encoding="utf-8")
    result = read_local_metadata(_media(tmp_path))

    assert result.has_metadata is True
    assert result.title == "Wicked (NFO)"
    assert result.overview == "Two witches."
    assert result.original_title == "Wicked"
    assert result.sort_title == "Wicked 2024"
    assert result.premiere_date == datetime(2024, 12, 31)
    assert result.production_year == 2024
    assert result.studio == "Gershwin Theatre"
    assert result.genres == ["Video", "Full Show"]
    assert result.official_rating == "NFT"
    assert result.primary_image_url == "https://img/poster.jpg"
    assert len(result.people) == 1
    actor = result.people[0]
    assert (actor.name, actor.role, actor.image_url, actor.kind) == (
        "Cynthia Erivo",
        "Elphaba",
        "https://img/cynthia.jpg",
        PersonKind.ACTOR,
    )


def test_releasedate_used_when_premiered_is_invalid(tmp_path):
    (tmp_path / "movie.nfo").write_text(
        "<movie><premiered>soon</premiered><releasedate>2025-01-05</releasedate></movie>"
    )
    result = read_local_metadata(_media(tmp_path))
    assert result.premiere_date == datetime(2025, 1, 5)


def test_missing_optional_fields_stay_empty(tmp_path):
    (tmp_path / "movie.nfo").write_text("<movie><title>Only a title</title><year>n/a</year></movie>")
    result = read_local_metadata(_media(tmp_path))
    assert result.has_metadata is True
    assert result.title == "Only a title"
    assert result.premiere_date is None
    assert result.production_year is None
    assert result.studio is None
    assert result.genres == []
    assert result.official_rating is None
    assert result.primary_image_url is None
    assert result.people == []


def test_named_sidecar_used_when_movie_nfo_is_absent(tmp_path):
    (tmp_path / "Wicked.nfo").write_text("<movie><title>Named</title></movie>")
    media = _media(tmp_path, "Wicked.mkv")
    assert find_nfo_path(media) == str(tmp_path / "Wicked.nfo")
    assert read_local_metadata(media).title == "Named"


def test_movie_nfo_preferred_over_named_sidecar(tmp_path):
    (tmp_path / "Wicked.nfo").write_text("<movie><title>Named</title></movie>")
    (tmp_path / "movie.nfo").write_text("<movie><title>Generic</title></movie>")
    assert read_local_metadata(_media(tmp_path, "Wicked.mkv")).title == "Generic"


def test_root_element_match_is_case_insensitive(tmp_path):
    (tmp_path / "movie.nfo").write_text("<Movie><title>Upper</title></Movie>")
    assert read_local_metadata(_media(tmp_path)).has_metadata is True


def test_wrong_root_element_is_not_found(tmp_path):
    (tmp_path / "movie.nfo").write_text("<tvshow><title>Series</title></tvshow>")
    result = read_local_metadata(_media(tmp_path))
    assert result.has_metadata is False
    assert result.title is None


def test_malformed_xml_is_not_found(tmp_path):
    (tmp_path / "movie.nfo").write_text("<movie><title>broken</movie>")
    assert read_local_metadata(_media(tmp_path)).has_metadata is False


def test_no_descriptor_is_not_found(tmp_path):
    result = read_local_metadata(_media(tmp_path))
    assert result.has_metadata is False
    assert result.people == []
