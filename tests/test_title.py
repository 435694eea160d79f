import pytest

from encora_provider.services.models import EncoraDate, EncoraRecording
from encora_provider.services.title import build_date_labels, format_title, show_with_act


def _recording(**overrides):
    data = {
        "show": "Wicked",
        "tour": "Broadway",
        "master": "dreamer",
        "date": {"full_date": "2024-12-31", "month_known": True, "day_known": True},
    }
    data.update(overrides)
    return EncoraRecording.model_validate(data)


def test_full_date_renders_long_form():
    assert format_title("{show} - {date}", _recording(), "/media/Wicked {e-4821}/movie.mkv") == (
        "Wicked - December 31, 2024"
    )


def test_all_date_variants():
    labels = build_date_labels(EncoraDate(full_date="2024-03-05", month_known=True, day_known=True))
    assert labels.long == "March 5, 2024"
    assert labels.iso == "2024-03-05"
    assert labels.usa == "03-05-2024"
    assert labels.numeric == "05-03-2024"


def test_unknown_day_uses_replacement_characters():
    labels = build_date_labels(
        EncoraDate(full_date="2024-03-01", month_known=True, day_known=False), "x"
    )
    assert labels.long == "March xx, 2024"
    assert labels.iso == "2024-03-xx"
    assert labels.usa == "03-xx-2024"
    assert labels.numeric == "xx-03-2024"


@pytest.mark.parametrize("full_date", ["2019-01-01", "2019-07-20", "2019"])
def test_year_only_when_month_and_day_unknown(full_date):
    labels = build_date_labels(EncoraDate(full_date=full_date, month_known=False, day_known=False))
    assert labels.long == "2019"
    assert labels.iso == "2019-xx-xx"


def test_replacement_char_uses_first_character_only():
    labels = build_date_labels(EncoraDate(full_date="2019-01-01"), "#?")
    assert labels.iso == "2019-##-##"


def test_invalid_calendar_date_falls_back_to_raw_components():
    labels = build_date_labels(EncoraDate(full_date="2023-02-30", month_known=True, day_known=True))
    assert labels.long == "2023-02-30"


def test_time_of_day_does_not_hide_known_day():
    labels = build_date_labels(EncoraDate(full_date="2024-12-31T20:00:00", month_known=True, day_known=True))
    assert labels.long == "December 31, 2024"
    assert labels.iso == "2024-12-31"


def test_unparseable_year_falls_back_to_raw_components():
    labels = build_date_labels(EncoraDate(full_date="unknown", month_known=False, day_known=False))
    assert labels.long == "unknown-xx-xx"


def test_variant_and_matinee_suffixes_apply_to_every_form():
    labels = build_date_labels(
        EncoraDate(
            full_date="2024-12-31",
            month_known=True,
            day_known=True,
            date_variant="preview",
            time="Matinee",
        )
    )
    assert labels.long == "December 31, 2024 (preview) (matinée)"
    assert labels.iso == "2024-12-31 (preview) (matinée)"
    assert labels.usa == "12-31-2024 (preview) (matinée)"
    assert labels.numeric == "31-12-2024 (preview) (matinée)"


def test_evening_time_gets_no_suffix():
    labels = build_date_labels(
        EncoraDate(full_date="2024-12-31", month_known=True, day_known=True, time="evening")
    )
    assert labels.long == "December 31, 2024"


def test_missing_date_gives_no_labels():
    assert build_date_labels(None) is None
    assert build_date_labels(EncoraDate(full_date="  ")) is None


def test_act_suffix_from_path():
    assert show_with_act("Hamilton", "/media/Hamilton/act 2.mkv") == "Hamilton Act 2"
    assert show_with_act("Hamilton", "/media/Hamilton/Act1.mkv") == "Hamilton Act 1"
    assert show_with_act("Hamilton", "/media/Hamilton/Contract 2.mkv") == "Hamilton"


def test_all_tokens_substituted():
    title = format_title(
        "{show} | {date_iso} | {date_usa} | {date_numeric} | {tour} | {master}",
        _recording(),
        "/media/Wicked/Act 1.mkv",
    )
    assert title == "Wicked Act 1 | 2024-12-31 | 12-31-2024 | 31-12-2024 | Broadway | dreamer"


def test_missing_values_become_empty_and_title_is_trimmed():
    recording = EncoraRecording.model_validate({"show": "Wicked"})
    assert format_title("{show} - {tour} {date}", recording, "/media/x.mkv") == "Wicked -"


@pytest.mark.parametrize("template", ["  Plain title  ", "{unknown} token", "{Show} is case-sensitive"])
def test_template_without_recognised_tokens_is_returned_trimmed(template):
    assert format_title(template, _recording(), "/media/x.mkv") == template.strip()


def test_formatting_is_deterministic():
    recording = _recording(date={"full_date": "2024-12-31", "month_known": True, "day_known": True, "time": "matinee"})
    first = format_title("{show} {date} {date_iso}", recording, "/media/Act 3/x.mkv")
    second = format_title("{show} {date} {date_iso}", recording, "/media/Act 3/x.mkv")
    assert first == second
