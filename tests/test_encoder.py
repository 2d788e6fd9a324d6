"""Tests for UrlEntryEncoder — URL block formatting and document side effects."""
import re

import pytest

from sitemap_writer.sitemap.encoder import UrlEntryEncoder
from sitemap_writer.sitemap.errors import (
    CallerContractError,
    MissingFieldError,
    UnknownFieldError,
    WriteError,
)
from sitemap_writer.sitemap.resolver import UrlResolver
from tests.conftest import RecordingDocument, make_news, make_video


def make_encoder(document, **kwargs):
    kwargs.setdefault("timezone", "UTC")
    return UrlEntryEncoder(document, **kwargs)


def encode_one(url="https://example.com/", options=None, **kwargs):
    document = RecordingDocument()
    encoder = make_encoder(document, **kwargs)
    encoder.encode(url, options)
    return document, document.fragments[0]


class TestCoreBlock:
    """The <loc>/<lastmod>/<changefreq>/<priority> block."""

    def test_minimal_entry(self):
        _, fragment = encode_one(options={"lastModified": "2021-06-23"})
        assert fragment == (
            "<url><loc>https://example.com/</loc><lastmod>2021-06-23</lastmod>"
            "<changefreq>daily</changefreq><priority>0.5</priority></url>\n"
        )

    def test_core_tags_once_and_in_order_before_extensions(self):
        _, fragment = encode_one(options={
            "news": make_news(),
            "images": [{"location": "a.jpg"}],
            "alternate": {"url": "https://example.com/de", "hreflang": "de"},
        })
        tags = ["<loc>", "<lastmod>", "<changefreq>", "<priority>"]
        positions = [fragment.index(tag) for tag in tags]
        assert positions == sorted(positions)
        for tag in tags:
            assert fragment.count(tag) == 1
        assert positions[-1] < fragment.index("<news:news>")

    def test_default_lastmod_is_today(self):
        _, fragment = encode_one()
        assert re.search(r"<lastmod>\d{4}-\d{2}-\d{2}</lastmod>", fragment)

    def test_timestamp_string_normalized(self):
        _, fragment = encode_one(options={"lastModified": "1655942400"})
        assert "<lastmod>2022-06-23</lastmod>" in fragment

    def test_timestamp_uses_configured_zone(self):
        _, fragment = encode_one(
            options={"lastModified": 1655942400},
            timezone="America/New_York",
        )
        assert "<lastmod>2022-06-22</lastmod>" in fragment

    def test_iso_date_passes_through(self):
        _, fragment = encode_one(options={"lastModified": "2021-06-23"})
        assert "<lastmod>2021-06-23</lastmod>" in fragment

    def test_invalid_change_frequency_passes_through(self):
        _, fragment = encode_one(options={"changeFrequency": "sometimes"})
        assert "<changefreq>sometimes</changefreq>" in fragment

    def test_location_is_escaped(self):
        _, fragment = encode_one("https://example.com/?a=1&b=2")
        assert "<loc>https://example.com/?a=1&amp;b=2</loc>" in fragment


class TestOptionPrecedence:
    """Built-in defaults < encoder defaults < call options."""

    def test_encoder_defaults_override_builtins(self):
        _, fragment = encode_one(default_options={"priority": "0.8", "changeFrequency": "weekly"})
        assert "<priority>0.8</priority>" in fragment
        assert "<changefreq>weekly</changefreq>" in fragment

    def test_call_options_override_encoder_defaults(self):
        _, fragment = encode_one(
            options={"priority": 0.3},
            default_options={"priority": "0.8", "changeFrequency": "weekly"},
        )
        assert "<priority>0.3</priority>" in fragment
        assert "<changefreq>weekly</changefreq>" in fragment

    def test_defaults_come_from_config(self, tmp_path, monkeypatch):
        config_file = tmp_path / "sitemap.yaml"
        config_file.write_text("defaults:\n  changeFrequency: monthly\n", encoding="utf-8")
        monkeypatch.setenv("SITEMAP_CONFIG", str(config_file))
        _, fragment = encode_one()
        assert "<changefreq>monthly</changefreq>" in fragment


class TestNews:
    def test_news_block(self):
        document, fragment = encode_one(options={"news": make_news()})
        assert (
            "<news:news><news:publication><news:name>Example Times</news:name>"
            "<news:language>en</news:language></news:publication>"
            "<news:genres>PressRelease, Blog</news:genres>"
            "<news:publication_date>2021-06-23</news:publication_date>"
            "<news:title><![CDATA[Launch day]]></news:title>"
            "<news:keywords><![CDATA[launch, product]]></news:keywords>"
            "</news:news>"
        ) in fragment
        assert document.has_news is True

    def test_missing_news_field_fails_fast(self):
        news = make_news()
        del news["publicationDate"]
        document = RecordingDocument()
        with pytest.raises(MissingFieldError) as exc_info:
            make_encoder(document).encode("https://example.com/", {"news": news})
        assert exc_info.value.block == "news"
        assert exc_info.value.field == "publicationDate"
        assert document.fragments == []
        assert document.has_news is False


class TestImages:
    def test_location_only_image_has_one_child(self):
        document, fragment = encode_one(options={"images": [{"location": "a.jpg"}]})
        block = re.search(r"<image:image>(.*?)</image:image>", fragment).group(1)
        assert block == "<image:loc><![CDATA[a.jpg]]></image:loc>"
        for tag in ("caption", "geo_location", "title", "license"):
            assert f"image:{tag}" not in fragment
        assert document.has_images is True

    def test_full_image_field_order(self):
        _, fragment = encode_one(options={"images": [{
            "license": "https://example.com/license",
            "title": "Cat",
            "geoLocation": "Limerick, Ireland",
            "caption": "A cat",
            "location": "https://example.com/cat.jpg",
        }]})
        assert (
            "<image:image><image:loc><![CDATA[https://example.com/cat.jpg]]></image:loc>"
            "<image:caption><![CDATA[A cat]]></image:caption>"
            "<image:geo_location>Limerick, Ireland</image:geo_location>"
            "<image:title><![CDATA[Cat]]></image:title>"
            "<image:license><![CDATA[https://example.com/license]]></image:license>"
            "</image:image>"
        ) in fragment

    def test_multiple_images_in_order(self):
        _, fragment = encode_one(options={"images": [{"location": "a.jpg"}, {"location": "b.jpg"}]})
        assert fragment.count("<image:image>") == 2
        assert fragment.index("a.jpg") < fragment.index("b.jpg")

    def test_empty_image_list_sets_no_flag(self):
        document, fragment = encode_one(options={"images": []})
        assert "image:" not in fragment
        assert document.has_images is False

    def test_unknown_image_key_rejected(self):
        with pytest.raises(UnknownFieldError):
            encode_one(options={"images": [{"location": "a.jpg", "size": "big"}]})


class TestVideos:
    def test_required_fields_and_content_loc(self):
        document, fragment = encode_one(options={"video": [make_video()]})
        assert (
            "<video:video>"
            "<video:thumbnail_loc><![CDATA[https://example.com/thumb.jpg]]></video:thumbnail_loc>"
            "<video:title><![CDATA[Grilling steaks]]></video:title>"
            "<video:description><![CDATA[How to grill steaks]]></video:description>"
            "<video:content_loc><![CDATA[https://example.com/video.mp4]]></video:content_loc>"
            "</video:video>"
        ) in fragment
        assert document.has_videos is True

    def test_content_loc_wins_over_player_loc(self):
        _, fragment = encode_one(options={"video": [
            make_video(player_loc="https://example.com/player")
        ]})
        assert "<video:content_loc>" in fragment
        assert "player_loc" not in fragment

    def test_player_loc_when_no_content_loc(self):
        _, fragment = encode_one(options={"video": [
            make_video(content_loc=None, player_loc="https://example.com/player")
        ]})
        assert "<video:player_loc><![CDATA[https://example.com/player]]></video:player_loc>" in fragment
        assert "content_loc" not in fragment

    def test_no_location_emits_no_location_tag(self):
        _, fragment = encode_one(options={"video": [make_video(content_loc=None)]})
        assert "content_loc" not in fragment
        assert "player_loc" not in fragment

    def test_optional_fields_in_fixed_order(self):
        _, fragment = encode_one(options={"video": [make_video(
            live=False,
            duration=600,
            family_friendly=True,
            tag=["steak", "meat"],
            rating=4.2,
        )]})
        tail = fragment.split("</video:content_loc>")[1]
        assert tail.startswith(
            "<video:duration><![CDATA[600]]></video:duration>"
            "<video:rating><![CDATA[4.2]]></video:rating>"
            "<video:family_friendly><![CDATA[yes]]></video:family_friendly>"
            "<video:tag><![CDATA[steak]]></video:tag>"
            "<video:tag><![CDATA[meat]]></video:tag>"
            "<video:live><![CDATA[no]]></video:live>"
            "</video:video>"
        )

    def test_missing_required_video_field(self):
        video = make_video()
        del video["description"]
        with pytest.raises(MissingFieldError) as exc_info:
            encode_one(options={"video": [video]})
        assert exc_info.value.field == "description"

    def test_cdata_terminator_is_split(self):
        _, fragment = encode_one(options={"video": [make_video(title="a]]>b")]})
        assert "<video:title><![CDATA[a]]]]><![CDATA[>b]]></video:title>" in fragment


class TestAlternates:
    def test_single_alternate(self):
        _, fragment = encode_one(options={"alternate": {"url": "https://x/en", "hreflang": "en"}})
        assert '<xhtml:link rel="alternate" href="https://x/en" hreflang="en"/>' in fragment

    def test_href_first_then_input_order(self):
        _, fragment = encode_one(options={"alternate": [
            {"hreflang": "de", "media": "only screen", "url": "https://x/de"},
        ]})
        assert '<xhtml:link rel="alternate" href="https://x/de" hreflang="de" media="only screen"/>' in fragment

    def test_keyed_collection(self):
        _, fragment = encode_one(options={"alternate": {
            "en": {"url": "https://x/en", "hreflang": "en"},
            "fr": {"url": "https://x/fr", "hreflang": "fr"},
        }})
        assert fragment.count("<xhtml:link") == 2
        assert fragment.index("https://x/en") < fragment.index("https://x/fr")

    def test_link_without_url(self):
        _, fragment = encode_one(options={"alternate": [{"hreflang": "x-default"}]})
        assert '<xhtml:link rel="alternate" hreflang="x-default"/>' in fragment

    def test_attribute_values_escaped(self):
        _, fragment = encode_one(options={"alternate": {"url": 'https://x/?a=1&b="2"'}})
        assert 'href="https://x/?a=1&amp;b=&quot;2&quot;"' in fragment

    def test_invalid_attribute_name_rejected(self):
        with pytest.raises(CallerContractError):
            encode_one(options={"alternate": {"url": "https://x/", "bad name": "1"}})

    def test_alternates_do_not_touch_flags(self):
        document, _ = encode_one(options={"alternate": {"url": "https://x/en"}})
        assert (document.has_news, document.has_images, document.has_videos) == (False, False, False)


class TestSideEffects:
    def test_counter_incremented_once_per_call(self, document):
        encoder = make_encoder(document)
        encoder.encode("https://example.com/a")
        encoder.encode("https://example.com/b", {"news": make_news(), "video": [make_video()]})
        assert document.entries_count == 2

    def test_counter_incremented_even_when_validation_fails(self, document):
        encoder = make_encoder(document)
        with pytest.raises(UnknownFieldError):
            encoder.encode("https://example.com/", {"colour": "red"})
        assert document.entries_count == 1
        assert document.fragments == []

    def test_flags_are_monotonic(self, document):
        encoder = make_encoder(document)
        encoder.encode("https://example.com/a", {"news": make_news()})
        encoder.encode("https://example.com/b")
        assert document.has_news is True
        assert document.has_images is False
        assert document.has_videos is False

    def test_returns_bytes_written(self, document):
        written = make_encoder(document).encode("https://example.com/ü")
        assert written == len(document.fragments[0].encode("utf-8"))

    def test_idempotent_with_fresh_state(self):
        options = {
            "lastModified": "2021-06-23",
            "news": make_news(),
            "images": [{"location": "a.jpg", "caption": "A"}],
            "video": [make_video(tag="steak")],
            "alternate": {"url": "https://x/en", "hreflang": "en"},
        }
        first, fragment_a = encode_one(options=options)
        second, fragment_b = encode_one(options=options)
        assert fragment_a == fragment_b
        assert first.capabilities == second.capabilities

    def test_write_error_propagates_without_rollback(self, document):
        def failing_write(text):
            raise WriteError("disk full")

        document.write = failing_write
        with pytest.raises(WriteError):
            make_encoder(document).encode("https://example.com/", {"news": make_news()})
        assert document.entries_count == 1
        assert document.has_news is True


class TestLocation:
    def test_route_resolved_with_resolver(self):
        _, fragment = encode_one(
            ["blog/post", {"id": 5}],
            resolver=UrlResolver("https://example.com"),
        )
        assert "<loc>https://example.com/blog/post?id=5</loc>" in fragment

    def test_route_resolved_with_configured_base_url(self, monkeypatch):
        monkeypatch.setenv("SITEMAP_BASE_URL", "https://example.org/app/")
        _, fragment = encode_one(["site/index"])
        assert "<loc>https://example.org/app/site/index</loc>" in fragment

    def test_route_without_resolver_rejected(self, document):
        with pytest.raises(CallerContractError):
            make_encoder(document).encode(["site/index"])
        assert document.entries_count == 1

    def test_empty_location_rejected(self, document):
        with pytest.raises(CallerContractError):
            make_encoder(document).encode("")
