from app.services.m3u_parser_service import DEFAULT_CHANNEL_NAME, DEFAULT_GROUP, parse_m3u
from app.services.playlist_types import ParsedChannel


SAMPLE = (
    '#EXTM3U\n'
    '#EXTINF:-1 tvg-logo="http://logo" group-title="News",Channel One\n'
    'http://stream1\n'
    '#EXTINF:-1 group-title="Sports",Channel Two\n'
    'http://stream2\n'
)


def test_parses_groups_and_channels():
    parsed = parse_m3u(SAMPLE)

    assert list(parsed.groups) == ["News", "Sports"]
    assert parsed.invalid_count == 0
    assert parsed.total_entries == 2
    assert parsed.groups["News"] == [
        ParsedChannel(name="Channel One", url="http://stream1", group="News", logo="http://logo")
    ]
    assert parsed.groups["Sports"][0].logo == ""


def test_header_without_url_is_invalid():
    parsed = parse_m3u('#EXTM3U\n#EXTINF:-1 group-title="News",Channel One\n\n')

    assert parsed.invalid_count == 1
    assert parsed.total_entries == 0
    assert parsed.groups == {}


def test_url_is_next_data_line_after_comments_and_blanks():
    content = (
        '#EXTINF:-1 group-title="Movies",Film\n'
        '#EXTVLCOPT:http-user-agent=Foo\n'
        '\n'
        '   \n'
        '  http://movie/stream.ts  \n'
    )
    parsed = parse_m3u(content)

    assert parsed.groups["Movies"][0].url == "http://movie/stream.ts"


def test_consecutive_headers_share_following_url():
    # The first header has no URL of its own, so it borrows the next data line
    content = (
        '#EXTINF:-1 group-title="A",First\n'
        '#EXTINF:-1 group-title="A",Second\n'
        'http://shared\n'
    )
    parsed = parse_m3u(content)

    assert parsed.total_entries == 2
    assert [channel.url for channel in parsed.groups["A"]] == ["http://shared", "http://shared"]


def test_counts_add_up_to_headers():
    content = (
        '#EXTM3U\n'
        '#EXTINF:-1 group-title="A",One\nhttp://1\n'
        '#EXTINF:-1 group-title="B",Two\nhttp://2\n'
        '#EXTINF:-1 group-title="A",Three\nhttp://3\n'
        '#EXTINF:-1 group-title="C",Dangling\n'
    )
    parsed = parse_m3u(content)

    headers = content.count("#EXTINF")
    assert len(parsed.groups) == 3
    assert sum(len(channels) for channels in parsed.groups.values()) == parsed.total_entries == 3
    assert parsed.invalid_count + parsed.total_entries == headers
    assert [channel.name for channel in parsed.groups["A"]] == ["One", "Three"]


def test_defaults_when_attributes_missing():
    parsed = parse_m3u('#EXTINF:-1\nhttp://stream\n')

    channel = parsed.groups[DEFAULT_GROUP][0]
    assert channel.name == DEFAULT_CHANNEL_NAME
    assert channel.logo == ""
    assert channel.group == DEFAULT_GROUP


def test_header_without_comma_falls_back_to_tvg_name():
    parsed = parse_m3u('#EXTINF:-1 tvg-name="BBC One" group-title="UK"\nhttp://bbc\n')

    assert parsed.invalid_count == 0
    assert parsed.groups["UK"][0].name == "BBC One"


def test_whitespace_only_values_are_absent():
    parsed = parse_m3u('#EXTINF:-1 tvg-name="Named" tvg-logo="  " group-title="   ",   \nhttp://x\n')

    channel = parsed.groups[DEFAULT_GROUP][0]
    assert channel.name == "Named"
    assert channel.logo == ""


def test_name_keeps_commas():
    parsed = parse_m3u('#EXTINF:-1 group-title="Kids",Tom, Jerry, and Friends\nhttp://kids\n')

    assert parsed.groups["Kids"][0].name == "Tom, Jerry, and Friends"


def test_attribute_keys_are_case_insensitive_and_first_match_wins():
    parsed = parse_m3u(
        '#EXTINF:-1 GROUP-TITLE="First" group-title="Second" TVG-LOGO="http://l",Name\nhttp://s\n'
    )

    assert list(parsed.groups) == ["First"]
    assert parsed.groups["First"][0].logo == "http://l"


def test_line_endings_are_normalized():
    lf = parse_m3u(SAMPLE)
    crlf = parse_m3u(SAMPLE.replace("\n", "\r\n"))
    cr = parse_m3u(SAMPLE.replace("\n", "\r"))

    assert lf == crlf == cr


def test_crlf_header_without_name():
    parsed = parse_m3u('#EXTM3U\r\n#EXTINF:-1 group-title="Other"\r\nhttp://stream\r\n')

    assert parsed.groups["Other"][0].name == DEFAULT_CHANNEL_NAME


def test_parsing_is_deterministic():
    first = parse_m3u(SAMPLE)
    second = parse_m3u(SAMPLE)

    assert first == second
    assert list(first.groups) == list(second.groups)


def test_empty_and_none_content():
    for content in ("", None, "#EXTM3U\n"):
        parsed = parse_m3u(content)
        assert parsed.total_entries == 0
        assert parsed.invalid_count == 0
        assert parsed.groups == {}
