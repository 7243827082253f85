"""Unit tests for dbgtrack.scanner."""

import logging

import pytest

from dbgtrack.scanner import MARKER_RE, Location, MarkerScanner, parse_marker

TRANSCRIPT = (
    "Loading script...\n"
    "break via dbg() => main.lua:12 in chunk at main.lua:0\n"
    "debugger.lua> "
    "u\n"
    "Inspecting frame: lib/util.lua:7 in upvalue 'helper'\n"
    "debugger.lua> "
    "c\n"
    "breakfast is served\n"
    "break via dbg.call() => main.lua:40 in main\n"
    "done\n"
)

TRANSCRIPT_LOCATIONS = [
    Location("main.lua", 12),
    Location("lib/util.lua", 7),
    Location("main.lua", 40),
]


def _scan(chunks: list[str]) -> tuple[str, list[Location], Location | None]:
    found: list[Location] = []
    scanner = MarkerScanner(listener=found.append)
    output = "".join(scanner.feed(chunk) for chunk in chunks) + scanner.flush()
    return output, found, scanner.current_location()


class TestMarkerShapes:
    def test_plain_text_passes_through(self):
        scanner = MarkerScanner()
        assert scanner.feed("hello world\n") == "hello world\n"
        assert scanner.current_location() is None

    def test_bare_frame_line(self):
        scanner = MarkerScanner()
        line = "./debugger.lua:502 in upvalue 'dbg'\n"

        assert scanner.feed(line) == line
        assert scanner.current_location() == ("./debugger.lua", 502)

    def test_call_form_breakpoint(self):
        scanner = MarkerScanner()
        line = "break via dbg.call() => file.lua:123 in main\n"

        assert scanner.feed(line) == line
        assert scanner.current_location() == Location("file.lua", 123)

    def test_dbg_form_breakpoint(self):
        scanner = MarkerScanner()
        scanner.feed("break via dbg() => main.lua:12 in chunk at main.lua:0\n")
        assert scanner.current_location() == Location("main.lua", 12)

    def test_breakpoint_with_arguments_in_parens(self):
        scanner = MarkerScanner()
        scanner.feed("break via dbg(true, 1) => src/app.lua:88 in function 'run' (x)\n")
        assert scanner.current_location() == Location("src/app.lua", 88)

    def test_inspecting_frame(self):
        scanner = MarkerScanner()
        scanner.feed("Inspecting frame: lib/util.lua:7 in upvalue 'helper'\n")
        assert scanner.current_location() == Location("lib/util.lua", 7)

    def test_crlf_line_endings(self):
        scanner = MarkerScanner()
        line = "break via dbg() => main.lua:3 in main chunk\r\n"

        assert scanner.feed(line) == line
        assert scanner.current_location() == Location("main.lua", 3)

    def test_c_frame_is_not_a_location(self):
        scanner = MarkerScanner()
        line = "Inspecting frame: [C]:-1 in ?\n"

        assert scanner.feed(line) == line
        assert scanner.current_location() is None

    def test_indented_frame_line_is_not_a_marker(self):
        scanner = MarkerScanner()
        scanner.feed("    main.lua:4 in main chunk\n")
        assert scanner.current_location() is None

    def test_location_unpacks_as_pair(self):
        path, line = Location("a.lua", 9)
        assert (path, line) == ("a.lua", 9)


class TestFeed:
    def test_empty_chunk(self):
        scanner = MarkerScanner()
        assert scanner.feed("") == ""
        assert scanner.pending == ""

    def test_text_before_marker_is_emitted_with_it(self):
        scanner = MarkerScanner()
        chunk = "some output\nbreak via dbg() => a.lua:1 in main\n"

        assert scanner.feed(chunk) == chunk
        assert scanner.current_location() == Location("a.lua", 1)

    def test_last_marker_in_chunk_wins(self):
        found: list[Location] = []
        scanner = MarkerScanner(listener=found.append)
        chunk = (
            "a.lua:1 in main\n"
            "noise\n"
            "Inspecting frame: b.lua:2 in f\n"
            "break via dbg() => c.lua:3 in g\n"
        )

        assert scanner.feed(chunk) == chunk
        assert scanner.current_location() == Location("c.lua", 3)
        assert found == [Location("a.lua", 1), Location("b.lua", 2), Location("c.lua", 3)]

    def test_location_persists_across_plain_chunks(self):
        scanner = MarkerScanner()
        scanner.feed("a.lua:5 in main\n")
        scanner.feed("just text\n")
        assert scanner.current_location() == Location("a.lua", 5)

    def test_zero_line_number_is_emitted_but_ignored(self):
        found: list[Location] = []
        scanner = MarkerScanner(listener=found.append)
        line = "main.lua:0 in main chunk\n"

        assert scanner.feed(line) == line
        assert scanner.current_location() is None
        assert found == []

    def test_zero_line_number_keeps_previous_location(self):
        scanner = MarkerScanner()
        scanner.feed("main.lua:4 in main chunk\n")
        scanner.feed("main.lua:0 in main chunk\n")
        assert scanner.current_location() == Location("main.lua", 4)


class TestPendingPrefix:
    def test_split_inspecting_frame_is_held_then_completed(self):
        scanner = MarkerScanner()

        assert scanner.feed("Inspecting frame: foo.lua") == ""
        assert scanner.pending == "Inspecting frame: foo.lua"
        assert scanner.current_location() is None

        output = scanner.feed(":42 in upvalue 'dbg'\n")

        assert output == "Inspecting frame: foo.lua:42 in upvalue 'dbg'\n"
        assert scanner.current_location() == Location("foo.lua", 42)
        assert scanner.pending == ""

    def test_text_before_pending_marker_is_flushed(self):
        scanner = MarkerScanner()
        assert scanner.feed("output line\nbreak via dbg() => ma") == "output line\n"
        assert scanner.pending == "break via dbg() => ma"

    def test_marker_without_newline_is_held(self):
        scanner = MarkerScanner()
        assert scanner.feed("break via dbg() => main.lua:12 in main") == ""
        assert scanner.current_location() is None

        assert scanner.feed("\n") == "break via dbg() => main.lua:12 in main\n"
        assert scanner.current_location() == Location("main.lua", 12)

    def test_partial_anchor_word_is_held(self):
        scanner = MarkerScanner()
        assert scanner.feed("text\nInsp") == "text\n"
        assert scanner.pending == "Insp"

    def test_completed_non_marker_line_is_released(self):
        scanner = MarkerScanner()
        assert scanner.feed("breakfa") == ""
        assert scanner.feed("st\n") == "breakfast\n"
        assert scanner.pending == ""

    def test_anchor_in_middle_of_line_is_not_held(self):
        scanner = MarkerScanner()
        assert scanner.feed("see Inspecting frame: x") == "see Inspecting frame: x"
        assert scanner.pending == ""

    def test_prompt_is_not_held(self):
        scanner = MarkerScanner()
        assert scanner.feed("debugger.lua> ") == "debugger.lua> "

    def test_flush_returns_pending_text(self):
        scanner = MarkerScanner()
        scanner.feed("Inspecting frame: never finished")

        assert scanner.flush() == "Inspecting frame: never finished"
        assert scanner.pending == ""
        assert scanner.flush() == ""

    def test_flush_recognizes_final_marker_without_newline(self):
        found: list[Location] = []
        scanner = MarkerScanner(listener=found.append)
        text = "output\nInspecting frame: main.lua:1 in x"

        assert scanner.feed(text) == "output\n"
        assert scanner.current_location() is None
        assert scanner.flush() == "Inspecting frame: main.lua:1 in x"
        assert scanner.current_location() == Location("main.lua", 1)
        assert found == [Location("main.lua", 1)]

    def test_flush_of_incomplete_marker_keeps_location(self):
        scanner = MarkerScanner()
        scanner.feed("a.lua:2 in main\nInspecting frame: never finished")

        scanner.flush()

        assert scanner.current_location() == Location("a.lua", 2)


class TestMaxPending:
    def test_long_pending_text_is_released(self, caplog):
        scanner = MarkerScanner(max_pending=16)

        with caplog.at_level(logging.WARNING, logger="dbgtrack.scanner"):
            output = scanner.feed("x\nInspecting frame: a very long unterminated line")

        assert output == "x\nInspecting frame: a very long unterminated line"
        assert scanner.pending == ""
        assert "never completed a marker" in caplog.text

    def test_rest_of_released_line_is_not_a_line_start(self):
        scanner = MarkerScanner(max_pending=8)

        assert scanner.feed("Inspecting frame: ") == "Inspecting frame: "
        assert scanner.feed("main.lua:3 in f\n") == "main.lua:3 in f\n"
        assert scanner.current_location() is None

        scanner.feed("c.lua:1 in g\n")
        assert scanner.current_location() == Location("c.lua", 1)

    def test_short_pending_text_is_kept(self):
        scanner = MarkerScanner(max_pending=64)
        assert scanner.feed("break via dbg()") == ""
        assert scanner.pending == "break via dbg()"

    @pytest.mark.parametrize("value", [0, -1])
    def test_rejects_non_positive_cap(self, value):
        with pytest.raises(ValueError):
            MarkerScanner(max_pending=value)


class TestStreamProperties:
    def test_single_chunk_reference(self):
        output, found, current = _scan([TRANSCRIPT])

        assert output == TRANSCRIPT
        assert found == TRANSCRIPT_LOCATIONS
        assert current == Location("main.lua", 40)

    def test_every_two_way_split_matches_single_chunk(self):
        for index in range(len(TRANSCRIPT) + 1):
            output, found, current = _scan([TRANSCRIPT[:index], TRANSCRIPT[index:]])

            assert output == TRANSCRIPT, index
            assert found == TRANSCRIPT_LOCATIONS, index
            assert current == Location("main.lua", 40), index

    def test_character_at_a_time(self):
        output, found, current = _scan(list(TRANSCRIPT))

        assert output == TRANSCRIPT
        assert found == TRANSCRIPT_LOCATIONS
        assert current == Location("main.lua", 40)

    @pytest.mark.parametrize(
        ("text", "index"),
        [
            ("xbreak via dbg() => a.lua:1 in m\n", 1),
            ("see other.lua:9 in f\n", 4),
        ],
    )
    def test_chunk_boundary_inside_line_is_not_a_line_start(self, text, index):
        assert _scan([text[:index], text[index:]]) == (text, [], None)

    def test_every_two_way_split_of_mid_line_text(self):
        text = (
            "xbreak via dbg() => a.lua:1 in m\n"
            "see other.lua:9 in f\n"
            "Inspecting frame: b.lua:2 in g\n"
            "debugger.lua> "
        )
        expected = _scan([text])
        assert expected == (text, [Location("b.lua", 2)], Location("b.lua", 2))

        for index in range(len(text) + 1):
            assert _scan([text[:index], text[index:]]) == expected, index
        assert _scan(list(text)) == expected

    def test_unterminated_tail_is_recovered_by_flush(self):
        text = TRANSCRIPT + "Inspecting frame: main.lua:1"
        output, found, _ = _scan([text[:50], text[50:]])

        assert output == text
        assert found == TRANSCRIPT_LOCATIONS


class TestParseMarker:
    def test_breakpoint_groups(self):
        match = MARKER_RE.search("break via dbg() => x.lua:9 in main\n")
        assert match is not None
        assert parse_marker(match) == Location("x.lua", 9)

    def test_frame_groups(self):
        match = MARKER_RE.search("Inspecting frame: y.lua:10 in f\n")
        assert match is not None
        assert parse_marker(match) == Location("y.lua", 10)
