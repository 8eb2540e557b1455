"""Tests for numbered-step parsing."""

from voicepath.flow.steps import Step, parse_steps, steps_to_text


class TestParseSteps:
    def test_empty_input(self):
        assert parse_steps("") == []
        assert parse_steps(None) == []

    def test_titles_and_details(self):
        text = "1. Plan the trip\nPick dates\n  Ask Sam  \n2. Book flights\n"
        steps = parse_steps(text)
        assert [s.id for s in steps] == ["1", "2"]
        assert steps[0].title == "Plan the trip"
        assert steps[0].details == ["Pick dates", "Ask Sam"]
        assert steps[1].details == []

    def test_lines_before_first_step_are_dropped(self):
        steps = parse_steps("intro line\n\n1. First")
        assert len(steps) == 1
        assert steps[0].details == []

    def test_windows_line_endings(self):
        steps = parse_steps("1. A\r\ndetail\r\n2. B")
        assert [s.title for s in steps] == ["A", "B"]
        assert steps[0].details == ["detail"]

    def test_fill_missing_numbers(self):
        steps = parse_steps("1. A\n2. B\n5. E")
        assert [s.id for s in steps] == ["1", "2", "3", "4", "5"]
        assert steps[2] == Step(id="3", title="Step 3", details=[])
        assert steps[3] == Step(id="4", title="Step 4", details=[])
        assert steps[4].title == "E"

    def test_gap_filler_goes_before_triggering_step(self):
        steps = parse_steps("1. A\nnote for A\n3. C\nnote for C")
        assert [s.id for s in steps] == ["1", "2", "3"]
        assert steps[0].details == ["note for A"]
        assert steps[1].details == []
        assert steps[2].details == ["note for C"]

    def test_gaps_kept_without_filling(self):
        steps = parse_steps("1. A\n4. D", fill_missing_numbers=False)
        assert [s.id for s in steps] == ["1", "4"]

    def test_duplicates_kept(self):
        steps = parse_steps("1. A\n1. Again\n2. B")
        assert [s.id for s in steps] == ["1", "1", "2"]

    def test_count_matches_numbered_lines(self):
        text = "\n".join(f"{i}. Step title {i}" for i in range(1, 8))
        assert len(parse_steps(text)) == 7

    def test_only_ascii_digits_number_a_step(self):
        assert parse_steps("١. Arabic one\n２. Fullwidth two") == []
        steps = parse_steps("1. A\n２. Fullwidth two")
        assert [s.id for s in steps] == ["1"]
        assert steps[0].details == ["２. Fullwidth two"]

    def test_number_without_title_is_a_detail(self):
        steps = parse_steps("1. A\n2.")
        assert len(steps) == 1
        assert steps[0].details == ["2."]


class TestStepsToText:
    def test_round_trip(self):
        text = "1. A\ndetail\n2. B"
        assert steps_to_text(parse_steps(text)) == text

    def test_from_dict_defaults(self):
        step = Step.from_dict({"id": 3, "title": None})
        assert step == Step(id="3", title="", details=[])
