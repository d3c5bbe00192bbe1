"""Tests for the smaller timing line checks."""

from mapset_timing.checks import (
    BeforeLineCheck,
    ConcurrentLinesCheck,
    FirstLineCheck,
    InconsistentLinesCheck,
    KiaiUnsnapCheck,
)
from mapset_timing.config import Settings
from mapset_timing.models.beatmap import Circle, Mode, Slider, Spinner
from mapset_timing.models.issues import IssueLevel
from mapset_timing.models.timing import InheritedLine, Sampleset, UninheritedLine


class TestConcurrentLinesCheck:
    """Tests for ConcurrentLinesCheck."""

    def test_check_name(self):
        """Check has correct name."""
        assert ConcurrentLinesCheck().name == "concurrent_lines"

    def test_concurrent_uninherited(self, make_beatmap, make_context):
        """Two uninherited lines at one offset are a problem."""
        beatmap = make_beatmap(
            timing_lines=[UninheritedLine(offset=0), UninheritedLine(offset=1000), UninheritedLine(offset=1000)]
        )
        context = make_context(beatmap)

        issues = list(ConcurrentLinesCheck().get_issues(context, beatmap))

        assert [issue.message for issue in issues] == ["00:01:000 - Concurrent uninherited lines."]
        assert issues[0].level is IssueLevel.PROBLEM

    def test_concurrent_inherited(self, make_beatmap, make_context):
        """Two inherited lines at one offset are a problem."""
        beatmap = make_beatmap(
            timing_lines=[UninheritedLine(offset=0), InheritedLine(offset=1000), InheritedLine(offset=1000)]
        )
        context = make_context(beatmap)

        issues = list(ConcurrentLinesCheck().get_issues(context, beatmap))

        assert [issue.message for issue in issues] == ["00:01:000 - Concurrent inherited lines."]

    def test_conflicting_settings(self, make_beatmap, make_context):
        """A red and green line at one offset with different settings are listed side by side."""
        beatmap = make_beatmap(
            timing_lines=[
                UninheritedLine(offset=0),
                InheritedLine(offset=0, volume=50, sampleset=Sampleset.SOFT),
            ]
        )
        context = make_context(beatmap)

        issues = list(ConcurrentLinesCheck().get_issues(context, beatmap))

        assert len(issues) == 1
        assert issues[0].level is IssueLevel.MINOR
        assert issues[0].message == (
            "00:00:000 - Conflicting line settings. Green: 50% volume, Soft sampleset. "
            "Red: 100% volume, Normal sampleset. Green overrides red."
        )

    def test_matching_red_and_green(self, make_beatmap, make_context):
        """A green line on a red line with the same settings is fine."""
        beatmap = make_beatmap(timing_lines=[UninheritedLine(offset=0), InheritedLine(offset=0, sv_mult=2.0)])
        context = make_context(beatmap)

        assert list(ConcurrentLinesCheck().get_issues(context, beatmap)) == []


class TestBeforeLineCheck:
    """Tests for BeforeLineCheck."""

    lines = [UninheritedLine(offset=0), InheritedLine(offset=1000, sv_mult=2.0)]

    def test_check_name(self, settings: Settings):
        """Check has correct name."""
        assert BeforeLineCheck(settings).name == "before_line"

    def test_slider_before_sv_change(self, settings, make_beatmap, make_context):
        """A slider head just before an SV change misses it."""
        beatmap = make_beatmap([Slider(999.5, 1249.5), Circle(999.5)], timing_lines=self.lines)
        context = make_context(beatmap)

        issues = list(BeforeLineCheck(settings).get_issues(context, beatmap))

        assert [issue.template for issue in issues] == ["Before"]
        assert issues[0].level is IssueLevel.WARNING
        assert issues[0].message == (
            "00:01:000 - Slider head is snapped 0.50 ms before a line which would modify its slider velocity."
        )

    def test_taiko_checks_every_object(self, settings, make_beatmap, make_context):
        """In taiko every object is affected, before or after the line."""
        beatmap = make_beatmap([Circle(999.5), Circle(1000.5)], timing_lines=self.lines, mode=Mode.TAIKO)
        context = make_context(beatmap)

        issues = list(BeforeLineCheck(settings).get_issues(context, beatmap))

        assert [(issue.template, issue.time) for issue in issues] == [("Before", 999.5), ("After", 1000.5)]

    def test_line_without_velocity_change(self, settings, make_beatmap, make_context):
        """Lines that keep the effective BPM do not matter."""
        lines = [UninheritedLine(offset=0), InheritedLine(offset=1000, kiai=True)]
        beatmap = make_beatmap([Slider(999.5, 1249.5)], timing_lines=lines)
        context = make_context(beatmap)

        assert list(BeforeLineCheck(settings).get_issues(context, beatmap)) == []

    def test_far_from_line(self, settings, make_beatmap, make_context):
        """Objects further away than the window are not reported."""
        beatmap = make_beatmap([Slider(500, 750)], timing_lines=self.lines)
        context = make_context(beatmap)

        assert list(BeforeLineCheck(settings).get_issues(context, beatmap)) == []

    def test_mania_excluded(self, settings, make_beatmap, make_context):
        """Mania is not checked."""
        beatmap = make_beatmap([Circle(999.5)], timing_lines=self.lines, mode=Mode.MANIA)
        context = make_context(beatmap)

        result = BeforeLineCheck(settings).run(context)

        assert result.success is True
        assert result.issues == []


class TestKiaiUnsnapCheck:
    """Tests for KiaiUnsnapCheck."""

    def test_check_name(self, settings: Settings):
        """Check has correct name."""
        assert KiaiUnsnapCheck(settings).name == "kiai_unsnap"

    def test_unsnapped_kiai(self, settings, make_beatmap, make_context):
        """Kiai a few ms off is minor, 10 ms or more is a warning."""
        lines = [
            UninheritedLine(offset=0),
            InheritedLine(offset=1005, kiai=True),
            InheritedLine(offset=2000),
            InheritedLine(offset=3015, kiai=True),
        ]
        beatmap = make_beatmap(timing_lines=lines)
        context = make_context(beatmap)

        issues = list(KiaiUnsnapCheck(settings).get_issues(context, beatmap))

        assert [(issue.level, issue.time) for issue in issues] == [
            (IssueLevel.MINOR, 1005),
            (IssueLevel.WARNING, 3015),
        ]
        assert issues[0].message == "00:01:005 - Kiai is unsnapped by 5.0 ms."

    def test_only_kiai_starts(self, settings, make_beatmap, make_context):
        """Lines ending or continuing kiai are not checked."""
        lines = [
            UninheritedLine(offset=0),
            InheritedLine(offset=1000, kiai=True),
            InheritedLine(offset=1505, kiai=True),
            InheritedLine(offset=2005),
        ]
        beatmap = make_beatmap(timing_lines=lines)
        context = make_context(beatmap)

        assert list(KiaiUnsnapCheck(settings).get_issues(context, beatmap)) == []


class TestFirstLineCheck:
    """Tests for FirstLineCheck."""

    def test_check_name(self):
        """Check has correct name."""
        assert FirstLineCheck().name == "first_line"

    def test_no_lines(self, make_beatmap, make_context):
        """A beatmap without lines is reported rather than failing."""
        beatmap = make_beatmap(timing_lines=[])
        context = make_context(beatmap)

        result = FirstLineCheck().run(context)

        assert result.success is True
        assert [issue.message for issue in result.issues] == ["There are no timing lines."]
        assert result.issues[0].time is None

    def test_inherited_first_line(self, make_beatmap, make_context):
        """The first line must be uninherited."""
        beatmap = make_beatmap(timing_lines=[InheritedLine(offset=100), UninheritedLine(offset=200)])
        context = make_context(beatmap)

        issues = list(FirstLineCheck().get_issues(context, beatmap))

        assert [issue.template for issue in issues] == ["Inherited"]

    def test_kiai_first_line(self, make_beatmap, make_context):
        """The first line must not enable kiai."""
        beatmap = make_beatmap(timing_lines=[UninheritedLine(offset=0, kiai=True)])
        context = make_context(beatmap)

        issues = list(FirstLineCheck().get_issues(context, beatmap))

        assert [issue.message for issue in issues] == ["00:00:000 - First timing line toggles kiai."]

    def test_valid_first_line(self, make_beatmap, make_context):
        """A plain uninherited first line is fine."""
        beatmap = make_beatmap()
        context = make_context(beatmap)

        assert list(FirstLineCheck().get_issues(context, beatmap)) == []


class TestInconsistentLinesCheck:
    """Tests for InconsistentLinesCheck."""

    def test_check_name(self):
        """Check has correct name."""
        assert InconsistentLinesCheck().name == "inconsistent_lines"

    def test_missing_line(self, make_beatmap, make_context):
        """A line of the reference missing from another difficulty is a problem where objects are."""
        reference = make_beatmap(
            timing_lines=[UninheritedLine(offset=0), UninheritedLine(offset=4000, ms_per_beat=400)],
            version="Normal",
        )
        hard = make_beatmap([Circle(4400)], timing_lines=[UninheritedLine(offset=0)], version="Hard")
        context = make_context(reference, hard)

        issues = list(InconsistentLinesCheck().get_issues(context, hard))

        assert [(issue.template, issue.beatmap) for issue in issues] == [("Missing Problem", "Hard")]
        assert issues[0].message == "00:04:000 - Missing uninherited line, see Normal."

    def test_missing_line_without_objects(self, make_beatmap, make_context):
        """Sections with only spinners are warned about."""
        reference = make_beatmap(
            timing_lines=[UninheritedLine(offset=0), UninheritedLine(offset=4000, ms_per_beat=400)],
            version="Normal",
        )
        hard = make_beatmap(
            [Circle(1000), Spinner(4500, 6000)], timing_lines=[UninheritedLine(offset=0)], version="Hard"
        )
        context = make_context(reference, hard)

        issues = list(InconsistentLinesCheck().get_issues(context, hard))

        assert [issue.level for issue in issues] == [IssueLevel.WARNING]
        assert issues[0].message.endswith("If complex timing this is optional, since there are no hit objects.")

    def test_inconsistent_meter_and_bpm(self, make_beatmap, make_context):
        """Meter and BPM are compared for lines at the same offset."""
        reference = make_beatmap(timing_lines=[UninheritedLine(offset=0)], version="Normal")
        hard = make_beatmap(
            [Circle(500)],
            timing_lines=[UninheritedLine(offset=0, ms_per_beat=400, meter=3)],
            version="Hard",
        )
        context = make_context(reference, hard)

        issues = list(InconsistentLinesCheck().get_issues(context, hard))

        assert [issue.template for issue in issues] == ["Inconsistent Meter Problem", "Inconsistent BPM Problem"]

    def test_line_missing_from_reference(self, make_beatmap, make_context):
        """Lines the reference lacks are reported on the reference."""
        reference = make_beatmap(timing_lines=[UninheritedLine(offset=0)], version="Normal")
        hard = make_beatmap(
            timing_lines=[UninheritedLine(offset=0), UninheritedLine(offset=6000, ms_per_beat=400)],
            version="Hard",
        )
        context = make_context(reference, hard)

        issues = list(InconsistentLinesCheck().get_issues(context, hard))

        assert [(issue.beatmap, issue.level) for issue in issues] == [("Normal", IssueLevel.PROBLEM)]
        assert issues[0].message == "00:06:000 - Missing uninherited line, see Hard."

    def test_reference_not_compared_with_itself(self, make_beatmap, make_context):
        """The reference difficulty yields nothing of its own."""
        reference = make_beatmap(timing_lines=[UninheritedLine(offset=0)], version="Normal")
        context = make_context(reference)

        assert list(InconsistentLinesCheck().get_issues(context, reference)) == []
