import pytest

from backend.app.core.routine import (
    CountdownEngine,
    OutOfRange,
    StepSequence,
    format_clock,
    render_view,
)
from backend.app.models.routine import Step


def three_minutes():
    return StepSequence.of([Step(name=n, duration=1) for n in ("wash", "stretch", "plan")])


def run_ticks(engine, n):
    ends = []
    for i in range(1, n + 1):
        engine, ended = engine.tick()
        if ended:
            ends.append(i)
    return engine, ends


def test_advance_reports_next_duration_and_progress():
    seq = three_minutes()
    seq, seconds = seq.advance()
    assert seconds == 60
    assert seq.index == 1
    assert seq.progress == pytest.approx(100 / 3)

    seq, seconds = seq.advance()
    assert seq.index == 2
    assert seq.progress == pytest.approx(200 / 3)
    assert int(seq.progress) == 66


def test_advance_past_last_step_finishes():
    seq = three_minutes()
    seq, _ = seq.advance()
    seq, _ = seq.advance()
    seq, seconds = seq.advance()

    assert seconds is None
    assert seq.finished
    assert seq.progress == 100
    with pytest.raises(OutOfRange):
        seq.current_step()

    again, seconds = seq.advance()
    assert seconds is None
    assert again is seq


def test_progress_never_decreases_and_ignores_step_weights():
    seq = StepSequence.of(
        [Step(name="a", duration=0.5), Step(name="b", duration=10), Step(name="c", duration=2)]
    )
    seen = [seq.progress]
    while not seq.finished:
        seq, _ = seq.advance()
        seen.append(seq.progress)
    assert seen == sorted(seen)
    assert seen[1] == pytest.approx(0.5 / 12.5 * 100)
    assert seen[-1] == 100


def test_fractional_minutes_are_rounded_to_whole_seconds():
    seq = StepSequence.of([Step(name="quick", duration=0.1)])
    assert seq.current_duration_seconds() == 6


def test_replace_all_starts_over():
    seq = three_minutes()
    seq, _ = seq.advance()
    seq, _ = seq.advance()
    seq, _ = seq.advance()

    seq = seq.replace_all([Step(name="coffee", duration=2)])
    assert seq.index == 0
    assert not seq.finished
    assert seq.progress == 0
    assert seq.current_duration_seconds() == 120


def test_empty_sequence_has_no_current_step():
    seq = StepSequence.of([])
    with pytest.raises(OutOfRange):
        seq.current_step()
    with pytest.raises(OutOfRange):
        seq.current_duration_seconds()

    seq, seconds = seq.advance()
    assert seconds is None
    assert seq.finished


def test_all_zero_durations_keep_progress_at_zero():
    seq = StepSequence.of([Step(name="a", duration=0), Step(name="b", duration="x")])
    seq, seconds = seq.advance()
    assert seconds == 0
    assert seq.progress == 0


def test_countdown_into_overtime():
    engine = CountdownEngine().reset(5)
    engine, ends = run_ticks(engine, 7)

    assert engine.remaining == -2
    assert engine.is_overtime
    assert engine.total_overtime == 2
    assert engine.total_elapsed == 7
    assert ends == [6]


def test_overtime_flag_waits_for_zero_to_minus_one():
    engine, _ = run_ticks(CountdownEngine().reset(2), 2)
    assert engine.remaining == 0
    assert not engine.is_overtime
    assert engine.total_overtime == 0


def test_reset_clears_overtime_but_keeps_totals():
    engine, _ = run_ticks(CountdownEngine().reset(1), 4)
    engine = engine.pause().reset(30)

    assert engine.is_running
    assert engine.remaining == 30
    assert not engine.is_overtime
    assert engine.total_elapsed == 4
    assert engine.total_overtime == 3

    engine, ends = run_ticks(engine, 31)
    assert ends == [31]
    assert engine.total_overtime == 4
    assert engine.total_elapsed == 35


def test_paused_engine_ignores_ticks():
    engine, _ = run_ticks(CountdownEngine().reset(10), 3)
    engine = engine.pause()
    before = engine
    engine, ends = run_ticks(engine, 3)

    assert engine == before
    assert ends == []


def test_start_and_pause_are_idempotent():
    engine = CountdownEngine(remaining=10)
    started = engine.start()
    assert started.start() == started
    assert started.pause().pause() == started.pause()
    assert started.is_running
    assert not started.pause().is_running


def test_clear_totals():
    engine, _ = run_ticks(CountdownEngine().reset(0), 3)
    cleared = engine.clear_totals()
    assert cleared.total_elapsed == 0
    assert cleared.total_overtime == 0
    assert cleared.remaining == engine.remaining


@pytest.mark.parametrize(
    "seconds, text",
    [(-65, "-01:05"), (0, "00:00"), (125, "02:05"), (-1, "-00:01"), (3600, "60:00")],
)
def test_format_clock(seconds, text):
    assert format_clock(seconds) == text


def test_render_view_rounds_progress_and_formats_clocks():
    seq = three_minutes()
    seq, _ = seq.advance()
    seq, _ = seq.advance()
    engine, _ = run_ticks(CountdownEngine().reset(1), 3)

    view = render_view(seq, engine)
    assert view.step_name == "plan"
    assert view.step_number == 3
    assert view.step_count == 3
    assert view.is_last_step
    assert view.progress == 67
    assert view.remaining == "-00:02"
    assert view.total_time == "00:03"
    assert view.total_overtime == "00:02"
    assert view.is_overtime


def test_render_view_when_finished():
    seq = StepSequence.of([Step(name="only", duration=1)])
    seq, _ = seq.advance()
    view = render_view(seq, CountdownEngine())

    assert view.finished
    assert view.step_name is None
    assert view.progress == 100
    assert not view.is_last_step
    assert view.step_number == 1
