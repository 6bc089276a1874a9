from datetime import datetime, timedelta

import pytest

from timesense.models import ActivityType
from timesense.segmenter import Segmenter, SegmenterStoppedError

T0 = datetime(2024, 3, 4, 9, 0, 0)
P = ActivityType.PRODUCTIVE
D = ActivityType.DISTRACTION


def at(seconds: float) -> datetime:
    return T0 + timedelta(seconds=seconds)


def test_first_sample_opens_block():
    segmenter = Segmenter()
    assert segmenter.observe(at(0), "Code", P, False) is None
    block = segmenter.current_block
    assert block.start_time == block.end_time == at(0)
    assert block.application == "Code"


def test_unchanged_label_keeps_block_open():
    segmenter = Segmenter()
    segmenter.observe(at(0), "Code", P, False)
    assert segmenter.observe(at(5), "Code", P, False) is None
    assert segmenter.current_block.start_time == at(0)
    assert segmenter.current_block.end_time == at(0)


def test_application_switch_closes_block():
    segmenter = Segmenter()
    segmenter.observe(at(0), "Code", P, False)
    segmenter.observe(at(5), "Code", P, False)
    closed = segmenter.observe(at(10), "Slack", D, False)

    assert (closed.application, closed.start_time, closed.end_time) == ("Code", at(0), at(10))
    current = segmenter.current_block
    assert (current.application, current.start_time) == ("Slack", at(10))


def test_going_idle_in_same_app_is_its_own_boundary():
    segmenter = Segmenter()
    segmenter.observe(at(0), "Code", P, False)
    closed = segmenter.observe(at(200), "Code", P, True)

    assert closed.idle is False
    assert closed.end_time == at(200)
    assert segmenter.current_block.idle is True


def test_requested_boundary_ends_block_at_next_sample():
    segmenter = Segmenter()
    segmenter.observe(at(0), "Code", P, False)
    segmenter.request_boundary()
    assert segmenter.current_block.start_time == at(0)

    closed = segmenter.observe(at(35), "Code", P, False)
    assert (closed.start_time, closed.end_time) == (at(0), at(35))
    assert segmenter.current_block.start_time == at(35)

    # Only one boundary per request.
    assert segmenter.observe(at(40), "Code", P, False) is None


def test_requested_boundary_without_open_block_is_ignored():
    segmenter = Segmenter()
    segmenter.request_boundary()
    assert segmenter.observe(at(0), "Code", P, False) is None
    assert segmenter.observe(at(5), "Code", P, False) is None


def test_split_continues_same_label():
    segmenter = Segmenter()
    segmenter.observe(at(0), "Code", P, False)
    closed = segmenter.split(at(60))

    assert closed.end_time == at(60)
    current = segmenter.current_block
    assert current.start_time == at(60)
    assert (current.application, current.activity_type, current.idle) == ("Code", P, False)
    assert Segmenter().split(at(0)) is None


def test_shutdown_is_terminal():
    segmenter = Segmenter()
    segmenter.observe(at(0), "Code", P, False)
    closed = segmenter.shutdown(at(42))

    assert closed.end_time == at(42)
    assert segmenter.stopped
    with pytest.raises(SegmenterStoppedError):
        segmenter.observe(at(50), "Code", P, False)


def test_shutdown_without_open_block():
    assert Segmenter().shutdown(at(0)) is None


def test_timestamp_before_start_does_not_produce_negative_block():
    segmenter = Segmenter()
    segmenter.observe(at(10), "Code", P, False)
    closed = segmenter.shutdown(at(5))
    assert closed.duration == timedelta(0)


def test_emitted_blocks_are_contiguous():
    segmenter = Segmenter()
    script = [
        ("Code", False), ("Code", False), ("Slack", False), ("Slack", True),
        ("Slack", True), ("Code", True), ("Code", False), ("Terminal", False),
    ]
    blocks = []
    for index, (app, idle) in enumerate(script):
        if index == 4:
            segmenter.request_boundary()
        closed = segmenter.observe(at(index * 7), app, P, idle)
        if closed:
            blocks.append(closed)
    blocks.append(segmenter.shutdown(at(100)))

    assert len(blocks) == 7
    for previous, following in zip(blocks, blocks[1:]):
        assert previous.end_time == following.start_time
        assert previous.end_time >= previous.start_time
