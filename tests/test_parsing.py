"""Tests for score, plan-step and replan heuristics."""

import pytest

from agent_loops.core.parsing import extract_score, parse_plan_steps, should_replan


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Score: 7/10", 7),
        ("Overall quality of 9", 9),
        ("I'd give it 8 out of 10.", 8),
        ("Rating: 6", 6),
        ("Solid work, 4/10 on style though", 4),
        ("score: 15", 10),
        ("score: 0", 1),
        ("Looks fine overall, a few gaps.", 5),
        ("", 5),
    ],
)
def test_extract_score(text, expected):
    assert extract_score(text) == expected


def test_parse_plan_steps_ignores_prose():
    assert parse_plan_steps("1. Do X\n2. Do Y\nrandom note\n3. Do Z") == [
        "Do X",
        "Do Y",
        "Do Z",
    ]


def test_parse_plan_steps_strips_indentation_and_requires_space():
    plan = "Here is the plan:\n  1.   Gather data  \n2.Missing space\n10. Report"
    assert parse_plan_steps(plan) == ["Gather data", "Report"]


def test_parse_plan_steps_empty():
    assert parse_plan_steps("I could not come up with a plan.") == []


@pytest.mark.parametrize(
    "result",
    ["unable to connect to host", "Request FAILED", "Cannot parse", "An Error occurred"],
)
def test_should_replan_on_failure_markers(result):
    assert should_replan(result)


def test_should_not_replan_on_success():
    assert not should_replan("successfully completed")
