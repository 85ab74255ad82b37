from __future__ import annotations

import pytest

from restcheck import catalog
from restcheck.runner import ScenarioRunner
from restcheck.types import ConfigurationError, ScenarioStatus


def test_scenario_names_are_unique():
    names = [s.name for s in catalog.SCENARIOS]
    assert len(names) == len(set(names))


def test_both_groups_present():
    assert {s.api for s in catalog.SCENARIOS} == set(catalog.APIS)
    assert len(catalog.select(api="jsonplaceholder")) == 10
    assert [s.name for s in catalog.select(api="randomuser")] == ["random_user_basic"]


def test_select_by_name_keeps_table_order():
    picked = catalog.select(names=["get_missing_post", "get_posts"])
    assert [s.name for s in picked] == ["get_posts", "get_missing_post"]


def test_select_by_tag():
    names = {s.name for s in catalog.select(tags=["negative"])}
    assert names == {"get_missing_post", "create_post_without_title"}


def test_select_unknown_name():
    with pytest.raises(ConfigurationError):
        catalog.select(names=["get_everything"])


def test_select_unknown_api():
    with pytest.raises(ConfigurationError):
        catalog.select(api="github")


def test_missing_post_uses_absent_id():
    scenario = catalog.select(names=["get_missing_post"])[0]
    assert scenario.request.path_params == {"id": catalog.NON_EXISTENT_POST_ID}
    assert scenario.expect.status == 404


@pytest.mark.parametrize("workers", [1, 4])
def test_every_scenario_passes_against_recorded_responses(replay_settings, workers):
    summary = ScenarioRunner(replay_settings).run(catalog.SCENARIOS, workers=workers)
    failures = {r.scenario: r.failures for r in summary.results if not r.passed}
    assert failures == {}
    assert summary.ok
    assert summary.total == len(catalog.SCENARIOS)


def test_create_post_reports_generated_id(replay_settings):
    result = ScenarioRunner(replay_settings).run_one(catalog.select(names=["create_post"])[0])
    assert result.status == ScenarioStatus.PASS
    assert result.response.status_code == 201
    assert result.extracted == {"created_post_id": 101}


def test_create_without_title_comes_back_untitled(replay_settings):
    result = ScenarioRunner(replay_settings).run_one(catalog.select(names=["create_post_without_title"])[0])
    assert result.status == ScenarioStatus.PASS
    assert "title" not in result.response.json()


def test_random_user_extracts_username(replay_settings):
    result = ScenarioRunner(replay_settings).run_one(catalog.select(names=["random_user_basic"])[0])
    assert result.passed
    assert result.extracted == {"username": "silverpanda417"}


def test_random_user_checked_against_schema(replay_settings):
    scenario = catalog.select(names=["random_user_basic"])[0]
    assert scenario.expect.schema_ref == "randomuser-schema.json"

    runner = ScenarioRunner(replay_settings)
    data = runner.run_one(scenario).response.json()
    assert runner.validator.schemas.validate(data, "randomuser-schema.json") == []

    del data["results"][0]["login"]
    assert runner.validator.schemas.validate(data, "randomuser-schema.json") == [
        "$.results[0]: 'login' is a required property"
    ]
