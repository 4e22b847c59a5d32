# tests/test_config.py
from chess_coach.db import init_db
from chess_coach.config import (
    PlannerConfig, get_setting, set_setting, load_planner_config, save_planner_config,
)


def test_get_setting_default(tmp_db):
    init_db(tmp_db)
    assert get_setting(tmp_db, "missing") is None
    assert get_setting(tmp_db, "missing", "x") == "x"


def test_set_setting_overwrites(tmp_db):
    init_db(tmp_db)
    set_setting(tmp_db, "theme", "dark")
    set_setting(tmp_db, "theme", "light")
    assert get_setting(tmp_db, "theme") == "light"


def test_planner_config_defaults_off(tmp_db):
    init_db(tmp_db)
    assert load_planner_config(tmp_db) == PlannerConfig()
    assert PlannerConfig().same_day_plan_counts_as_one_day is False


def test_planner_config_round_trip(tmp_db):
    init_db(tmp_db)
    save_planner_config(tmp_db, PlannerConfig(same_day_plan_counts_as_one_day=True))
    assert load_planner_config(tmp_db).same_day_plan_counts_as_one_day is True
    save_planner_config(tmp_db, PlannerConfig())
    assert load_planner_config(tmp_db).same_day_plan_counts_as_one_day is False


def test_planner_config_accepts_true_strings(tmp_db):
    init_db(tmp_db)
    set_setting(tmp_db, "same_day_plan", "yes")
    assert load_planner_config(tmp_db).same_day_plan_counts_as_one_day is True
