from quizbank.services import config_svc


def test_defaults_without_file(tmp_path):
    cfg = config_svc.get_config(str(tmp_path / "absent.yaml"))
    assert cfg["default_theme_color"] == "#7C4DFF"
    assert cfg["quiz_default_amount"] == 5
    assert cfg["preset_colors"][0] == cfg["default_theme_color"]


def test_values_from_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("default_theme_color: '#00D0FF'\nquiz_default_amount: 10\n", encoding="utf-8")
    cfg = config_svc.get_config(str(path))
    assert cfg["default_theme_color"] == "#00D0FF"
    assert cfg["quiz_default_amount"] == 10


def test_bad_values_fall_back(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("quiz_default_amount: lots\n", encoding="utf-8")
    assert config_svc.get_config(str(path))["quiz_default_amount"] == 5

    path.write_text("- not\n- a mapping\n", encoding="utf-8")
    assert config_svc.get_config(str(path))["default_theme_color"] == "#7C4DFF"
