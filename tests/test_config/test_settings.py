"""配置测试

优先级: 环境变量 > YAML 文件 > 默认值
"""

import pytest

from mallcore.config import AppSettings, ConfigLoader, TreeSettings, load_yaml_config


YAML_CONTENT = """
app_name: "mall-test"
debug: true
database:
  url: "sqlite:///./yaml.db"
tree:
  strict_orphans: false
  category_max_depth: 4
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in (
        "MALL_DEBUG",
        "MALL_APP_NAME",
        "MALL_TREE__STRICT_ORPHANS",
        "MALL_TREE_STRICT_ORPHANS",
        "MALL_DATABASE__URL",
    ):
        monkeypatch.delenv(key, raising=False)
    ConfigLoader.clear_cache()
    yield
    ConfigLoader.clear_cache()


class TestAppSettings:

    def test_defaults(self):
        settings = AppSettings()
        assert settings.api_prefix == "/api/v1"
        assert settings.tree.strict_orphans is False
        assert settings.tree.category_max_depth == 3
        assert settings.tree.department_max_depth is None
        assert settings.tree.path_separator == " / "
        assert settings.database.is_sqlite is True

    def test_yaml_overrides_defaults(self, temp_file):
        path = temp_file("settings.yaml", YAML_CONTENT)
        settings = load_yaml_config(path, AppSettings)
        assert settings.app_name == "mall-test"
        assert settings.debug is True
        assert settings.database.url == "sqlite:///./yaml.db"
        assert settings.tree.category_max_depth == 4

    def test_env_overrides_yaml(self, temp_file, monkeypatch):
        path = temp_file("settings.yaml", YAML_CONTENT)
        monkeypatch.setenv("MALL_DEBUG", "false")
        monkeypatch.setenv("MALL_TREE__STRICT_ORPHANS", "true")
        settings = load_yaml_config(path, AppSettings)
        assert settings.debug is False
        assert settings.tree.strict_orphans is True
        # 未被环境变量覆盖的 YAML 值保留
        assert settings.tree.category_max_depth == 4

    def test_sub_settings_prefix(self, monkeypatch):
        monkeypatch.setenv("MALL_TREE_STRICT_ORPHANS", "true")
        assert TreeSettings().strict_orphans is True
        assert AppSettings().tree.strict_orphans is True

    def test_overrides_argument(self, temp_file):
        path = temp_file("settings.yaml", YAML_CONTENT)
        settings = load_yaml_config(path, AppSettings, app_name="override")
        assert settings.app_name == "override"
