"""
AppConfig / AppContext 测试
"""

import pytest

from handpicked.container import AppConfig, AppContext, get_registry
from handpicked.services import DEFAULT_VIEW_PERMISSION, MemoryConfigStore, PermissionAccessPolicy


@pytest.fixture(autouse=True)
def reset_context():
    AppContext.reset()
    yield
    AppContext.reset()


class TestAppConfig:
    """环境变量配置"""

    def test_defaults(self, monkeypatch, tmp_path):
        """测试未设置环境变量时的默认值"""
        monkeypatch.chdir(tmp_path)
        for name in [
            "HANDPICKED_DATA_DIR",
            "HANDPICKED_STORE",
            "HANDPICKED_ACCESS_POLICY",
            "HANDPICKED_ACCESS_PERMISSION",
            "LOG_TO_FILE",
        ]:
            monkeypatch.delenv(name, raising=False)

        config = AppConfig.from_env()

        assert config.data_dir == "data"
        assert config.store_type == "file"
        assert config.access_policy == "default"
        assert config.access_permission == DEFAULT_VIEW_PERMISSION
        assert config.configure_logging is True

    def test_from_env(self, monkeypatch, tmp_path):
        """测试从环境变量读取配置"""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HANDPICKED_DATA_DIR", "/srv/handpicked")
        monkeypatch.setenv("HANDPICKED_STORE", "MEMORY")
        monkeypatch.setenv("HANDPICKED_ACCESS_POLICY", "permission")
        monkeypatch.setenv("HANDPICKED_ACCESS_PERMISSION", "admin")
        monkeypatch.setenv("LOG_TO_FILE", "false")

        config = AppConfig.from_env()

        assert config.data_dir == "/srv/handpicked"
        assert config.store_type == "memory"
        assert config.access_policy == "permission"
        assert config.access_permission == "admin"
        assert config.log_to_file is False


class TestAppContext:
    """应用上下文生命周期"""

    def test_create_wires_services(self):
        """测试创建上下文时装配各服务"""
        ctx = AppContext.create(
            AppConfig(store_type="memory", access_policy="permission", access_permission="admin")
        )

        assert isinstance(ctx.store, MemoryConfigStore)
        assert ctx.registry.store is ctx.store
        assert isinstance(ctx.access_policy, PermissionAccessPolicy)
        assert ctx.projector.access_policy is ctx.access_policy

    def test_create_returns_existing_instance(self):
        """测试重复创建返回已有实例"""
        first = AppContext.create(AppConfig(store_type="memory"))

        assert AppContext.create(AppConfig(store_type="memory")) is first
        assert get_registry() is first.registry

    def test_get_instance_before_create(self):
        """测试创建前获取实例抛出 RuntimeError"""
        with pytest.raises(RuntimeError):
            AppContext.get_instance()

    def test_shutdown_clears_instance(self):
        """测试关闭后清除实例"""
        ctx = AppContext.create(AppConfig(store_type="memory"))

        ctx.shutdown()

        assert ctx.registry is None
        with pytest.raises(RuntimeError):
            AppContext.get_instance()

    def test_unknown_store_type(self):
        """测试未知存储类型抛出 ValueError"""
        with pytest.raises(ValueError):
            AppContext.create(AppConfig(store_type="sqlite"))
