"""
CollectionRegistry 单元测试

测试：
- 条目增删改查及软失败语义
- 每次变更后落盘
- 落盘失败不回滚
- 返回副本，外部修改不影响内部状态
- 并发写入串行化
"""

import logging
import threading
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from handpicked.models import HandpickedCollectionConfig, HandpickedItem
from handpicked.services import (
    AllowAllAccessPolicy,
    CollectionRegistry,
    FileConfigStore,
    MemoryConfigStore,
    OperationStatus,
)
from handpicked.services.access_policy import AccessPolicy


# =============================================================================
# Fixtures
# =============================================================================


def make_item(item_id: str, order: int = 0, active: bool = True, **kwargs) -> HandpickedItem:
    return HandpickedItem(
        item_id=item_id,
        name=kwargs.pop("name", f"Item {item_id}"),
        type=kwargs.pop("type", "Movie"),
        display_order=order,
        is_active=active,
        **kwargs,
    )


class FailingStore(MemoryConfigStore):
    """save 总是失败的存储"""

    def save(self, config):
        return False


@pytest.fixture
def store():
    return MemoryConfigStore()


@pytest.fixture
def registry(store):
    return CollectionRegistry(store)


# =============================================================================
# 初始化 / 读操作
# =============================================================================


class TestRegistryReads:
    """读操作测试"""

    def test_starts_from_store_content(self):
        """测试启动时加载存储中的配置"""
        initial = HandpickedCollectionConfig(title="Loaded", items=[make_item("a")])
        registry = CollectionRegistry(MemoryConfigStore(initial))

        assert registry.get_configuration().title == "Loaded"
        assert len(registry) == 1

    def test_starts_from_defaults_when_file_missing(self, tmp_path):
        """测试文件不存在时使用默认配置"""
        registry = CollectionRegistry(FileConfigStore(tmp_path))

        assert registry.get_configuration() == HandpickedCollectionConfig()

    def test_get_configuration_returns_copy(self, registry):
        """测试获取配置返回副本"""
        registry.add_item(make_item("a"))

        config = registry.get_configuration()
        config.items.clear()
        config.title = "Changed"

        assert len(registry.get_items()) == 1
        assert registry.get_configuration().title == "Handpicked"

    def test_get_items_returns_all_items_including_inactive(self, registry):
        """测试获取全部条目包含未激活条目"""
        registry.add_item(make_item("a"))
        registry.add_item(make_item("b", active=False))

        assert [i.item_id for i in registry.get_items()] == ["a", "b"]

    def test_get_items_returns_copies(self, registry):
        """测试获取条目返回副本"""
        registry.add_item(make_item("a"))

        registry.get_items()[0].name = "Mutated"

        assert registry.get_items()[0].name == "Item a"

    def test_get_items_for_user_returns_active_only(self, registry):
        """测试用户可见条目只含激活条目"""
        registry.add_item(make_item("a"))
        registry.add_item(make_item("b", active=False))
        registry.add_item(make_item("c"))

        assert [i.item_id for i in registry.get_items_for_user("user-1")] == ["a", "c"]

    def test_get_items_for_user_applies_policy_filter(self, registry):
        """测试用户可见条目经过策略过滤"""
        class SeriesOnly(AllowAllAccessPolicy):
            def filter_items(self, identity, items):
                return [i for i in items if i.type == "Series"]

        registry.add_item(make_item("a", type="Movie"))
        registry.add_item(make_item("b", type="Series"))

        items = registry.get_items_for_user("user-1", SeriesOnly())

        assert [i.item_id for i in items] == ["b"]

    def test_get_items_for_user_policy_failure_returns_empty(self, registry):
        """测试策略过滤异常时返回空列表"""
        class Broken(AccessPolicy):
            def _check(self, identity):
                return True

            def filter_items(self, identity, items):
                raise RuntimeError("boom")

        registry.add_item(make_item("a"))

        assert registry.get_items_for_user("user-1", Broken()) == []


# =============================================================================
# 写操作
# =============================================================================


class TestAddItem:
    """add_item 测试"""

    def test_add_appends_and_persists(self, registry, store):
        """测试添加条目追加到末尾并落盘"""
        result = registry.add_item(make_item("a"))

        assert result.status == OperationStatus.OK
        assert result.ok and result.persisted
        assert result.item.item_id == "a"
        assert [i.item_id for i in store.load().items] == ["a"]

    def test_add_keeps_insertion_order(self, registry):
        """测试条目保持插入顺序"""
        for item_id, order in [("x", 5), ("y", 1), ("z", 3)]:
            registry.add_item(make_item(item_id, order))

        assert [i.item_id for i in registry.get_items()] == ["x", "y", "z"]

    def test_duplicate_id_is_a_noop_with_warning(self, registry, store, caplog):
        """测试重复ID添加不做修改并记录警告"""
        registry.add_item(make_item("a", name="Original"))
        saves_before = store.save_count

        with caplog.at_level(logging.WARNING):
            result = registry.add_item(make_item("a", name="Duplicate"))

        assert result.status == OperationStatus.CONFLICT
        assert not result.ok
        assert [i.name for i in registry.get_items()] == ["Original"]
        assert store.save_count == saves_before
        assert "already in the handpicked collection" in caplog.text

    def test_ids_stay_unique_across_many_adds(self, registry):
        """测试多次添加后条目ID仍唯一"""
        for item_id in ["a", "b", "a", "c", "b", "a"]:
            registry.add_item(make_item(item_id))

        ids = [i.item_id for i in registry.get_items()]
        assert sorted(ids) == ["a", "b", "c"]
        assert len(ids) == len(set(ids))

    def test_caller_mutation_after_add_does_not_leak(self, registry):
        """测试添加后修改入参不影响内部状态"""
        item = make_item("a")
        registry.add_item(item)

        item.name = "Mutated"

        assert registry.get_items()[0].name == "Item a"


class TestUpdateItem:
    """update_item 测试"""

    def test_update_replaces_in_place(self, registry, store):
        """测试更新条目原位替换"""
        for item_id in ["a", "b", "c"]:
            registry.add_item(make_item(item_id))

        result = registry.update_item(make_item("b", order=9, name="Renamed", active=False))

        items = registry.get_items()
        assert result.status == OperationStatus.OK
        assert [i.item_id for i in items] == ["a", "b", "c"]
        assert items[1].name == "Renamed"
        assert items[1].display_order == 9
        assert items[1].is_active is False
        assert store.load().items[1].name == "Renamed"

    def test_update_preserves_added_date(self, registry):
        """测试更新条目保留原添加时间"""
        created = datetime(2025, 12, 24, 8, 0, tzinfo=timezone.utc)
        registry.add_item(make_item("a", added_date=created))

        registry.update_item(
            make_item("a", added_date=datetime(2026, 6, 1, tzinfo=timezone.utc))
        )

        assert registry.get_items()[0].added_date == created

    def test_update_missing_id_is_a_noop(self, registry, store):
        """测试更新不存在的条目不做修改"""
        registry.add_item(make_item("a"))
        saves_before = store.save_count
        before = registry.get_items()

        result = registry.update_item(make_item("missing"))

        assert result.status == OperationStatus.NOT_FOUND
        assert registry.get_items() == before
        assert store.save_count == saves_before


class TestRemoveItem:
    """remove_item 测试"""

    def test_remove_existing(self, registry, store):
        """测试删除已有条目"""
        registry.add_item(make_item("a"))
        registry.add_item(make_item("b"))

        result = registry.remove_item("a")

        assert result.status == OperationStatus.OK
        assert result.item.item_id == "a"
        assert [i.item_id for i in registry.get_items()] == ["b"]
        assert [i.item_id for i in store.load().items] == ["b"]

    def test_remove_absent_id_is_a_noop(self, registry, store):
        """测试删除不存在的条目不做修改"""
        registry.add_item(make_item("a"))
        saves_before = store.save_count

        result = registry.remove_item("zzz")

        assert result.status == OperationStatus.NOT_FOUND
        assert [i.item_id for i in registry.get_items()] == ["a"]
        assert store.save_count == saves_before


class TestUpdateConfiguration:
    """update_configuration 测试"""

    def test_full_replace(self, registry, store):
        """测试整体替换配置"""
        registry.add_item(make_item("a"))

        replacement = HandpickedCollectionConfig(
            title="New", is_enabled=False, max_items=3, items=[make_item("z")]
        )
        result = registry.update_configuration(replacement)

        config = registry.get_configuration()
        assert result.status == OperationStatus.OK
        assert config == replacement
        assert store.load() == replacement

    def test_caller_mutation_after_replace_does_not_leak(self, registry):
        """测试替换后修改入参不影响内部状态"""
        replacement = HandpickedCollectionConfig(items=[make_item("z")])
        registry.update_configuration(replacement)

        replacement.items.append(make_item("y"))

        assert [i.item_id for i in registry.get_items()] == ["z"]

    def test_config_with_duplicate_ids_cannot_be_built(self):
        """测试构造含重复条目ID的配置会校验失败"""
        with pytest.raises(ValidationError, match="Duplicate item ids: a"):
            HandpickedCollectionConfig(items=[make_item("a"), make_item("b"), make_item("a")])

    def test_replace_with_duplicate_ids_is_a_noop(self, registry, store, caplog):
        """测试整体替换时条目ID重复则不做任何修改"""
        registry.add_item(make_item("a"))
        saves_before = store.save_count

        replacement = HandpickedCollectionConfig(title="New", items=[make_item("x")])
        replacement.items.append(make_item("x", name="Other"))
        with caplog.at_level(logging.WARNING):
            result = registry.update_configuration(replacement)

        assert result.status == OperationStatus.CONFLICT
        assert result.item_id == "x"
        assert registry.get_configuration().title == "Handpicked"
        assert [i.item_id for i in registry.get_items()] == ["a"]
        assert store.save_count == saves_before
        assert "duplicate item ids" in caplog.text


# =============================================================================
# 落盘失败
# =============================================================================


class TestPersistenceFailure:
    """落盘失败时内存状态保留"""

    def test_failed_save_keeps_in_memory_change(self, caplog):
        """测试落盘失败时内存变更保留"""
        registry = CollectionRegistry(FailingStore())

        with caplog.at_level(logging.ERROR):
            result = registry.add_item(make_item("a"))

        assert result.status == OperationStatus.PERSISTENCE_FAILED
        assert result.ok is True
        assert result.persisted is False
        assert [i.item_id for i in registry.get_items()] == ["a"]
        assert "could not be persisted" in caplog.text

    def test_failed_save_on_remove(self):
        """测试删除时落盘失败"""
        registry = CollectionRegistry(
            FailingStore(HandpickedCollectionConfig(items=[make_item("a")]))
        )

        result = registry.remove_item("a")

        assert result.status == OperationStatus.PERSISTENCE_FAILED
        assert registry.get_items() == []


# =============================================================================
# 并发
# =============================================================================


class TestConcurrency:
    """并发写入串行化"""

    def test_concurrent_adds_are_all_applied(self, registry, store):
        """测试并发添加全部生效"""
        def add_range(start: int):
            for n in range(start, start + 25):
                registry.add_item(make_item(f"item-{n}"))

        threads = [threading.Thread(target=add_range, args=(i * 25,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        ids = [i.item_id for i in registry.get_items()]
        assert len(ids) == 200
        assert len(set(ids)) == 200
        assert len(store.load().items) == 200

    def test_concurrent_duplicate_adds_keep_one(self, registry):
        """测试并发添加同一ID只保留一条"""
        barrier = threading.Barrier(10)

        def add_same():
            barrier.wait()
            registry.add_item(make_item("same"))

        threads = [threading.Thread(target=add_same) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert [i.item_id for i in registry.get_items()] == ["same"]

    def test_save_happens_inside_the_write_lock(self):
        """测试落盘在写锁内完成"""
        class SlowStore(MemoryConfigStore):
            def __init__(self):
                super().__init__()
                self.active = 0
                self.max_active = 0
                self._guard = threading.Lock()

            def save(self, config):
                with self._guard:
                    self.active += 1
                    self.max_active = max(self.max_active, self.active)
                threading.Event().wait(0.005)
                with self._guard:
                    self.active -= 1
                return super().save(config)

        store = SlowStore()
        registry = CollectionRegistry(store)

        threads = [
            threading.Thread(target=registry.add_item, args=(make_item(f"i{n}"),))
            for n in range(10)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.max_active == 1
        assert len(registry.get_items()) == 10
