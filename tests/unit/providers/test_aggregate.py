"""Tests for ProviderAggregate precedence, enumeration and reload handling."""

import threading

import pytest
import structlog
from structlog.testing import capture_logs

from tessera.errors import ConfigurationError
from tessera.providers.aggregate import ProviderAggregate, RawValue
from tessera.providers.base import ConfigurationProvider, ReloadToken
from tessera.providers.memory import MemoryProvider


class RacingToken(ReloadToken):
    """Token whose provider changes between lookup and registration."""

    def __init__(self, provider: "RacingProvider") -> None:
        super().__init__()
        self._provider = provider

    def register(self, callback):
        if self._provider.change_on_register is not None:
            value, self._provider.change_on_register = self._provider.change_on_register, None
            self._provider.change(value)
        return super().register(callback)


class RacingProvider(ConfigurationProvider):
    """Single-key provider that can change while a subscriber registers."""

    def __init__(self, value: str) -> None:
        self.value = value
        self.change_on_register: str | None = None
        self._token = RacingToken(self)

    def get(self, key: str) -> str | None:
        return self.value if key == "k" else None

    def keys(self, prefix: str | None = None) -> set[str]:
        return {"k"}

    def get_reload_token(self) -> ReloadToken:
        return self._token

    def change(self, value: str) -> None:
        self.value = value
        previous, self._token = self._token, RacingToken(self)
        previous.fire()


@pytest.fixture
def first() -> MemoryProvider:
    """Lower-precedence provider."""
    return MemoryProvider({"shared": "from-first", "only-first": "1", "app:name": "a"})


@pytest.fixture
def second() -> MemoryProvider:
    """Higher-precedence provider."""
    return MemoryProvider({"shared": "from-second", "only-second": "2", "App:Port": "80"})


@pytest.fixture
def aggregate(first: MemoryProvider, second: MemoryProvider) -> ProviderAggregate:
    """Aggregate over first then second."""
    return ProviderAggregate([first, second])


class TestGetRaw:
    """Tests for precedence-resolved raw lookup."""

    def test_later_provider_wins(self, aggregate: ProviderAggregate) -> None:
        """The provider added last supplies a shared key."""
        assert aggregate.get_raw("shared") == RawValue("from-second", 1)

    def test_falls_through_to_earlier_provider(self, aggregate: ProviderAggregate) -> None:
        """Keys only in an earlier provider are still found."""
        assert aggregate.get_raw("only-first") == RawValue("1", 0)

    def test_missing_key(self, aggregate: ProviderAggregate) -> None:
        """Keys in no provider are not found."""
        assert aggregate.get_raw("nokey") is None

    def test_empty_chain(self) -> None:
        """An empty chain finds nothing."""
        aggregate = ProviderAggregate([])
        assert aggregate.get_raw("anything") is None
        assert aggregate.keys() == set()

    def test_raw_value_is_not_resolved(self) -> None:
        """The aggregate returns placeholders untouched."""
        aggregate = ProviderAggregate([MemoryProvider({"a": "${b}", "b": "x"})])
        assert aggregate.get_raw("a") == RawValue("${b}", 0)


class TestKeys:
    """Tests for key enumeration."""

    def test_union_is_deduplicated(self, aggregate: ProviderAggregate) -> None:
        """Every key appears once."""
        assert aggregate.keys() == {
            "shared",
            "only-first",
            "only-second",
            "app:name",
            "App:Port",
        }

    def test_prefix_filter(self, aggregate: ProviderAggregate) -> None:
        """Prefix applies across providers, case-insensitively."""
        assert aggregate.keys("app") == {"app:name", "App:Port"}

    def test_casing_from_highest_precedence(self) -> None:
        """Duplicate keys differing in case keep the later provider's casing."""
        aggregate = ProviderAggregate([
            MemoryProvider({"db:host": "a"}),
            MemoryProvider({"DB:Host": "b"}),
        ])
        assert aggregate.keys() == {"DB:Host"}


class TestConstruction:
    """Tests for construction-time validation."""

    def test_rejects_non_provider(self) -> None:
        """Objects that are not providers fail fast."""
        with pytest.raises(ConfigurationError):
            ProviderAggregate([{"key": "value"}])  # type: ignore[list-item]

    def test_holds_providers_by_reference(self, first: MemoryProvider) -> None:
        """The snapshot references the same provider objects."""
        aggregate = ProviderAggregate([first])
        assert aggregate.providers[0] is first

    def test_load_calls_every_provider(self) -> None:
        """load() is forwarded in chain order."""
        calls: list[str] = []

        class RecordingProvider(MemoryProvider):
            def __init__(self, name: str) -> None:
                super().__init__()
                self.name = name

            def load(self) -> None:
                calls.append(self.name)

        ProviderAggregate([RecordingProvider("a"), RecordingProvider("b")]).load()
        assert calls == ["a", "b"]


class TestReload:
    """Tests for snapshot swaps on reload."""

    def test_reload_bumps_generation(
        self, aggregate: ProviderAggregate, second: MemoryProvider
    ) -> None:
        """Each provider reload produces a new snapshot generation."""
        before = aggregate.snapshot
        second.set("shared", "changed")

        after = aggregate.snapshot
        assert after is not before
        assert after.generation == before.generation + 1
        assert after.providers == before.providers
        assert aggregate.get_raw("shared") == RawValue("changed", 1)

    def test_reload_fires_aggregate_token(
        self, aggregate: ProviderAggregate, first: MemoryProvider
    ) -> None:
        """Subscribers of the aggregate are notified."""
        calls: list[int] = []
        aggregate.get_reload_token().register(lambda: calls.append(1))

        first.set("only-first", "updated")

        assert calls == [1]

    def test_resubscribes_after_reload(
        self, aggregate: ProviderAggregate, first: MemoryProvider
    ) -> None:
        """A second reload of the same provider is still observed."""
        first.set("only-first", "x")
        calls: list[int] = []
        aggregate.get_reload_token().register(lambda: calls.append(1))

        first.set("only-first", "y")

        assert calls == [1]
        assert aggregate.snapshot.generation == 2

    def test_reload_logged(self, first: MemoryProvider) -> None:
        """The snapshot swap is reported on the injected logger."""
        with capture_logs() as logs:
            aggregate = ProviderAggregate([first], logger=structlog.get_logger())
            first.set("only-first", "x")

        assert aggregate.snapshot.generation == 1
        assert logs[-1]["event"] == "provider_snapshot_reloaded"
        assert logs[-1]["generation"] == 1

    def test_concurrent_reads_during_reloads(self) -> None:
        """Readers never fail while providers reload."""
        provider = MemoryProvider({"key": "0"})
        aggregate = ProviderAggregate([MemoryProvider({"key": "base"}), provider])
        errors: list[BaseException] = []
        stop = threading.Event()

        def reader() -> None:
            try:
                while not stop.is_set():
                    raw = aggregate.get_raw("key")
                    assert raw is not None and raw.ordinal == 1
            except BaseException as exc:  # noqa: BLE001
                errors.append(exc)

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for thread in threads:
            thread.start()
        for i in range(200):
            provider.set("key", str(i))
        stop.set()
        for thread in threads:
            thread.join()

        assert errors == []
        assert aggregate.snapshot.generation == 200

    def test_change_while_resubscribing(self) -> None:
        """A token that fires during re-registration triggers another reload."""
        provider = RacingProvider("before")
        aggregate = ProviderAggregate([provider])
        provider.change_on_register = "after"

        thread = threading.Thread(target=provider.change, args=("middle",))
        thread.start()
        thread.join(timeout=3)

        assert not thread.is_alive()
        assert aggregate.snapshot.generation == 2
        assert aggregate.get_raw("k") == RawValue("after", 0)

        provider.change("again")
        assert aggregate.snapshot.generation == 3

    def test_concurrent_writers(self) -> None:
        """Simultaneous reloads from several providers all complete."""
        providers = [MemoryProvider({"key": "0"}) for _ in range(2)]
        aggregate = ProviderAggregate(providers)

        def writer(provider: MemoryProvider) -> None:
            for i in range(200):
                provider.set("key", str(i))

        threads = [threading.Thread(target=writer, args=(p,)) for p in providers]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert not any(thread.is_alive() for thread in threads)
        assert aggregate.get_raw("key") == RawValue("199", 1)

        before = aggregate.snapshot.generation
        providers[0].set("key", "final")
        assert aggregate.snapshot.generation == before + 1
