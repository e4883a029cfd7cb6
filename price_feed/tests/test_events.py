"""Unit tests for EventEmitter."""

from price_feed.src.events import EventEmitter, OracleEvent


class TestEventEmitter:
    """Test event fan-out."""

    def test_emit_to_listeners(self) -> None:
        emitter = EventEmitter()
        first, second = [], []
        emitter.subscribe(first.append)
        emitter.subscribe(second.append)

        event = emitter.emit("AssetOracleUpdated", token="0xabc")

        assert event == OracleEvent("AssetOracleUpdated", {"token": "0xabc"})
        assert first == [event]
        assert second == [event]

    def test_unsubscribe(self) -> None:
        emitter = EventEmitter()
        seen = []
        emitter.subscribe(seen.append)
        emitter.unsubscribe(seen.append)
        emitter.unsubscribe(seen.append)  # Should not raise

        emitter.emit("BaseAssetUpdated")

        assert seen == []

    def test_logged(self, caplog) -> None:
        """Events should be logged even without listeners."""
        emitter = EventEmitter()
        with caplog.at_level("INFO", logger="price_feed.src.events"):
            emitter.emit("NativeTokenUpdated", token="0xabc")

        assert "NativeTokenUpdated" in caplog.text
