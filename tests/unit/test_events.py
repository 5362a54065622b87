"""Tests for EventEmitter."""
from swarmpy.core.api.events import EventEmitter


class TestEventEmitter:
    """Test suite for EventEmitter."""

    def test_emit_calls_handlers_in_order(self):
        """Test handlers run in registration order with arguments."""
        emitter = EventEmitter()
        calls = []
        emitter.on('progress', lambda p: calls.append(('a', p)))
        emitter.on('progress', lambda p: calls.append(('b', p)))

        emitter.emit('progress', 5)

        assert calls == [('a', 5), ('b', 5)]

    def test_failing_handler_does_not_stop_others(self):
        """Test one broken observer does not affect the rest."""
        emitter = EventEmitter()
        calls = []

        def broken(_):
            raise ValueError("bad observer")

        emitter.on('state', broken)
        emitter.on('state', calls.append)

        emitter.emit('state', 'syncing')

        assert calls == ['syncing']

    def test_off_single_handler(self):
        """Test removing one handler."""
        emitter = EventEmitter()
        calls = []
        emitter.on('x', calls.append)
        emitter.off('x', calls.append)

        emitter.emit('x', 1)

        assert calls == []

    def test_clear(self):
        """Test removing every handler."""
        emitter = EventEmitter()
        emitter.on('a', print).on('b', print)

        emitter.clear()

        assert emitter.listener_count('a') == 0
        assert emitter.listener_count('b') == 0

    def test_emit_without_handlers(self):
        """Test emitting an unknown event is a no-op."""
        EventEmitter().emit('nothing', 1)
