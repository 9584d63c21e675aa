"""
Tests for the session lifecycle and end-to-end play.
"""

import dataclasses

import pytest

from fruit_catcher.catcher_core.config_loader import load_config
from fruit_catcher.catcher_core.events import EventLog, GameListener, RemovalReason
from fruit_catcher.catcher_core.game import GameSession
from fruit_catcher.catcher_core.scheduler import ManualScheduler
from fruit_catcher.catcher_core.session_state import SessionPhase

FRAME = 1 / 60


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def log():
    return EventLog()


@pytest.fixture
def session(config, scheduler, log):
    return GameSession(config=config, scheduler=scheduler, seed=42, listeners=[log])


class Dodger(GameListener):
    """Moves the basket out of every new entity's lane."""

    def __init__(self, session):
        self._session = session

    def on_entity_spawned(self, entity):
        labels = self._session.config.board.lane_labels
        self._session.on_lane_command(labels[(entity.lane + 1) % len(labels)])


def follow_items(session, scheduler, seconds=60):
    """Step frame by frame on absolute times, keeping the basket under the item."""
    labels = session.config.board.lane_labels
    for frame in range(seconds * 60):
        if session.entities:
            session.on_lane_command(labels[session.entities[0].lane])
        scheduler.advance_to((frame + 1) / 60)


class Exploding(GameListener):
    def on_entity_position_changed(self, entity, new_y):
        raise RuntimeError("renderer crashed")


class TestLifecycle:
    """Test Idle/Running/Ended transitions."""

    def test_initial_state_is_idle(self, session):
        """A new session is idle with zero score at level 1."""
        assert session.phase is SessionPhase.IDLE
        assert session.score == 0
        assert session.level == 1

    def test_start_resets_and_spawns(self, session, config, log):
        """Start resets the HUD values and spawns the first item."""
        assert session.start()

        assert session.phase is SessionPhase.RUNNING
        assert session.score == 0
        assert session.level == 1
        assert session.time_remaining == 60
        assert session.speed_scalar == 1.0
        assert session.basket_lane == config.center_lane
        assert len(session.entities) == 1
        assert log.count("entity_spawned") == 1

    def test_start_while_running_is_noop(self, session, scheduler):
        """Starting a running game changes nothing."""
        session.start()
        scheduler.advance(2.0)
        time_left = session.time_remaining

        assert not session.start()
        assert session.time_remaining == time_left

    def test_countdown_ticks_every_second(self, session, scheduler, log):
        """The countdown drops by one each second."""
        session.start()
        log.clear()

        scheduler.advance(3.0)

        assert session.time_remaining == 57
        assert log.payloads("time_changed") == [59, 58, 57]

    def test_stop_cancels_everything(self, session, scheduler, log):
        """Stop cancels every timer and reports the result once."""
        session.start()
        scheduler.advance(0.5)

        assert session.stop()

        assert session.phase is SessionPhase.ENDED
        assert scheduler.pending_count == 0
        assert log.count("game_ended") == 1

        assert not session.stop()
        assert log.count("game_ended") == 1

    def test_stop_when_idle_is_safe(self, session, log):
        """Stopping an idle session reports nothing."""
        assert not session.stop()
        assert session.phase is SessionPhase.IDLE
        assert log.count("game_ended") == 0

    def test_pending_spawn_cancelled_by_stop(self, session, scheduler):
        """A spawn waiting on its delay never fires after stop."""
        session.start()
        entity = session.entities[0]
        session.on_lane_command(session.config.board.lane_labels[entity.lane])
        while session.entities:
            scheduler.advance(FRAME)
        assert session.state.timers.spawn_pending

        session.stop()
        scheduler.advance(5.0)

        assert len(session.entities) == 0

    def test_restart_after_end(self, session, scheduler):
        """A finished game can be started again."""
        session.start()
        scheduler.advance(61.0)
        assert session.is_over

        assert session.start()
        assert session.is_running
        assert session.time_remaining == 60
        assert session.score == 0

    def test_reset_returns_to_idle(self, session, scheduler, log):
        """Reset stops a running game and returns to idle."""
        session.start()
        state = session.reset(seed=7)

        assert state.phase is SessionPhase.IDLE
        assert log.count("game_ended") == 1
        assert scheduler.pending_count == 0
        assert len(session.entities) == 0


class TestLaneCommands:
    """Test inbound lane commands."""

    def test_labels_map_to_lanes(self, session, log):
        """Left, Center and Right move the basket to lanes 0, 1 and 2."""
        session.start()

        assert session.on_lane_command("Left")
        assert session.basket_lane == 0
        assert session.on_lane_command("Right")
        assert session.basket_lane == 2
        assert session.on_lane_command("Center")
        assert session.basket_lane == 1
        assert log.payloads("basket_moved")[-3:] == [0, 2, 1]

    def test_unrecognized_commands_ignored(self, session):
        """Unknown labels and non-string commands are ignored."""
        session.start()

        assert not session.on_lane_command("Jump")
        assert not session.on_lane_command(None)
        assert not session.on_lane_command(2)
        assert session.basket_lane == 1

    def test_ignored_when_not_running(self, session):
        """Lane commands before start are ignored."""
        assert not session.on_lane_command("Left")
        assert session.basket_lane == 1

    def test_latest_command_wins(self, session, scheduler):
        """Only the last command before the catch frame counts."""
        session.start()
        entity = session.entities[0]
        labels = session.config.board.lane_labels

        session.on_lane_command(labels[(entity.lane + 1) % 3])
        session.on_lane_command(labels[entity.lane])
        while entity.uid in session.state.entities:
            scheduler.advance(FRAME)

        assert session.score == entity.kind.score_delta


class TestEndToEnd:
    """Full games driven by the scheduler."""

    def test_dodging_everything_ends_with_zero(self, session, scheduler, log):
        """Dodging every item ends at score 0, level 1, with no later events."""
        session.add_listener(Dodger(session))
        session.start()

        for _ in range(60):
            scheduler.advance(1.0)

        assert session.is_over
        assert log.payloads("game_ended") == [(0, 1)]
        assert log.count("caught") == 0
        assert log.payloads("time_changed")[-1] == 0

        ended_at = len(log.events)
        scheduler.advance(30.0)
        session.on_lane_command("Left")

        assert len(log.events) == ended_at
        assert session.score == 0
        assert session.time_remaining == 0
        assert scheduler.pending_count == 0

    def test_at_most_one_entity_in_flight(self, session, scheduler):
        """Never more than one item falls at a time."""
        session.start()

        for frame in range(60 * 60):
            scheduler.advance_to((frame + 1) / 60)
            assert len(session.entities) <= 1

    def test_catching_everything(self, session, scheduler, log):
        """Standing under every item catches all of them before time runs out."""
        session.start()
        follow_items(session, scheduler)

        assert session.is_over
        assert scheduler.now == 60.0
        assert log.count("caught") > 0
        assert session.score == sum(event.delta for event in log.payloads("caught"))
        assert all(reason is RemovalReason.CAUGHT for _, reason in log.payloads("entity_removed"))

    def test_level_and_speed_track_rising_score(self, config, scheduler):
        """Without hazards the level and speed follow the score exactly."""
        items = tuple(item for item in config.items if item.score > 0)
        session = GameSession(
            config=dataclasses.replace(config, items=items), scheduler=scheduler, seed=42
        )
        session.start()
        follow_items(session, scheduler)

        assert session.is_over
        assert session.score >= 1000
        assert session.level == session.resolver.level_for_score(session.score)
        assert session.speed_scalar == pytest.approx(1.0 + 0.2 * (session.level - 1))

    def test_final_result_reported_once(self, session, scheduler, log):
        """game_ended fires once even if stop is called again."""
        session.start()
        scheduler.advance(60.0)
        session.stop()
        scheduler.advance(60.0)

        assert log.count("game_ended") == 1
        assert log.payloads("game_ended") == [(session.score, session.level)]


class TestListeners:
    """Listener registration."""

    def test_removed_listener_gets_nothing_more(self, session, scheduler):
        """A removed listener receives no events after removal."""
        other = EventLog()
        session.add_listener(other)
        session.start()
        session.remove_listener(other)

        scheduler.advance(2.0)
        session.stop()

        assert other.payloads("time_changed") == [60]
        assert other.count("game_ended") == 0


class TestErrorPaths:
    """Cleanup on failures."""

    def test_context_manager_stops(self, config, scheduler):
        """Leaving the with block stops the game."""
        with GameSession(config=config, scheduler=scheduler) as session:
            session.start()
            assert scheduler.pending_count > 0

        assert session.is_over
        assert scheduler.pending_count == 0

    def test_context_manager_stops_on_exception(self, config, scheduler):
        """An exception in the with block still stops the game."""
        with pytest.raises(KeyError):
            with GameSession(config=config, scheduler=scheduler) as session:
                session.start()
                raise KeyError("boom")

        assert session.is_over
        assert scheduler.pending_count == 0

    def test_listener_failure_cancels_timers(self, session, scheduler):
        """A listener raising inside a frame stops the session."""
        session.add_listener(Exploding())
        session.start()

        with pytest.raises(RuntimeError):
            scheduler.advance(1.0)

        assert session.is_over
        assert scheduler.pending_count == 0

    def test_bad_catalog_fails_at_construction(self, config):
        """An all-zero-weight catalog is rejected up front."""
        items = tuple(dataclasses.replace(item, weight=0) for item in config.items)
        with pytest.raises(ValueError):
            GameSession(config=dataclasses.replace(config, items=items))

    def test_info_and_render_data(self, session):
        """Info and render data reflect the running session."""
        session.start()
        info = session.get_info()
        data = session.get_render_data()

        assert info["phase"] == "running"
        assert info["entity_count"] == 1
        assert data["lane_count"] == 3
        assert len(data["entities"]) == 1
        assert data["capture_top"] == session.config.capture_top
