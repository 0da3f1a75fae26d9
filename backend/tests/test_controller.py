import pytest

from karaoke_roulette.services.raffle import (
    ExhaustedError,
    InvalidStateError,
    LanguageFilter,
    SessionController,
    StorageError,
    TimerState,
    ValidationError,
    Word,
)


AMOR = Word(id=1, text='amor', language='PT', media_url='https://youtu.be/dQw4w9WgXcQ?t=30')
SAUDADE = Word(id=2, text='saudade', language='PT')
LOVE = Word(id=3, text='love', language='EN')


class FirstPick:
    """Deterministic rng: always picks index 0."""

    def randrange(self, n):
        return 0


def make_controller(scheduler, words=(AMOR, SAUDADE), **kwargs):
    kwargs.setdefault('rng', FirstPick())
    controller = SessionController(scheduler, round_duration=7, **kwargs)
    controller.on_catalog_changed(words)
    return controller


def test_scenario_draw_skip_exhaust_reset(scheduler):
    controller = make_controller(scheduler)

    first = controller.draw()
    assert first.id == 1
    assert len(controller.pool) == 1
    assert len(controller.history) == 1

    controller.skip()
    second = controller.draw()
    assert second.id == 2
    assert len(controller.pool) == 0

    with pytest.raises(ExhaustedError):
        controller.draw()
    assert controller.state.error_message
    assert controller.state.current_word is None
    assert controller.timer.state is TimerState.IDLE

    controller.reset_raffle()
    assert len(controller.pool) == 2
    assert len(controller.history) == 0
    assert controller.state.error_message is None


def test_draws_never_repeat_until_reset(scheduler):
    words = [Word(id=i, text=f'w{i}') for i in range(1, 9)]
    controller = make_controller(scheduler, words=words, rng=None)
    seen = set()
    for expected in range(7, -1, -1):
        word = controller.draw()
        assert word.id not in seen
        seen.add(word.id)
        assert len(controller.pool) == expected
        controller.skip()
    assert seen == {w.id for w in words}


def test_exhaustion_leaves_history_and_scores_alone(scheduler):
    controller = make_controller(scheduler, words=[AMOR])
    alice = controller.add_participant('Alice')
    controller.draw()
    controller.validate()
    controller.skip()
    history_before = controller.history.to_list()

    with pytest.raises(ExhaustedError):
        controller.draw()
    assert controller.history.to_list() == history_before
    assert alice.score == 1


def test_draw_starts_round_timer(scheduler):
    controller = make_controller(scheduler)
    controller.draw()
    assert controller.timer.state is TimerState.RUNNING
    scheduler.advance(3)
    assert controller.timer.remaining == 4
    scheduler.advance(10)
    assert controller.timer.remaining == 0
    assert controller.timer.state is TimerState.EXPIRED
    # the word stays displayed after time is up
    assert controller.state.current_word == AMOR


def test_draw_while_round_running_is_rejected(scheduler):
    controller = make_controller(scheduler)
    controller.draw()
    with pytest.raises(InvalidStateError):
        controller.draw()
    assert len(controller.pool) == 1
    assert len(controller.history) == 1
    assert controller.state.current_word == AMOR
    assert controller.state.error_message


def test_draw_after_round_ended_replaces_word(scheduler):
    controller = make_controller(scheduler)
    controller.draw()
    controller.validate()
    word = controller.draw()
    assert word == SAUDADE
    assert controller.state.current_word == SAUDADE
    assert [e['id'] for e in controller.history.to_list()] == [2, 1]


def test_skip_keeps_word_consumed_and_unvalidated(scheduler):
    controller = make_controller(scheduler)
    controller.draw()
    scheduler.advance(2)
    controller.skip()
    assert controller.state.current_word is None
    assert controller.timer.state is TimerState.STOPPED
    assert controller.timer.remaining == 5
    assert AMOR not in controller.pool
    assert controller.history.latest.validated is False
    # skipping again is harmless
    controller.skip()


def test_validate_scores_once_per_draw(scheduler):
    controller = make_controller(scheduler)
    alice = controller.add_participant('Alice')
    controller.draw()
    controller.validate()
    controller.validate()
    assert alice.score == 1
    assert controller.history.latest.validated is True
    assert controller.timer.state is TimerState.STOPPED
    assert controller.state.current_word == AMOR


def test_validate_without_word_is_noop(scheduler):
    controller = make_controller(scheduler)
    alice = controller.add_participant('Alice')
    assert controller.validate() is None
    assert alice.score == 0


def test_validate_without_active_participant_marks_history_only(scheduler):
    controller = make_controller(scheduler)
    alice = controller.add_participant('Alice')
    controller.set_active(None)
    controller.draw()
    controller.validate()
    assert alice.score == 0
    assert controller.history.latest.validated is True


def test_validate_exposes_media_url_for_playback(scheduler):
    controller = make_controller(scheduler)
    events = []
    controller.subscribe(lambda event, payload: events.append((event, payload)))
    controller.draw()
    assert controller.validate() == AMOR.media_url
    assert controller.state.playback_url == AMOR.media_url
    assert ('playback_requested', {'media_url': AMOR.media_url, 'word_id': 1}) in events
    controller.skip()
    assert controller.state.playback_url is None


def test_validate_word_without_media_requests_nothing(scheduler):
    controller = make_controller(scheduler, words=[SAUDADE])
    events = []
    controller.subscribe(lambda event, payload: events.append(event))
    controller.draw()
    assert controller.validate() is None
    assert 'playback_requested' not in events


def test_reset_raffle_preserves_scores(scheduler):
    controller = make_controller(scheduler)
    alice = controller.add_participant('Alice')
    controller.draw()
    controller.validate()
    controller.reset_raffle()
    assert len(controller.pool) == len(controller.catalog) == 2
    assert len(controller.history) == 0
    assert controller.state.current_word is None
    assert controller.timer.state is TimerState.IDLE
    assert controller.scoreboard.get(alice.id).score == 1
    assert controller.scoreboard.active_id == alice.id


def test_reset_session_clears_participants(scheduler):
    controller = make_controller(scheduler)
    controller.add_participant('Alice')
    controller.add_participant('Bob')
    controller.draw()
    controller.reset_session()
    assert len(controller.scoreboard) == 0
    assert controller.scoreboard.active_id is None
    assert len(controller.pool) == 2


def test_filter_switch_discards_running_round(scheduler):
    controller = make_controller(scheduler, words=[AMOR, SAUDADE, LOVE])
    alice = controller.add_participant('Alice')
    controller.draw()
    controller.validate()
    controller.skip()
    controller.draw()

    token = controller.begin_catalog_load(LanguageFilter.PT)
    assert controller.state.loading is True
    assert controller.apply_catalog(token, [AMOR, SAUDADE]) is True

    assert controller.state.current_word is None
    assert controller.timer.state is TimerState.IDLE
    assert len(controller.history) == 0
    assert len(controller.pool) == 2
    assert controller.catalog.language_filter is LanguageFilter.PT
    assert alice.score == 1
    assert scheduler.active_jobs == []


def test_stale_catalog_response_is_discarded(scheduler):
    controller = make_controller(scheduler, words=[AMOR, SAUDADE, LOVE])
    old = controller.begin_catalog_load('PT')
    new = controller.begin_catalog_load('ALL')
    assert controller.apply_catalog(old, [AMOR]) is False
    assert controller.state.loading is True
    assert controller.apply_catalog(new, [AMOR, SAUDADE, LOVE]) is True
    assert len(controller.catalog) == 3
    assert controller.fail_catalog_load(old, StorageError('late failure')) is False
    assert controller.state.error_message is None


def test_actions_rejected_while_catalog_loading(scheduler):
    controller = make_controller(scheduler)
    controller.begin_catalog_load('PT')
    with pytest.raises(InvalidStateError):
        controller.draw()
    assert len(controller.history) == 0


def test_failed_catalog_load_keeps_previous_catalog(scheduler):
    controller = make_controller(scheduler)
    token = controller.begin_catalog_load('PT')
    assert controller.fail_catalog_load(token, StorageError('Could not load words.')) is True
    assert controller.state.loading is False
    assert controller.state.error_message == 'Could not load words.'
    assert len(controller.catalog) == 2
    controller.draw()


def test_inserted_word_is_drawable_without_reset(scheduler):
    controller = make_controller(scheduler, words=[AMOR], language_filter='PT')
    controller.draw()
    controller.skip()
    controller.begin_word_insert()
    assert controller.state.saving is True
    assert controller.add_word_to_catalog(SAUDADE) is True
    assert controller.state.saving is False
    assert SAUDADE in controller.catalog
    assert SAUDADE in controller.pool
    assert controller.draw() == SAUDADE


def test_inserted_word_outside_filter_is_not_drawable(scheduler):
    controller = make_controller(scheduler, words=[AMOR], language_filter='PT')
    assert controller.add_word_to_catalog(LOVE) is False
    assert LOVE not in controller.catalog
    assert LOVE not in controller.pool


def test_duplicate_insert_does_not_refill_drawn_word(scheduler):
    controller = make_controller(scheduler, words=[AMOR])
    controller.draw()
    assert controller.add_word_to_catalog(AMOR) is False
    assert len(controller.pool) == 0


def test_participant_errors_fill_error_slot(scheduler):
    controller = make_controller(scheduler)
    with pytest.raises(ValidationError):
        controller.add_participant('  ')
    assert controller.state.error_message == 'Participant name is required'
    assert controller.adjust_score(42, 1) is None
    assert controller.remove_participant(42) is False


def test_removing_active_participant_stops_crediting(scheduler):
    controller = make_controller(scheduler)
    alice = controller.add_participant('Alice')
    bob = controller.add_participant('Bob')
    controller.remove_participant(alice.id)
    controller.draw()
    controller.validate()
    assert bob.score == 0
    assert controller.scoreboard.active_id is None


def test_timer_events_are_published(scheduler):
    controller = make_controller(scheduler)
    events = []
    controller.subscribe(lambda event, payload: events.append(event))
    controller.draw()
    scheduler.advance(7)
    assert events.count('timer_tick') == 6
    assert events[-1] == 'time_up'


def test_shutdown_cancels_tick_and_pending_load(scheduler):
    controller = make_controller(scheduler)
    controller.draw()
    token = controller.begin_catalog_load('PT')
    controller.shutdown()
    assert scheduler.active_jobs == []
    assert controller.apply_catalog(token, [SAUDADE]) is False
    scheduler.advance(10)
    assert controller.timer.remaining == 0


def test_snapshot_shape(scheduler):
    controller = make_controller(scheduler)
    controller.draw()
    snap = controller.snapshot()
    assert snap['current_word']['word'] == 'amor'
    assert snap['timer'] == {'remaining': 7, 'running': True, 'state': 'running', 'duration': 7}
    assert snap['pool_size'] == 1
    assert snap['catalog_size'] == 2
    assert snap['language_filter'] == 'ALL'
    assert snap['scoreboard'] == {'participants': [], 'active_id': None}
