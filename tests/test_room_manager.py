import threading

import pytest

from lobby import RoomAlreadyStarted, RoomFull, RoomNotFound, WrongPassword


def test_create_room_makes_requester_sole_host(room_manager, connect, notifier):
    connect('sid-a')
    room = room_manager.create_room('sid-a', {'playerName': 'Alice'})

    assert room.player_count == 1
    assert room.host.socket_id == 'sid-a'
    assert room.players[0] is room.host
    assert room.status == 'waiting'
    assert room.name == "Alice's Room"
    assert room_manager.connection_manager.get_room_by_socket('sid-a') == room.id

    created = notifier.events('room_created')
    assert len(created) == 1
    assert created[0].to == 'sid-a'
    assert created[0].data['roomId'] == room.id
    # Room list goes to everyone
    assert notifier.events('rooms_list')[-1].to is None


def test_create_room_defaults_malformed_fields(room_manager, connect):
    connect('sid-a')
    room = room_manager.create_room('sid-a', {
        'playerName': 'Alice',
        'maxPlayers': 'lots',
        'gameMode': 42,
        'matchDuration': None,
        'isPrivate': 'yes',
        'stadium': 'night-arena'
    })

    assert room.max_players == 2
    assert room.game_mode == '1v1'
    assert room.match_duration == 120
    assert room.is_private is False
    assert room.stadium == 'night-arena'
    assert room.weather == 'normal'


def test_room_snapshot_hides_password(room_manager, connect):
    connect('sid-a')
    room = room_manager.create_room('sid-a', {'playerName': 'Alice', 'password': 'secret'})
    snapshot = room.to_dict()

    assert 'password' not in snapshot
    assert snapshot['hasPassword'] is True


def test_list_rooms_only_public_waiting(room_manager, connect, two_player_room):
    connect('sid-c')
    connect('sid-d')
    private = room_manager.create_room('sid-c', {'playerName': 'Cara', 'isPrivate': True})
    public = room_manager.create_room('sid-d', {'playerName': 'Dan'})

    listed = {room.id for room in room_manager.list_rooms()}
    assert public.id in listed
    assert two_player_room.id in listed
    assert private.id not in listed

    room_manager.toggle_ready('sid-a')
    room_manager.toggle_ready('sid-b')
    assert two_player_room.id not in {room.id for room in room_manager.list_rooms()}


def test_join_unknown_room(room_manager, connect):
    connect('sid-a')
    with pytest.raises(RoomNotFound):
        room_manager.join_room('sid-a', 'room_missing', player_name='Alice')


def test_join_full_room_is_rejected_without_mutation(room_manager, connect, two_player_room):
    connect('sid-c')
    before = [p.socket_id for p in two_player_room.players]

    with pytest.raises(RoomFull):
        room_manager.join_room('sid-c', two_player_room.id, player_name='Cara')

    assert [p.socket_id for p in two_player_room.players] == before
    assert room_manager.connection_manager.get_room_by_socket('sid-c') is None


def test_join_started_room_is_rejected(room_manager, connect, clock):
    connect('sid-a')
    connect('sid-b')
    connect('sid-c')
    room = room_manager.create_room('sid-a', {'playerName': 'Alice', 'maxPlayers': 3})
    room_manager.join_room('sid-b', room.id, player_name='Bob')
    room_manager.toggle_ready('sid-a')
    room_manager.toggle_ready('sid-b')
    assert room.status == 'playing'

    with pytest.raises(RoomAlreadyStarted):
        room_manager.join_room('sid-c', room.id, player_name='Cara')
    assert room.player_count == 2


def test_join_with_wrong_password(room_manager, connect):
    connect('sid-a')
    connect('sid-b')
    room = room_manager.create_room('sid-a', {'playerName': 'Alice', 'password': 'secret'})

    with pytest.raises(WrongPassword):
        room_manager.join_room('sid-b', room.id, password='guess', player_name='Bob')
    assert room.player_count == 1

    room_manager.join_room('sid-b', room.id, password='secret', player_name='Bob')
    assert room.player_count == 2


def test_join_notifies_room_and_joiner(room_manager, connect, notifier):
    connect('sid-a')
    connect('sid-b')
    room = room_manager.create_room('sid-a', {'playerName': 'Alice'})
    notifier.clear()

    room_manager.join_room('sid-b', room.id, player_name='Bob')

    joined = notifier.events('player_joined')
    assert len(joined) == 1
    assert joined[0].reaches('sid-a') and joined[0].reaches('sid-b')
    assert joined[0].data['player']['name'] == 'Bob'
    assert notifier.events('room_joined')[0].to == 'sid-b'
    assert [p.name for p in room.players] == ['Alice', 'Bob']


def test_capacity_never_exceeded(room_manager, connect):
    for sid in ('sid-a', 'sid-b', 'sid-c', 'sid-d'):
        connect(sid)
    room = room_manager.create_room('sid-a', {'playerName': 'Alice', 'maxPlayers': 3})
    room_manager.join_room('sid-b', room.id, player_name='Bob')
    room_manager.join_room('sid-c', room.id, player_name='Cara')

    with pytest.raises(RoomFull):
        room_manager.join_room('sid-d', room.id, player_name='Dan')
    assert room.player_count == 3


def test_ready_toggle_starts_match_when_all_ready(room_manager, two_player_room, notifier):
    room_manager.toggle_ready('sid-a')
    assert two_player_room.status == 'waiting'
    assert not notifier.events('game_start')

    room_manager.toggle_ready('sid-b')
    assert two_player_room.status == 'playing'
    assert two_player_room.game_start_time is not None

    starts = notifier.events('game_start')
    assert len(starts) == 1
    assert starts[0].reaches('sid-a') and starts[0].reaches('sid-b')


def test_single_ready_player_does_not_start(room_manager, connect, notifier):
    connect('sid-a')
    room = room_manager.create_room('sid-a', {'playerName': 'Alice'})
    room_manager.toggle_ready('sid-a')

    assert room.players[0].ready is True
    assert room.status == 'waiting'
    assert not notifier.events('game_start')


def test_toggle_ready_twice_unreadies(room_manager, two_player_room):
    room_manager.toggle_ready('sid-a')
    room_manager.toggle_ready('sid-a')
    room_manager.toggle_ready('sid-b')

    assert two_player_room.status == 'waiting'


def test_toggle_ready_outside_room_is_noop(room_manager, connect, notifier):
    connect('sid-a')
    assert room_manager.toggle_ready('sid-a') is None
    assert notifier.sent == []


def test_host_leaving_lobby_deletes_room(room_manager, two_player_room, notifier):
    room_manager.leave('sid-a')

    assert room_manager.get_room(two_player_room.id) is None
    notices = notifier.events('host_left_lobby')
    assert len(notices) == 1
    assert notices[0].reaches('sid-b')
    assert not notices[0].reaches('sid-a')
    assert room_manager.connection_manager.get_room_by_socket('sid-b') is None
    assert room_manager.connection_manager.get_room_by_socket('sid-a') is None
    assert notifier.events('rooms_list')


def test_host_leaving_match_sends_game_notice(room_manager, playing_room, notifier):
    room_manager.leave('sid-a')

    assert room_manager.get_room(playing_room.id) is None
    assert len(notifier.events('host_left_game')) == 1
    assert not notifier.events('host_left_lobby')


def test_non_host_leaving_keeps_room(room_manager, playing_room, notifier):
    room_manager.leave('sid-b')

    room = room_manager.get_room(playing_room.id)
    assert room is not None
    assert [p.socket_id for p in room.players] == ['sid-a']

    left = notifier.events('player_left')
    assert len(left) == 1
    assert left[0].data['wasPlaying'] is True
    assert left[0].data['playerName'] == 'Bob'
    assert left[0].reaches('sid-a')
    assert not left[0].reaches('sid-b')


def test_leave_without_room_is_idempotent(room_manager, connect, notifier):
    connect('sid-a')
    assert room_manager.leave('sid-a') is None
    assert room_manager.leave('unknown') is None
    assert notifier.sent == []


def test_disconnect_runs_leave_and_forgets_session(room_manager, two_player_room):
    room_manager.disconnect('sid-b')

    assert room_manager.connection_manager.get_session('sid-b') is None
    assert [p.socket_id for p in two_player_room.players] == ['sid-a']


def test_creating_a_second_room_leaves_the_first(room_manager, two_player_room):
    second = room_manager.create_room('sid-b', {'playerName': 'Bob'})

    assert [p.socket_id for p in two_player_room.players] == ['sid-a']
    assert room_manager.connection_manager.get_room_by_socket('sid-b') == second.id


def test_end_match_records_results_and_resets_room(room_manager, playing_room, leaderboard, notifier):
    updated = room_manager.end_match('sid-a', [
        {'name': 'Alice', 'score': 3, 'opponentScore': 1, 'won': True},
        {'name': 'Bob', 'score': 1, 'opponentScore': 3, 'won': False}
    ])

    assert len(updated) == 2
    alice = leaderboard.get_entry('Alice')
    bob = leaderboard.get_entry('Bob')
    assert (alice.wins, alice.losses, alice.goals, alice.goals_against) == (1, 0, 3, 1)
    assert (bob.wins, bob.losses, bob.goals, bob.goals_against) == (0, 1, 1, 3)

    assert playing_room.status == 'waiting'
    assert all(not p.ready for p in playing_room.players)
    assert len(notifier.events('room_updated')) == 1


def test_duplicate_game_end_is_ignored(room_manager, playing_room, leaderboard):
    results = [
        {'name': 'Alice', 'score': 2, 'opponentScore': 0, 'won': True},
        {'name': 'Bob', 'score': 0, 'opponentScore': 2, 'won': False}
    ]
    room_manager.end_match('sid-a', results)
    assert room_manager.end_match('sid-b', results) == []

    assert leaderboard.get_entry('Alice').games_played == 1


def test_rematch_after_end(room_manager, playing_room, notifier):
    room_manager.end_match('sid-a', [])
    room_manager.toggle_ready('sid-a')
    room_manager.toggle_ready('sid-b')

    assert playing_room.status == 'playing'
    assert len(notifier.events('game_start')) == 1


def test_half_time_barrier(room_manager, playing_room, notifier):
    assert room_manager.half_time_start('sid-a', {'playerScore': 1, 'aiScore': 0})
    started = notifier.events('half_time_started')[0]
    assert started.reaches('sid-a') and started.reaches('sid-b')
    assert started.data == {'playerScore': 1, 'aiScore': 0}

    assert room_manager.half_time_ready('sid-a') is False
    assert room_manager.half_time_ready('sid-a') is False
    assert notifier.events('half_time_ready_update')[-1].data == {'readyCount': 1, 'totalPlayers': 2}
    assert not notifier.events('half_time_resume')

    assert room_manager.half_time_ready('sid-b') is True
    assert len(notifier.events('half_time_resume')) == 1
    assert playing_room.half_time_ready == set()


def test_half_time_compares_against_live_occupant_count(room_manager, connect, notifier):
    for sid in ('sid-a', 'sid-b', 'sid-c'):
        connect(sid)
    room = room_manager.create_room('sid-a', {'playerName': 'Alice', 'maxPlayers': 3})
    room_manager.join_room('sid-b', room.id, player_name='Bob')
    room_manager.join_room('sid-c', room.id, player_name='Cara')
    for sid in ('sid-a', 'sid-b', 'sid-c'):
        room_manager.toggle_ready(sid)

    room_manager.half_time_start('sid-a', {})
    room_manager.half_time_ready('sid-c')
    room_manager.leave('sid-c')

    # Cara's stale readiness still counts against the two remaining occupants
    assert room_manager.half_time_ready('sid-a') is True


def test_half_time_holds_when_stale_set_outnumbers_occupants(room_manager, connect, notifier):
    for sid in ('sid-a', 'sid-b', 'sid-c'):
        connect(sid)
    room = room_manager.create_room('sid-a', {'playerName': 'Alice', 'maxPlayers': 3})
    room_manager.join_room('sid-b', room.id, player_name='Bob')
    room_manager.join_room('sid-c', room.id, player_name='Cara')
    for sid in ('sid-a', 'sid-b', 'sid-c'):
        room_manager.toggle_ready(sid)

    room_manager.half_time_start('sid-a', {})
    room_manager.half_time_ready('sid-b')
    room_manager.half_time_ready('sid-c')
    room_manager.leave('sid-c')
    notifier.clear()

    assert room_manager.half_time_ready('sid-a') is False
    assert notifier.events('half_time_ready_update')[-1].data == {'readyCount': 3, 'totalPlayers': 2}
    assert notifier.events('half_time_resume') == []

    # A fresh half time starts from an empty set again
    room_manager.half_time_start('sid-a', {})
    room_manager.half_time_ready('sid-a')
    assert room_manager.half_time_ready('sid-b') is True


def test_second_half_start_reaches_sender(room_manager, playing_room, notifier):
    room_manager.second_half_start('sid-b')

    event = notifier.events('second_half_start')[0]
    assert event.reaches('sid-a') and event.reaches('sid-b')


def test_close_room_unbinds_everyone(room_manager, two_player_room, notifier):
    assert room_manager.close_room(two_player_room.id, 'bye') is True

    closed = notifier.events('room_closed')[0]
    assert closed.data == {'message': 'bye'}
    assert closed.reaches('sid-a') and closed.reaches('sid-b')
    assert room_manager.get_room(two_player_room.id) is None
    assert room_manager.connection_manager.get_room_by_socket('sid-b') is None
    assert room_manager.close_room(two_player_room.id, 'again') is False


def test_offline_result_registers_name_and_flushes_mailbox(room_manager, connect, mailbox, notifier, leaderboard):
    mailbox.send_request('Bob', 'Alice')
    connect('sid-a')

    entry = room_manager.record_offline_result('sid-a', {
        'playerName': 'Alice', 'playerScore': 4, 'aiScore': 2, 'won': True
    })

    assert entry.wins == 1
    assert leaderboard.get_entry('Alice').goals == 4
    delivered = notifier.received('sid-a', 'friend_request_received')
    assert len(delivered) == 1
    assert delivered[0].data['from'] == 'Bob'


def test_friend_and_leaderboard_calls_wait_for_the_room_lock(room_manager):
    results = {}

    def worker():
        results['ack'] = room_manager.send_friend_request('Alice', 'Bob')
        results['pruned'] = room_manager.prune_mailbox()
        results['board'] = room_manager.leaderboard_payload()

    with room_manager._lock:
        thread = threading.Thread(target=worker)
        thread.start()
        thread.join(timeout=0.2)
        assert thread.is_alive()
        assert results == {}

    thread.join(timeout=5)
    assert not thread.is_alive()
    assert results['ack']['delivered'] is False
    assert results['pruned'] == 0
    assert results['board'] == []


def test_connect_and_friend_presence_go_through_coordinator(room_manager, notifier):
    session = room_manager.connect('sid-b')
    room_manager.create_room('sid-b', {'playerName': 'Bob'})

    assert room_manager.online_friends(['Cara', 'Bob']) == ['Bob']
    assert room_manager.notify_friend('friend_removed', 'Alice', 'Bob') is True
    assert notifier.received('sid-b', 'friend_removed')[0].data == {'from': 'Alice', 'to': 'Bob'}
    assert room_manager.connection_status()['named_sessions'] == 1
    assert session.player_id >= 1
    assert set(vars(session)) == {'socket_id', 'player_id', 'player_name', 'room_id'}
