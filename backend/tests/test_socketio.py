NS = '/ws'


def _events(test_client, name):
    return [pkt['args'][0] for pkt in test_client.get_received(NS) if pkt['name'] == name]


def _names(received):
    return [pkt['name'] for pkt in received]


def _paired(sio_factory):
    host = sio_factory()
    guest = sio_factory()
    host.emit('create-room', 'Ana', namespace=NS)
    [created] = _events(host, 'room-created')
    code = created['roomCode']
    guest.emit('join-room', {'roomCode': code, 'playerName': 'Ben'}, namespace=NS)
    return host, guest, code


def test_create_room(sio_factory):
    host = sio_factory()
    assert host.is_connected(NS)
    host.emit('create-room', 'Ana', namespace=NS)
    [created] = _events(host, 'room-created')
    assert len(created['roomCode']) == 6
    assert created['player']['name'] == 'Ana'
    assert created['player']['socketId'] == created['player']['id']


def test_create_room_accepts_object_payload(sio_factory):
    host = sio_factory()
    host.emit('create-room', {'playerName': 'Ana'}, namespace=NS)
    assert len(_events(host, 'room-created')) == 1


def test_join_broadcasts_players(sio_factory):
    host, guest, code = _paired(sio_factory)
    expected = ['Ana', 'Ben']
    [joined] = _events(host, 'player-joined')
    assert [p['name'] for p in joined['players']] == expected
    [joined] = _events(guest, 'player-joined')
    assert [p['name'] for p in joined['players']] == expected


def test_join_lowercase_code(sio_factory):
    host = sio_factory()
    guest = sio_factory()
    host.emit('create-room', 'Ana', namespace=NS)
    code = _events(host, 'room-created')[0]['roomCode']
    guest.emit('join-room', {'roomCode': f' {code.lower()} ', 'playerName': 'Ben'}, namespace=NS)
    assert _events(guest, 'player-joined')


def test_join_unknown_room_errors(sio_factory):
    guest = sio_factory()
    guest.emit('join-room', {'roomCode': 'ZZZZZZ', 'playerName': 'Ben'}, namespace=NS)
    assert _events(guest, 'error') == [{'message': 'Room not found'}]


def test_join_full_room_errors(sio_factory):
    host, guest, code = _paired(sio_factory)
    host.get_received(NS)
    third = sio_factory()
    third.emit('join-room', {'roomCode': code, 'playerName': 'Cy'}, namespace=NS)
    assert _events(third, 'error') == [{'message': 'Room is full'}]
    # The error only goes to the offending connection
    assert 'error' not in _names(host.get_received(NS))


def test_failed_join_keeps_partner(sio_factory):
    host, guest, code = _paired(sio_factory)
    host.get_received(NS)
    guest.get_received(NS)
    guest.emit('join-room', {'roomCode': 'ZZZZZZ', 'playerName': 'Ben'}, namespace=NS)
    assert _events(guest, 'error') == [{'message': 'Room not found'}]
    assert host.get_received(NS) == []

    host.emit('start-game', code, namespace=NS)
    assert _events(guest, 'game-started')


def test_matching_round_reveals_then_challenges(sio_factory):
    host, guest, code = _paired(sio_factory)
    host.emit('start-game', code, namespace=NS)
    [started] = _events(guest, 'game-started')
    assert started['round'] == 1
    assert set(started['question']) == {'id', 'question', 'discussionPrompt'}
    host.get_received(NS)

    host.emit('submit-answer', {'roomCode': code, 'answer': 'Paris'}, namespace=NS)
    guest.emit('submit-answer', {'roomCode': code, 'answer': 'paris '}, namespace=NS)

    received = host.get_received(NS)
    names = _names(received)
    assert names.count('answers-revealed') == 1
    assert names.count('challenge-time') == 1
    assert names.index('answers-revealed') < names.index('challenge-time')
    revealed = received[names.index('answers-revealed')]['args'][0]
    assert revealed['match'] is True
    assert revealed['score'] == 10
    assert revealed['discussionPrompt'] is None
    challenge = received[names.index('challenge-time')]['args'][0]
    assert set(challenge) == {'type', 'content'}


def test_mismatched_round_shares_discussion_prompt(sio_factory):
    host, guest, code = _paired(sio_factory)
    host.emit('start-game', code, namespace=NS)
    guest.get_received(NS)
    host.emit('submit-answer', {'roomCode': code, 'answer': 'Paris'}, namespace=NS)
    guest.emit('submit-answer', {'roomCode': code, 'answer': 'Rome'}, namespace=NS)
    [revealed] = _events(guest, 'answers-revealed')
    assert revealed['match'] is False
    assert revealed['score'] == 0
    assert revealed['discussionPrompt']


def test_next_round_sends_new_question(sio_factory):
    host, guest, code = _paired(sio_factory)
    host.emit('start-game', code, namespace=NS)
    first = _events(guest, 'game-started')[0]['question']['id']
    guest.emit('next-round', code, namespace=NS)
    [nxt] = _events(host, 'next-question')
    assert nxt['round'] == 2
    assert nxt['question']['id'] != first


def test_out_of_order_events_are_ignored(sio_factory):
    host = sio_factory()
    host.emit('create-room', 'Ana', namespace=NS)
    code = _events(host, 'room-created')[0]['roomCode']
    host.emit('start-game', code, namespace=NS)
    host.emit('submit-answer', {'roomCode': 'NOPE00', 'answer': 'x'}, namespace=NS)
    host.emit('next-round', 'NOPE00', namespace=NS)
    host.emit('join-room', {'roomCode': code}, namespace=NS)
    assert host.get_received(NS) == []


def test_disconnect_notifies_remaining_player(flask_app, sio_factory):
    host, guest, code = _paired(sio_factory)
    guest.get_received(NS)
    host.disconnect(namespace=NS)
    [left] = _events(guest, 'player-left')
    assert [p['name'] for p in left['players']] == ['Ben']

    registry = flask_app.extensions['closer']['registry']
    guest.disconnect(namespace=NS)
    assert registry.get(code) is None
    assert registry.room_count() == 0
