"""Client against the reference authority, through the Flask test client
and over a real socket.io connection."""
import asyncio

import pytest

from spinboard.client import GameClient
from spinboard.errors import AuthError
from spinboard.leaderboard import LeaderboardState, Snapshot
from spinboard.outcomes import OutcomeGenerator
from spinboard.realtime import RealtimeChannel
from spinboard.session_store import SessionStorage

from test_outcomes import PinnedRandom
from test_realtime import FakeSocket

pytestmark = pytest.mark.anyio


def game_for(http, tmp_path, index=5, tab='tab-1'):
    return GameClient(
        http,
        SessionStorage(str(tmp_path), tab),
        sio=FakeSocket(),
        generator=OutcomeGenerator(PinnedRandom(index)),
    )


async def test_login_spin_and_broadcast_round_trip(authority_http, sio_client, users, tmp_path):
    game = game_for(authority_http, tmp_path)
    await game.start()
    await game.login('bob', 'pw')
    assert game.view().rank == 2

    await game.spinner.spin()
    view = game.view()
    assert [(e.username, e.score, e.rank) for e in view.entries] == [('bob', 21, 1), ('alice', 0, 2)]
    assert view.rank == 1

    # The authority broadcast the same snapshot; replaying it changes nothing
    updates = [pkt for pkt in sio_client.get_received() if pkt['name'] == 'leaderboard-update']
    assert len(updates) == 1
    await game.channel.handle_update(updates[0]['args'][0])
    assert game.view() == view


async def test_restored_session_keeps_working_after_reload(authority_http, users, tmp_path):
    first = game_for(authority_http, tmp_path)
    await first.login('alice', 'pw')

    reloaded = game_for(authority_http, tmp_path, index=1)
    session = await reloaded.start()
    assert session.username == 'alice'
    assert reloaded.view().rank == 1
    await reloaded.spinner.spin()
    assert reloaded.leaderboard.entries[0].score == 32


async def test_bad_password_against_authority(authority_http, users, tmp_path):
    game = game_for(authority_http, tmp_path)
    with pytest.raises(AuthError):
        await game.login('alice', 'nope')
    assert game.session is None


async def eventually(predicate, timeout=5.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            return False
        await asyncio.sleep(0.05)
    return True


async def test_socketio_client_receives_authority_broadcast(live_authority, client, users):
    state = LeaderboardState()
    # Left over from a previous authority process
    state.apply(Snapshot((), seq=99))
    channel = RealtimeChannel(state)
    await channel.connect(live_authority, transports=['polling'])
    try:
        assert channel.connected
        assert await eventually(lambda: state.seq is None)

        token = client.post('/login', json={'username': 'alice', 'password': 'pw'}).get_json()['token']
        res = client.post(
            '/increment-score', json={'increment': '32'}, headers={'Authorization': f'Bearer {token}'}
        )
        assert res.status_code == 200

        assert await eventually(lambda: bool(state.entries))
        assert [(e.username, e.score, e.rank) for e in state.entries] == [('alice', 32, 1), ('bob', 0, 2)]
        assert state.seq == res.get_json()['seq']
    finally:
        await channel.disconnect()
    assert not channel.connected
