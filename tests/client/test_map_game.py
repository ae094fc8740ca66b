import httpx
import pytest

from phindex.client.api import PhindexAPIError, PhindexClient
from phindex.client.game import MapGame


class FakeGameClient:
    def __init__(self, profiles, token="token"):
        self.profiles = profiles
        self.is_authenticated = bool(token)
        self.saved = []
        self.fail_save = False

    async def game_round(self, difficulty):
        if not self.profiles:
            raise PhindexAPIError(404, "There are no profiles to play with yet.")
        return list(self.profiles)

    async def save_game_result(self, score, total_questions, difficulty):
        if self.fail_save:
            raise PhindexAPIError(500, "boom")
        self.saved.append((score, total_questions, difficulty))
        return {"id": len(self.saved), "score": score, "total_questions": total_questions, "difficulty": difficulty}

    async def game_stats(self):
        return {"total_games": len(self.saved)}


PROFILES = [
    {"id": 1, "name": "Ada", "most_voted_phenotype": "Northern Europe"},
    {"id": 2, "name": "Jane", "most_voted_phenotype": "Levant"},
    {"id": 3, "name": "Kim", "most_voted_phenotype": None},
]


@pytest.fixture()
def notices():
    return []


async def test_full_game_saves_once(notices):
    client = FakeGameClient(PROFILES)
    game = MapGame(client, "easy", notify=notices.append)
    assert await game.start() is True
    assert game.current_profile["name"] == "Ada"

    assert game.check_answer("Europe") is True
    assert game.check_answer("Asia") is None  # already answered
    await game.advance()

    assert game.check_answer("Africa") is False
    assert game.correct_region == "Middle East"
    await game.skip()  # ignored while feedback is showing
    assert game.current_profile["name"] == "Jane"
    await game.advance()

    # nobody voted on Kim yet, so anything goes
    assert game.check_answer("Oceania") is True
    await game.advance()

    assert game.ended
    assert game.current_profile is None
    assert game.score == 2
    assert client.saved == [(2, 3, "easy")]
    assert game.stats == {"total_games": 1}

    await game.advance()
    assert client.saved == [(2, 3, "easy")]


async def test_skip_moves_on_without_scoring(notices):
    client = FakeGameClient(PROFILES[:1])
    game = MapGame(client, notify=notices.append)
    await game.start()

    await game.skip()
    assert game.ended
    assert client.saved == [(0, 1, "medium")]


async def test_empty_pool(notices):
    game = MapGame(FakeGameClient([]), notify=notices.append)
    assert await game.start() is False
    assert game.ended
    assert notices[-1].title == "No profiles available"


async def test_load_failure_is_reported(notices):
    class OfflineClient(FakeGameClient):
        async def game_round(self, difficulty):
            raise httpx.ConnectError("offline")

    class BrokenClient(FakeGameClient):
        async def game_round(self, difficulty):
            raise PhindexAPIError(500, "db down")

    for client in (OfflineClient(PROFILES), BrokenClient(PROFILES)):
        game = MapGame(client, notify=notices.append)
        assert await game.start() is False
        assert game.ended
        assert game.current_profile is None
        assert notices[-1].title == "Error loading game"
        assert notices[-1].is_error

    assert len(notices) == 2


async def test_guest_results_are_not_saved(notices):
    client = FakeGameClient(PROFILES[:1], token=None)
    game = MapGame(client, notify=notices.append)
    await game.start()
    game.check_answer("Europe")
    await game.advance()

    assert game.ended
    assert client.saved == []
    assert game.stats is None


async def test_save_failure_is_reported(notices):
    client = FakeGameClient(PROFILES[:1])
    client.fail_save = True
    game = MapGame(client, notify=notices.append)
    await game.start()
    await game.skip()

    assert game.ended
    assert notices[-1].title == "Error saving result"


async def test_restart_resets_state(notices):
    client = FakeGameClient(PROFILES[:1])
    game = MapGame(client, notify=notices.append)
    await game.start()
    game.check_answer("Europe")
    await game.advance()

    await game.start("hard")
    assert not game.ended
    assert game.score == 0
    assert game.difficulty == "hard"
    await game.skip()
    assert client.saved == [(1, 1, "medium"), (0, 1, "hard")]


async def test_against_live_app(asgi_transport, make_profile, make_token):
    ada = await make_profile("Ada Lovelace")
    async with PhindexClient("http://test", make_token("voter"), transport=asgi_transport) as voter:
        await voter.cast_vote(ada.id, "Northern Europe", "Primary Geographic")

    async with PhindexClient("http://test", make_token("player"), transport=asgi_transport) as player:
        game = MapGame(player, "easy")
        assert await game.start() is True
        assert game.total == 1
        assert game.check_answer("Europe") is True
        await game.advance()

        assert game.ended
        assert game.stats == {
            "total_games": 1,
            "total_correct": 1,
            "total_questions": 1,
            "accuracy_percentage": 100,
        }
        board = await player.leaderboard()
        assert board[0]["user_id"] == "player"
