"""Client-side state for one map game session."""

from typing import Optional

from loguru import logger

from phindex.client.api import REQUEST_ERRORS, PhindexAPIError
from phindex.client.notices import Notice, Notifier, log_notice
from phindex.services.regions import check_answer


class MapGame:
    """
    Walks through a round of profiles, scoring region answers against each
    profile's most voted phenotype. The result is saved once, when the last
    profile is answered or skipped, and only for signed-in players.
    """

    def __init__(self, client, difficulty: str = "medium", notify: Optional[Notifier] = None):
        self.client = client
        self.difficulty = difficulty
        self.notify = notify or log_notice
        self.profiles: list[dict] = []
        self.index = 0
        self.score = 0
        self.ended = False
        self.feedback: Optional[bool] = None
        self.correct_region: Optional[str] = None
        self.stats: Optional[dict] = None
        self._saved = False

    @property
    def total(self) -> int:
        return len(self.profiles)

    @property
    def current_profile(self) -> Optional[dict]:
        if self.ended or self.index >= len(self.profiles):
            return None
        return self.profiles[self.index]

    async def start(self, difficulty: Optional[str] = None) -> bool:
        if difficulty:
            self.difficulty = difficulty
        self.index = 0
        self.score = 0
        self.ended = False
        self.feedback = None
        self.correct_region = None
        self._saved = False

        try:
            self.profiles = await self.client.game_round(self.difficulty)
        except REQUEST_ERRORS as e:
            self.profiles = []
            if not (isinstance(e, PhindexAPIError) and e.status_code == 404):
                self.ended = True
                logger.warning("Loading game round failed: {}", e)
                self.notify(Notice("Error loading game", "Failed to load profiles for the game.", "destructive"))
                return False
        if not self.profiles:
            self.ended = True
            self.notify(Notice("No profiles available", "There are no profiles to play with yet.", "destructive"))
            return False
        return True

    def check_answer(self, region: str) -> Optional[bool]:
        """Score ``region`` for the current profile; None once this profile has been answered."""
        profile = self.current_profile
        if profile is None or self.feedback is not None:
            return None

        correct, self.correct_region = check_answer(region, profile.get("most_voted_phenotype"))
        self.feedback = correct
        if correct:
            self.score += 1
        return correct

    async def advance(self) -> None:
        """Move on to the next profile, finishing the game after the last one."""
        if self.ended:
            return
        self.feedback = None
        self.correct_region = None
        self.index += 1
        if self.index >= len(self.profiles):
            await self._finish()

    async def skip(self) -> None:
        if self.feedback is not None:
            return
        await self.advance()

    async def _finish(self) -> None:
        self.ended = True
        if self._saved or not self.client.is_authenticated:
            return
        self._saved = True
        try:
            await self.client.save_game_result(self.score, len(self.profiles), self.difficulty)
        except REQUEST_ERRORS as e:
            logger.warning("Saving game result failed: {}", e)
            self.notify(Notice("Error saving result", str(e), "destructive"))
            return
        await self.load_stats()

    async def load_stats(self) -> Optional[dict]:
        if not self.client.is_authenticated:
            return None
        try:
            self.stats = await self.client.game_stats()
        except REQUEST_ERRORS as e:
            logger.warning("Loading game stats failed: {}", e)
        return self.stats
