"""Optimistic voting.

``VoteTracker`` keeps the tally of one profile/characteristic pair for one
signed-in user. A cast or change is shown in ``state`` immediately, then
written to the API. A successful write is followed by a refetch so that
votes from other users are picked up; a failed write puts the previous
tally back.

There is no queueing: two overlapping mutations on the same tracker can
race, and the last confirmed read wins.
"""

from typing import Callable, Optional

from loguru import logger

from phindex.client.api import REQUEST_ERRORS
from phindex.client.notices import Notice, Notifier, log_notice
from phindex.services.catalog import PHENOTYPE
from phindex.services.tally import Tally, VoteShare, apply_cast, apply_change


class VoteTracker:
    """
    ``store`` needs ``is_authenticated``, ``fetch_tally``, ``cast_vote`` and
    ``change_vote`` with the signatures of ``PhindexClient``.
    """

    def __init__(
        self,
        store,
        profile_id: int,
        characteristic_type: str = PHENOTYPE,
        notify: Optional[Notifier] = None,
    ):
        self.store = store
        self.profile_id = profile_id
        self.characteristic_type = characteristic_type
        self.notify = notify or log_notice
        self.state = Tally()
        self.loading = False

    @property
    def votes(self) -> list[VoteShare]:
        return self.state.votes

    @property
    def user_vote(self) -> Optional[str]:
        return self.state.user_vote

    @property
    def has_user_voted(self) -> bool:
        return self.state.user_vote is not None

    async def load(self) -> Tally:
        self.loading = True
        try:
            self.state = await self.store.fetch_tally(self.profile_id, self.characteristic_type)
        finally:
            self.loading = False
        return self.state

    async def cast_vote(self, classification: str) -> bool:
        return await self._mutate(
            classification,
            apply_cast,
            self.store.cast_vote,
            success=Notice("Vote registered!", f"You voted for {classification}"),
            failure_title="Voting error",
        )

    async def change_vote(self, new_classification: str) -> bool:
        return await self._mutate(
            new_classification,
            apply_change,
            self.store.change_vote,
            success=Notice("Vote updated!", f"You changed your vote to {new_classification}"),
            failure_title="Error updating vote",
        )

    async def _mutate(
        self,
        classification: str,
        delta: Callable[[Tally, str], Tally],
        write,
        *,
        success: Notice,
        failure_title: str,
    ) -> bool:
        if not self.store.is_authenticated:
            self.notify(Notice("Login required", "You need to be logged in to vote", "destructive"))
            return False

        snapshot = self.state
        self.state = delta(snapshot, classification)

        try:
            await write(self.profile_id, classification, self.characteristic_type)
        except REQUEST_ERRORS as e:
            self.state = snapshot
            logger.warning(
                "Vote write failed for profile {} ({}), rolled back: {}",
                self.profile_id, self.characteristic_type, e,
            )
            self.notify(Notice(failure_title, str(e), "destructive"))
            return False

        await self._reconcile()
        self.notify(success)
        return True

    async def _reconcile(self) -> None:
        try:
            self.state = await self.store.fetch_tally(self.profile_id, self.characteristic_type)
        except REQUEST_ERRORS as e:
            # the write went through; keep the optimistic tally until the next load
            logger.warning("Refetch after vote failed for profile {}: {}", self.profile_id, e)
